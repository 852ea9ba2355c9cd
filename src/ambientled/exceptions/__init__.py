"""
Custom exception hierarchy for ambientled.

## Exception Hierarchy

```
AmbientLedError (base)
├── ConfigurationError
│   ├── ConfigFileInvalidError
│   └── ConfigValidationError
├── WatchSetupError
└── TransportError
    ├── TransportConnectionError
    └── TransportIOError
```

All custom exceptions carry `user_message`, `technical_message`,
`recoverable` and `recovery_hint`. Only `WatchSetupError` is fatal; the
rest are logged and recovered from (previous configuration kept, transport
reopened).

See `ambientled.exceptions.handlers` for utilities to handle these
exceptions systematically.
"""

from .base import AmbientLedError
from .config import (
    ConfigFileInvalidError,
    ConfigurationError,
    ConfigValidationError,
    WatchSetupError,
)
from .handlers import ErrorContext, format_error_for_display, wrap_pydantic_error
from .transport import TransportConnectionError, TransportError, TransportIOError

__all__ = [
    # Base
    "AmbientLedError",
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    "WatchSetupError",
    # Transport
    "TransportConnectionError",
    "TransportError",
    "TransportIOError",
    # Handlers
    "ErrorContext",
    "format_error_for_display",
    "wrap_pydantic_error",
]
