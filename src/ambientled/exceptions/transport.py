"""Transport-related exceptions.

Hardware disconnects are expected steady-state events, so both errors
here are marked recoverable; the strip updater retries forever.
"""

from typing import Optional

from .base import AmbientLedError


class TransportError(AmbientLedError):
    """Base class for LED strip transport failures."""

    recoverable = True

    def __init__(self, user_message: str, address: Optional[str] = None, **kwargs):
        """
        Initialize transport error.

        Args:
            user_message: User-friendly error message
            address: Device name or host:port of the strip (if known)
        """
        super().__init__(user_message, **kwargs)
        self.address = address


class TransportConnectionError(TransportError):
    """The transport to a strip could not be opened."""

    def __init__(self, address: str, original_error: Optional[str] = None):
        """
        Initialize connection error.

        Args:
            address: Device name or host:port that failed to open
            original_error: Underlying error message (for logs)
        """
        technical = f"Failed to open {address}"
        if original_error:
            technical += f": {original_error}"

        super().__init__(
            f"Cannot connect to LED strip at {address}",
            address=address,
            technical_message=technical,
            recovery_hint=(
                "Check that the device is plugged in (serial) or that the receiver "
                "is running and reachable (network). Reconnection is retried automatically."
            ),
        )
        self.original_error = original_error


class TransportIOError(TransportError):
    """Writing or flushing a frame to an open transport failed."""

    def __init__(self, address: str, operation: str, original_error: Optional[str] = None):
        """
        Initialize I/O error.

        Args:
            address: Device name or host:port of the strip
            operation: The operation that failed (e.g. "flush")
            original_error: Underlying error message (for logs)
        """
        technical = f"{operation} failed on {address}"
        if original_error:
            technical += f": {original_error}"

        super().__init__(
            f"Lost connection to LED strip at {address}",
            address=address,
            technical_message=technical,
        )
        self.operation = operation
        self.original_error = original_error
