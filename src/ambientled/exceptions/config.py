"""Configuration-related exceptions.

This module defines exceptions for configuration errors:
- ConfigurationError: Base class for configuration errors
- ConfigFileInvalidError: Config file has invalid syntax
- ConfigValidationError: Config values fail validation
- WatchSetupError: The config directory cannot be watched
"""

from typing import Any, Optional

from .base import AmbientLedError


class ConfigurationError(AmbientLedError):
    """Configuration is invalid or cannot be loaded.

    Recoverable: the previously accepted configuration stays in effect.
    """

    recoverable = True


class ConfigFileInvalidError(ConfigurationError):
    """Configuration file has invalid JSON syntax."""

    def __init__(self, file_path: str, parse_error: str):
        """
        Initialize config file invalid error.

        Args:
            file_path: Path to the invalid config file
            parse_error: The parsing error message
        """
        user_msg = "Configuration file has invalid syntax"
        recovery = "Check for common JSON errors:\n"
        recovery += "  - Trailing commas (remove commas after last item)\n"
        recovery += "  - Missing quotes around strings\n"
        recovery += "  - Unclosed braces or brackets\n"
        recovery += f"  - Edit: {file_path}"

        if "trailing comma" in parse_error.lower():
            user_msg = "Configuration file has a trailing comma"
            recovery = (
                f"Remove the trailing comma from {file_path}\n"
                "JSON doesn't allow commas after the last item in an object or array"
            )
        elif "empty" in parse_error.lower():
            user_msg = "Configuration file is empty"
            recovery = f"Run 'ambientled config init --force' to write an example to {file_path}"
        elif "expecting" in parse_error.lower():
            user_msg = "Configuration file has a syntax error"

        super().__init__(
            user_message=user_msg,
            technical_message=f"JSON parse error in {file_path}: {parse_error}",
            recovery_hint=recovery
        )
        self.file_path = file_path
        self.parse_error = parse_error


class ConfigValidationError(ConfigurationError):
    """Configuration values fail validation."""

    def __init__(self, field: str, value: Any, error_msg: str, file_path: Optional[str] = None):
        """
        Initialize config validation error.

        Args:
            field: The configuration field that failed validation
            value: The invalid value
            error_msg: Why the value is invalid
            file_path: Path to the config file (optional)
        """
        user_msg = f"Invalid configuration value for '{field}': {error_msg}"

        recovery = f"Update the '{field}' value in your configuration"
        if file_path:
            recovery += f"\nConfig file: {file_path}"

        # Field-specific hints
        if "segments" in field:
            recovery += "\nEvery segment must satisfy offset + length <= leds"
        elif "com" in field.split("."):
            recovery += "\nRun 'ambientled serial list' to see connected serial devices"
        elif "reduction" in field:
            recovery += "\nReduction factors must be between 0.0 and 1.0"
        elif "maxBrightness" in field:
            recovery += "\nmaxBrightness caps r+g+b and must be between 0 and 765"
        elif field in ("fps", "ups"):
            recovery += "\nRates are given in updates per second and must be positive"

        super().__init__(
            user_message=user_msg,
            technical_message=f"Config validation failed for {field}={value!r}: {error_msg}",
            recovery_hint=recovery
        )
        self.field = field
        self.value = value
        self.file_path = file_path


class WatchSetupError(AmbientLedError):
    """The configuration directory could not be watched for changes."""

    def __init__(self, directory: str, reason: str):
        """
        Initialize watch setup error.

        Args:
            directory: Directory that was supposed to be watched
            reason: Why the watch could not be registered
        """
        super().__init__(
            user_message=f"Cannot watch configuration directory: {directory}",
            technical_message=f"Failed to register watch on {directory}: {reason}",
            recovery_hint="Check that the directory exists and is readable, or pass --dir"
        )
        self.directory = directory
        self.reason = reason
