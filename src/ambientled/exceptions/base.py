"""Base exception class for ambientled.

Every error carries a message for the user and one for the log. Whether an
error is ``recoverable`` is decided per class: a strip that drops off the
bus is retried forever and a bad config edit is waited out, but a config
directory that cannot be watched stops the program.
"""

from typing import Optional


class AmbientLedError(Exception):
    """
    Base exception for all ambientled errors.

    Attributes:
        user_message: Human-friendly message for display
        technical_message: Detailed message for logging
        recoverable: True if the program keeps running after this error
        recovery_hint: Optional hint for how to fix the issue
    """

    recoverable: bool = False

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recoverable: Optional[bool] = None,
        recovery_hint: Optional[str] = None,
    ):
        """
        Initialize an ambientled error.

        Args:
            user_message: Message to show to users
            technical_message: Detailed message for logs (defaults to user_message)
            recoverable: Overrides the class default when given
            recovery_hint: Suggestion for how to fix the issue
        """
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        if recoverable is not None:
            self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        """Return user-friendly message."""
        return self.user_message
