"""Observer protocol definitions."""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .events import ConfigEvent, TransportEvent

if TYPE_CHECKING:
    from ambientled.models import Configuration


@runtime_checkable
class TransportObserver(Protocol):
    """
    Observer that receives strip connection state changes.

    Note:
        Called from the strip's worker thread, so implementations must be
        thread-safe and must not block.
    """

    def on_transport_event(self, event: TransportEvent, strip_key: str) -> None:
        """
        Handle a transport state change.

        Args:
            event: The type of transport event
            strip_key: Identity of the strip (``Strip.key``)
        """
        ...


@runtime_checkable
class ConfigObserver(Protocol):
    """Observer that receives configuration reload results."""

    def on_config_event(self, event: ConfigEvent, **kwargs: Any) -> None:
        """
        Handle a configuration event.

        Args:
            event: The type of configuration event
            **kwargs: ``config`` for CONFIG_LOADED, ``error`` for CONFIG_REJECTED
        """
        ...


@runtime_checkable
class ConfigCallback(Protocol):
    """Callback invoked with each new configuration snapshot."""

    def __call__(self, config: "Configuration") -> bool:
        """Return True once the snapshot has been applied."""
        ...
