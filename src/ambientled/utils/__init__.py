"""Generic utilities for ambientled.

- observers: thread-safe observer list
- persistence: pydantic model JSON load/save
"""

from .observers import ObserverManager
from .persistence import PydanticPersistence

__all__ = ["ObserverManager", "PydanticPersistence"]
