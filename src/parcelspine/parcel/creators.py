"""Creator registry for polymorphic parcelable records.

A parcelable array names the type of every element inline; the registry maps
that name to the creator that knows how to read the element's fields.

Manifesto:
    Type identity comes only from the name in the stream. Decoders receive
    the registry explicitly so tests can run with isolated registries, and
    the process-wide default exists only for callers that do not care.

Architecture:
    ::

        ┌──────────────────────────────────────────────┐
        │               CreatorRegistry                 │
        │  _creators: dict[str, ParcelableCreator]      │
        │  _lock: ReadWriteLock                         │
        ├──────────────────────────────────────────────┤
        │  register(name, creator)   write lock         │
        │  lookup(name)              read lock          │
        │  is_registered / names     read lock          │
        └──────────────────────────────────────────────┘

        default_registry()  -- built once, on first use, with the
                               creators shipped in parcelspine.parcel.records

Guardrails:
    - Registration is last-write-wins; nothing is ever removed
    - Lookups from many decode threads do not block each other
    - A missing name raises CreatorNotFoundError naming the type
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol, runtime_checkable

from parcelspine.core.errors import ConfigError, CreatorNotFoundError
from parcelspine.core.logging import get_logger
from parcelspine.parcel.cursor import ParcelReader
from parcelspine.parcel.records import Parcelable, PowerMonitor

logger = get_logger(__name__)


@runtime_checkable
class ParcelableCreator(Protocol):
    """Anything that can read one record from a cursor."""

    def create_from_parcel(self, cursor: ParcelReader) -> Parcelable: ...


class ReadWriteLock:
    """Many concurrent readers or one exclusive writer.

    Writers wait for active readers to drain; new readers wait while a
    writer holds or is waiting for the lock.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class CreatorRegistry:
    """Thread-safe mapping from parcelable type name to creator."""

    def __init__(self) -> None:
        self._creators: dict[str, ParcelableCreator] = {}
        self._lock = ReadWriteLock()

    def __repr__(self) -> str:
        return f"CreatorRegistry(names={self.names()})"

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_registered(name)

    def register(self, name: str, creator: ParcelableCreator) -> None:
        """Register ``creator`` under ``name``, replacing any previous entry.

        Raises:
            ConfigError: If name is empty or creator has no create_from_parcel
        """
        if not name:
            raise ConfigError("Creator type name must not be empty")
        if not isinstance(creator, ParcelableCreator):
            raise ConfigError(
                f"Creator for `{name}` does not implement create_from_parcel",
                type_name=name,
            )
        with self._lock.write_locked():
            replaced = name in self._creators
            self._creators[name] = creator
        logger.debug("creator_registered", type_name=name, replaced=replaced)

    def lookup(self, name: str) -> ParcelableCreator:
        """Return the creator registered under ``name``.

        Raises:
            CreatorNotFoundError: If no creator is registered for name
        """
        with self._lock.read_locked():
            creator = self._creators.get(name)
        if creator is None:
            logger.warning("creator_not_found", type_name=name)
            raise CreatorNotFoundError(name)
        return creator

    def is_registered(self, name: str) -> bool:
        with self._lock.read_locked():
            return name in self._creators

    def names(self) -> list[str]:
        """List all registered type names."""
        with self._lock.read_locked():
            return sorted(self._creators)


def register_builtin_creators(registry: CreatorRegistry) -> CreatorRegistry:
    """Register the record types shipped with parcelspine."""
    registry.register(PowerMonitor.TYPE_NAME, PowerMonitor)
    return registry


def build_registry() -> CreatorRegistry:
    """Construct an isolated registry holding the built-in creators."""
    return register_builtin_creators(CreatorRegistry())


_default_registry: CreatorRegistry | None = None
_default_lock = threading.Lock()


def default_registry() -> CreatorRegistry:
    """Process-wide registry, initialized on first use.

    Repeat calls return the same instance without registering again.
    """
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = build_registry()
                logger.debug(
                    "default_registry_initialized", names=_default_registry.names()
                )
    return _default_registry


__all__ = [
    "ParcelableCreator",
    "ReadWriteLock",
    "CreatorRegistry",
    "register_builtin_creators",
    "build_registry",
    "default_registry",
]
