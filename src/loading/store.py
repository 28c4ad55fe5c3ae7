"""
EntryStore - the observable accumulated entry set of the current cycle.
"""

from collections.abc import Callable, Iterable
from typing import Literal

from src.core.models import Entry
from src.observability.logger import get_logger

logger = get_logger(__name__)

StoreEvent = Literal["reset", "append"]
StoreListener = Callable[[StoreEvent, tuple[Entry, ...]], None]


class StaleCycleError(RuntimeError):
    """Raised when a superseded cycle tries to write to the store."""

    def __init__(self, generation: int, current: int):
        self.generation = generation
        self.current = current
        super().__init__(
            f"Cycle {generation} is stale; store belongs to cycle {current}"
        )


class EntryStore:
    """
    Append-only entry collection owned by one load cycle at a time.

    ``reset`` hands the store to a new cycle and discards everything the
    previous cycle appended. ``append`` only accepts entries tagged with the
    owning cycle's generation. Listeners are called with ("reset", ()) and
    ("append", new_entries).
    """

    def __init__(self) -> None:
        self._entries: list[Entry] = []
        self._generation = 0
        self._listeners: list[StoreListener] = []

    @property
    def generation(self) -> int:
        return self._generation

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))

    def snapshot(self) -> tuple[Entry, ...]:
        """Immutable view of the accumulated entries, in append order."""
        return tuple(self._entries)

    def sorted_by_date(self) -> list[Entry]:
        """Accumulated entries, most recent first."""
        return sorted(self._entries, key=lambda entry: entry.date, reverse=True)

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self, generation: int) -> None:
        """Replace the accumulated set with an empty one owned by ``generation``."""
        if generation < self._generation:
            raise StaleCycleError(generation, self._generation)
        self._generation = generation
        self._entries = []
        self._notify("reset", ())

    def append(self, generation: int, entries: Iterable[Entry]) -> None:
        """
        Append entries produced by cycle ``generation``.

        Raises:
            StaleCycleError: If ``generation`` does not own the store
        """
        if generation != self._generation:
            raise StaleCycleError(generation, self._generation)

        batch = tuple(entries)
        if not batch:
            return
        self._entries.extend(batch)
        self._notify("append", batch)

    def _notify(self, event: StoreEvent, entries: tuple[Entry, ...]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, entries)
            except Exception as e:
                logger.error(f"Entry store listener failed on {event}: {e}", exc_info=True)
