"""
Generation-based cancellation for load cycles.

Every load cycle takes a token from a shared GenerationCounter. Starting
a new cycle advances the counter, which makes every older token stale.
Stages check their token before doing more work and before committing
output; in-flight calls are never interrupted.
"""


class GenerationCounter:
    """Monotonic counter identifying the current load cycle."""

    def __init__(self) -> None:
        self._current = 0

    @property
    def current(self) -> int:
        return self._current

    def advance(self) -> "CancellationToken":
        """Start a new generation and return its token."""
        self._current += 1
        return CancellationToken(self, self._current)


class CancellationToken:
    """
    Captured generation of one load cycle.

    Attributes:
        generation: Generation number the cycle was started with
    """

    def __init__(self, counter: GenerationCounter, generation: int):
        self._counter = counter
        self.generation = generation

    @property
    def cancelled(self) -> bool:
        """True once a newer cycle has been started."""
        return self._counter.current != self.generation

    def __repr__(self) -> str:
        return f"CancellationToken(generation={self.generation}, cancelled={self.cancelled})"
