"""Optimistic updates for like and follow buttons.

The local state flips as soon as the user acts. When the server answers, its
``is_active``/``count`` replace the guess; when the call fails the state goes
back to the snapshot taken before the flip.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

from .errors import SocialClientError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToggleState:
    is_active: bool
    count: int

    def flipped(self) -> "ToggleState":
        delta = -1 if self.is_active else 1
        return ToggleState(is_active=not self.is_active, count=max(0, self.count + delta))


Mutation = Callable[[], ToggleState]
Listener = Callable[[ToggleState], None]


def _emit(listener: Listener | None, state: ToggleState) -> None:
    if listener is not None:
        listener(state)


def apply_optimistic(state: ToggleState, mutation: Mutation, *, on_change: Listener | None = None) -> ToggleState:
    """Flip ``state`` locally, run ``mutation`` and return the settled state.

    ``mutation`` returns the server's view of the membership or raises
    :class:`SocialClientError`. Any failure restores ``state``; errors other
    than :class:`SocialClientError` are re-raised after the revert.
    """

    snapshot = state
    _emit(on_change, state.flipped())
    try:
        settled = mutation()
    except SocialClientError as exc:
        logger.warning("Reverting optimistic update: %s", exc.message)
        _emit(on_change, snapshot)
        return snapshot
    except Exception:
        _emit(on_change, snapshot)
        raise
    _emit(on_change, settled)
    return settled


class OptimisticToggle:
    """Holds the displayed state of one like or follow button.

    While a request is in flight further :meth:`toggle` calls are dropped and
    return the current (optimistic) state without contacting the server.
    """

    def __init__(self, initial: ToggleState, mutation: Mutation, *, on_change: Listener | None = None) -> None:
        self._state = initial
        self._mutation = mutation
        self._listener = on_change
        self._pending = threading.Lock()

    @property
    def state(self) -> ToggleState:
        return self._state

    @property
    def pending(self) -> bool:
        return self._pending.locked()

    def _set(self, state: ToggleState) -> None:
        self._state = state
        _emit(self._listener, state)

    def toggle(self) -> ToggleState:
        if not self._pending.acquire(blocking=False):
            logger.debug("Toggle ignored while a request is pending")
            return self._state
        try:
            return apply_optimistic(self._state, self._mutation, on_change=self._set)
        finally:
            self._pending.release()


__all__ = ["ToggleState", "Mutation", "apply_optimistic", "OptimisticToggle"]
