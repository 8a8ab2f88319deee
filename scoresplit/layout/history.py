"""Bounded undo/redo history and the layout session built on top of it."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Tuple, TypeVar

from ..config import MAX_UNDO
from .model import Layout

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class UndoHistory(Generic[T]):
    present: T
    past: Tuple[T, ...] = field(default_factory=tuple)
    future: Tuple[T, ...] = field(default_factory=tuple)


def create_history(initial: T) -> UndoHistory[T]:
    return UndoHistory(present=initial)


def push_state(history: UndoHistory[T], new_present: T, max_size: int = MAX_UNDO) -> UndoHistory[T]:
    """Record ``new_present``; the oldest entries fall off past ``max_size``."""

    past = history.past + (history.present,)
    if len(past) > max_size:
        past = past[len(past) - max_size :]
    return UndoHistory(present=new_present, past=past, future=())


def undo(history: UndoHistory[T]) -> UndoHistory[T]:
    if not history.past:
        return history
    return UndoHistory(
        present=history.past[-1],
        past=history.past[:-1],
        future=(history.present,) + history.future,
    )


def redo(history: UndoHistory[T]) -> UndoHistory[T]:
    if not history.future:
        return history
    return UndoHistory(
        present=history.future[0],
        past=history.past + (history.present,),
        future=history.future[1:],
    )


def can_undo(history: UndoHistory[T]) -> bool:
    return bool(history.past)


def can_redo(history: UndoHistory[T]) -> bool:
    return bool(history.future)


def clear_history(history: UndoHistory[T]) -> UndoHistory[T]:
    return UndoHistory(present=history.present)


class LayoutSession:
    """Single owner of the edited layout and its undo history.

    Every edit goes through :meth:`apply` (or :meth:`replace` for bulk
    results) so the history always mirrors what the user sees.  The session is
    not thread-safe; drive it from one thread.
    """

    def __init__(self, layout: Layout | None = None, *, max_undo: int = MAX_UNDO) -> None:
        self._max_undo = max_undo
        self._history: UndoHistory[Layout] = create_history(layout or Layout())

    @property
    def layout(self) -> Layout:
        return self._history.present

    @property
    def history(self) -> UndoHistory[Layout]:
        return self._history

    @property
    def can_undo(self) -> bool:
        return can_undo(self._history)

    @property
    def can_redo(self) -> bool:
        return can_redo(self._history)

    def apply(self, mutation: Callable[..., Layout], *args, **kwargs) -> bool:
        """Run ``mutation(layout, *args, **kwargs)`` and record its result.

        Returns ``False`` when the mutation left the layout untouched (the same
        instance or an equal snapshot), in which case nothing is recorded.
        """

        updated = mutation(self.layout, *args, **kwargs)
        if updated is self.layout or updated == self.layout:
            logger.debug("%s left the layout unchanged", getattr(mutation, "__name__", mutation))
            return False
        self._history = push_state(self._history, updated, self._max_undo)
        return True

    def replace(self, layout: Layout) -> None:
        self._history = push_state(self._history, layout, self._max_undo)

    def load(self, layout: Layout) -> None:
        """Start over with ``layout`` and an empty history (document reload)."""

        self._history = create_history(layout)

    def undo(self) -> bool:
        previous = self._history
        self._history = undo(previous)
        return self._history is not previous

    def redo(self) -> bool:
        previous = self._history
        self._history = redo(previous)
        return self._history is not previous
