"""Live query primitives: re-run a loader whenever the backing store changes.

Repositories own a :class:`ChangeNotifier` and call :meth:`ChangeNotifier.notify`
after every committed mutation. A :class:`LiveQuery` emits its current snapshot
on subscribe and a fresh snapshot on every notification. :func:`combine_latest`
merges two sources, recomputing from the latest value of each whenever either
one emits.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")

_MISSING = object()


class Subscription:
    """Handle returned by ``subscribe``; ``close()`` is idempotent."""

    def __init__(self, cancel: Callable[[], None]):
        self._cancel: Optional[Callable[[], None]] = cancel
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._cancel is None

    def close(self) -> None:
        with self._lock:
            cancel, self._cancel = self._cancel, None
        if cancel is not None:
            cancel()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class ChangeNotifier:
    """Broadcasts "data changed" signals to registered listeners."""

    def __init__(self) -> None:
        self._listeners: list[Callable[[], None]] = []
        self._lock = threading.Lock()

    def add_listener(self, listener: Callable[[], None]) -> Subscription:
        with self._lock:
            self._listeners.append(listener)

        def _remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return Subscription(_remove)

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener()


class Observable(Generic[T]):
    """A value that can be read now or followed over time."""

    def get(self) -> T:  # pragma: no cover - interface
        raise NotImplementedError

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:  # pragma: no cover
        raise NotImplementedError

    def map(self, transform: Callable[[T], U]) -> "Observable[U]":
        return _MappedObservable(self, transform)


class LiveQuery(Observable[T]):
    """Loader bound to a change notifier."""

    def __init__(self, loader: Callable[[], T], notifier: ChangeNotifier):
        self._loader = loader
        self._notifier = notifier

    def get(self) -> T:
        """Run the loader once (point-in-time snapshot)."""
        return self._loader()

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        subscription = self._notifier.add_listener(lambda: callback(self._loader()))
        callback(self._loader())
        return subscription


class _MappedObservable(Observable[U]):
    def __init__(self, source: Observable[T], transform: Callable[[T], U]):
        self._source = source
        self._transform = transform

    def get(self) -> U:
        return self._transform(self._source.get())

    def subscribe(self, callback: Callable[[U], None]) -> Subscription:
        return self._source.subscribe(lambda value: callback(self._transform(value)))


class _CombinedObservable(Observable[R]):
    def __init__(
        self,
        first: Observable[T],
        second: Observable[U],
        combiner: Callable[[T, U], R],
    ):
        self._first = first
        self._second = second
        self._combiner = combiner

    def get(self) -> R:
        return self._combiner(self._first.get(), self._second.get())

    def subscribe(self, callback: Callable[[R], None]) -> Subscription:
        lock = threading.RLock()
        latest: list[object] = [_MISSING, _MISSING]

        def _on(index: int, value: object) -> None:
            with lock:
                latest[index] = value
                if _MISSING in latest:
                    return
                first, second = latest
            callback(self._combiner(first, second))  # type: ignore[arg-type]

        first_sub = self._first.subscribe(lambda value: _on(0, value))
        second_sub = self._second.subscribe(lambda value: _on(1, value))

        def _cancel() -> None:
            first_sub.close()
            second_sub.close()

        return Subscription(_cancel)


def combine_latest(
    first: Observable[T],
    second: Observable[U],
    combiner: Callable[[T, U], R],
) -> Observable[R]:
    """Combine two sources, emitting ``combiner(latest_first, latest_second)``.

    Emission starts once both sources have produced a value; after that every
    emission from either side triggers a recomputation.
    """

    return _CombinedObservable(first, second, combiner)


__all__ = [
    "ChangeNotifier",
    "LiveQuery",
    "Observable",
    "Subscription",
    "combine_latest",
]
