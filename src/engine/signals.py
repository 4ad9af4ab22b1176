from typing import Callable, List

from utils.logger import get_logger

_logger = get_logger(__name__)


class Signal:
    """
    Minimal push notification: subscribers are called synchronously on emit.

    connect() returns the matching unsubscribe function. A failing subscriber
    is logged and skipped so the emitter never sees its exception.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._callbacks: List[Callable[..., None]] = []

    def connect(self, callback: Callable[..., None]) -> Callable[[], None]:
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def emit(self, *args) -> None:
        for callback in list(self._callbacks):
            try:
                callback(*args)
            except Exception:
                _logger.exception(f"Subscriber of {self.name} failed.")

    def __len__(self) -> int:
        return len(self._callbacks)
