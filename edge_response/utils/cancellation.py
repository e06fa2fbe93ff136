import threading
from typing import Optional


class OperationCancelledError(Exception):
    pass


class CancellationToken:
    """
    Cooperative cancellation flag shared between a caller and a long-running
    operation. The operation polls `raise_if_cancelled()` at safe points
    (once per radius in the profiler, between stages in the pipeline).
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("Operation cancelled")


def check_cancelled(token: Optional[CancellationToken]) -> None:
    if token is not None:
        token.raise_if_cancelled()
