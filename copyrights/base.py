from typing import List, Callable
from dataclasses import dataclass
from copyrights.messages import error
from types import TracebackType


class Callback:
    pass


@dataclass
class OnExitCallback(Callback):
    value: Callable[[], None]


@dataclass
class OnFailureCallback(Callback):
    value: Callable[[type[BaseException]], None]


class Scope:
    """
    Runs deferred callbacks in reverse order when the block exits. Errors
    raised by a callback are reported and do not mask the block's own error.
    """
    def __init__(self) -> None:
        self.deferred: List[Callback] = []

    def defer(self, fn: Callable[[], None]) -> None:
        self.deferred.append(OnExitCallback(fn))

    def on_failure(self, fn: Callable[[type[BaseException]], None]) -> None:
        self.deferred.append(OnFailureCallback(fn))

    def __enter__(self):
        assert len(self.deferred) == 0
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        for fn in self.deferred[::-1]:
            match fn:
                case OnExitCallback(fn):
                    try:
                        fn()
                    except Exception as e:
                        error(f"Error during deferred execution: {e}")
                case OnFailureCallback(fn):
                    if exc_type is None:
                        continue
                    try:
                        fn(exc_type)
                    except Exception as e:
                        error(f"Error during deferred execution: {e}")
