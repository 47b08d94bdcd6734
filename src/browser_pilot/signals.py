# signals.py
# One-shot lifecycle notifications ("stopped", "completed").

from typing import Callable

Callback = Callable[[], None]


class Signal:
    """
    Observer list that fires at most once per run.

    Callbacks connected before a run stay connected across runs; `reset()`
    re-arms the signal at the start of each run.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._callbacks: list[Callback] = []
        self._fired = False

    def connect(self, callback: Callback) -> Callback:
        self._callbacks.append(callback)
        return callback

    def disconnect(self, callback: Callback) -> None:
        self._callbacks.remove(callback)

    def emit(self) -> bool:
        """Notify observers. Returns False if the signal already fired this run."""
        if self._fired:
            return False
        self._fired = True
        for callback in list(self._callbacks):
            callback()
        return True

    def reset(self) -> None:
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired
