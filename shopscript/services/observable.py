"""
Observable state containers for domain services.

A service keeps one immutable ServiceState snapshot. Every transition
replaces the snapshot and notifies the subscribers with the new one, so a
listener always sees a complete state, never a partially applied one.
"""

from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from shopscript.core.errors import ErrorRecord, ShopScriptError
from shopscript.core.logging import get_logger

logger = get_logger(__name__)

DataT = TypeVar("DataT")
StateT = TypeVar("StateT", bound="ServiceState")
ResultT = TypeVar("ResultT")

Listener = Callable[[Any], None]


class ServiceState(BaseModel, Generic[DataT]):
    model_config = ConfigDict(frozen=True)

    data: Optional[DataT] = None
    is_loading: bool = False
    last_error: Optional[ErrorRecord] = None


class ObservableService(Generic[StateT]):
    """
    Base class for services publishing ServiceState snapshots.

    `is_loading` stays true while at least one operation of the service is
    in flight. Each operation publishes its own terminal state; with
    overlapping operations the last publish wins.
    """

    def __init__(self, initial_state: StateT):
        self._initial_state = initial_state
        self._state = initial_state
        self._listeners: List[Listener] = []
        self._pending = 0

    @property
    def state(self) -> StateT:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def last_error(self) -> Optional[ErrorRecord]:
        return self._state.last_error

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register `listener(state)` for every published snapshot.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self) -> None:
        """Return to the initial empty state and publish it."""
        self._state = self._initial_state.model_copy(update={"is_loading": self._pending > 0})
        self._notify()

    def _publish(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception(f"{type(self).__name__} listener failed")

    def _begin(self) -> None:
        self._pending += 1
        self._publish(is_loading=True, last_error=None)

    def _end(self, **changes: Any) -> None:
        self._pending -= 1
        self._publish(is_loading=self._pending > 0, **changes)

    async def _run(
        self,
        operation: Awaitable[ResultT],
        on_success: Optional[Callable[[ResultT], Dict[str, Any]]] = None,
        on_error: Optional[Callable[[ShopScriptError], Dict[str, Any]]] = None
    ) -> ResultT:
        """
        Await `operation` inside the loading/error bookkeeping.

        `on_success` maps the result to state changes published together with
        the end of loading. On failure the error is recorded, `on_error` may
        add further changes, and the exception is re-raised.
        """
        self._begin()
        changes: Dict[str, Any] = {}
        try:
            result = await operation
            if on_success is not None:
                changes = on_success(result)
            return result
        except ShopScriptError as e:
            changes = {"last_error": e.record}
            if on_error is not None:
                changes.update(on_error(e))
            raise
        finally:
            self._end(**changes)
