# reviewtui/core/loading.py
"""Four-phase value describing an asynchronous fetch.

``Init -> Loading -> Loaded | Error``; ``Loaded``/``Error`` may go back to
``Loading`` for a refresh. A state is never mutated, only replaced.
"""
import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Init:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Loaded(Generic[T]):
    data: T


@dataclass(frozen=True)
class Error:
    reason: str


LoadingState = Union[Init, Loading, Loaded, Error]

INIT = Init()
LOADING = Loading()


def valid_transition(prev: LoadingState, nxt: LoadingState) -> bool:
    if isinstance(nxt, Loading):
        return True
    if isinstance(nxt, Init):
        return False
    return isinstance(prev, Loading)


def advance(prev: LoadingState, nxt: LoadingState, what: str = "") -> LoadingState:
    """Return ``nxt``; log a warning when the step skips ``Loading``."""
    if not valid_transition(prev, nxt):
        log.warning("unexpected loading transition %s%s -> %s",
                    f"[{what}] " if what else "", type(prev).__name__, type(nxt).__name__)
    return nxt


def loaded_data(state: LoadingState, default: Any = None) -> Any:
    return state.data if isinstance(state, Loaded) else default
