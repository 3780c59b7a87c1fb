"""
Cycle navigation as an explicit, immutable state value.
Every operation takes a NavigationState and returns a new one; nothing is kept between calls.
"""
import enum
from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from diary.schemas.cycle import Cycle
from diary.services.cycles import build_cycles
from diary.services.event_store import EventStore


class NavigationMove(str, enum.Enum):
    stay = "stay"
    previous = "previous"
    next = "next"
    latest = "latest"


class NavigationState(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int = 0
    cycles: tuple[Cycle, ...] = ()

    @property
    def current(self) -> Cycle | None:
        if not self.cycles:
            return None
        return self.cycles[self.index]

    @property
    def has_previous(self) -> bool:
        return self.index > 0

    @property
    def has_next(self) -> bool:
        return self.index < len(self.cycles) - 1


def _clamp(index: int, length: int) -> int:
    if length == 0:
        return 0
    return max(0, min(index, length - 1))


def refresh(state: NavigationState, cycles: Sequence[Cycle]) -> NavigationState:
    """Swap in a recomputed cycle list and clamp the index to it."""
    cycles = tuple(cycles)
    return NavigationState(index=_clamp(state.index, len(cycles)), cycles=cycles)


def jump_to_latest(state: NavigationState) -> NavigationState:
    return state.model_copy(update={"index": max(0, len(state.cycles) - 1)})


def step_previous(state: NavigationState) -> NavigationState:
    return state.model_copy(update={"index": _clamp(state.index - 1, len(state.cycles))})


def step_next(state: NavigationState) -> NavigationState:
    return state.model_copy(update={"index": _clamp(state.index + 1, len(state.cycles))})


def apply_move(state: NavigationState, move: NavigationMove) -> NavigationState:
    if move == NavigationMove.previous:
        return step_previous(state)
    if move == NavigationMove.next:
        return step_next(state)
    if move == NavigationMove.latest:
        return jump_to_latest(state)
    return state


async def load_navigation(
    store: EventStore,
    index: int | None = None,
    move: NavigationMove = NavigationMove.stay,
    now_ms: int | None = None,
) -> NavigationState:
    """Rebuild cycles from the store, clamp index (None = latest), then apply move."""
    cycles = build_cycles(await store.list_all(), now_ms=now_ms)
    if index is None:
        state = jump_to_latest(NavigationState(cycles=tuple(cycles)))
    else:
        state = refresh(NavigationState(index=index), cycles)
    return apply_move(state, move)
