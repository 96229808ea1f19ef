"""Finite-state machine for a single capture session.

``transition`` is pure: it never touches the camera, the clock or the
compositor. ``CaptureSession`` feeds it events and performs the side effects
each resulting phase calls for.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from booth.errors import InvalidTransition


class Phase(str, Enum):
    idle = "idle"
    countdown = "countdown"
    flash = "flash"
    composing = "composing"
    delivering = "delivering"
    complete = "complete"
    failed = "failed"


class FailureReason(str, Enum):
    composition_failure = "composition_failure"
    no_frames_captured = "no_frames_captured"
    device_lost = "device_lost"
    internal_error = "internal_error"


ACTIVE_PHASES = frozenset({Phase.countdown, Phase.flash, Phase.composing, Phase.delivering})
TERMINAL_PHASES = frozenset({Phase.complete, Phase.failed})
CANCELLABLE_PHASES = frozenset({Phase.idle, Phase.countdown, Phase.flash, Phase.composing})


@dataclass(frozen=True)
class SessionState:
    phase: Phase = Phase.idle
    target_shot_count: int = 0
    shot_index: int = 0
    seconds_remaining: int = 0
    captured_count: int = 0
    flashed_at: Optional[float] = None
    reason: Optional[FailureReason] = None


@dataclass(frozen=True)
class Start:
    target_shot_count: int
    first_duration: int


@dataclass(frozen=True)
class Tick:
    at: float


@dataclass(frozen=True)
class ShotTaken:
    captured: bool
    next_duration: int


@dataclass(frozen=True)
class Composed:
    pass


@dataclass(frozen=True)
class Delivered:
    pass


@dataclass(frozen=True)
class Fail:
    reason: FailureReason


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class Reset:
    pass


Event = Union[Start, Tick, ShotTaken, Composed, Delivered, Fail, Cancel, Reset]

IDLE = SessionState()


def _invalid(state: SessionState, event: Event) -> InvalidTransition:
    return InvalidTransition(state.phase.value, type(event).__name__)


def transition(state: SessionState, event: Event) -> SessionState:
    phase = state.phase

    if isinstance(event, Start):
        if phase is not Phase.idle:
            raise _invalid(state, event)
        if event.target_shot_count < 1:
            raise ValueError("target_shot_count must be positive")
        return SessionState(
            phase=Phase.countdown,
            target_shot_count=event.target_shot_count,
            shot_index=0,
            seconds_remaining=event.first_duration,
        )

    if isinstance(event, Tick):
        if phase is not Phase.countdown:
            raise _invalid(state, event)
        remaining = state.seconds_remaining - 1
        if remaining > 0:
            return replace(state, seconds_remaining=remaining)
        return replace(state, phase=Phase.flash, seconds_remaining=0, flashed_at=event.at)

    if isinstance(event, ShotTaken):
        if phase is not Phase.flash:
            raise _invalid(state, event)
        captured = state.captured_count + (1 if event.captured else 0)
        next_index = state.shot_index + 1
        if next_index < state.target_shot_count:
            return replace(
                state,
                phase=Phase.countdown,
                shot_index=next_index,
                seconds_remaining=event.next_duration,
                captured_count=captured,
                flashed_at=None,
            )
        if captured == 0:
            return replace(
                state,
                phase=Phase.failed,
                captured_count=0,
                flashed_at=None,
                reason=FailureReason.no_frames_captured,
            )
        return replace(state, phase=Phase.composing, captured_count=captured, flashed_at=None)

    if isinstance(event, Composed):
        if phase is not Phase.composing:
            raise _invalid(state, event)
        return replace(state, phase=Phase.delivering)

    if isinstance(event, Delivered):
        if phase is not Phase.delivering:
            raise _invalid(state, event)
        return replace(state, phase=Phase.complete)

    if isinstance(event, Fail):
        if phase not in ACTIVE_PHASES:
            raise _invalid(state, event)
        return replace(
            state,
            phase=Phase.failed,
            seconds_remaining=0,
            captured_count=0,
            flashed_at=None,
            reason=event.reason,
        )

    if isinstance(event, Cancel):
        if phase not in CANCELLABLE_PHASES:
            raise _invalid(state, event)
        return IDLE

    if isinstance(event, Reset):
        if phase not in TERMINAL_PHASES:
            raise _invalid(state, event)
        return IDLE

    raise TypeError(f"Unknown session event: {event!r}")
