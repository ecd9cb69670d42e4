"""
Ritual controller — the timed state machine that drives the piece.

Each update accumulates time, advances at most one state when the
current one has run its course, notifies listeners, and blends every
live channel a step closer to the active state's targets.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Callable, Optional, Sequence

from config import settings
from ritual.easing import get_easing
from ritual.states import RITUAL_STATES, ParameterVector, RitualState

logger = logging.getLogger(__name__)

StateListener = Callable[[str, int], None]


class RitualController:
    """
    Owns the live ParameterVector and the position in the state sequence.

    Blending defaults to a fixed per-update factor (``value += (target -
    value) * smoothing``), so the blend speed follows the update rate.
    ``mode="time"`` swaps in ``1 - exp(-rate * dt)`` for frame-rate
    independent blending.
    """

    def __init__(
        self,
        states: Sequence[RitualState] = RITUAL_STATES,
        smoothing: Optional[float] = None,
        mode: Optional[str] = None,
        rate: Optional[float] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if not states:
            raise ValueError("A ritual needs at least one state")
        self.states: tuple[RitualState, ...] = tuple(states)
        self.smoothing = settings.SMOOTHING_FACTOR if smoothing is None else smoothing
        self.mode = mode or settings.SMOOTHING_MODE
        self.rate = settings.SMOOTHING_RATE if rate is None else rate
        if self.mode not in ("frame", "time"):
            raise ValueError(f"Unknown smoothing mode: {self.mode}")
        self._clock = clock

        self._index = 0
        self.time_in_state = 0.0
        self.global_time = 0.0
        self._values: dict[str, float] = ParameterVector().to_dict()
        self._targets: dict[str, float] = self.states[0].targets.to_dict()
        self._listeners: list[StateListener] = []
        self.completion_timestamp: Optional[datetime] = None

        if self.is_complete:
            self._mark_complete()

    # ── Listeners ────────────────────────────────────────────────────

    def on_state_change(self, callback: StateListener) -> StateListener:
        """Register a callback fired with (state_name, state_index) on each transition."""
        self._listeners.append(callback)
        return callback

    # ── Tick ─────────────────────────────────────────────────────────

    def update(self, dt: float) -> None:
        dt = max(0.0, dt)
        self.global_time += dt
        self.time_in_state += dt

        if not self.is_complete and self.time_in_state >= self.current_state.effective_duration:
            self._advance()

        self._blend(dt)

    def _advance(self) -> None:
        self._index += 1
        self.time_in_state = 0.0
        state = self.current_state
        self._targets = state.targets.to_dict()

        if self.is_complete:
            self._mark_complete()

        logger.debug("Ritual state -> %s (%d)", state.name, self._index)
        for callback in list(self._listeners):
            callback(state.name, self._index)

    def _mark_complete(self) -> None:
        if self.completion_timestamp is None:
            self.completion_timestamp = self._clock()
            logger.info("Ritual complete at %s", self.completion_timestamp.isoformat())

    def _blend_factor(self, dt: float) -> float:
        if self.mode == "time":
            return 1.0 - math.exp(-self.rate * dt)
        return self.smoothing

    def _blend(self, dt: float) -> None:
        k = self._blend_factor(dt)
        for name, value in self._values.items():
            self._values[name] = value + (self._targets[name] - value) * k

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def current_state(self) -> RitualState:
        return self.states[self._index]

    @property
    def state_name(self) -> str:
        return self.current_state.name

    @property
    def state_index(self) -> int:
        return self._index

    @property
    def is_complete(self) -> bool:
        return self._index == len(self.states) - 1

    @property
    def state_progress(self) -> float:
        state = self.current_state
        if state.is_terminal:
            return 0.0
        return min(self.time_in_state / state.effective_duration, 1.0)

    @property
    def eased_progress(self) -> float:
        return get_easing(self.current_state.easing)(self.state_progress)

    @property
    def global_progress(self) -> float:
        """Time-weighted progress over all non-terminal states; 1.0 once complete."""
        if self.is_complete:
            return 1.0
        durations = [s.effective_duration for s in self.states[:-1]]
        total = sum(durations)
        elapsed = sum(durations[: self._index])
        elapsed += min(self.time_in_state, durations[self._index])
        return min(1.0, elapsed / total)

    @property
    def params(self) -> ParameterVector:
        """Read-only snapshot of the live channels."""
        return ParameterVector(**self._values)

    @property
    def targets(self) -> ParameterVector:
        return ParameterVector(**self._targets)

    def get_param(self, name: str) -> float:
        try:
            return self._values[name]
        except KeyError:
            raise KeyError(f"Unknown parameter channel: {name}") from None
