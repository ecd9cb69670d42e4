"""Ritual — the timed state machine and its parameter script."""

from ritual.controller import RitualController
from ritual.states import (
    RITUAL_STATES,
    ParameterVector,
    RitualState,
    frozen_for_relic,
    layer_order,
)

__all__ = [
    "RitualController",
    "RITUAL_STATES",
    "ParameterVector",
    "RitualState",
    "frozen_for_relic",
    "layer_order",
]
