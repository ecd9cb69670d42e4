"""Easing curves for de-linearized progress signals."""

from __future__ import annotations

from typing import Callable

Easing = Callable[[float], float]


def ease_in_cubic(t: float) -> float:
    return t * t * t


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


def ease_in_out_cubic(t: float) -> float:
    return 4 * t * t * t if t < 0.5 else 1 - (-2 * t + 2) ** 3 / 2


EASINGS: dict[str, Easing] = {
    "in": ease_in_cubic,
    "out": ease_out_cubic,
    "in_out": ease_in_out_cubic,
}


def get_easing(name: str) -> Easing:
    try:
        return EASINGS[name]
    except KeyError:
        raise ValueError(f"Unknown easing curve: {name}") from None
