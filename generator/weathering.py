"""
Weathering pass: organic stains and golden glitch flecks (seeded, fixed
for the session) plus grain and dither overlays that are re-rolled every
frame from ambient randomness. Layout repeats; texture does not.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from generator.palette import FOREGROUND
from generator.seeding import SeededGenerator, ambient_rng

STAIN_COUNT = 6
STAIN_LOBES = 12
FLECK_COUNT = 20
FLECK_THRESHOLD = 0.2
GRAIN_DENSITY = 300
GRAIN_ALPHA = 15
DITHER_STATES = frozenset({"BREACH_3D", "DESTABILIZE"})
DITHER_MAX_BLOCKS = 40
DITHER_BLOCK_SIZE = 0.02


@dataclass(frozen=True)
class Stain:
    x: float
    y: float
    size: float
    opacity: float
    palette_index: int
    lobes: tuple[float, ...]

    def outline(self) -> list[tuple[float, float]]:
        """Closed polygon around the stain centre, one vertex per lobe."""
        n = len(self.lobes)
        return [
            (
                self.x + self.size * r * math.cos(2 * math.pi * k / n),
                self.y + self.size * r * math.sin(2 * math.pi * k / n),
            )
            for k, r in enumerate(self.lobes)
        ]


@dataclass(frozen=True)
class Fleck:
    x: float
    y: float
    size: float
    opacity: float


@dataclass
class DitherOverlay:
    block_size: float
    blocks: np.ndarray  # (n, 3): x, y, alpha


class WeatheringGenerator:
    def __init__(self, rng: SeededGenerator, ambient: Optional[np.random.Generator] = None):
        self.stains: tuple[Stain, ...] = tuple(
            Stain(
                x=rng.uniform(-0.45, 0.45),
                y=rng.uniform(-0.45, 0.45),
                size=rng.uniform(0.05, 0.18),
                opacity=rng.uniform(0.02, 0.08),
                palette_index=rng.integer(0, len(FOREGROUND)),
                lobes=tuple(rng.uniform(0.75, 1.25) for _ in range(STAIN_LOBES)),
            )
            for _ in range(STAIN_COUNT)
        )
        self.flecks: tuple[Fleck, ...] = tuple(
            Fleck(
                x=rng.uniform(-0.5, 0.5),
                y=rng.uniform(-0.5, 0.5),
                size=rng.uniform(0.0005, 0.002),
                opacity=rng.uniform(0.3, 0.8),
            )
            for _ in range(FLECK_COUNT)
        )
        self._ambient = ambient if ambient is not None else ambient_rng()

    def visible_flecks(self, glitch_rate: float) -> tuple[Fleck, ...]:
        if glitch_rate <= FLECK_THRESHOLD:
            return ()
        count = min(len(self.flecks), math.floor(glitch_rate * len(self.flecks)))
        return self.flecks[:count]

    def grain(self, amount: float) -> np.ndarray:
        """Fresh grain points for this frame as an (n, 3) array of x, y, alpha."""
        n = max(0, math.floor(GRAIN_DENSITY * amount))
        points = np.empty((n, 3), dtype=np.float32)
        if n:
            points[:, :2] = self._ambient.uniform(-0.5, 0.5, size=(n, 2))
            points[:, 2] = amount * GRAIN_ALPHA
        return points

    def dither(self, state_name: str, glitch_rate: float) -> Optional[DitherOverlay]:
        """Pixelation blocks, only while the ritual is breaking apart."""
        if state_name not in DITHER_STATES:
            return None
        n = max(0, min(DITHER_MAX_BLOCKS, math.floor(glitch_rate * DITHER_MAX_BLOCKS)))
        blocks = np.empty((n, 3), dtype=np.float32)
        if n:
            blocks[:, :2] = self._ambient.uniform(-0.5, 0.5, size=(n, 2))
            blocks[:, 2] = self._ambient.uniform(0.1, 0.5, size=n) * glitch_rate
        return DitherOverlay(block_size=DITHER_BLOCK_SIZE, blocks=blocks)

    def describe(self) -> dict:
        return {
            "stains": [
                (s.x, s.y, s.size, s.opacity, s.palette_index, s.lobes) for s in self.stains
            ],
            "flecks": [(f.x, f.y, f.size, f.opacity) for f in self.flecks],
        }
