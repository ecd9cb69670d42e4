"""
Sacred-geometry layer: concentric circle sets, golden-ratio spirals and
radial construction guides.

Everything is drawn once from the session's SeededGenerator; the renderer
reveals it progressively from the ``geometry_completion`` channel.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from generator.palette import FOREGROUND
from generator.seeding import SeededGenerator

PHI = (1 + math.sqrt(5)) / 2
TWO_PI = 2 * math.pi

SPIRAL_POINTS = 200

GUIDE_FADE_END = 0.05
SPIRAL_FADE_END = 0.1
CIRCLE_REVEAL_START = 0.2


@dataclass(frozen=True)
class Ring:
    radius: float
    fill_alpha: float


@dataclass(frozen=True)
class CircleSet:
    """A family of concentric circles sharing one centre."""
    cx: float
    cy: float
    max_radius: float
    filled: bool
    palette_index: int
    rings: tuple[Ring, ...]

    @property
    def circle_count(self) -> int:
        return len(self.rings)


@dataclass(frozen=True)
class Spiral:
    turns: float
    max_radius: float
    rotation: float
    palette_index: int
    points: tuple[tuple[float, float], ...]


@dataclass(frozen=True)
class Guide:
    angle: float
    length: float

    @property
    def end(self) -> tuple[float, float]:
        return (self.length * math.cos(self.angle), self.length * math.sin(self.angle))


def spiral_point(t: float, turns: float, max_radius: float, rotation: float = 0.0) -> tuple[float, float]:
    """Point on a golden-ratio scaled spiral at parameter t in [0, 1)."""
    radius = t * max_radius * PHI ** (2 * t - 1)
    angle = t * turns * TWO_PI + rotation
    return (radius * math.cos(angle), radius * math.sin(angle))


def _clamp01(v: float) -> float:
    return min(1.0, max(0.0, v))


class GeometryGenerator:
    """Draws circle sets, spirals and guides, in that order."""

    def __init__(self, rng: SeededGenerator):
        self.circle_sets: tuple[CircleSet, ...] = self._generate_circle_sets(rng)
        self.spirals: tuple[Spiral, ...] = self._generate_spirals(rng)
        self.guides: tuple[Guide, ...] = self._generate_guides(rng)

    @staticmethod
    def _generate_circle_sets(rng: SeededGenerator) -> tuple[CircleSet, ...]:
        sets = []
        for _ in range(rng.integer(2, 5)):
            cx = rng.uniform(-0.06, 0.06)
            cy = rng.uniform(-0.06, 0.06)
            max_radius = rng.uniform(0.18, 0.42)
            count = rng.integer(3, 8)
            filled = rng.chance(0.7)
            palette_index = rng.integer(0, len(FOREGROUND))
            rings = tuple(
                Ring(radius=max_radius * (k + 1) / count, fill_alpha=rng.uniform(0.02, 0.10))
                for k in range(count)
            )
            sets.append(CircleSet(cx, cy, max_radius, filled, palette_index, rings))
        return tuple(sets)

    @staticmethod
    def _generate_spirals(rng: SeededGenerator) -> tuple[Spiral, ...]:
        spirals = []
        for _ in range(rng.integer(1, 4)):
            turns = rng.uniform(2.0, 4.0)
            max_radius = rng.uniform(0.25, 0.42)
            rotation = rng.uniform(0.0, TWO_PI)
            palette_index = rng.integer(0, len(FOREGROUND))
            points = tuple(
                spiral_point(i / SPIRAL_POINTS, turns, max_radius, rotation)
                for i in range(SPIRAL_POINTS)
            )
            spirals.append(Spiral(turns, max_radius, rotation, palette_index, points))
        return tuple(spirals)

    @staticmethod
    def _generate_guides(rng: SeededGenerator) -> tuple[Guide, ...]:
        count = rng.integer(8, 17)
        return tuple(
            Guide(
                angle=i / count * TWO_PI + rng.uniform(-0.05, 0.05),
                length=rng.uniform(0.3, 0.5),
            )
            for i in range(count)
        )

    # ── Progressive reveal ───────────────────────────────────────────

    @staticmethod
    def guide_alpha(completion: float) -> float:
        return _clamp01(completion / GUIDE_FADE_END)

    @staticmethod
    def spiral_alpha(completion: float) -> float:
        return _clamp01(completion / SPIRAL_FADE_END)

    @staticmethod
    def circle_progress(completion: float) -> float:
        return _clamp01((completion - CIRCLE_REVEAL_START) / (1.0 - CIRCLE_REVEAL_START))

    @classmethod
    def visible_rings(cls, circle_set: CircleSet, completion: float) -> int:
        """How many rings of a set are drawn at this completion level."""
        if completion <= CIRCLE_REVEAL_START:
            return 0
        return math.ceil(cls.circle_progress(completion) * circle_set.circle_count)

    def describe(self) -> dict:
        return {
            "circle_sets": [
                {
                    "center": (s.cx, s.cy),
                    "max_radius": s.max_radius,
                    "filled": s.filled,
                    "palette_index": s.palette_index,
                    "radii": [r.radius for r in s.rings],
                }
                for s in self.circle_sets
            ],
            "spirals": [
                {"turns": s.turns, "max_radius": s.max_radius, "rotation": s.rotation}
                for s in self.spirals
            ],
            "guides": [(g.angle, g.length) for g in self.guides],
        }
