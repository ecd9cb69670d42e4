"""
Grid field: a square lattice with a few filled cells and a handful of
fragments that lift off along their own drift vectors once the z-lift
channel passes the detach threshold.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from generator.palette import FOREGROUND
from generator.seeding import SeededGenerator

GRID_EXTENT = 0.5  # half-width in unit space
FRAGMENT_COUNT = 4
DETACH_THRESHOLD = 0.3
INNER_LINE_FRACTION = 0.3
VERTEX_JITTER = 0.05
JITTER_TIME_SCALE = 0.2


@dataclass(frozen=True)
class FilledCell:
    gx: int
    gy: int
    palette_index: int
    alpha: float


@dataclass(frozen=True)
class Fragment:
    gx: int
    gy: int
    drift_x: float
    drift_y: float
    drift_z: float


@dataclass
class FragmentRuntime:
    """Per-frame state paired by index with a Fragment."""
    offset_x: float = 0.0
    offset_y: float = 0.0
    z_offset: float = 0.0
    detached: bool = False


class GridGenerator:
    def __init__(self, rng: SeededGenerator):
        self.size = rng.integer(6, 11)
        self.inner_palette_index = rng.integer(0, len(FOREGROUND))
        self.outer_palette_index = rng.integer(0, len(FOREGROUND))

        self.filled_cells: tuple[FilledCell, ...] = tuple(
            FilledCell(
                gx=rng.integer(0, self.size),
                gy=rng.integer(0, self.size),
                palette_index=rng.integer(0, len(FOREGROUND)),
                alpha=rng.uniform(0.04, 0.18),
            )
            for _ in range(rng.integer(4, 12))
        )

        self.fragments: tuple[Fragment, ...] = tuple(
            Fragment(
                gx=rng.integer(0, self.size),
                gy=rng.integer(0, self.size),
                drift_x=rng.uniform(-0.02, 0.02),
                drift_y=rng.uniform(-0.02, 0.02),
                drift_z=rng.uniform(0.1, 0.3),
            )
            for _ in range(FRAGMENT_COUNT)
        )
        self.runtime: list[FragmentRuntime] = [FragmentRuntime() for _ in self.fragments]

    @property
    def cell_size(self) -> float:
        return GRID_EXTENT * 2 / self.size

    def line_position(self, i: int) -> float:
        return -GRID_EXTENT + i * self.cell_size

    def cell_center(self, gx: int, gy: int) -> tuple[float, float]:
        return (
            -GRID_EXTENT + (gx + 0.5) * self.cell_size,
            -GRID_EXTENT + (gy + 0.5) * self.cell_size,
        )

    def inner_lines(self) -> frozenset[int]:
        """The round(30%) of the size + 1 lines lying closest to the centre line."""
        count = max(1, round(INNER_LINE_FRACTION * (self.size + 1)))
        centre = self.size / 2
        ranked = sorted(range(self.size + 1), key=lambda i: (abs(i - centre), i))
        return frozenset(ranked[:count])

    def is_inner_line(self, i: int) -> bool:
        return i in self.inner_lines()

    def line_palette_index(self, i: int) -> int:
        return self.inner_palette_index if self.is_inner_line(i) else self.outer_palette_index

    def vertex(
        self,
        i: int,
        j: int,
        noise_amp: float = 0.0,
        time: float = 0.0,
        noise: Optional[Callable[[float, float, float], float]] = None,
    ) -> tuple[float, float]:
        """
        Lattice point (i, j) in unit space. With a noise field and a
        positive amplitude, both axes shift by the same sampled offset.
        """
        x = self.line_position(i)
        y = self.line_position(j)
        if noise is not None and noise_amp > 0:
            n = noise(i * 0.5, j * 0.5, time * JITTER_TIME_SCALE)
            shift = (n - 0.5) * noise_amp * VERTEX_JITTER
            x += shift
            y += shift
        return (x, y)

    def update(self, params) -> None:
        z_lift = params.z_lift_strength
        detached = z_lift > DETACH_THRESHOLD
        for frag, state in zip(self.fragments, self.runtime):
            state.z_offset = z_lift * frag.drift_z
            state.offset_x = frag.drift_x * z_lift
            state.offset_y = frag.drift_y * z_lift
            state.detached = detached

    def describe(self) -> dict:
        return {
            "size": self.size,
            "filled_cells": [(c.gx, c.gy, c.palette_index, c.alpha) for c in self.filled_cells],
            "fragments": [
                (f.gx, f.gy, f.drift_x, f.drift_y, f.drift_z) for f in self.fragments
            ],
            "line_palette": (self.inner_palette_index, self.outer_palette_index),
        }
