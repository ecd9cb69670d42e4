"""
Layer state calculator — the ground-truth content of an edition.

Python fixes every seeded visual decision BEFORE the ritual starts; the
renderer only ever reads what is built here plus the live parameters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from generator.geometry import GeometryGenerator
from generator.grid import GridGenerator
from generator.particles import ParticleGenerator
from generator.seeding import RandomSource, SeededGenerator
from generator.weathering import WeatheringGenerator


@dataclass
class LayerSet:
    """All content layers for one session, built from a single seed."""
    seed: int
    identity: str
    geometry: GeometryGenerator
    grid: GridGenerator
    particles: ParticleGenerator
    weathering: WeatheringGenerator
    rng: SeededGenerator

    def describe(self) -> dict[str, Any]:
        """Static descriptors only; per-frame runtime state is excluded."""
        return {
            "seed": self.seed,
            "geometry": self.geometry.describe(),
            "grid": self.grid.describe(),
            "particles": self.particles.describe(),
            "weathering": self.weathering.describe(),
        }


def build_layers(rng: SeededGenerator) -> LayerSet:
    """
    Run every content generator against one SeededGenerator.

    The draw order (geometry, grid, particles, weathering) is part of the
    edition's identity: reordering it changes every artwork.
    """
    geometry = GeometryGenerator(rng)
    grid = GridGenerator(rng)
    particles = ParticleGenerator(rng)
    weathering = WeatheringGenerator(rng)
    return LayerSet(
        seed=rng.seed,
        identity=rng.identity,
        geometry=geometry,
        grid=grid,
        particles=particles,
        weathering=weathering,
        rng=rng,
    )


def generate_layers(identity: str, source: Optional[RandomSource] = None) -> LayerSet:
    """Build the full layer set for an identity string."""
    return build_layers(SeededGenerator(identity, source))
