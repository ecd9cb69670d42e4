"""
Particle field — a fixed pool of pen-like particles that trace the
composition. The pool never grows or shrinks; the ``particle_energy``
channel decides how many of them are live on a given frame.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field

from generator.seeding import SeededGenerator

CAPACITY = 120
SPAWN_RADIUS = 0.4
MAX_DISTANCE = 0.6
TRAIL_LENGTH = 5
DAMPING = 0.98
STEER_FORCE = 0.00005
LIFE_DECAY = 0.2  # per second
REFERENCE_FPS = 60


@dataclass(frozen=True)
class ParticleSeed:
    x: float
    y: float
    vx: float
    vy: float
    life: float
    size: float


@dataclass
class ParticleRuntime:
    x: float
    y: float
    vx: float
    vy: float
    life: float
    trail: deque = field(default_factory=lambda: deque(maxlen=TRAIL_LENGTH))
    active: bool = False

    @classmethod
    def from_seed(cls, seed: ParticleSeed) -> ParticleRuntime:
        return cls(x=seed.x, y=seed.y, vx=seed.vx, vy=seed.vy, life=seed.life)


class ParticleGenerator:
    def __init__(self, rng: SeededGenerator, capacity: int = CAPACITY):
        self._rng = rng
        self.capacity = capacity
        self.seeds: tuple[ParticleSeed, ...] = tuple(self._spawn(rng) for _ in range(capacity))
        self.runtime: list[ParticleRuntime] = [ParticleRuntime.from_seed(s) for s in self.seeds]

    @staticmethod
    def _spawn(rng: SeededGenerator) -> ParticleSeed:
        angle = rng.uniform(0.0, 2 * math.pi)
        radius = rng.uniform(0.0, SPAWN_RADIUS)
        return ParticleSeed(
            x=radius * math.cos(angle),
            y=radius * math.sin(angle),
            vx=rng.uniform(-0.001, 0.001),
            vy=rng.uniform(-0.001, 0.001),
            life=rng.uniform(0.5, 1.0),
            size=rng.uniform(0.0008, 0.002),
        )

    def active_count(self, energy: float) -> int:
        return max(0, min(self.capacity, math.floor(energy * self.capacity)))

    def update(self, params, dt: float, time: float) -> None:
        """Advance every live particle by dt seconds; ``time`` drives the noise field."""
        energy = params.particle_energy
        noise_amp = params.noise_amp
        live = self.active_count(energy)

        for i, p in enumerate(self.runtime):
            p.active = i < live
            if not p.active:
                continue

            p.x += p.vx * dt * REFERENCE_FPS
            p.y += p.vy * dt * REFERENCE_FPS

            if noise_amp > 0:
                n = self._rng.noise(p.x * 3, p.y * 3, time * 0.3)
                heading = n * 4 * math.pi
                p.vx += math.cos(heading) * STEER_FORCE * energy
                p.vy += math.sin(heading) * STEER_FORCE * energy

            p.vx *= DAMPING
            p.vy *= DAMPING

            if math.hypot(p.x, p.y) > MAX_DISTANCE:
                # Re-enter on the opposite side, halfway in
                angle = math.atan2(p.y, p.x) + math.pi
                p.x = MAX_DISTANCE * 0.5 * math.cos(angle)
                p.y = MAX_DISTANCE * 0.5 * math.sin(angle)

            p.trail.append((p.x, p.y))

            p.life -= dt * LIFE_DECAY
            if p.life <= 0:
                p.life = 1.0

    def active(self) -> list[tuple[ParticleSeed, ParticleRuntime]]:
        return [(s, r) for s, r in zip(self.seeds, self.runtime) if r.active]

    def describe(self) -> dict:
        return {
            "capacity": self.capacity,
            "seeds": [(s.x, s.y, s.vx, s.vy, s.life, s.size) for s in self.seeds],
        }
