"""
Seeded randomness — the single source of every per-edition decision.

A session identity string is folded into a 32-bit seed; that seed drives
both the uniform draws the content generators consume and the coherent
noise field used for drift and jitter. Same identity, same artwork.
"""

from __future__ import annotations

import logging
import math
import random
import struct
from typing import Optional, Protocol

import numpy as np

logger = logging.getLogger(__name__)


def string_hash(identity: str) -> int:
    """
    Rolling 32-bit string hash: h = h * 31 + code_unit, wrapped to a
    signed 32-bit integer each step, absolute value at the end.

    Iterates UTF-16 code units so the result matches browser hosts
    character for character. Total over all strings.
    """
    data = identity.encode("utf-16-le", errors="surrogatepass")
    h = 0
    for (unit,) in struct.iter_unpack("<H", data):
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def seed_from_string(identity: str) -> int:
    """Derive the integer seed for an identity string."""
    return string_hash(identity)


class RandomSource(Protocol):
    """Seed-able uniform + coherent-noise source (usually the host renderer's)."""

    def set_seed(self, seed: int) -> None: ...

    def uniform(self, lo: float, hi: float) -> float: ...

    def noise(self, x: float, y: float = 0.0, z: float = 0.0) -> float: ...


# ── Coherent noise ───────────────────────────────────────────────────

def _fade(t: float) -> float:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _grad(h: int, x: float, y: float, z: float) -> float:
    h &= 15
    u = x if h < 8 else y
    if h < 4:
        v = y
    elif h in (12, 14):
        v = x
    else:
        v = z
    return (u if h & 1 == 0 else -u) + (v if h & 2 == 0 else -v)


class PerlinNoise:
    """
    Improved Perlin gradient noise in 3D, summed over octaves and
    normalized to [0, 1].

    The permutation table comes from numpy's PCG64 seeded with the
    session seed, so the field is as reproducible as the uniform draws.
    """

    def __init__(self, seed: int, octaves: int = 4, falloff: float = 0.5):
        self.octaves = max(1, octaves)
        self.falloff = falloff
        perm = np.random.default_rng(seed).permutation(256)
        self._perm: list[int] = [int(v) for v in np.concatenate([perm, perm])]

    def _single(self, x: float, y: float, z: float) -> float:
        p = self._perm
        xi = math.floor(x) & 255
        yi = math.floor(y) & 255
        zi = math.floor(z) & 255
        x -= math.floor(x)
        y -= math.floor(y)
        z -= math.floor(z)
        u, v, w = _fade(x), _fade(y), _fade(z)

        a = p[xi] + yi
        aa = p[a] + zi
        ab = p[a + 1] + zi
        b = p[xi + 1] + yi
        ba = p[b] + zi
        bb = p[b + 1] + zi

        return _lerp(
            _lerp(
                _lerp(_grad(p[aa], x, y, z), _grad(p[ba], x - 1, y, z), u),
                _lerp(_grad(p[ab], x, y - 1, z), _grad(p[bb], x - 1, y - 1, z), u),
                v,
            ),
            _lerp(
                _lerp(_grad(p[aa + 1], x, y, z - 1), _grad(p[ba + 1], x - 1, y, z - 1), u),
                _lerp(
                    _grad(p[ab + 1], x, y - 1, z - 1),
                    _grad(p[bb + 1], x - 1, y - 1, z - 1),
                    u,
                ),
                v,
            ),
            w,
        )

    def __call__(self, x: float, y: float = 0.0, z: float = 0.0) -> float:
        total = 0.0
        norm = 0.0
        amp = 1.0
        freq = 1.0
        for _ in range(self.octaves):
            total += amp * (self._single(x * freq, y * freq, z * freq) + 1.0) * 0.5
            norm += amp
            amp *= self.falloff
            freq *= 2.0
        return min(1.0, max(0.0, total / norm))


class LocalRandomSource:
    """Stdlib PRNG + local Perlin field; used when no host source is injected."""

    def __init__(self, seed: int = 0):
        self.set_seed(seed)

    def set_seed(self, seed: int) -> None:
        self._rng = random.Random(seed)
        self._noise = PerlinNoise(seed)

    def uniform(self, lo: float, hi: float) -> float:
        return lo + self._rng.random() * (hi - lo)

    def noise(self, x: float, y: float = 0.0, z: float = 0.0) -> float:
        return self._noise(x, y, z)


def ambient_rng() -> np.random.Generator:
    """Unseeded generator for frame-time texture that is not meant to repeat."""
    return np.random.default_rng()


class SeededGenerator:
    """
    Session-owned seeded generator.

    Hashes the identity, seeds the injected RandomSource (so any ambient
    randomness the renderer performs on its own is reproducible too) and
    forwards draws to it. Without a host source, a LocalRandomSource is
    created instead.
    """

    def __init__(self, identity: str, source: Optional[RandomSource] = None):
        self.identity = identity
        self.seed = seed_from_string(identity)
        if source is None:
            logger.info(
                "No host random source; using local seeded PRNG for seed %d", self.seed
            )
            source = LocalRandomSource()
        self.source = source
        self.source.set_seed(self.seed)

    def uniform(self, lo: float, hi: float) -> float:
        return self.source.uniform(lo, hi)

    def random(self) -> float:
        return self.source.uniform(0.0, 1.0)

    def integer(self, lo: int, hi: int) -> int:
        """Integer in [lo, hi), via floor of a uniform draw."""
        return min(hi - 1, int(math.floor(self.source.uniform(lo, hi))))

    def chance(self, p: float) -> bool:
        return self.random() < p

    def noise(self, x: float, y: float = 0.0, z: float = 0.0) -> float:
        return self.source.noise(x, y, z)
