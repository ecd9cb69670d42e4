"""Fixed colour palette shared by the generators and the renderer."""

from __future__ import annotations

RGB = tuple[int, int, int]

CARBON: RGB = (28, 28, 31)
GHOST: RGB = (249, 249, 254)
TWILIGHT: RGB = (23, 22, 100)
PERIWINKLE: RGB = (147, 129, 255)
GOLDEN: RGB = (224, 202, 60)

BACKGROUND = CARBON

# Generators draw palette indices into this tuple
FOREGROUND: tuple[RGB, ...] = (TWILIGHT, PERIWINKLE, GOLDEN, GHOST)


def color(index: int) -> RGB:
    return FOREGROUND[index % len(FOREGROUND)]
