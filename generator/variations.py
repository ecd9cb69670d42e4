"""
Edition variation generator.

Builds N layer sets from sibling identities (``base-0`` .. ``base-N-1``)
so the generation ranges can be checked across many seeds at once, and
optionally renders a contact sheet of their relic frames.
"""

from __future__ import annotations

import math
from typing import Optional

from PIL import Image

from generator.state import LayerSet, generate_layers


def generate_variations(base_identity: str, n: int = 16) -> list[LayerSet]:
    """
    Generate N layer sets with sibling identities.

    Args:
        base_identity: Prefix; variation i uses ``f"{base_identity}-{i}"``.
        n: Number of variations.

    Returns:
        List of LayerSets in index order.
    """
    return [generate_layers(f"{base_identity}-{i}") for i in range(n)]


def contact_sheet(
    layer_sets: list[LayerSet],
    tile_size: int = 256,
    columns: Optional[int] = None,
) -> Image.Image:
    """Tile the relic frame of each layer set into one image."""
    from generator.renderer import render_relic
    from ritual.states import RELIC_PARAMETERS

    if columns is None:
        columns = max(1, math.ceil(math.sqrt(len(layer_sets))))
    rows = max(1, math.ceil(len(layer_sets) / columns))
    sheet = Image.new("RGB", (columns * tile_size, rows * tile_size))
    for i, layers in enumerate(layer_sets):
        tile = render_relic(layers, RELIC_PARAMETERS, size=tile_size)
        sheet.paste(tile, ((i % columns) * tile_size, (i // columns) * tile_size))
    return sheet
