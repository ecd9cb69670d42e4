"""Content Generator — seeded layers and their Pillow renderer."""

from generator.seeding import SeededGenerator, seed_from_string, string_hash
from generator.state import LayerSet, build_layers, generate_layers
from generator.renderer import render_frame, render_relic
from generator.variations import generate_variations

__all__ = [
    "SeededGenerator",
    "seed_from_string",
    "string_hash",
    "LayerSet",
    "build_layers",
    "generate_layers",
    "render_frame",
    "render_relic",
    "generate_variations",
]
