"""
Pillow reference renderer — layers + parameters → RGB image.

The engine only defines what is drawn; this module is one concrete way
to draw it. Each layer is painted onto its own RGBA overlay and
alpha-composited in the order the ritual state asks for.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from config import settings
from generator.palette import BACKGROUND, GHOST, GOLDEN, PERIWINKLE, color
from generator.state import LayerSet
from ritual.states import ParameterVector, layer_order

RELIC_FLECK_RATE = 0.6


class _Projection:
    """Unit space (centre origin, ±0.5 across) → pixel space, with camera tilt/zoom."""

    def __init__(self, size: int, params: ParameterVector):
        self.size = size
        self.zoom = params.camera_zoom
        self.cos_x = math.cos(params.camera_tilt_x)
        self.sin_x = math.sin(params.camera_tilt_x)
        self.cos_y = math.cos(params.camera_tilt_y)

    def __call__(self, x: float, y: float, z: float = 0.0) -> tuple[float, float]:
        px = x * self.cos_y
        py = y * self.cos_x - z * self.sin_x
        half = self.size / 2
        return (half + px * self.size * self.zoom, half + py * self.size * self.zoom)

    def length(self, v: float) -> float:
        return v * self.size * self.zoom


def _rgba(rgb: tuple[int, int, int], alpha: float) -> tuple[int, int, int, int]:
    return (*rgb, max(0, min(255, int(alpha))))


def _overlay(size: int) -> tuple[Image.Image, ImageDraw.ImageDraw]:
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    return img, ImageDraw.Draw(img)


def _draw_geometry(layers: LayerSet, params: ParameterVector, proj: _Projection, time: float) -> Image.Image:
    img, draw = _overlay(proj.size)
    geo = layers.geometry
    completion = params.geometry_completion
    if completion <= 0:
        return img
    width = max(1, int(proj.size * 0.002))

    guide_alpha = geo.guide_alpha(completion)
    for guide in geo.guides:
        ex, ey = guide.end
        draw.line([proj(0, 0), proj(ex, ey)], fill=_rgba(GHOST, guide_alpha * 50), width=1)

    spiral_alpha = geo.spiral_alpha(completion)
    for spiral in geo.spirals:
        draw.line(
            [proj(x, y) for x, y in spiral.points],
            fill=_rgba(color(spiral.palette_index), spiral_alpha * 90),
            width=width,
        )

    for i, cset in enumerate(geo.circle_sets):
        jitter_x = jitter_y = 0.0
        if params.noise_amp > 0:
            jitter_x = (layers.rng.noise(i * 7.1, 0.0, time * 0.1) - 0.5) * params.noise_amp * 0.1
            jitter_y = (layers.rng.noise(i * 7.1, 50.0, time * 0.1) - 0.5) * params.noise_amp * 0.1
        cx, cy = proj(cset.cx + jitter_x, cset.cy + jitter_y)
        rgb = color(cset.palette_index)
        for ring in cset.rings[: geo.visible_rings(cset, completion)]:
            r = proj.length(ring.radius)
            box = [cx - r, cy - r, cx + r, cy + r]
            fill = _rgba(rgb, ring.fill_alpha * 255) if cset.filled else None
            draw.ellipse(box, fill=fill, outline=_rgba(rgb, 180), width=width)
    return img


def _draw_grid(layers: LayerSet, params: ParameterVector, proj: _Projection, time: float) -> Image.Image:
    img, draw = _overlay(proj.size)
    grid = layers.grid
    visibility = params.grid_visibility
    if visibility <= 0:
        return img

    for cell in grid.filled_cells:
        x0 = grid.line_position(cell.gx)
        y0 = grid.line_position(cell.gy)
        x1 = x0 + grid.cell_size
        y1 = y0 + grid.cell_size
        draw.polygon(
            [proj(x0, y0), proj(x1, y0), proj(x1, y1), proj(x0, y1)],
            fill=_rgba(color(cell.palette_index), cell.alpha * visibility * 255),
        )

    lattice = range(grid.size + 1)
    points = {
        (i, j): proj(*grid.vertex(i, j, params.noise_amp, time, layers.rng.noise))
        for i in lattice
        for j in lattice
    }
    for i in lattice:
        fill = _rgba(color(grid.line_palette_index(i)), visibility * 60)
        draw.line([points[i, j] for j in lattice], fill=fill, width=1)
        draw.line([points[j, i] for j in lattice], fill=fill, width=1)

    z_lift = params.z_lift_strength
    half = grid.cell_size * 0.4
    for frag, state in zip(grid.fragments, grid.runtime):
        if not state.detached:
            continue
        cx, cy = grid.cell_center(frag.gx, frag.gy)
        cx += state.offset_x
        cy += state.offset_y
        corners = [(cx - half, cy - half), (cx + half, cy - half), (cx + half, cy + half), (cx - half, cy + half)]
        draw.polygon(
            [proj(x, y, state.z_offset) for x, y in corners],
            outline=_rgba(GOLDEN, z_lift * 150),
        )
    return img


def _draw_particles(layers: LayerSet, params: ParameterVector, proj: _Projection, time: float) -> Image.Image:
    img, draw = _overlay(proj.size)
    energy = params.particle_energy
    if energy <= 0:
        return img
    for seed, p in layers.particles.active():
        alpha = p.life * min(energy, 1.0) * 180
        if len(p.trail) > 1:
            draw.line([proj(x, y) for x, y in p.trail], fill=_rgba(PERIWINKLE, alpha * 0.3), width=1)
        x, y = proj(p.x, p.y)
        r = max(0.5, proj.length(seed.size) / 2)
        draw.ellipse([x - r, y - r, x + r, y + r], fill=_rgba(PERIWINKLE, alpha))
    return img


def _draw_weathering_base(
    layers: LayerSet,
    params: ParameterVector,
    proj: _Projection,
    fleck_rate: float,
) -> Image.Image:
    img, draw = _overlay(proj.size)
    amount = params.weathering_amount
    if amount <= 0:
        return img
    weathering = layers.weathering

    for stain in weathering.stains:
        draw.polygon(
            [proj(x, y) for x, y in stain.outline()],
            fill=_rgba(color(stain.palette_index), stain.opacity * min(1.0, amount * 2) * 255),
        )

    for fleck in weathering.visible_flecks(fleck_rate):
        x, y = proj(fleck.x, fleck.y)
        r = max(0.5, proj.length(fleck.size) / 2)
        draw.ellipse(
            [x - r, y - r, x + r, y + r],
            fill=_rgba(GOLDEN, fleck.opacity * fleck_rate * amount * 200),
        )

    for gx, gy, alpha in weathering.grain(amount):
        x, y = proj(float(gx), float(gy))
        draw.point((x, y), fill=_rgba(GHOST, float(alpha)))
    return img


def _pixelate(canvas: Image.Image, layers: LayerSet, params: ParameterVector, state_name: str, proj: _Projection) -> None:
    overlay = layers.weathering.dither(state_name, params.glitch_rate)
    if overlay is None:
        return
    block = max(2, int(proj.length(overlay.block_size)))
    for bx, by, _alpha in overlay.blocks:
        x, y = proj(float(bx), float(by))
        box = (int(x), int(y), min(canvas.width, int(x) + block * 4), min(canvas.height, int(y) + block * 4))
        if box[2] <= box[0] or box[3] <= box[1] or box[0] < 0 or box[1] < 0:
            continue
        region = canvas.crop(box)
        small = region.resize(
            (max(1, region.width // block), max(1, region.height // block)), Image.Resampling.NEAREST
        )
        canvas.paste(small.resize(region.size, Image.Resampling.NEAREST), box[:2])


_LAYER_PAINTERS = {
    "geometry": _draw_geometry,
    "grid": _draw_grid,
    "particles": _draw_particles,
}


def render_frame(
    layers: LayerSet,
    params: ParameterVector,
    state_name: str,
    size: Optional[int] = None,
    time: float = 0.0,
) -> Image.Image:
    """Render one live frame of the ritual."""
    size = size or settings.CANVAS_SIZE
    proj = _Projection(size, params)
    canvas = Image.new("RGBA", (size, size), _rgba(BACKGROUND, 255))

    for name in layer_order(state_name):
        if name == "weathering":
            canvas.alpha_composite(_draw_weathering_base(layers, params, proj, params.glitch_rate))
        else:
            canvas.alpha_composite(_LAYER_PAINTERS[name](layers, params, proj, time))

    _pixelate(canvas, layers, params, state_name, proj)
    return canvas.convert("RGB")


def render_relic(
    layers: LayerSet,
    params: ParameterVector,
    edition_label: Optional[str] = None,
    timestamp_text: Optional[str] = None,
    size: Optional[int] = None,
) -> Image.Image:
    """
    Render the frozen relic: flat camera, no particles, a fixed share of
    glitch flecks, and the provenance text overlays.
    """
    size = size or settings.EXPORT_SIZE
    proj = _Projection(size, params)
    canvas = Image.new("RGBA", (size, size), _rgba(BACKGROUND, 255))
    canvas.alpha_composite(_draw_geometry(layers, params, proj, 0.0))
    canvas.alpha_composite(_draw_grid(layers, params, proj, 0.0))
    canvas.alpha_composite(_draw_weathering_base(layers, params, proj, RELIC_FLECK_RATE))

    draw = ImageDraw.Draw(canvas)
    font = ImageFont.load_default()
    if edition_label:
        left, top, right, bottom = draw.textbbox((0, 0), edition_label, font=font)
        draw.text(
            ((size - (right - left)) / 2, size * 0.96 - (bottom - top)),
            edition_label,
            fill=_rgba(GHOST, 160),
            font=font,
        )
    if timestamp_text:
        left, top, right, bottom = draw.textbbox((0, 0), timestamp_text, font=font)
        draw.text(
            (size * 0.96 - (right - left), size * 0.04),
            timestamp_text,
            fill=_rgba(GHOST, 120),
            font=font,
        )
    return canvas.convert("RGB")


def render_frame_to_file(image: Image.Image, path: str | Path) -> Path:
    """Save a rendered image to disk. Returns the output path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(path))
    return path
