"""
Art session — one visitor's edition, from seed to relic.

Resolves the session seed and edition from persistence (or an explicit
override), builds every content layer once, and steps the ritual one
frame at a time after the single start trigger.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from PIL import Image

from config import settings
from edition import Edition, EditionAllocator
from generator.renderer import render_frame, render_relic
from generator.seeding import RandomSource, SeededGenerator
from generator.state import LayerSet, build_layers
from persistence import (
    MOBILE_ACK_KEY,
    SESSION_SEED_KEY,
    MemoryStore,
    Persistence,
    get_or_create,
    safe_get,
    safe_set,
)
from relic import ExportResult, RelicExporter, format_long_timestamp
from ritual.controller import RitualController
from ritual.states import ParameterVector, frozen_for_relic, layer_order

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, r = divmod(n, 36)
        digits.append(_BASE36[r])
    return "".join(reversed(digits))


def new_session_seed() -> str:
    """Millisecond clock in base 36 followed by random base-36 characters."""
    return _to_base36(int(time.time() * 1000)) + _to_base36(uuid.uuid4().int)[:11]


@dataclass(frozen=True)
class FrameState:
    """Everything the renderer needs from the engine for one frame."""
    params: ParameterVector
    state_name: str
    layer_order: tuple[str, ...]
    state_progress: float
    eased_progress: float
    global_progress: float
    time: float
    started: bool
    complete: bool


class ArtSession:
    """
    Owns the seeded generator, the content layers and the ritual controller
    for one visit. Nothing advances until ``start()`` is called.
    """

    def __init__(
        self,
        persistence: Optional[Persistence] = None,
        seed_override: Optional[str] = None,
        source: Optional[RandomSource] = None,
        master_seed: Optional[str] = None,
        controller: Optional[RitualController] = None,
    ):
        self.persistence = persistence if persistence is not None else MemoryStore()
        self.master_seed = master_seed or settings.MASTER_SEED

        if seed_override:
            self.session_seed = seed_override
        else:
            self.session_seed = get_or_create(self.persistence, SESSION_SEED_KEY, new_session_seed)
        self.seed_string = self.master_seed + self.session_seed

        self.edition: Edition = EditionAllocator(self.persistence, self.master_seed).edition
        self.rng = SeededGenerator(self.seed_string, source)
        self.layers: LayerSet = build_layers(self.rng)

        self.controller = controller or RitualController()
        self.controller.on_state_change(self._handle_state_change)
        self.started = False

        logger.info(
            "Session ready: %s, seed %s (%d)", self.edition.label, self.seed_string, self.rng.seed
        )

    # ── Lifecycle ────────────────────────────────────────────────────

    def start(self) -> None:
        """The single start trigger. Calling it again has no effect."""
        if not self.started:
            self.started = True
            logger.info("Ritual started")

    def tick(self, dt: float) -> FrameState:
        """Advance the ritual and the per-frame layer state by dt seconds."""
        if self.started:
            self.controller.update(dt)
            params = self.controller.params
            self.layers.grid.update(params)
            self.layers.particles.update(params, dt, self.controller.global_time)
        return self.frame()

    def frame(self) -> FrameState:
        c = self.controller
        return FrameState(
            params=c.params,
            state_name=c.state_name,
            layer_order=layer_order(c.state_name),
            state_progress=c.state_progress,
            eased_progress=c.eased_progress,
            global_progress=c.global_progress,
            time=c.global_time,
            started=self.started,
            complete=c.is_complete,
        )

    def _handle_state_change(self, name: str, index: int) -> None:
        logger.info("State: %s", name)
        if self.controller.is_complete:
            logger.info("Ritual complete. Relic available for %s", self.edition.label)

    # ── Rendering / relic ────────────────────────────────────────────

    def render(self, size: Optional[int] = None) -> Image.Image:
        c = self.controller
        return render_frame(self.layers, c.params, c.state_name, size=size, time=c.global_time)

    @property
    def completion_timestamp(self) -> Optional[datetime]:
        return self.controller.completion_timestamp

    @property
    def timestamp_text(self) -> Optional[str]:
        ts = self.completion_timestamp
        return format_long_timestamp(ts) if ts else None

    def relic_parameters(self) -> ParameterVector:
        return frozen_for_relic(self.controller.params)

    def relic_draw_callback(self) -> Callable[[int], Image.Image]:
        """Draw callback for an offscreen export buffer of the given size."""
        params = self.relic_parameters()
        label = self.edition.label
        stamp = self.timestamp_text

        def draw(size: int) -> Image.Image:
            return render_relic(self.layers, params, label, stamp, size=size)

        return draw

    def export_relic(self, exporter: Optional[RelicExporter] = None) -> ExportResult:
        if not self.controller.is_complete:
            return ExportResult(success=False, error="Ritual not complete")
        exporter = exporter or RelicExporter()
        return exporter.export(self.relic_draw_callback(), self.edition.filename_part)

    # ── Mobile warning ───────────────────────────────────────────────

    def should_show_mobile_warning(self, is_mobile: bool) -> bool:
        return is_mobile and safe_get(self.persistence, MOBILE_ACK_KEY) != "true"

    def acknowledge_mobile_warning(self) -> None:
        safe_set(self.persistence, MOBILE_ACK_KEY, "true")
