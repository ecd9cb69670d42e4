"""
Relic export — the frozen final frame written out as a PNG.

The session hands over a draw callback (size → image); this module owns
the file name, the output directory and the failure reporting. A failed
export leaves the session untouched and can simply be retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from PIL import Image

from config import settings
from generator.renderer import render_frame_to_file

logger = logging.getLogger(__name__)

# Month names are spelled out here so the label never depends on the host locale
MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

DrawCallback = Callable[[int], Image.Image]


def format_long_timestamp(ts: datetime) -> str:
    """'October 17, 2026 · 14:05:09'"""
    return f"{MONTHS[ts.month - 1]} {ts.day}, {ts.year} · {ts:%H:%M:%S}"


def format_filename_timestamp(ts: datetime) -> str:
    """'20261017-140509'"""
    return ts.strftime("%Y%m%d-%H%M%S")


def relic_filename(edition_part: str, ts: datetime) -> str:
    return f"stillbecoming-ed{edition_part}-{format_filename_timestamp(ts)}.png"


@dataclass
class ExportResult:
    success: bool
    path: Optional[Path] = None
    error: Optional[str] = None


class RelicExporter:
    """Renders a relic at export resolution and saves it to the outputs directory."""

    def __init__(
        self,
        output_dir: Optional[Path] = None,
        size: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.output_dir = Path(output_dir or settings.OUTPUTS_DIR)
        self.size = size or settings.EXPORT_SIZE
        self._clock = clock
        self.is_exporting = False

    def export(self, draw: DrawCallback, edition_part: str) -> ExportResult:
        if self.is_exporting:
            return ExportResult(success=False, error="Export already in progress")

        self.is_exporting = True
        try:
            image = draw(self.size)
            path = self.output_dir / relic_filename(edition_part, self._clock())
            render_frame_to_file(image, path)
        except Exception as e:
            logger.error("Relic export failed: %s", e)
            return ExportResult(success=False, error=str(e))
        finally:
            self.is_exporting = False

        logger.info("Relic exported to %s", path)
        return ExportResult(success=True, path=path)
