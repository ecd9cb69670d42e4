"""Run the full ritual headlessly at a fixed frame rate and export the relic."""

import argparse
import sys
from pathlib import Path

from config import configure_logging, settings
from persistence import JsonFileStore
from relic import RelicExporter
from session import ArtSession


def run(seed=None, fps=None, size=None, frames_dir=None, frame_every=30):
    fps = fps or settings.FRAME_RATE
    art = ArtSession(persistence=JsonFileStore(settings.store_path), seed_override=seed)
    print(f"{art.edition.label} · seed {art.seed_string} ({art.rng.seed})")

    if frames_dir:
        Path(frames_dir).mkdir(parents=True, exist_ok=True)

    art.start()
    dt = 1.0 / fps
    frame_index = 0
    last_state = None
    while not art.controller.is_complete:
        frame = art.tick(dt)
        if frame.state_name != last_state:
            print(f"  {frame.global_progress:6.1%}  {frame.state_name}")
            last_state = frame.state_name
        if frames_dir and frame_index % frame_every == 0:
            art.render(settings.CANVAS_SIZE).save(f"{frames_dir}/frame_{frame_index:05d}.png")
        frame_index += 1

    result = art.export_relic(RelicExporter(size=size))
    if not result.success:
        print(f"Export failed: {result.error}")
        return 1
    print(f"Relic written to {result.path} after {frame_index} frames")
    return 0


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", help="explicit session seed (overrides the stored one)")
    parser.add_argument("--fps", type=int, default=None)
    parser.add_argument("--size", type=int, default=None, help="relic size in pixels")
    parser.add_argument("--frames-dir", default=None, help="also dump preview frames here")
    args = parser.parse_args()

    configure_logging()
    sys.exit(run(seed=args.seed, fps=args.fps, size=args.size, frames_dir=args.frames_dir))


if __name__ == "__main__":
    main()
