"""
The ritual script: ten named states, each with a duration, an easing
curve and the parameter vector the live channels blend toward.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields

MIN_DURATION = 1e-6


@dataclass(frozen=True)
class ParameterVector:
    """The ten control channels every visual layer reads each frame."""
    camera_tilt_x: float = 0.0
    camera_tilt_y: float = 0.0
    camera_zoom: float = 1.0
    z_lift_strength: float = 0.0
    noise_amp: float = 0.0
    glitch_rate: float = 0.0
    geometry_completion: float = 0.0
    grid_visibility: float = 0.0
    particle_energy: float = 0.0
    weathering_amount: float = 0.0

    @classmethod
    def channel_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class RitualState:
    name: str
    duration: float
    targets: ParameterVector
    easing: str = "in_out"

    @property
    def is_terminal(self) -> bool:
        return math.isinf(self.duration)

    @property
    def effective_duration(self) -> float:
        return max(self.duration, MIN_DURATION)


RITUAL_STATES: tuple[RitualState, ...] = (
    RitualState("BOOT", 0.8, ParameterVector(), easing="out"),
    RitualState(
        "TITLE", 2.2,
        ParameterVector(particle_energy=0.1, weathering_amount=0.05),
        easing="out",
    ),
    RitualState(
        "INVOKE_2D", 3.0,
        ParameterVector(
            noise_amp=0.02, geometry_completion=0.15,
            particle_energy=0.3, weathering_amount=0.1,
        ),
    ),
    RitualState(
        "BLOOM_BUILD", 10.0,
        ParameterVector(
            noise_amp=0.05, glitch_rate=0.05, geometry_completion=1.0,
            particle_energy=0.8, weathering_amount=0.15,
        ),
    ),
    RitualState(
        "GRID_ASSERT", 6.0,
        ParameterVector(
            noise_amp=0.08, glitch_rate=0.1, geometry_completion=1.0,
            grid_visibility=1.0, particle_energy=0.9, weathering_amount=0.2,
        ),
    ),
    RitualState(
        "BREACH_3D", 3.0,
        ParameterVector(
            camera_tilt_x=0.4, camera_tilt_y=0.3, camera_zoom=0.65,
            z_lift_strength=0.6, noise_amp=0.12, glitch_rate=0.15,
            geometry_completion=1.0, grid_visibility=1.0,
            particle_energy=1.0, weathering_amount=0.25,
        ),
    ),
    RitualState(
        "DESTABILIZE", 5.0,
        ParameterVector(
            camera_tilt_x=0.5, camera_tilt_y=0.4, camera_zoom=0.55,
            z_lift_strength=1.0, noise_amp=0.3, glitch_rate=0.4,
            geometry_completion=1.0, grid_visibility=0.7,
            particle_energy=1.2, weathering_amount=0.4,
        ),
        easing="in",
    ),
    RitualState(
        "REASSEMBLE", 5.0,
        ParameterVector(
            camera_tilt_x=0.1, camera_tilt_y=0.05, camera_zoom=0.95,
            z_lift_strength=0.3, noise_amp=0.1, glitch_rate=0.1,
            geometry_completion=1.0, grid_visibility=0.9,
            particle_energy=0.6, weathering_amount=0.3,
        ),
    ),
    RitualState(
        "CONSECRATE_2D", 1.8,
        ParameterVector(
            noise_amp=0.02, geometry_completion=1.0, grid_visibility=1.0,
            particle_energy=0.2, weathering_amount=0.5,
        ),
        easing="out",
    ),
    RitualState(
        "RELIC", math.inf,
        ParameterVector(
            geometry_completion=1.0, grid_visibility=1.0, weathering_amount=0.6,
        ),
    ),
)

# Grid is drawn behind geometry while the piece resolves
RESOLUTION_STATES = frozenset({"REASSEMBLE", "CONSECRATE_2D", "RELIC"})


def layer_order(state_name: str) -> tuple[str, ...]:
    if state_name in RESOLUTION_STATES:
        return ("grid", "geometry", "particles", "weathering")
    return ("geometry", "grid", "particles", "weathering")


def frozen_for_relic(live: ParameterVector) -> ParameterVector:
    """
    The still frame used for the relic: motion, noise and glitch zeroed,
    completion channels full, weathering kept as the ritual left it.
    """
    return ParameterVector(
        geometry_completion=1.0,
        grid_visibility=1.0,
        weathering_amount=live.weathering_amount,
    )


RELIC_PARAMETERS = frozen_for_relic(RITUAL_STATES[-1].targets)
