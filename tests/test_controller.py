"""Tests for the ritual state machine."""

import math
from datetime import datetime, timedelta

import pytest

from ritual.controller import RitualController
from ritual.easing import EASINGS, ease_in_cubic, ease_in_out_cubic, ease_out_cubic, get_easing
from ritual.states import RITUAL_STATES, ParameterVector, RitualState


def abc_states():
    return [
        RitualState("A", 1.0, ParameterVector()),
        RitualState("B", 2.0, ParameterVector(noise_amp=1.0)),
        RitualState("C", math.inf, ParameterVector(geometry_completion=1.0)),
    ]


class TickingClock:
    """Clock returning a later instant on every call."""

    def __init__(self):
        self.calls = 0
        self.start = datetime(2026, 10, 17, 14, 5, 9)

    def __call__(self):
        self.calls += 1
        return self.start + timedelta(seconds=self.calls)


class TestReferenceSequence:
    """Tests for the ten-state reference ritual."""

    def test_ten_states_relic_last(self):
        names = [s.name for s in RITUAL_STATES]
        assert len(names) == 10
        assert names[0] == "BOOT"
        assert names[-1] == "RELIC"
        assert RITUAL_STATES[-1].is_terminal
        assert not any(s.is_terminal for s in RITUAL_STATES[:-1])

    def test_every_state_targets_all_channels(self):
        for state in RITUAL_STATES:
            assert set(state.targets.to_dict()) == set(ParameterVector.channel_names())

    def test_visits_each_state_once_in_order(self):
        c = RitualController(smoothing=0.05, mode="frame")
        visited = []
        c.on_state_change(lambda name, index: visited.append((name, index)))

        dt = 0.01
        while not c.is_complete:
            c.update(dt)

        assert visited == [(s.name, i) for i, s in enumerate(RITUAL_STATES) if i > 0]
        total = sum(s.duration for s in RITUAL_STATES[:-1])
        assert abs(c.global_time - total) <= dt * len(RITUAL_STATES)

    def test_exact_total_with_binary_durations(self):
        states = [
            RitualState("A", 0.5, ParameterVector()),
            RitualState("B", 0.25, ParameterVector()),
            RitualState("C", 1.0, ParameterVector()),
            RitualState("D", math.inf, ParameterVector()),
        ]
        c = RitualController(states, smoothing=0.05, mode="frame")
        while not c.is_complete:
            c.update(0.125)
        assert c.global_time == 1.75

    def test_large_dt_never_skips(self):
        c = RitualController(smoothing=0.05, mode="frame")
        visited = []
        c.on_state_change(lambda name, index: visited.append(index))
        for _ in range(len(RITUAL_STATES) + 5):
            c.update(100.0)
        assert visited == list(range(1, len(RITUAL_STATES)))

    def test_easing_per_state(self):
        easings = {s.name: s.easing for s in RITUAL_STATES}
        assert easings["BOOT"] == "out"
        assert easings["TITLE"] == "out"
        assert easings["DESTABILIZE"] == "in"
        assert easings["CONSECRATE_2D"] == "out"
        assert easings["GRID_ASSERT"] == "in_out"


class TestEasing:
    """Tests for the easing lookup."""

    def test_every_state_curve_is_registered(self):
        assert {s.easing for s in RITUAL_STATES} == set(EASINGS)

    def test_curves_span_unit_interval(self):
        for curve in EASINGS.values():
            assert curve(0.0) == 0.0
            assert curve(1.0) == 1.0

    def test_unknown_curve(self):
        with pytest.raises(ValueError):
            get_easing("bounce")


class TestTransitions:
    """Tests for update() and transitions on a three-state ritual."""

    def test_half_steps_reach_boundary(self):
        c = RitualController(abc_states(), smoothing=0.05, mode="frame")
        fired = []
        c.on_state_change(lambda name, index: fired.append((name, index)))

        c.update(0.5)
        assert c.state_name == "A"
        assert fired == []

        c.update(0.5)
        assert c.state_name == "B"
        assert c.time_in_state == 0.0
        assert fired == [("B", 1)]

    def test_listeners_called_in_registration_order(self):
        c = RitualController(abc_states(), smoothing=0.05, mode="frame")
        order = []
        c.on_state_change(lambda name, index: order.append("first"))
        c.on_state_change(lambda name, index: order.append("second"))
        c.update(1.0)
        assert order == ["first", "second"]

    def test_listener_sees_new_state(self):
        c = RitualController(abc_states(), smoothing=0.05, mode="frame")
        seen = []
        c.on_state_change(lambda name, index: seen.append(c.state_name))
        c.update(1.0)
        assert seen == ["B"]

    def test_terminal_state_holds(self):
        c = RitualController(abc_states(), smoothing=0.05, mode="frame")
        c.update(1.0)
        c.update(2.0)
        assert c.state_name == "C"
        for _ in range(100):
            c.update(10.0)
        assert c.state_name == "C"
        assert c.state_index == 2

    def test_zero_duration_guarded(self):
        states = [
            RitualState("ZERO", 0.0, ParameterVector()),
            RitualState("NEG", -1.0, ParameterVector()),
            RitualState("END", math.inf, ParameterVector()),
        ]
        c = RitualController(states, smoothing=0.05, mode="frame")
        assert c.state_progress == 0.0
        c.update(0.001)
        assert c.state_name == "NEG"
        c.update(0.001)
        assert c.state_name == "END"

    def test_negative_dt_ignored(self):
        c = RitualController(abc_states(), smoothing=0.05, mode="frame")
        c.update(-5.0)
        assert c.global_time == 0.0
        assert c.state_name == "A"

    def test_empty_sequence_rejected(self):
        with pytest.raises(ValueError):
            RitualController([])


class TestProgress:
    """Tests for state/global progress queries."""

    def test_state_progress_clamped(self):
        c = RitualController(abc_states(), smoothing=0.05, mode="frame")
        c.update(0.25)
        assert c.state_progress == pytest.approx(0.25)

    def test_eased_progress_uses_state_curve(self):
        states = [
            RitualState("IN", 1.0, ParameterVector(), easing="in"),
            RitualState("OUT", 1.0, ParameterVector(), easing="out"),
            RitualState("MID", 1.0, ParameterVector()),
            RitualState("END", math.inf, ParameterVector()),
        ]
        c = RitualController(states, smoothing=0.05, mode="frame")
        c.update(0.5)
        assert c.eased_progress == pytest.approx(ease_in_cubic(0.5))
        c.update(0.5)
        c.update(0.25)
        assert c.eased_progress == pytest.approx(ease_out_cubic(0.25))
        c.update(0.75)
        c.update(0.75)
        assert c.eased_progress == pytest.approx(ease_in_out_cubic(0.75))

    def test_global_progress_monotonic_and_saturates(self):
        c = RitualController(smoothing=0.05, mode="frame")
        last = c.global_progress
        assert last == 0.0
        for _ in range(1000):
            c.update(0.05)
            g = c.global_progress
            assert last <= g <= 1.0
            last = g
        assert c.is_complete
        assert c.global_progress == 1.0

    def test_global_progress_time_weighted(self):
        c = RitualController(abc_states(), smoothing=0.05, mode="frame")
        c.update(1.0)
        assert c.global_progress == pytest.approx(1.0 / 3.0)
        c.update(1.0)
        assert c.global_progress == pytest.approx(2.0 / 3.0)

    def test_terminal_reports_one(self):
        c = RitualController(abc_states(), smoothing=0.05, mode="frame")
        c.update(1.0)
        c.update(2.0)
        assert c.global_progress == 1.0


class TestBlending:
    """Tests for parameter smoothing."""

    def test_single_step_frame_mode(self):
        c = RitualController(abc_states(), smoothing=0.05, mode="frame")
        c.update(1.0)  # enters B, noise target 1.0
        assert c.get_param("noise_amp") == pytest.approx(0.05)

    def test_frame_mode_ignores_dt(self):
        a = RitualController(abc_states(), smoothing=0.05, mode="frame")
        b = RitualController(abc_states(), smoothing=0.05, mode="frame")
        a.update(1.0)
        b.update(1.0)
        a.update(0.001)
        b.update(0.9)
        assert a.get_param("noise_amp") == b.get_param("noise_amp")

    def test_converges_to_targets(self):
        target = ParameterVector(
            camera_tilt_x=0.5, camera_tilt_y=-0.4, camera_zoom=0.55, z_lift_strength=1.0,
            noise_amp=0.3, glitch_rate=0.4, geometry_completion=1.0, grid_visibility=0.7,
            particle_energy=1.2, weathering_amount=0.4,
        )
        states = [RitualState("HOLD", 1000.0, target), RitualState("END", math.inf, ParameterVector())]
        c = RitualController(states, smoothing=0.05, mode="frame")
        for _ in range(600):
            c.update(1 / 60)
        for name, value in target.to_dict().items():
            assert c.get_param(name) == pytest.approx(value, abs=1e-6)

    def test_time_mode_matches_frame_mode_at_60fps(self):
        c = RitualController(abc_states(), mode="time", rate=3.0776)
        c.update(1.0)
        first = c.get_param("noise_amp")
        assert first == pytest.approx(1 - math.exp(-3.0776 * 1.0))
        before = c.get_param("noise_amp")
        c.update(1 / 60)
        step = (c.get_param("noise_amp") - before) / (1.0 - before)
        assert step == pytest.approx(0.05, abs=1e-3)

    def test_time_mode_frame_rate_independent(self):
        states = [RitualState("HOLD", 100.0, ParameterVector(glitch_rate=1.0)),
                  RitualState("END", math.inf, ParameterVector())]
        slow = RitualController(states, mode="time", rate=2.0)
        fast = RitualController(states, mode="time", rate=2.0)
        for _ in range(30):
            slow.update(1 / 30)
        for _ in range(120):
            fast.update(1 / 120)
        assert slow.get_param("glitch_rate") == pytest.approx(fast.get_param("glitch_rate"), rel=1e-9)

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            RitualController(abc_states(), mode="wallclock")

    def test_snapshot_is_a_copy(self):
        c = RitualController(abc_states(), smoothing=0.05, mode="frame")
        snap = c.params
        c.update(1.0)
        c.update(0.1)
        assert snap.noise_amp == 0.0
        assert c.params.noise_amp > 0.0

    def test_unknown_param(self):
        c = RitualController(abc_states(), smoothing=0.05, mode="frame")
        with pytest.raises(KeyError):
            c.get_param("brightness")


class TestCompletion:
    """Tests for the completion flag and timestamp."""

    def test_not_complete_initially(self):
        c = RitualController(abc_states(), smoothing=0.05, mode="frame")
        assert not c.is_complete
        assert c.completion_timestamp is None

    def test_timestamp_set_once(self):
        clock = TickingClock()
        c = RitualController(abc_states(), smoothing=0.05, mode="frame", clock=clock)
        c.update(1.0)
        c.update(2.0)
        assert c.is_complete
        stamp = c.completion_timestamp
        assert stamp == clock.start + timedelta(seconds=1)

        for _ in range(50):
            c.update(5.0)
        assert c.completion_timestamp == stamp
        assert clock.calls == 1
