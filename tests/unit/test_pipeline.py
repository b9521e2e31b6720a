"""
Tests for the one-shot render session.
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import patch

from orbit_visualizer.config import VisualizerConfig
from orbit_visualizer.elements import TLESourceError
from orbit_visualizer.pipeline import build_window, run_session, sample_all

from conftest import FakePropagator


class TestBuildWindow:

    def test_uses_config_length_and_path_stride(self, base_datetime) -> None:
        config = VisualizerConfig(window_hours=3.0, path_step_seconds=20.0)
        window = build_window(config, base_datetime)

        assert window.start == base_datetime
        assert window.stop == base_datetime + timedelta(hours=3)
        assert window.step_seconds == 20.0

    def test_defaults_to_now_truncated_to_seconds(self) -> None:
        now = datetime(2025, 6, 1, 8, 30, 15, 987654)
        with patch("orbit_visualizer.pipeline.get_current_utc", return_value=now):
            window = build_window(VisualizerConfig())

        assert window.start == datetime(2025, 6, 1, 8, 30, 15)


class TestRunSession:

    def test_full_session_with_fake_propagator(self, tle_file, base_datetime) -> None:
        config = VisualizerConfig(tle_source=str(tle_file))
        result = run_session(config, start_time=base_datetime, propagator=FakePropagator(base_datetime))

        assert [es.name for es in result.element_sets] == ["ISS (ZARYA)", "SAT 2"]
        assert [len(t) for t in result.trajectories] == [721, 721]
        assert [len(g) for g in result.ground_tracks] == [241, 241]

        ids = [packet["id"] for packet in result.czml]
        assert ids == [
            "document",
            "sat_1", "sat_1_ground_track",
            "sat_2", "sat_2_ground_track",
        ]
        assert result.czml[0]["clock"]["multiplier"] == 10.0

    def test_summary(self, tle_file, base_datetime) -> None:
        config = VisualizerConfig(tle_source=str(tle_file), window_hours=1.0)
        result = run_session(config, start_time=base_datetime, propagator=FakePropagator(base_datetime))

        summary = result.summary
        assert summary["satellites"] == 2
        assert summary["rendered"] == 2
        assert summary["samples"] == 2 * 361
        assert summary["ground_track_points"] == 2 * 121
        assert summary["start"] == "2024-01-01T12:00:00"

    def test_custom_strides(self, tle_file, base_datetime) -> None:
        config = VisualizerConfig(
            tle_source=str(tle_file),
            window_hours=1.0,
            path_step_seconds=60.0,
            ground_track_step_seconds=120.0,
        )
        result = run_session(config, start_time=base_datetime, propagator=FakePropagator(base_datetime))

        assert len(result.trajectories[0]) == 61
        assert len(result.ground_tracks[0]) == 31

    def test_satellites_drawn_white(self, tle_file, base_datetime) -> None:
        config = VisualizerConfig(tle_source=str(tle_file), window_hours=0.5)
        result = run_session(config, start_time=base_datetime, propagator=FakePropagator(base_datetime))

        colors = [p["point"]["color"]["rgba"] for p in result.czml if "point" in p]
        assert colors == [[255, 255, 255, 255], [255, 255, 255, 255]]

    def test_decayed_satellite_becomes_notice(self, tle_file, base_datetime) -> None:
        config = VisualizerConfig(tle_source=str(tle_file), window_hours=0.5)
        propagator = FakePropagator(base_datetime, fail_after_seconds=-1)

        result = run_session(config, start_time=base_datetime, propagator=propagator)

        assert all(t.is_empty for t in result.trajectories)
        labels = [p["label"]["text"] for p in result.czml[1:]]
        assert labels == [
            "No positions computed for ISS (ZARYA)",
            "No positions computed for SAT 2",
        ]

    def test_no_element_sets_renders_notice(self, tmp_path, base_datetime) -> None:
        path = tmp_path / "TLE.txt"
        path.write_text("# nothing useful\n")
        config = VisualizerConfig(tle_source=str(path))

        result = run_session(config, start_time=base_datetime, propagator=FakePropagator(base_datetime))

        assert result.element_sets == []
        assert len(result.czml) == 2
        assert result.czml[1]["label"]["text"] == f"No valid TLEs found in {path}"

    def test_missing_source_is_fatal(self, tmp_path, base_datetime) -> None:
        config = VisualizerConfig(tle_source=str(tmp_path / "missing.txt"))

        with pytest.raises(TLESourceError):
            run_session(config, start_time=base_datetime, propagator=FakePropagator(base_datetime))


class TestSampleAll:

    def test_explicit_propagator_stays_in_process(
        self, iss_element_set, noaa_element_set, two_hour_window, fake_propagator
    ) -> None:
        with patch("orbit_visualizer.pipeline.sample_trajectories_parallel") as mock_parallel:
            trajectories = sample_all(
                [iss_element_set, noaa_element_set], two_hour_window, fake_propagator, max_workers=4
            )

        mock_parallel.assert_not_called()
        assert [t.name for t in trajectories] == ["ISS (ZARYA)", "NOAA 18"]

    def test_workers_use_process_pool(self, iss_element_set, two_hour_window) -> None:
        with patch("orbit_visualizer.pipeline.sample_trajectories_parallel", return_value=[]) as mock_parallel:
            sample_all([iss_element_set], two_hour_window, None, max_workers=2)

        mock_parallel.assert_called_once_with([iss_element_set], two_hour_window, 2)

    def test_empty_input(self, two_hour_window, fake_propagator) -> None:
        assert sample_all([], two_hour_window, fake_propagator) == []
