"""
Tests for the GPX replay host application.

Tests argument parsing into ReplayConfig, the replay loop and main()'s
error paths.
"""

import pytest
from pydantic import ValidationError

from geo import GeoCoordinate
from location_provider import PositionFix
from main import ReplayConfig, main, parse_args, replay_track


def write_track(path, points):
    body = "".join(f'<trkpt lat="{lat}" lon="{lon}"/>' for lat, lon in points)
    path.write_text(
        '<gpx version="1.1" xmlns="http://www.topografix.com/GPX/1/1">'
        f"<trk><trkseg>{body}</trkseg></trk></gpx>"
    )


class TestParseArgs:
    """Tests for command line parsing."""

    def test_defaults(self):
        config = parse_args(["track.gpx", "out"])

        assert config.track_file == "track.gpx"
        assert config.output_dir == "out"
        assert config.snapshot_every == 1
        assert config.accuracy is None
        assert config.options.high_accuracy_preferred is True
        assert config.options.timeout_ms == 10000
        assert config.options.max_cached_age_ms == 60000

    def test_tracking_options(self):
        config = parse_args(["t.gpx", "out", "--low-accuracy", "--timeout-ms", "500",
                             "--max-age-ms", "0", "--accuracy", "12.5", "--snapshot-every", "3"])

        assert config.options.high_accuracy_preferred is False
        assert config.options.timeout_ms == 500
        assert config.options.max_cached_age_ms == 0
        assert config.accuracy == 12.5
        assert config.snapshot_every == 3

    def test_invalid_snapshot_interval(self):
        with pytest.raises(ValidationError):
            parse_args(["t.gpx", "out", "--snapshot-every", "0"])


class TestReplayTrack:
    """Tests for the replay loop."""

    def test_replay_writes_snapshot_per_move(self, tmp_path, sample_track):
        fixes = [PositionFix(GeoCoordinate(latitude=lat, longitude=lon), 20.0) for lat, lon in sample_track]
        config = ReplayConfig(track_file="unused", output_dir=str(tmp_path / "frames"))

        readout, frames, renders = replay_track(fixes, config, show_progress=False)

        assert frames == len(sample_track)
        assert renders == len(sample_track) + 1  # plus the initial empty map
        assert sorted(p.name for p in (tmp_path / "frames").iterdir())[0] == "frame_00000.png"
        assert readout.tracking is True
        assert readout.accuracy == "±20m"

    def test_snapshot_every(self, tmp_path, sample_track):
        fixes = [PositionFix(GeoCoordinate(latitude=lat, longitude=lon)) for lat, lon in sample_track]
        config = ReplayConfig(track_file="unused", output_dir=str(tmp_path), snapshot_every=3)

        _, frames, _ = replay_track(fixes, config, show_progress=False)

        assert frames == 2  # moves 1 and 4

    def test_repeated_points_render_once(self, tmp_path):
        fix = PositionFix(GeoCoordinate(latitude=37.41, longitude=127.13))
        config = ReplayConfig(track_file="unused", output_dir=str(tmp_path))

        _, frames, _ = replay_track([fix, fix, fix], config, show_progress=False)

        assert frames == 1


class TestMain:
    """Tests for main() exit codes."""

    def test_success(self, tmp_path, sample_track):
        track = tmp_path / "walk.gpx"
        write_track(track, sample_track)
        out = tmp_path / "frames"

        assert main([str(track), str(out), "--accuracy", "15"]) == 0
        assert len(list(out.glob("*.png"))) == len(sample_track)

    def test_missing_track(self, tmp_path):
        assert main([str(tmp_path / "missing.gpx"), str(tmp_path)]) == 1

    def test_empty_track(self, tmp_path):
        track = tmp_path / "empty.gpx"
        write_track(track, [])
        assert main([str(track), str(tmp_path / "frames")]) == 1

    def test_malformed_track(self, tmp_path):
        track = tmp_path / "broken.gpx"
        track.write_text("<gpx>")
        assert main([str(track), str(tmp_path / "frames")]) == 1

    def test_missing_track_with_brackets_in_path(self, tmp_path):
        """Paths that look like console markup are printed literally."""
        assert main([str(tmp_path / "walk[/b].gpx"), str(tmp_path / "frames")]) == 1

    def test_bad_track_point_with_brackets_in_path(self, tmp_path):
        folder = tmp_path / "[red]tracks"
        folder.mkdir()
        track = folder / "walk.gpx"
        track.write_text('<gpx><trk><trkseg><trkpt lat="37.41"/></trkseg></trk></gpx>')

        assert main([str(track), str(tmp_path / "frames")]) == 1

    def test_invalid_config(self, tmp_path):
        assert main(["t.gpx", str(tmp_path), "--accuracy", "-5"]) == 1
