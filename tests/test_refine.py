"""
Unit tests for the refinement driver and end-to-end generation.
"""

import json
import random
from pathlib import Path
from unittest.mock import patch

import pytest
from playfill.catalog.scan import Catalog
from playfill.config import Config
from playfill.generate.heuristics import SimulatedAnnealing, greedy
from playfill.generate.playlist import Playlist, Track
from playfill.generate.refine import build_playlist, generate, refine


def make_catalog(durations):
    return [Track(i, f"/music/track{i}.mp3", float(d)) for i, d in enumerate(durations)]


@pytest.fixture
def catalog():
    """Forty tracks of 100..490 seconds."""
    return make_catalog(range(100, 500, 10))


@pytest.fixture
def playlist(catalog):
    """Seeded playlist with a fixed random source."""
    return Playlist.from_random(catalog, 1800, random.Random(3))


@pytest.fixture
def config():
    """Default config with a fixed seed."""
    cfg = Config.defaults()
    cfg["refine"]["random_seed"] = 5
    return cfg


class TestRefineParameters:
    """Test depth/steps/passes derivation."""

    def test_swap_call_counts(self, playlist):
        """passes x steps swaps, positions 0..steps-1 in order, fixed depth."""
        used_len, unused_len = playlist.used_len(), playlist.unused_len()

        with patch.object(Playlist, "swap", autospec=True, return_value=None) as swap:
            refine(playlist, 0.5, 0.5, 3, greedy, max_workers=1)

        steps = used_len // 2
        depth = unused_len // 2
        assert swap.call_count == 3 * steps
        positions = [c.args[1] for c in swap.call_args_list]
        assert positions == list(range(steps)) * 3
        assert {c.args[2] for c in swap.call_args_list} == {depth}

    def test_fraction_floor(self):
        """Portions are floored without float drift."""
        tracks = make_catalog([10] * 200)
        playlist = Playlist(tracks[:100], tracks[100:], 1000)

        with patch.object(Playlist, "swap", autospec=True, return_value=None) as swap:
            refine(playlist, 0.29, 0.29, 1, greedy, max_workers=1)

        assert swap.call_count == 29
        assert swap.call_args_list[0].args[2] == 29

    def test_zero_passes(self, playlist):
        """No passes, no swaps."""
        with patch.object(Playlist, "swap", autospec=True) as swap:
            refine(playlist, 1.0, 1.0, 0, greedy)
        swap.assert_not_called()

    def test_zero_depth_skips(self, playlist):
        """Zero depth makes every swap a no-op, so none are run."""
        with patch.object(Playlist, "swap", autospec=True) as swap:
            refine(playlist, 0.0, 1.0, 2, greedy)
        swap.assert_not_called()

    @pytest.mark.parametrize("depth,steps,passes", [(-0.1, 1, 1), (1.1, 1, 1), (1, -1, 1), (1, 2, 1), (1, 1, -1)])
    def test_invalid_parameters(self, playlist, depth, steps, passes):
        """Fractions outside [0, 1] and negative passes are rejected."""
        with pytest.raises(ValueError):
            refine(playlist, depth, steps, passes, greedy)

    def test_zero_depth_still_cools_and_logs(self, playlist, caplog):
        """Runs with nothing to swap cool per pass and log the closing summary."""
        heuristic = SimulatedAnnealing(temperature=8.0, cooling_rate=0.5, rng=random.Random(0))

        with caplog.at_level("INFO", logger="playfill.generate.refine"):
            refine(playlist, 0.0, 1.0, 2, heuristic)

        assert heuristic.temperature == pytest.approx(2.0)
        assert "Refining:" in caplog.text
        assert "Refined:" in caplog.text

    def test_long_annealing_run(self, catalog, playlist):
        """Many passes with fast cooling finish without a division error."""
        heuristic = SimulatedAnnealing(temperature=1.0, cooling_rate=0.01, rng=random.Random(1))

        refine(playlist, 1.0, 1.0, 200, heuristic, max_workers=1)

        assert heuristic.temperature > 0
        assert sorted(t.key for t in playlist.used + playlist.unused) == list(range(len(catalog)))

    def test_cools_after_each_pass(self, playlist):
        """Heuristics with cool() are cooled once per pass."""
        heuristic = SimulatedAnnealing(temperature=8.0, cooling_rate=0.5, rng=random.Random(0))
        refine(playlist, 1.0, 1.0, 3, heuristic, max_workers=1)
        assert heuristic.temperature == pytest.approx(1.0)


class TestRefineBehavior:
    """Test refinement outcomes."""

    @pytest.mark.parametrize("max_workers", [1, 4])
    def test_invariants_and_improvement(self, catalog, playlist, max_workers):
        """Refinement keeps the partition and never moves away from target."""
        used_len, unused_len = playlist.used_len(), playlist.unused_len()
        before = playlist.distance()

        result = refine(playlist, 1.0, 1.0, 2, greedy, max_workers=max_workers)

        assert result is playlist
        assert playlist.used_len() == used_len
        assert playlist.unused_len() == unused_len
        assert sorted(t.key for t in playlist.used + playlist.unused) == list(range(len(catalog)))
        assert playlist.used_duration == pytest.approx(sum(t.duration_seconds for t in playlist.used))
        assert playlist.distance() <= before

    def test_full_depth_hits_reachable_target(self):
        """With every candidate visible, a single-track fix lands on target."""
        tracks = make_catalog([100, 200, 300, 250])
        playlist = Playlist([tracks[0], tracks[1]], [tracks[2], tracks[3]], 350)

        refine(playlist, 1.0, 1.0, 1, greedy, max_workers=1)

        assert playlist.used_duration == 350


class TestBuildPlaylist:
    """Test scan -> seed -> refine orchestration."""

    def test_build_uses_config(self, catalog, config):
        """Catalog comes from scan_library and refine gets config values."""
        with patch("playfill.generate.refine.scan_library", return_value=Catalog(tracks=catalog)) as scan, \
                patch("playfill.generate.refine.refine", side_effect=lambda p, **kw: p) as mock_refine:
            playlist = build_playlist("/music", 1800, config)

        scan.assert_called_once_with("/music", [".mp3", ".wav", ".ogg", ".flac"])
        kwargs = mock_refine.call_args.kwargs
        assert kwargs["depth_fraction"] == 1.0
        assert kwargs["steps_fraction"] == 1.0
        assert kwargs["passes"] == 2
        assert kwargs["max_workers"] == 4
        assert kwargs["heuristic"] is greedy
        assert playlist.used_duration >= 1800

    def test_build_reproducible_with_seed(self, catalog, config):
        """random_seed makes builds repeatable."""
        with patch("playfill.generate.refine.scan_library", return_value=Catalog(tracks=catalog)):
            a = build_playlist("/music", 1800, config)
            b = build_playlist("/music", 1800, config)

        assert [t.key for t in a.used] == [t.key for t in b.used]

    def test_build_annealing(self, catalog, config):
        """Annealing heuristic is selected from config."""
        config["refine"]["heuristic"] = "annealing"
        with patch("playfill.generate.refine.scan_library", return_value=Catalog(tracks=catalog)), \
                patch("playfill.generate.refine.refine", side_effect=lambda p, **kw: p) as mock_refine:
            build_playlist("/music", 1800, config)

        assert isinstance(mock_refine.call_args.kwargs["heuristic"], SimulatedAnnealing)

    def test_empty_library(self, config):
        """An empty catalog gives an empty playlist."""
        with patch("playfill.generate.refine.scan_library", return_value=Catalog()):
            playlist = build_playlist("/music", 600, config)

        assert playlist.get() == ([], 0)


class TestGenerate:
    """Test end-to-end output generation."""

    def test_writes_outputs(self, catalog, config, tmp_path):
        """generate() writes M3U and summary JSON."""
        with patch("playfill.generate.refine.scan_library", return_value=Catalog(tracks=catalog)):
            result = generate("/music", 1800, config, output_dir=str(tmp_path / "out"))

        assert result is not None
        m3u_path, summary_path = result
        assert Path(m3u_path).read_text().startswith("#EXTM3U\n")

        summary = json.loads(Path(summary_path).read_text())
        assert summary["target_seconds"] == 1800
        assert summary["total_seconds"] == pytest.approx(
            sum(t["duration_seconds"] for t in summary["tracks"])
        )

    def test_write_failure(self, catalog, config, tmp_path):
        """A failed write returns None."""
        with patch("playfill.generate.refine.scan_library", return_value=Catalog(tracks=catalog)), \
                patch("playfill.generate.refine.write_m3u", return_value=False):
            assert generate("/music", 1800, config, output_dir=str(tmp_path)) is None
