# Copyright (c) 2025 Trae AI. All rights reserved.

import pytest
from unittest.mock import patch
from typer.testing import CliRunner
from bonarr.cli.main import app
from bonarr.clients.errors import MetadataError
from bonarr.clients.tmdb import SeasonDetails, ShowDetails
from bonarr.core.models import Torrent, TorrentFile

runner = CliRunner()

@pytest.fixture
def config_path(tmp_path, library_root):
    path = tmp_path / "config.yaml"
    path.write_text(f'library_root: "{library_root}"\ntmdb_api_key: "dummy"\n')
    return str(path)

@pytest.fixture
def clients(episodes, download_dir):
    with patch("bonarr.cli.main.TMDBClient") as MockTMDB, \
         patch("bonarr.cli.main.TransmissionClient") as MockTransmission:
        tmdb = MockTMDB.return_value
        tmdb.get_show_details.return_value = ShowDetails(id=100, name="Show")
        tmdb.get_season_details.return_value = SeasonDetails(season_number=1, episodes=episodes)
        MockTransmission.return_value.get_torrent_files.return_value = Torrent(
            id=5,
            name="Pack",
            download_dir=str(download_dir),
            files=[
                TorrentFile(name="Pack/Show.S01E01.mkv", length=1),
                TorrentFile(name="Pack/Show 02.mkv", length=1),
            ],
        )
        yield tmdb

def test_match_command(config_path, clients):
    result = runner.invoke(app, ["match", "100", "1", "5", "--config-path", config_path])
    assert result.exit_code == 0
    assert "Show.S01E01.mkv" in result.output
    assert "Matched 2 of 3 episodes" in result.output

def test_apply_dry_run_creates_nothing(config_path, clients, library_root):
    result = runner.invoke(app, ["apply", "100", "1", "5", "--config-path", config_path, "--dry-run"])
    assert result.exit_code == 0
    assert "Dry run completed" in result.output
    assert list(library_root.iterdir()) == []

def test_apply_min_confidence_skips_low(config_path, clients, download_dir, library_root):
    (download_dir / "Pack").mkdir()
    (download_dir / "Pack" / "Show.S01E01.mkv").write_bytes(b"1")

    result = runner.invoke(
        app, ["apply", "100", "1", "5", "--config-path", config_path, "--min-confidence", "medium"]
    )

    assert result.exit_code == 0
    season_dir = library_root / "Show [tmdbid-100]" / "Season 01"
    assert (season_dir / "Show - S01E01.mkv").exists()
    assert not (season_dir / "Show - S01E02.mkv").exists()

def test_apply_reports_failures(config_path, clients):
    # Source files were never downloaded
    result = runner.invoke(app, ["apply", "100", "1", "5", "--config-path", config_path])
    assert result.exit_code == 1
    assert "failed" in result.output

def test_check_command(config_path, clients, library_root):
    season_dir = library_root / "Show [tmdbid-100]" / "Season 01"
    season_dir.mkdir(parents=True)
    (season_dir / "Show - S01E02.mp4").touch()

    result = runner.invoke(app, ["check", "100", "1", "--config-path", config_path])

    assert result.exit_code == 0
    assert "Show - S01E02.mp4" in result.output
    assert "1 of 3 episodes present" in result.output

def test_upstream_error(config_path, clients):
    clients.get_show_details.side_effect = MetadataError("Show 100 not found on TMDB")
    result = runner.invoke(app, ["check", "100", "1", "--config-path", config_path])
    assert result.exit_code == 1

def test_missing_library_root(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text('tmdb_api_key: "dummy"\n')
    with patch.dict("os.environ", {}, clear=True):
        result = runner.invoke(app, ["check", "100", "1", "--config-path", str(path)])
    assert result.exit_code == 1
    assert "Error loading config" in result.output
