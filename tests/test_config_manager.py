"""Tests for settings persistence."""

from __future__ import annotations

import json

import pytest

from serpentine.config_manager import (
    ConfigManager,
    settings_from_dict,
    settings_to_dict,
)
from serpentine.image_processing.errors import ProcessingError
from serpentine.models import CurveControlSettings, ProcessingMode, Settings


def test_save_and_load_round_trip(tmp_path):
    manager = ConfigManager(tmp_path / "config.json")
    settings = Settings(
        columns_count=24,
        processing_mode=ProcessingMode.CMYK,
        curved_paths=True,
        kmeans_seed=9,
        visible_paths={"cyan": False},
        curve_controls=CurveControlSettings(tile_height_scale=0.8),
    )

    ok, error = manager.save(settings)
    assert ok
    assert error is None
    assert manager.load() == settings


def test_mode_stored_as_string(tmp_path):
    path = tmp_path / "config.json"
    ConfigManager(path).save(Settings(processing_mode=ProcessingMode.MONOCHROME))
    assert json.loads(path.read_text())["processing_mode"] == "monochrome"


def test_missing_file_gives_defaults(tmp_path):
    assert ConfigManager(tmp_path / "nope.json").load() == Settings()


def test_corrupt_file_gives_defaults(tmp_path, caplog):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert ConfigManager(path).load() == Settings()
    assert "Could not load config file" in caplog.text


def test_unknown_mode_gives_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"processing_mode": "sepia"}))
    assert ConfigManager(path).load() == Settings()


def test_partial_dict_keeps_defaults():
    settings = settings_from_dict(
        {"rows_count": 3, "unknown": 1, "curve_controls": {"bogus": 2}}
    )
    assert settings.rows_count == 3
    assert settings.columns_count == Settings().columns_count
    assert settings.curve_controls == CurveControlSettings()


def test_settings_to_dict_is_json_serializable():
    json.dumps(settings_to_dict(Settings()))


def test_save_failure_reports_error(tmp_path):
    ok, error = ConfigManager(tmp_path / "missing-dir" / "config.json").save(Settings())
    assert not ok
    assert error


@pytest.mark.parametrize(
    "changes",
    [
        {"columns_count": 0},
        {"colors_amt": 0},
        {"min_density": 6, "max_density": 5},
        {"min_density": -1},
        {"brightness_threshold": 300},
        {"density_smoothing": 1.5},
    ],
)
def test_validate_rejects_out_of_range(changes):
    with pytest.raises(ProcessingError):
        Settings(**changes).validate()


def test_validate_accepts_defaults():
    Settings().validate()


def test_is_visible_defaults_to_true():
    settings = Settings(visible_paths={"cyan": False, "black": True})
    assert not settings.is_visible("cyan")
    assert settings.is_visible("black")
    assert settings.is_visible("magenta")
