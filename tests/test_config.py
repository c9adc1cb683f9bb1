"""Unit tests for TutorialConfig load/save."""

from __future__ import annotations

import json
from pathlib import Path

from plotwalk.config import SCHEMA_VERSION, TutorialConfig, TutorialConfigData


def test_load_missing_file_uses_defaults(tmp_path):
    cfg = TutorialConfig.load(config_path=tmp_path / "cfg.json")
    assert cfg.data == TutorialConfigData()
    assert not (tmp_path / "cfg.json").exists()


def test_load_missing_file_create_if_missing(tmp_path):
    path = tmp_path / "sub" / "cfg.json"
    TutorialConfig.load(config_path=path, create_if_missing=True)
    assert path.exists()
    assert json.loads(path.read_text())["schema_version"] == SCHEMA_VERSION


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "cfg.json"
    cfg = TutorialConfig(path=path)
    cfg.data.export_width = 18.0
    cfg.data.export_height = 12.0
    cfg.data.export_units = "cm"
    cfg.data.export_format = "svg"
    cfg.save()

    loaded = TutorialConfig.load(config_path=path)
    assert loaded.data.export_width == 18.0
    assert loaded.data.export_units == "cm"
    assert loaded.data.export_format == "svg"


def test_invalid_json_uses_defaults(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("{not json", encoding="utf-8")
    cfg = TutorialConfig.load(config_path=path)
    assert cfg.data == TutorialConfigData()


def test_non_dict_json_uses_defaults(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert TutorialConfig.load(config_path=path).data == TutorialConfigData()


def test_schema_mismatch_resets(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"schema_version": 99, "export_width": 10}), encoding="utf-8")
    cfg = TutorialConfig.load(config_path=path)
    assert cfg.data.export_width == TutorialConfigData().export_width


def test_schema_mismatch_keep_loaded(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"schema_version": 99, "export_width": 10}), encoding="utf-8")
    cfg = TutorialConfig.load(config_path=path, reset_on_version_mismatch=False)
    assert cfg.data.export_width == 10.0
    assert cfg.data.schema_version == SCHEMA_VERSION


def test_invalid_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({
        "schema_version": SCHEMA_VERSION,
        "export_width": -3,
        "export_height": "tall",
        "export_units": "furlongs",
        "export_format": "bmp",
        "extra": True,
    }), encoding="utf-8")
    data = TutorialConfig.load(config_path=path).data
    defaults = TutorialConfigData()
    assert data.export_width == defaults.export_width
    assert data.export_height == defaults.export_height
    assert data.export_units == defaults.export_units
    assert data.export_format == defaults.export_format


def test_export_kwargs_and_output_path(tmp_path):
    cfg = TutorialConfig(path=tmp_path / "cfg.json")
    assert cfg.export_kwargs() == {"width": 6.0, "height": 4.0, "units": "in", "dpi": 300.0}
    assert cfg.output_path("fig") == Path("figures") / "fig.png"
    assert cfg.output_path("fig", tmp_path) == tmp_path / "fig.png"


def test_default_config_path_is_json():
    path = TutorialConfig.default_config_path()
    assert path.name == "plotwalk_config.json"
    assert "plotwalk" in str(path.parent)
