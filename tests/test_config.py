import json

import pytest

from fastripple.config import load_config
from fastripple.hfo_detector import FastRippleConfig


def test_load_json_flat(tmp_path):
    path = tmp_path / "detector.json"
    path.write_text(json.dumps({"std_rms": 4.5, "min_peaks": 8}), encoding="utf-8")

    cfg = load_config(path)
    assert cfg == FastRippleConfig(std_rms=4.5, min_peaks=8)


def test_load_json_nested_section_ignores_other_keys(tmp_path):
    path = tmp_path / "pipeline.json"
    payload = {"subject": "p01", "fast_ripple": {"max_gap_ms": 15.0}}
    path.write_text(json.dumps(payload), encoding="utf-8")

    cfg = load_config(str(path))
    assert cfg.max_gap_ms == 15.0
    assert cfg.std_rms == 5.0


def test_load_yaml(tmp_path):
    pytest.importorskip("yaml")
    path = tmp_path / "detector.yaml"
    path.write_text("fast_ripple:\n  std_rms: 4\n  std_peaks: 2.5\n", encoding="utf-8")

    cfg = load_config(path)
    assert cfg.std_rms == 4
    assert cfg.std_peaks == 2.5


def test_load_empty_yaml_gives_defaults(tmp_path):
    pytest.importorskip("yaml")
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == FastRippleConfig()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.json")


def test_unknown_key_rejected(tmp_path):
    path = tmp_path / "typo.json"
    path.write_text(json.dumps({"stdsRMS": 5}), encoding="utf-8")
    with pytest.raises(ValueError, match="Unknown"):
        load_config(path)


def test_non_mapping_root_rejected(tmp_path):
    path = tmp_path / "list.json"
    path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_invalid_value_rejected(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"min_duration_ms": 0}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)
