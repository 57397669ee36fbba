"""
Test Counter Configuration
==========================

CounterConfig YAML loading and validation.

Usage:
    pytest test_config.py
"""

from pathlib import Path

import pytest

from peoplecount_processor import CounterConfig, DetectorConfig, LineConfig, ModelLoader
from peoplecount_zone import CrossingLine, EngineConfig


EXAMPLE_CONFIG = Path(__file__).parent / "config" / "people_counter.yaml"


def write_config(tmp_path, text):
    path = tmp_path / "counter.yaml"
    path.write_text(text)
    return path


def test_example_config_loads():
    config = CounterConfig.from_yaml(EXAMPLE_CONFIG)

    assert config.service_id == "entrance_cam"
    assert config.line.to_crossing_line() == CrossingLine.from_coords(320, 0, 320, 480)
    assert config.engine_config == EngineConfig()
    assert config.detector_config.get_model_filename() == "yolo11n.pt"


def test_minimal_config_uses_defaults(tmp_path):
    path = write_config(tmp_path, 'service_id: "cam"\nsource: "0"\n')

    config = CounterConfig.from_yaml(path)

    assert config.line is None
    assert config.frame_resolution_wh == (640, 480)
    assert config.models_dir == Path("./models")
    assert config.engine_config.detection_interval_ms == 50
    assert config.engine_config.cleanup_horizon_ms == 5000


def test_engine_overrides(tmp_path):
    path = write_config(
        tmp_path,
        'service_id: "cam"\n'
        'source: "video.mp4"\n'
        "engine_config:\n"
        "  min_tracking_confidence: 0.5\n"
        "  position_history_limit: 5\n",
    )

    config = CounterConfig.from_yaml(path)

    assert config.engine_config.min_tracking_confidence == 0.5
    assert config.engine_config.position_history_limit == 5
    assert config.engine_config.min_crossing_confidence == 0.3


def test_unknown_engine_field_rejected(tmp_path):
    path = write_config(
        tmp_path,
        'service_id: "cam"\nsource: "0"\nengine_config:\n  max_people: 3\n',
    )
    with pytest.raises(ValueError, match="max_people"):
        CounterConfig.from_yaml(path)


def test_missing_required_field_rejected(tmp_path):
    path = write_config(tmp_path, 'source: "0"\n')
    with pytest.raises(ValueError, match="service_id"):
        CounterConfig.from_yaml(path)


def test_non_mapping_root_rejected(tmp_path):
    path = write_config(tmp_path, "- just\n- a list\n")
    with pytest.raises(ValueError):
        CounterConfig.from_yaml(path)


def test_invalid_yaml_rejected(tmp_path):
    path = write_config(tmp_path, "service_id: [unclosed\n")
    with pytest.raises(ValueError):
        CounterConfig.from_yaml(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        CounterConfig.from_yaml(tmp_path / "missing.yaml")


def test_degenerate_line_rejected(tmp_path):
    path = write_config(
        tmp_path,
        'service_id: "cam"\nsource: "0"\nline:\n  start: [10, 10]\n  end: [10, 10]\n',
    )
    with pytest.raises(ValueError):
        CounterConfig.from_yaml(path)


def test_line_config_validation():
    with pytest.raises(ValueError):
        LineConfig(start=(0, 0, 0), end=(1, 1))

    line = LineConfig(start=(0, 240), end=(640, 240))
    assert line.to_crossing_line().as_tuple() == (0.0, 240.0, 640.0, 240.0)


def test_counter_config_validation():
    with pytest.raises(ValueError):
        CounterConfig(service_id="", source="0")
    with pytest.raises(ValueError):
        CounterConfig(service_id="cam", source="0", frame_resolution_wh=(0, 480))
    with pytest.raises(ValueError):
        CounterConfig(service_id="cam", source="0", frame_resolution_wh=(8192, 480))


def test_detector_config_validation():
    assert DetectorConfig(model_format="onnx", input_size=320).get_model_filename() == "yolo11n-320.onnx"
    assert DetectorConfig(model_version="12", model_variant="s").get_model_filename() == "yolo12s.pt"

    with pytest.raises(ValueError):
        DetectorConfig(model_version="8")
    with pytest.raises(ValueError):
        DetectorConfig(model_variant="q")
    with pytest.raises(ValueError):
        DetectorConfig(model_format="onnx", input_size=512)
    with pytest.raises(ValueError):
        DetectorConfig(confidence=1.5)


def test_model_loader_reports_missing_file(tmp_path):
    (tmp_path / "yolo11s.pt").write_bytes(b"")
    loader = ModelLoader(tmp_path)

    with pytest.raises(FileNotFoundError, match="yolo11n.pt"):
        loader.load_model_from_config(DetectorConfig())
    assert loader.list_available_models() == ["yolo11s.pt"]
    assert loader.cache_size() == 0
