"""
Configuration schema for the people counter.

This module defines the configuration structure for the counter service,
including the video source, detector model, crossing line and engine tuning.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Tuple
import yaml

from peoplecount_zone.engine import EngineConfig
from peoplecount_zone.geometry.shapes import CrossingLine


@dataclass(frozen=True)
class DetectorConfig:
    """
    YOLO detector configuration with catalog support.

    Supported models (files expected in models_dir):
    - YOLO11 / YOLO12: n, s, m, l, x

    Formats:
    - ONNX: Pre-exported models (yolo{version}{variant}-{size}.onnx)
    - PT: PyTorch native models (yolo{version}{variant}.pt)

    ``confidence`` is the detector's own pre-filter; the engine applies
    min_tracking_confidence on top of it.
    """

    model_version: str = "11"  # "11" or "12"
    model_variant: str = "n"  # n, s, m, l, x
    input_size: int = 640
    model_format: str = "pt"  # "onnx" or "pt"
    confidence: float = 0.25
    iou_threshold: float = 0.5

    def __post_init__(self):
        """Validate detector configuration."""
        valid_versions = {"11", "12"}
        if self.model_version not in valid_versions:
            raise ValueError(
                f"Invalid model_version: {self.model_version}. "
                f"Must be one of {valid_versions}"
            )

        valid_variants = {"n", "s", "m", "l", "x"}
        if self.model_variant not in valid_variants:
            raise ValueError(
                f"Invalid model_variant: {self.model_variant}. "
                f"Must be one of {valid_variants}"
            )

        valid_formats = {"onnx", "pt"}
        if self.model_format not in valid_formats:
            raise ValueError(
                f"Invalid model_format: {self.model_format}. "
                f"Must be one of {valid_formats}"
            )

        # ONNX models have fixed input sizes
        if self.model_format == "onnx":
            valid_sizes = {320, 640}
            if self.input_size not in valid_sizes:
                raise ValueError(
                    f"Invalid input_size for ONNX: {self.input_size}. "
                    f"Must be one of {valid_sizes}"
                )
        else:  # pt
            if not 32 <= self.input_size <= 1280:
                raise ValueError(
                    f"input_size must be in [32, 1280], got {self.input_size}"
                )

        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"confidence must be in [0.0, 1.0], got {self.confidence}"
            )

        if not 0.0 <= self.iou_threshold <= 1.0:
            raise ValueError(
                f"iou_threshold must be in [0.0, 1.0], got {self.iou_threshold}"
            )

    def get_model_filename(self) -> str:
        """
        Get the model filename based on configuration.

        Returns:
            str: Model filename (e.g., "yolo11n-640.onnx" or "yolo11n.pt")
        """
        if self.model_format == "onnx":
            return f"yolo{self.model_version}{self.model_variant}-{self.input_size}.onnx"
        else:  # pt
            return f"yolo{self.model_version}{self.model_variant}.pt"


@dataclass(frozen=True)
class LineConfig:
    """Crossing line endpoints in frame pixels."""

    start: Tuple[float, float]
    end: Tuple[float, float]

    def __post_init__(self):
        """Validate line configuration."""
        if len(self.start) != 2 or len(self.end) != 2:
            raise ValueError(
                f"Line endpoints must be [x, y] pairs, got {self.start}, {self.end}"
            )
        # Reuses the geometry validation (finite, non-degenerate)
        self.to_crossing_line()

    def to_crossing_line(self) -> CrossingLine:
        return CrossingLine.from_coords(*self.start, *self.end)


@dataclass(frozen=True)
class CounterConfig:
    """
    Main configuration for the people counter.

    Loaded from YAML and validated at startup.
    Immutable after construction (frozen dataclass).
    """

    # Service identification
    service_id: str

    # Video source: file path, stream URL or camera index ("0")
    source: str
    frame_resolution_wh: Tuple[int, int] = (640, 480)  # (width, height)

    # Crossing line (None = nothing is counted until set)
    line: Optional[LineConfig] = None

    # Detector configuration
    detector_config: DetectorConfig = field(default_factory=DetectorConfig)
    models_dir: Path = Path("./models")

    # Engine tuning
    engine_config: EngineConfig = field(default_factory=EngineConfig)

    def __post_init__(self):
        """Validate counter configuration."""
        if not self.service_id:
            raise ValueError("service_id cannot be empty")

        if not self.source:
            raise ValueError("source cannot be empty")

        width, height = self.frame_resolution_wh
        if width <= 0 or height <= 0:
            raise ValueError(
                f"frame_resolution_wh must have positive dimensions, got {self.frame_resolution_wh}"
            )
        if width > 4096 or height > 4096:
            raise ValueError(
                f"frame_resolution_wh dimensions too large (max 4096x4096), got {self.frame_resolution_wh}"
            )

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "CounterConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            service_id: "entrance_cam"
            source: "./data/videos/people.mp4"
            frame_resolution_wh: [640, 480]

            line:
              start: [320, 0]
              end: [320, 480]

            detector_config:
              model_version: "11"
              model_variant: "n"
              model_format: "pt"
              confidence: 0.25

            models_dir: "./models"

            engine_config:
              detection_interval_ms: 50
              min_tracking_confidence: 0.3
              cleanup_horizon_ms: 5000

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the YAML is invalid or a value fails validation
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        try:
            with open(yaml_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")

        for key in ("service_id", "source"):
            if key not in data:
                raise ValueError(f"Missing required config field: {key}")

        # Parse nested configs
        detector_config = DetectorConfig(**data.get("detector_config", {}))
        engine_config = _engine_config_from_dict(data.get("engine_config", {}))

        line = None
        line_data = data.get("line")
        if line_data:
            line = LineConfig(
                start=tuple(line_data["start"]),
                end=tuple(line_data["end"]),
            )

        frame_resolution_wh = tuple(data.get("frame_resolution_wh", [640, 480]))

        return cls(
            service_id=str(data["service_id"]),
            source=str(data["source"]),
            frame_resolution_wh=frame_resolution_wh,
            line=line,
            detector_config=detector_config,
            models_dir=Path(data.get("models_dir", "./models")),
            engine_config=engine_config,
        )


def _engine_config_from_dict(data: dict) -> EngineConfig:
    known = {f.name for f in fields(EngineConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(
            f"Unknown engine_config fields: {sorted(unknown)}. "
            f"Valid fields: {sorted(known)}"
        )
    return EngineConfig(**data)
