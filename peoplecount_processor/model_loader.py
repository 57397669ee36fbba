"""
Model Loader - YOLO model loading and caching.

This module provides the ModelLoader class which handles loading YOLO models
from disk, caching them in memory, and providing access to the current model.

Supports the model catalog described by DetectorConfig:
- YOLO11 and YOLO12 versions
- All variants: n, s, m, l, x
- Both ONNX (320, 640) and PT (flexible) formats

Thread Safety:
- NOT thread-safe (single writer pattern); load before starting the loop
"""

from pathlib import Path
from typing import Dict, Optional, Any
from ultralytics import YOLO

from peoplecount_processor.config import DetectorConfig
from peoplecount_zone.logging import LogEvent, StructuredLogger, create_logger


class ModelLoader:
    """
    YOLO model loader with in-memory caching.

    Models are identified by (version, variant, input_size, format) tuples.

    Usage:
        loader = ModelLoader(models_dir=Path("./models"))
        model = loader.load_model_from_config(DetectorConfig(model_variant="n"))

        loader.get_current_model_info()
        loader.list_available_models()
    """

    def __init__(self, models_dir: Path, logger: Optional[StructuredLogger] = None):
        """
        Initialize model loader.

        Args:
            models_dir: Directory containing YOLO model files (.pt, .onnx)
            logger: Structured logger (default: component "model_loader")
        """
        self.models_dir = Path(models_dir)
        self.logger = logger or create_logger("model_loader")
        self._cache: Dict[tuple, YOLO] = {}
        self._current_model: Optional[YOLO] = None
        self._current_key: Optional[tuple] = None
        self._current_config: Optional[DetectorConfig] = None

    def load_model_from_config(self, config: DetectorConfig) -> YOLO:
        """
        Load YOLO model from DetectorConfig (cache first, then disk).

        Raises:
            FileNotFoundError: If model file does not exist
        """
        cache_key = (
            config.model_version,
            config.model_variant,
            config.input_size,
            config.model_format,
        )

        if cache_key in self._cache:
            model = self._cache[cache_key]
        else:
            model_path = self.models_dir / config.get_model_filename()

            if not model_path.exists():
                raise FileNotFoundError(
                    f"Model file not found: {model_path}\n"
                    f"Expected: {config.get_model_filename()}\n"
                    f"Available models:\n" + "\n".join(f"  - {m}" for m in self.list_available_models())
                )

            model = YOLO(str(model_path))
            model.overrides["verbose"] = False
            model.overrides["imgsz"] = config.input_size
            self._cache[cache_key] = model

            self.logger.info(
                event=LogEvent.MODEL_LOADED,
                message="Loaded detector model",
                metadata={'model_path': str(model_path)}
            )

        # Inference parameters are not part of the cache key
        model.overrides["conf"] = config.confidence
        model.overrides["iou"] = config.iou_threshold

        self._current_model = model
        self._current_key = cache_key
        self._current_config = config
        return model

    def get_current_model(self) -> Optional[YOLO]:
        """Currently loaded model, or None."""
        return self._current_model

    def get_current_model_info(self) -> Optional[Dict[str, Any]]:
        """
        Get information about the current model.

        Returns:
            Dictionary with version, variant, input_size, format, model_path;
            None if no model is loaded.
        """
        if self._current_config is None:
            return None

        return {
            "version": self._current_config.model_version,
            "variant": self._current_config.model_variant,
            "input_size": self._current_config.input_size,
            "format": self._current_config.model_format,
            "model_path": str(self.models_dir / self._current_config.get_model_filename()),
        }

    def list_available_models(self) -> list[str]:
        """
        List available YOLO models in models_dir.

        Example:
            ["yolo11n-320.onnx", "yolo11n.pt", ...]
        """
        if not self.models_dir.exists():
            return []

        models = [
            f.name
            for pattern in ("yolo1[12]*.pt", "yolo1[12]*.onnx")
            for f in self.models_dir.glob(pattern)
            if f.is_file()
        ]
        return sorted(models)

    def clear_cache(self) -> None:
        """Unload all cached models."""
        self._cache.clear()
        self._current_model = None
        self._current_key = None
        self._current_config = None

    def cache_size(self) -> int:
        """Number of models in cache."""
        return len(self._cache)
