"""
YOLO person detector adapter.

Wraps an ultralytics model behind the Detector protocol the engine's
orchestrators expect: frame in, list of Detection out.
"""

from typing import Any, List

import numpy as np
import supervision as sv

from peoplecount_zone.schemas.detection import Detection, from_supervision


class YoloPersonDetector:
    """
    Detector adapter around an ultralytics YOLO model.

    Exceptions raised by the model propagate; the pipeline/service logs them
    and skips the engine call for that frame.

    Usage:
        model = ModelLoader(Path("./models")).load_model_from_config(config)
        detector = YoloPersonDetector(model)
        detections = detector.detect(frame)
    """

    def __init__(self, model: Any):
        """
        Args:
            model: Callable ultralytics model (``model(frame)`` -> results)
        """
        self.model = model

    def detect(self, frame: np.ndarray) -> List[Detection]:
        results = self.model(frame)[0]
        detections = sv.Detections.from_ultralytics(results)
        return from_supervision(detections, getattr(results, "names", None))
