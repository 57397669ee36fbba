"""
Detection Schema
================

Bounded Context: Detector Output Boundary

This module defines the closed detection type consumed by the counting
engine and the conversions from the shapes detectors actually produce.

Design:
- Detection: one detector output (class, score, bbox)
- parse_detection(): validates loose mappings ({"class", "score", "bbox"})
- from_supervision(): converts sv.Detections (YOLO via ultralytics)

Message Flow:
    Detector → Detection → PeopleCountingEngine.process_detections()
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import numpy as np
import supervision as sv

from .common import BBox


@dataclass(frozen=True)
class Detection:
    """
    Single object detection from the external detector.

    Attributes:
        class_name: Object class (e.g., "person")
        score: Detection confidence [0.0, 1.0]
        bbox: Bounding box (absolute pixels)

    Invariants:
        - score is finite and in [0.0, 1.0]
        - bbox is valid (see BBox)

    Example:
        >>> det = Detection(
        ...     class_name="person",
        ...     score=0.92,
        ...     bbox=BBox(x=100, y=200, width=50, height=100)
        ... )
    """
    class_name: str
    score: float
    bbox: BBox

    def __post_init__(self):
        """Validate invariants."""
        if not math.isfinite(self.score) or not (0.0 <= self.score <= 1.0):
            raise ValueError(
                f"Score must be in [0.0, 1.0], got {self.score}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the detector wire shape."""
        return {
            'class': self.class_name,
            'score': self.score,
            'bbox': self.bbox.to_list(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Detection':
        """Deserialize from ``{"class", "score", "bbox": [x, y, w, h]}``.

        Raises:
            ValueError: If required fields missing or invalid
        """
        try:
            return cls(
                class_name=str(data['class']),
                score=float(data['score']),
                bbox=BBox.from_xywh(data['bbox']),
            )
        except KeyError as e:
            raise ValueError(f"Missing required Detection field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid Detection data: {e}")


def parse_detection(item: Any) -> Detection:
    """
    Coerce one raw detector entry into a Detection.

    Accepts Detection instances unchanged and mappings in the detector wire
    shape.

    Raises:
        ValueError: If the entry cannot be turned into a valid Detection
    """
    if isinstance(item, Detection):
        return item
    if isinstance(item, Mapping):
        return Detection.from_dict(item)
    raise ValueError(f"Unsupported detection type: {type(item).__name__}")


def from_supervision(
    detections: sv.Detections,
    class_names: Optional[Mapping[int, str]] = None,
) -> List[Detection]:
    """
    Convert supervision detections into Detection values.

    Class names come from ``detections.data["class_name"]`` when the model
    adapter filled it (ultralytics does), else from ``class_names`` keyed by
    ``class_id``. Boxes that do not form a valid BBox are skipped.

    Args:
        detections: supervision Detections (xyxy boxes)
        class_names: Optional mapping {class_id: name}

    Returns:
        List of Detection in detector order
    """
    if len(detections) == 0:
        return []

    names = detections.data.get("class_name") if detections.data else None
    confidences = (
        detections.confidence
        if detections.confidence is not None
        else np.ones(len(detections))
    )

    result: List[Detection] = []
    for idx, (x1, y1, x2, y2) in enumerate(detections.xyxy):
        if names is not None:
            class_name = str(names[idx])
        elif detections.class_id is not None:
            class_id = int(detections.class_id[idx])
            class_name = class_names.get(class_id, f"class_{class_id}") if class_names else f"class_{class_id}"
        else:
            class_name = "unknown"

        try:
            result.append(Detection(
                class_name=class_name,
                score=float(confidences[idx]),
                bbox=BBox.from_xyxy(x1, y1, x2, y2),
            ))
        except ValueError:
            continue

    return result
