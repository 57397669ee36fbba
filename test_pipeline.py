"""
Test Counting Pipeline
======================

Offline pipeline orchestration, supervision detection conversion and the
count overlay, with a scripted detector instead of YOLO.

Usage:
    pytest test_pipeline.py
"""

import numpy as np
import pytest
import supervision as sv

from peoplecount_zone import (
    AggregateCount,
    BBox,
    CountVisualizer,
    CrossingLine,
    PipelineBuilder,
)
from peoplecount_zone.schemas import Detection, from_supervision, parse_detection


FRAME = np.zeros((480, 640, 3), dtype=np.uint8)


def person_at(cx, cy, width=40, height=100, score=0.9):
    return {"class": "person", "score": score, "bbox": [cx - width / 2, cy - height / 2, width, height]}


class ScriptedDetector:
    def __init__(self, batches):
        self.batches = list(batches)

    def detect(self, frame):
        batch = self.batches.pop(0) if self.batches else []
        if isinstance(batch, Exception):
            raise batch
        return batch


@pytest.fixture
def video_path(tmp_path):
    path = tmp_path / "people.mp4"
    path.write_bytes(b"")
    return str(path)


def build_pipeline(video_path, batches, observer=None):
    builder = (
        PipelineBuilder()
        .with_video(video_path)
        .with_detector(ScriptedDetector(batches))
        .with_crossing_line(320, 0, 320, 480)
        .without_video_output()
    )
    if observer is not None:
        builder = builder.with_count_observer(observer)
    return builder.build()


# ─────────────────────────────────────────────────────────────────────────────
# Pipeline
# ─────────────────────────────────────────────────────────────────────────────

def test_builder_requires_video_and_detector(video_path):
    with pytest.raises(ValueError):
        PipelineBuilder().with_detector(ScriptedDetector([])).build()
    with pytest.raises(ValueError):
        PipelineBuilder().with_video(video_path).build()


def test_builder_validates_inputs(tmp_path, video_path):
    with pytest.raises(FileNotFoundError):
        (
            PipelineBuilder()
            .with_video(str(tmp_path / "missing.mp4"))
            .with_detector(ScriptedDetector([]))
            .without_video_output()
            .build()
        )
    with pytest.raises(ValueError):
        (
            PipelineBuilder()
            .with_video(video_path)
            .with_detector(ScriptedDetector([]))
            .with_stride(0)
            .without_video_output()
            .build()
        )
    with pytest.raises(ValueError):
        PipelineBuilder().with_crossing_line(5, 5, 5, 5)


def test_process_frame_counts_and_annotates(video_path):
    counts = []
    pipeline = build_pipeline(
        video_path, [[person_at(300, 240)], [person_at(340, 240)]], observer=counts.append
    )

    first = pipeline._process_frame(FRAME, 0, 0.0)
    second = pipeline._process_frame(FRAME, 1, 100.0)

    assert pipeline.engine.count == AggregateCount(left_to_right=1)
    assert counts[-1].total == 1
    assert first.shape == FRAME.shape
    assert not np.array_equal(second, FRAME)
    assert not FRAME.any()  # input frame left untouched


def test_process_frame_without_annotation_returns_input(video_path):
    pipeline = build_pipeline(video_path, [[person_at(300, 240)]])

    result = pipeline._process_frame(FRAME, 0, 0.0, annotate=False)

    assert result is FRAME
    assert pipeline.engine.tracked_count == 1


def test_detector_failure_skips_engine(video_path):
    pipeline = build_pipeline(video_path, [RuntimeError("model crashed"), [person_at(300, 240)]])

    pipeline._process_frame(FRAME, 0, 0.0, annotate=False)
    assert pipeline.engine.tracked_count == 0

    pipeline._process_frame(FRAME, 1, 100.0, annotate=False)
    assert pipeline.engine.tracked_count == 1


def test_cleanup_runs_on_video_time(video_path):
    pipeline = build_pipeline(video_path, [[person_at(300, 240)]])

    pipeline._process_frame(FRAME, 0, 0.0, annotate=False)
    pipeline._process_frame(FRAME, 1, 3000.0, annotate=False)
    assert pipeline.engine.tracked_count == 1

    pipeline._process_frame(FRAME, 2, 6000.0, annotate=False)
    assert pipeline.engine.tracked_count == 0


def test_frame_timestamps_follow_stride(video_path):
    pipeline = (
        PipelineBuilder()
        .with_video(video_path)
        .with_detector(ScriptedDetector([]))
        .with_stride(2)
        .without_video_output()
        .build()
    )

    assert pipeline._frame_timestamp_ms(3, 25) == pytest.approx(240.0)


# ─────────────────────────────────────────────────────────────────────────────
# Detection conversion
# ─────────────────────────────────────────────────────────────────────────────

def test_from_supervision_uses_class_name_data():
    detections = sv.Detections(
        xyxy=np.array([[10, 20, 50, 120], [5, 5, 5, 50]], dtype=float),
        confidence=np.array([0.8, 0.9]),
        class_id=np.array([0, 0]),
        data={"class_name": np.array(["person", "person"])},
    )

    result = from_supervision(detections)

    # Zero-width box is skipped
    assert result == [Detection(class_name="person", score=0.8, bbox=BBox(x=10, y=20, width=40, height=100))]


def test_from_supervision_falls_back_to_class_ids():
    detections = sv.Detections(
        xyxy=np.array([[0, 0, 10, 10], [0, 0, 20, 20]], dtype=float),
        confidence=np.array([0.5, 0.6]),
        class_id=np.array([2, 7]),
    )

    result = from_supervision(detections, {0: "person", 2: "car"})

    assert [d.class_name for d in result] == ["car", "class_7"]


def test_from_supervision_empty():
    assert from_supervision(sv.Detections.empty()) == []


def test_parse_detection():
    detection = parse_detection({"class": "person", "score": 0.7, "bbox": [1, 2, 3, 4]})

    assert detection.bbox.center.x == pytest.approx(2.5)
    assert detection.to_dict() == {"class": "person", "score": 0.7, "bbox": [1.0, 2.0, 3.0, 4.0]}
    assert parse_detection(detection) is detection

    with pytest.raises(ValueError):
        parse_detection(["person", 0.7, [1, 2, 3, 4]])
    with pytest.raises(ValueError):
        parse_detection({"class": "person", "score": 1.7, "bbox": [1, 2, 3, 4]})


# ─────────────────────────────────────────────────────────────────────────────
# Visualizer
# ─────────────────────────────────────────────────────────────────────────────

def test_render_without_line_returns_copy():
    visualizer = CountVisualizer()

    annotated = visualizer.render(FRAME, [], None, AggregateCount(left_to_right=2))

    assert annotated is not FRAME
    assert annotated.shape == FRAME.shape


def test_render_draws_line():
    visualizer = CountVisualizer()
    line = CrossingLine.from_coords(320, 0, 320, 480)

    annotated = visualizer.render(FRAME, [], line)

    assert annotated[100, 320].any()
