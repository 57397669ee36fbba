"""
Counting Pipeline Module
========================

Bounded Context: Offline video processing orchestration for people counting.

Design:
- Orchestrator: Combines detector, engine, cleanup schedule, visualization
- Builder pattern: Fluent configuration
- Fail Fast: Validation at build time, not runtime
- Deterministic clock: timestamps come from frame index and video fps,
  so re-running a video reproduces the same counts

Dependencies:
- supervision (video utils)
- peoplecount_zone.engine (tracking & counting)
- peoplecount_zone.rendering (visualizer)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
import supervision as sv

from peoplecount_zone.engine import EngineConfig, PeopleCountingEngine
from peoplecount_zone.geometry.shapes import CrossingLine
from peoplecount_zone.interfaces import CountObserver, Detector
from peoplecount_zone.logging import LogEvent, StructuredLogger, create_logger
from peoplecount_zone.rendering.visualizer import CountVisualizer
from peoplecount_zone.utils import get_target_run_folder


@dataclass
class PipelineConfig:
    """
    Pipeline configuration.

    Design:
    - All dependencies injected
    - Validated at construction
    """

    video_path: str
    output_folder: str
    detector: Detector
    engine: PeopleCountingEngine
    visualizer: CountVisualizer
    stride: int = 1
    output_fps: Optional[int] = None
    save_video: bool = True


class CountingPipeline:
    """
    Orchestrates people counting over a video file.

    Pipeline stages per frame:
    1. Detection (external detector; failures skip the engine call)
    2. Tracking & counting (engine.process_detections)
    3. Periodic cleanup (engine.cleanup_stale, on video time)
    4. Visualization (rendering layer)

    Usage:
        pipeline = (
            PipelineBuilder()
            .with_video("people.mp4")
            .with_detector(detector)
            .with_crossing_line(640, 0, 640, 720)
            .build()
        )

        output_path = pipeline.process()
        print(pipeline.engine.count)
    """

    def __init__(self, config: PipelineConfig, logger: Optional[StructuredLogger] = None):
        """
        Initialize pipeline with configuration.

        Args:
            config: Pipeline configuration (validated)
            logger: Structured logger (default: component "pipeline")
        """
        self.config = config
        self.logger = logger or create_logger("pipeline")
        self._last_cleanup_ms: Optional[float] = None
        self._validate_config()

    @property
    def engine(self) -> PeopleCountingEngine:
        return self.config.engine

    def _validate_config(self) -> None:
        """Validate configuration (fail fast)."""
        video_path = Path(self.config.video_path)
        if not video_path.exists():
            raise FileNotFoundError(f"Video not found: {self.config.video_path}")

        if self.config.stride < 1:
            raise ValueError(f"stride must be >= 1, got {self.config.stride}")

    def process(self) -> Optional[str]:
        """
        Process the whole video.

        Returns:
            Path to the annotated output video, or None when save_video is off
        """
        video_info = sv.VideoInfo.from_video_path(self.config.video_path)
        source_fps = video_info.fps or 25
        frames_generator = sv.get_video_frames_generator(
            self.config.video_path, stride=self.config.stride
        )

        self.logger.info(
            event=LogEvent.PIPELINE_STARTED,
            message="Counting pipeline started",
            metadata={
                'video_path': self.config.video_path,
                'resolution_wh': list(video_info.resolution_wh),
                'fps': source_fps,
                'stride': self.config.stride,
            }
        )

        output_path = None
        if self.config.save_video:
            video_info.fps = self.config.output_fps or max(1, round(source_fps / self.config.stride))
            output_path = f"{self.config.output_folder}/people_counter_output.mp4"
            Path(output_path).parent.mkdir(parents=True, exist_ok=True)

            with sv.VideoSink(output_path, video_info) as sink:
                for frame_idx, frame in enumerate(frames_generator):
                    now_ms = self._frame_timestamp_ms(frame_idx, source_fps)
                    sink.write_frame(self._process_frame(frame, frame_idx, now_ms))
        else:
            for frame_idx, frame in enumerate(frames_generator):
                now_ms = self._frame_timestamp_ms(frame_idx, source_fps)
                self._process_frame(frame, frame_idx, now_ms, annotate=False)

        count = self.engine.count
        self.logger.info(
            event=LogEvent.PIPELINE_COMPLETED,
            message="Counting pipeline completed",
            metadata={'output_path': output_path, 'count': count.to_dict()}
        )
        return output_path

    def _frame_timestamp_ms(self, frame_idx: int, source_fps: float) -> float:
        return frame_idx * self.config.stride * 1000.0 / source_fps

    def _process_frame(
        self,
        frame: np.ndarray,
        frame_idx: int,
        now_ms: float,
        annotate: bool = True,
    ) -> np.ndarray:
        """
        Process a single frame through the pipeline.

        Args:
            frame: Input frame (H x W x 3)
            frame_idx: Index among processed frames
            now_ms: Frame timestamp in video time
            annotate: Draw the overlay on a copy of the frame

        Returns:
            Annotated frame (or the input frame when annotate is False)
        """
        height, width = frame.shape[:2]

        try:
            detections = self.config.detector.detect(frame)
        except Exception as e:
            self.logger.error(
                event=LogEvent.DETECTOR_FAILED,
                message="Detector failed, skipping frame",
                metadata={'frame_index': frame_idx},
                exc_info=e,
            )
        else:
            self.engine.process_detections(detections, width, height, now_ms)

        self._maybe_cleanup(now_ms)

        if not annotate:
            return frame

        return self.config.visualizer.render(
            frame,
            self.engine.tracked_people(),
            self.engine.crossing_line,
            self.engine.count,
            now_ms,
        )

    def _maybe_cleanup(self, now_ms: float) -> None:
        if self._last_cleanup_ms is None:
            self._last_cleanup_ms = now_ms
            return

        if now_ms - self._last_cleanup_ms >= self.engine.config.cleanup_interval_ms:
            self.engine.cleanup_stale(now_ms)
            self._last_cleanup_ms = now_ms


class PipelineBuilder:
    """
    Builder for CountingPipeline.

    Design:
    - Fluent API for construction
    - Fail-fast validation
    - Sensible defaults

    Usage:
        pipeline = (
            PipelineBuilder()
            .with_video("people.mp4")
            .with_detector(yolo_detector)
            .with_crossing_line(640, 0, 640, 720)
            .with_count_observer(print)
            .build()
        )
    """

    def __init__(self):
        self._video_path: str | None = None
        self._output_folder: str | None = None
        self._detector: Detector | None = None
        self._engine: PeopleCountingEngine | None = None
        self._engine_config: EngineConfig | None = None
        self._crossing_line: CrossingLine | None = None
        self._observer: CountObserver | None = None
        self._visualizer: CountVisualizer | None = None
        self._stride: int = 1
        self._output_fps: int | None = None
        self._save_video: bool = True

    def with_video(self, video_path: str) -> "PipelineBuilder":
        """Set input video path."""
        self._video_path = video_path
        return self

    def with_output_folder(self, folder: str) -> "PipelineBuilder":
        """Set output folder."""
        self._output_folder = folder
        return self

    def with_detector(self, detector: Detector) -> "PipelineBuilder":
        """Set frame detector (e.g., YoloPersonDetector)."""
        self._detector = detector
        return self

    def with_engine(self, engine: PeopleCountingEngine) -> "PipelineBuilder":
        """Use a pre-built engine (overrides config/line/observer settings)."""
        self._engine = engine
        return self

    def with_engine_config(self, config: EngineConfig) -> "PipelineBuilder":
        """Set engine tuning."""
        self._engine_config = config
        return self

    def with_crossing_line(self, x1: float, y1: float, x2: float, y2: float) -> "PipelineBuilder":
        """Set the crossing line (validated immediately)."""
        self._crossing_line = CrossingLine.from_coords(x1, y1, x2, y2)
        return self

    def with_count_observer(self, observer: CountObserver) -> "PipelineBuilder":
        """Set count-change observer."""
        self._observer = observer
        return self

    def with_visualizer(self, visualizer: CountVisualizer) -> "PipelineBuilder":
        """Set visualizer."""
        self._visualizer = visualizer
        return self

    def with_stride(self, stride: int) -> "PipelineBuilder":
        """Set frame stride (process every N frames)."""
        self._stride = stride
        return self

    def with_output_fps(self, fps: int) -> "PipelineBuilder":
        """Set output video FPS."""
        self._output_fps = fps
        return self

    def without_video_output(self) -> "PipelineBuilder":
        """Count only, do not write an annotated video."""
        self._save_video = False
        return self

    def build(self) -> CountingPipeline:
        """
        Build the pipeline.

        Returns:
            Configured pipeline

        Raises:
            ValueError: If required configuration is missing
        """
        if self._video_path is None:
            raise ValueError("Video path is required (use .with_video())")
        if self._detector is None:
            raise ValueError("Detector is required (use .with_detector())")

        # Defaults
        if self._output_folder is None and self._save_video:
            self._output_folder = get_target_run_folder(application_name="people_counter")
        if self._engine is None:
            self._engine = PeopleCountingEngine(
                config=self._engine_config,
                crossing_line=self._crossing_line,
                on_count_changed=self._observer,
            )
        if self._visualizer is None:
            self._visualizer = CountVisualizer()

        config = PipelineConfig(
            video_path=self._video_path,
            output_folder=self._output_folder or "",
            detector=self._detector,
            engine=self._engine,
            visualizer=self._visualizer,
            stride=self._stride,
            output_fps=self._output_fps,
            save_video=self._save_video,
        )

        return CountingPipeline(config)
