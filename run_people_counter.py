"""
People Counter Demo
===================

Counts people crossing a line in a video file.

Architecture:
- geometry: CrossingLine (immutable shape)
- engine: PeopleCountingEngine (tracking + counting)
- rendering: CountVisualizer (drawing)
- pipeline: Orchestration

Usage:
    python run_people_counter.py --config config/people_counter.yaml
    python run_people_counter.py --config config/people_counter.yaml --no-video
"""

import argparse
import logging
import sys
from pathlib import Path

from peoplecount_processor import CounterConfig, ModelLoader, YoloPersonDetector
from peoplecount_zone import AggregateCount, PipelineBuilder


def print_count(count: AggregateCount) -> None:
    print(f"  count: {count}")


def main():
    """Run people counting on the configured video."""
    parser = argparse.ArgumentParser(description="Count people crossing a line in a video")
    parser.add_argument(
        "--config",
        default="config/people_counter.yaml",
        help="Path to counter config YAML (default: config/people_counter.yaml)"
    )
    parser.add_argument("--stride", type=int, default=1, help="Process every N frames")
    parser.add_argument("--output-folder", default=None, help="Where to write the annotated video")
    parser.add_argument("--no-video", action="store_true", help="Count only, no annotated output")
    parser.add_argument("--debug", action="store_true", help="Emit per-batch debug events")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # 1. Load configuration
    config = CounterConfig.from_yaml(Path(args.config))

    # 2. Load detection model
    model = ModelLoader(config.models_dir).load_model_from_config(config.detector_config)
    detector = YoloPersonDetector(model)

    # 3. Build pipeline
    builder = (
        PipelineBuilder()
        .with_video(config.source)
        .with_detector(detector)
        .with_engine_config(config.engine_config)
        .with_count_observer(print_count)
        .with_stride(args.stride)
    )
    if config.line is not None:
        builder = builder.with_crossing_line(*config.line.start, *config.line.end)
    if args.output_folder:
        builder = builder.with_output_folder(args.output_folder)
    if args.no_video:
        builder = builder.without_video_output()

    pipeline = builder.build()
    pipeline.engine.set_debug_mode(args.debug)

    # 4. Process video
    print("Starting people counting...")
    print(f"  Video: {config.source}")
    print()

    output_path = pipeline.process()

    print()
    print("People counting completed!")
    if output_path:
        print(f"  Output: {output_path}")
    print(f"  Final: {pipeline.engine.count}")


if __name__ == "__main__":
    main()
