#!/usr/bin/env python3
"""
People Counter Service - Entry Point
====================================

Starts the live people counter, which:
- Reads frames from a stream URL, camera index or file (OpenCV)
- Runs YOLO person detection
- Tracks people and counts line crossings
- Sweeps stale tracks on a background scheduler

Usage:
    python run_stream_counter.py --config config/people_counter.yaml

Lifecycle:
    1. Load configuration from YAML
    2. Setup logging (console + file)
    3. Load detector model
    4. Run the counter (blocks)
    5. SIGINT / SIGTERM: graceful shutdown

Logs:
    - Console: INFO level
    - File: logs/people_counter.log (INFO level) when --log-file is given
"""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from peoplecount_processor import (
    CounterConfig,
    ModelLoader,
    PeopleCounterService,
    YoloPersonDetector,
)
from peoplecount_zone import AggregateCount


# ─────────────────────────────────────────────────────────────────────────────
# Logging Setup
# ─────────────────────────────────────────────────────────────────────────────

def setup_logging(log_file: Optional[Path] = None) -> logging.Logger:
    """
    Setup logging for the counter service.

    Args:
        log_file: Optional path to log file

    Returns:
        Logger instance for the entry point
    """
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            *(
                [logging.FileHandler(log_file)]
                if log_file
                else []
            )
        ]
    )

    return logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Main
# ─────────────────────────────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(description="Live people counter")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config/people_counter.yaml"),
        help="Path to counter config YAML"
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Optional log file")
    parser.add_argument("--debug", action="store_true", help="Emit per-batch debug events")
    args = parser.parse_args()

    logger = setup_logging(args.log_file)

    try:
        config = CounterConfig.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    model = ModelLoader(config.models_dir).load_model_from_config(config.detector_config)

    def on_count_changed(count: AggregateCount) -> None:
        logger.info(f"Count: {count}")

    service = PeopleCounterService(
        config=config,
        detector=YoloPersonDetector(model),
        on_count_changed=on_count_changed,
    )
    service.engine.set_debug_mode(args.debug)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, stopping...")
        service.stop()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    final = service.run()
    logger.info(f"Final count: {final}")


if __name__ == "__main__":
    main()
