"""
Count Visualizer Module
=======================

Pure visualization layer for the crossing line, tracked people and counts.

Design:
- Stateless rendering (pure functions over snapshots)
- No business logic, never touches the engine
- Configurable styles
- Uses supervision drawing utilities (cv2 for the crossing marker)

Dependencies:
- supervision (draw utilities, Color, Point, Rect)
- opencv-python (circle marker)
- numpy (arrays)
"""

from typing import Optional, Sequence

import cv2
import numpy as np
import supervision as sv

from peoplecount_zone.analytics.counter import AggregateCount, CrossingDirection
from peoplecount_zone.analytics.tracker import PersonSnapshot
from peoplecount_zone.geometry.intersection import SegmentIntersector
from peoplecount_zone.geometry.shapes import CrossingLine


class CountVisualizer:
    """
    Stateless visualizer for counting overlays.

    Usage:
        visualizer = CountVisualizer()
        frame = visualizer.render(
            frame, engine.tracked_people(), engine.crossing_line, engine.count, now_ms
        )
    """

    def __init__(
        self,
        line_color: sv.Color = sv.Color(r=255, g=0, b=0),
        person_color: sv.Color = sv.Color(r=0, g=255, b=0),
        stale_color: sv.Color = sv.Color(r=128, g=0, b=0),
        trail_color: sv.Color = sv.Color(r=0, g=255, b=255),
        left_to_right_color: sv.Color = sv.Color(r=0, g=255, b=0),
        right_to_left_color: sv.Color = sv.Color(r=255, g=0, b=0),
        marker_color: sv.Color = sv.Color(r=255, g=255, b=0),
        text_color: sv.Color = sv.Color(r=255, g=255, b=255),
        text_background_color: sv.Color = sv.Color(r=0, g=0, b=0),
        thickness: int = 2,
        text_scale: float = 0.5,
        text_thickness: int = 1,
        text_padding: int = 4,
    ):
        """
        Initialize visualizer with style configuration.

        Args:
            line_color: Crossing line color
            person_color: Box color for people seen in the current batch
            stale_color: Box color for people not seen in the current batch
            trail_color: Position history trail color
            left_to_right_color: Box/trail color after a left-to-right crossing
            right_to_left_color: Box/trail color after a right-to-left crossing
            marker_color: Crossing point marker color
            text_color: Label text color
            text_background_color: Label background color
            thickness: Line thickness
            text_scale: Label text scale
            text_thickness: Label text thickness
            text_padding: Label background padding
        """
        self.line_color = line_color
        self.person_color = person_color
        self.stale_color = stale_color
        self.trail_color = trail_color
        self.left_to_right_color = left_to_right_color
        self.right_to_left_color = right_to_left_color
        self.marker_color = marker_color
        self.text_color = text_color
        self.text_background_color = text_background_color
        self.thickness = thickness
        self.text_scale = text_scale
        self.text_thickness = text_thickness
        self.text_padding = text_padding

    def _text(self, frame: np.ndarray, text: str, x: float, y: float) -> np.ndarray:
        return sv.draw_text(
            scene=frame,
            text=text,
            text_anchor=sv.Point(x=int(x), y=int(y)),
            text_color=self.text_color,
            text_scale=self.text_scale,
            text_thickness=self.text_thickness,
            text_padding=self.text_padding,
            background_color=self.text_background_color,
        )

    def _person_color(self, person: PersonSnapshot, now_ms: Optional[float]) -> sv.Color:
        if person.crossing_direction == CrossingDirection.LEFT_TO_RIGHT:
            return self.left_to_right_color
        if person.crossing_direction == CrossingDirection.RIGHT_TO_LEFT:
            return self.right_to_left_color
        if now_ms is not None and person.last_seen_ms < now_ms:
            return self.stale_color
        return self.person_color

    def draw_crossing_line(
        self,
        frame: np.ndarray,
        line: CrossingLine,
        count: AggregateCount | None = None,
    ) -> np.ndarray:
        """
        Draw the crossing line with "L"/"R" side labels.

        Args:
            frame: Video frame to draw on
            line: Crossing line geometry
            count: Optional count to display at the line midpoint

        Returns:
            Frame with line drawn
        """
        start_point = sv.Point(x=int(line.start[0]), y=int(line.start[1]))
        end_point = sv.Point(x=int(line.end[0]), y=int(line.end[1]))

        frame = sv.draw_line(
            scene=frame,
            start=start_point,
            end=end_point,
            color=self.line_color,
            thickness=self.thickness,
        )

        mid_x, mid_y = line.midpoint
        frame = self._text(frame, "L", max(line.start[0] - 20, 10), mid_y)
        frame = self._text(frame, "R", line.end[0] + 10, mid_y)

        if count is not None:
            frame = self._text(frame, str(count), mid_x, mid_y - 20)

        return frame

    def draw_people(
        self,
        frame: np.ndarray,
        people: Sequence[PersonSnapshot],
        now_ms: float | None = None,
    ) -> np.ndarray:
        """
        Draw boxes, centroids and labels for tracked people.

        Args:
            frame: Video frame to draw on
            people: Engine snapshots
            now_ms: Timestamp of the current batch; people last seen earlier
                are drawn with the stale color

        Returns:
            Annotated frame
        """
        for person in people:
            color = self._person_color(person, now_ms)
            box = person.bbox

            frame = sv.draw_rectangle(
                scene=frame,
                rect=sv.Rect(x=int(box.x), y=int(box.y), width=int(box.width), height=int(box.height)),
                color=color,
                thickness=self.thickness,
            )
            frame = sv.draw_filled_rectangle(
                scene=frame,
                rect=sv.Rect(x=int(person.last_center.x) - 3, y=int(person.last_center.y) - 3, width=6, height=6),
                color=self.text_color,
            )

            label = f"ID: {person.id[:8]} {round(person.confidence * 100)}%"
            frame = self._text(frame, label, box.x + box.width / 2, max(box.y - 12, 12))

        return frame

    def draw_trails(
        self,
        frame: np.ndarray,
        people: Sequence[PersonSnapshot],
    ) -> np.ndarray:
        """Draw each person's position history as a polyline."""
        for person in people:
            history = person.position_history
            if person.has_crossed:
                color = self._person_color(person, None)
            else:
                color = self.trail_color

            for previous, current in zip(history, history[1:]):
                frame = sv.draw_line(
                    scene=frame,
                    start=sv.Point(x=int(previous.x), y=int(previous.y)),
                    end=sv.Point(x=int(current.x), y=int(current.y)),
                    color=color,
                    thickness=1,
                )

        return frame

    def draw_crossing_points(
        self,
        frame: np.ndarray,
        people: Sequence[PersonSnapshot],
        line: CrossingLine,
    ) -> np.ndarray:
        """Mark where crossed people met the line (first hit in their history)."""
        for person in people:
            if not person.has_crossed:
                continue

            history = person.position_history
            for previous, current in zip(history, history[1:]):
                point = SegmentIntersector.intersection_point(
                    (previous.x, previous.y), (current.x, current.y), line
                )
                if point is not None:
                    cv2.circle(
                        frame,
                        (int(point[0]), int(point[1])),
                        5,
                        self.marker_color.as_bgr(),
                        -1,
                    )
                    break

        return frame

    def render(
        self,
        frame: np.ndarray,
        people: Sequence[PersonSnapshot],
        line: CrossingLine | None,
        count: AggregateCount | None = None,
        now_ms: float | None = None,
    ) -> np.ndarray:
        """
        Full overlay: trails, people, crossing line, crossing points.

        Returns:
            Annotated copy of the frame
        """
        annotated = frame.copy()
        annotated = self.draw_trails(annotated, people)
        annotated = self.draw_people(annotated, people, now_ms)

        if line is not None:
            annotated = self.draw_crossing_line(annotated, line, count)
            annotated = self.draw_crossing_points(annotated, people, line)
        elif count is not None:
            annotated = self._text(annotated, str(count), 120, 20)

        return annotated
