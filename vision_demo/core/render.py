"""Overlay rendering as plain draw-command lists.

Builders here never touch pixels. They return immutable commands that a
surface (see ``vision_demo.core.surface``) executes, so the geometry can be
asserted on directly. Every list starts with ``Clear``.
"""

import random
from dataclasses import dataclass
from typing import Literal, Sequence, Union

from vision_demo.core.types import BBox, ClassificationResult, DetectionResult

SOURCE_WIDTH = 800
SOURCE_HEIGHT = 600

DETECTION_CANVAS = (600, 400)
PREDICTIONS_CANVAS = (400, 300)
FEATURE_CANVAS = (200, 150)

PLACEHOLDER_BACKGROUND = '#f0f0f0'
PLACEHOLDER_TEXT = '#666666'
AXIS_COLOR = '#333333'
FALLBACK_CLASS_COLOR = '#666666'
FEATURE_POINT_COLOR = '#ff6b6b'

CLASS_COLORS = {
    'person': '#ff6b6b',
    'car': '#4ecdc4',
    'dog': '#45b7d1',
    'bicycle': '#96ceb4',
    'tree': '#feca57',
}

BOX_LINE_WIDTH = 3
LABEL_TAG_HEIGHT = 25
CHART_MARGIN = 40
BAR_GAP = 10

Align = Literal['left', 'center']


@dataclass(frozen=True)
class Clear:
    width: int
    height: int


@dataclass(frozen=True)
class FillRect:
    x: float
    y: float
    width: float
    height: float
    color: str


@dataclass(frozen=True)
class StrokeRect:
    x: float
    y: float
    width: float
    height: float
    color: str
    line_width: int = 1


@dataclass(frozen=True)
class Polyline:
    points: tuple[tuple[float, float], ...]
    color: str
    line_width: int = 1


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    color: str
    size: int = 12
    align: Align = 'left'
    rotation: float = 0.0


@dataclass(frozen=True)
class Dot:
    x: float
    y: float
    radius: float
    color: str


DrawCommand = Union[Clear, FillRect, StrokeRect, Polyline, Text, Dot]


def class_color(class_label: str) -> str:
    return CLASS_COLORS.get(class_label, FALLBACK_CLASS_COLOR)


def bar_color(index: int) -> str:
    return f'hsl({(index * 60) % 360}, 70%, 50%)'


def scale_box(bbox: BBox, width: int, height: int) -> tuple[float, float, float, float]:
    """Map an (x1, y1, x2, y2) source box to canvas (x, y, width, height)."""
    x1, y1, x2, y2 = bbox
    scale_x = width / SOURCE_WIDTH
    scale_y = height / SOURCE_HEIGHT
    return x1 * scale_x, y1 * scale_y, (x2 - x1) * scale_x, (y2 - y1) * scale_y


def _placeholder(width: int, height: int, caption: str) -> list[DrawCommand]:
    return [
        Clear(width, height),
        FillRect(0, 0, width, height, PLACEHOLDER_BACKGROUND),
        Text(width / 2, height / 2, caption, PLACEHOLDER_TEXT, size=16, align='center'),
    ]


def render_detections(
    results: Sequence[DetectionResult],
    width: int = DETECTION_CANVAS[0],
    height: int = DETECTION_CANVAS[1],
) -> list[DrawCommand]:
    commands = _placeholder(width, height, 'Detection Visualization')
    for result in results:
        x, y, box_width, box_height = scale_box(result.bbox, width, height)
        color = class_color(result.class_label)
        commands.append(StrokeRect(x, y, box_width, box_height, color, line_width=BOX_LINE_WIDTH))
        # Tag sits directly above the box; near the top edge it is clipped by the surface.
        commands.append(FillRect(x, y - LABEL_TAG_HEIGHT, box_width, LABEL_TAG_HEIGHT, color))
        commands.append(
            Text(
                x + 5,
                y - 8,
                f'{result.class_label} {round(result.confidence * 100)}%',
                '#ffffff',
                size=14,
            )
        )
    return commands


def render_predictions_chart(
    results: Sequence[ClassificationResult],
    width: int = PREDICTIONS_CANVAS[0],
    height: int = PREDICTIONS_CANVAS[1],
) -> list[DrawCommand]:
    chart_width = width - 2 * CHART_MARGIN
    chart_height = height - 2 * CHART_MARGIN
    baseline = CHART_MARGIN + chart_height
    commands: list[DrawCommand] = [
        Clear(width, height),
        Polyline(
            (
                (CHART_MARGIN, CHART_MARGIN),
                (CHART_MARGIN, baseline),
                (CHART_MARGIN + chart_width, baseline),
            ),
            AXIS_COLOR,
            line_width=2,
        ),
    ]
    if not results:
        return commands

    column_width = chart_width / len(results)
    bar_width = max(0.0, column_width - 2 * BAR_GAP)
    for index, result in enumerate(results):
        bar_height = result.confidence * chart_height
        x = CHART_MARGIN + index * column_width + BAR_GAP
        y = baseline - bar_height
        center = x + bar_width / 2
        commands.append(FillRect(x, y, bar_width, bar_height, bar_color(index)))
        commands.append(Text(center, baseline + 15, result.class_label, AXIS_COLOR, align='center', rotation=45.0))
        commands.append(Text(center, y - 5, f'{round(result.confidence * 100)}%', AXIS_COLOR, align='center'))
    return commands


def render_feature_points(
    rng: random.Random | None = None,
    count: int = 20,
    width: int = FEATURE_CANVAS[0],
    height: int = FEATURE_CANVAS[1],
) -> list[DrawCommand]:
    rng = rng or random.Random()
    commands: list[DrawCommand] = [Clear(width, height), FillRect(0, 0, width, height, PLACEHOLDER_BACKGROUND)]
    for _ in range(count):
        commands.append(Dot(rng.random() * width, rng.random() * height, 2, FEATURE_POINT_COLOR))
    return commands
