"""
Server side line charts rendered as PNG with Pillow.

A chart has one or two series: the first is scaled on the left axis, the
second (if any) on its own right axis.
"""
import io
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont

WIDTH = 1000
HEIGHT = 700

BACKGROUND = (15, 23, 42, 255)
GRID = (51, 65, 85, 255)
AXIS_TEXT = (148, 163, 184, 255)
TITLE_TEXT = (241, 245, 249, 255)

MARGIN_LEFT = 90
MARGIN_RIGHT = 90
MARGIN_TOP = 80
MARGIN_BOTTOM = 70
GRID_LINES = 5
MAX_X_LABELS = 8


@dataclass
class ChartSeries:
    label: str
    color: str
    values: List[float] = field(default_factory=list)
    # Fixed axis bounds; None means derived from the data
    min_value: Optional[float] = None
    max_value: Optional[float] = None


def _axis_bounds(series: ChartSeries) -> Tuple[float, float]:
    finite = [v for v in series.values if math.isfinite(v)]
    low = series.min_value if series.min_value is not None else (min(finite) if finite else 0.0)
    high = series.max_value if series.max_value is not None else (max(finite) if finite else 1.0)
    if high <= low:
        low, high = low - 1.0, high + 1.0
    pad_low = 0.0 if series.min_value is not None else (high - low) * 0.05
    pad_high = 0.0 if series.max_value is not None else (high - low) * 0.05
    return low - pad_low, high + pad_high


def _tick_text(value: float, span: float) -> str:
    if span >= 50:
        return f"{value:.0f}"
    if span >= 5:
        return f"{value:.1f}"
    return f"{value:.2f}"


def _encode(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def render_line_chart(
    title: str,
    labels: Sequence[str],
    series: Sequence[ChartSeries],
    width: int = WIDTH,
    height: int = HEIGHT,
) -> bytes:
    """Render a line chart and return the PNG bytes."""
    if not 1 <= len(series) <= 2:
        raise ValueError(f"A chart takes one or two series, got {len(series)}")

    image = Image.new("RGBA", (width, height), BACKGROUND)
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()

    draw.text((MARGIN_LEFT, MARGIN_TOP // 3), title, fill=TITLE_TEXT, font=font)

    plot_left, plot_top = MARGIN_LEFT, MARGIN_TOP
    plot_right, plot_bottom = width - MARGIN_RIGHT, height - MARGIN_BOTTOM
    plot_width = plot_right - plot_left
    plot_height = plot_bottom - plot_top

    # Horizontal grid
    for i in range(GRID_LINES + 1):
        y = plot_top + plot_height * i / GRID_LINES
        draw.line([(plot_left, y), (plot_right, y)], fill=GRID, width=1)
    draw.rectangle([plot_left, plot_top, plot_right, plot_bottom], outline=GRID, width=1)

    point_count = len(labels)
    if point_count == 0 or all(not s.values for s in series):
        message = "No data"
        text_width = draw.textlength(message, font=font)
        draw.text(
            (plot_left + (plot_width - text_width) / 2, plot_top + plot_height / 2),
            message, fill=AXIS_TEXT, font=font,
        )
        return _encode(image)

    def x_at(index: int) -> float:
        if point_count == 1:
            return plot_left + plot_width / 2
        return plot_left + plot_width * index / (point_count - 1)

    # X labels
    step = max(1, math.ceil(point_count / MAX_X_LABELS))
    for index in range(0, point_count, step):
        text = labels[index]
        text_width = draw.textlength(text, font=font)
        draw.text((x_at(index) - text_width / 2, plot_bottom + 10), text, fill=AXIS_TEXT, font=font)

    for axis, s in enumerate(series):
        low, high = _axis_bounds(s)
        span = high - low

        def y_at(value: float) -> float:
            return plot_bottom - (value - low) / span * plot_height

        # Axis ticks, left for the first series and right for the second
        for i in range(GRID_LINES + 1):
            value = low + span * i / GRID_LINES
            text = _tick_text(value, span)
            y = y_at(value) - 6
            if axis == 0:
                x = plot_left - 10 - draw.textlength(text, font=font)
            else:
                x = plot_right + 10
            draw.text((x, y), text, fill=ImageColor.getrgb(s.color), font=font)

        # Line segments, broken at non-finite values
        segment: List[Tuple[float, float]] = []
        for index, value in enumerate(s.values[:point_count]):
            if math.isfinite(value):
                segment.append((x_at(index), y_at(value)))
                continue
            _draw_segment(draw, segment, s.color)
            segment = []
        _draw_segment(draw, segment, s.color)

    # Legend
    legend_x = plot_right
    for s in reversed(series):
        text_width = draw.textlength(s.label, font=font)
        legend_x -= text_width + 30
        draw.rectangle([legend_x, MARGIN_TOP // 3, legend_x + 12, MARGIN_TOP // 3 + 12], fill=s.color)
        draw.text((legend_x + 18, MARGIN_TOP // 3), s.label, fill=TITLE_TEXT, font=font)

    return _encode(image)


def _draw_segment(draw: ImageDraw.ImageDraw, points: List[Tuple[float, float]], color: str):
    if len(points) == 1:
        x, y = points[0]
        draw.ellipse([x - 3, y - 3, x + 3, y + 3], fill=color)
    elif points:
        draw.line(points, fill=color, width=3, joint="curve")
