"""Layout and rendering of a sensor reading series as a line graph."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.patches import Circle

from airquality.analysis import SeriesSummary, extract_readings, summarize

LEFT_MARGIN = 60
RIGHT_MARGIN = 50
TOP_MARGIN = 50
BOTTOM_MARGIN = 200
HORIZONTAL_DIVISIONS = 10
VERTICAL_DIVISIONS = 10
DATE_LABEL_OFFSET = 125
DEFAULT_WIDTH = 1000
DEFAULT_HEIGHT = 550
_DPI = 100

_GRID_COLOUR = (200 / 255, 200 / 255, 200 / 255)


@dataclass(frozen=True)
class GraphGeometry:
    """Pixel positions of every element of a graph, origin at the top left."""

    width: int
    height: int
    grid_step_y: int
    horizontal_grid: tuple[int, ...]
    scale_x: float
    scale_y: float
    y_range: float
    min_value: float
    max_value: float
    label_interval: int
    label_indices: tuple[int, ...]
    vertical_grid: tuple[float, ...]
    points: tuple[tuple[float, float], ...]
    y_labels: tuple[tuple[int, str], ...]
    min_index: int
    max_index: int

    @property
    def baseline(self) -> int:
        """Vertical position of the X axis."""
        return self.height - BOTTOM_MARGIN

    @property
    def x_axis(self) -> tuple[tuple[int, int], tuple[int, int]]:
        """End points of the X axis."""
        return (LEFT_MARGIN, self.baseline), (self.width - RIGHT_MARGIN, self.baseline)

    @property
    def y_axis(self) -> tuple[tuple[int, int], tuple[int, int]]:
        """End points of the Y axis."""
        return (LEFT_MARGIN, self.baseline), (LEFT_MARGIN, TOP_MARGIN)


def compute_geometry(
    values: Sequence[float], width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT
) -> GraphGeometry:
    """Lay out a graph of values, ordered earliest first, on a width x height canvas.

    Raises ValueError when there are no values.
    """
    if not values:
        raise ValueError("no values to lay out")

    plot_height = height - TOP_MARGIN - BOTTOM_MARGIN
    plot_width = width - LEFT_MARGIN - RIGHT_MARGIN
    grid_step_y = int(plot_height / HORIZONTAL_DIVISIONS)
    horizontal_grid = tuple(
        TOP_MARGIN + i * grid_step_y for i in range(HORIZONTAL_DIVISIONS + 1)
    )

    max_value = max(values)
    min_value = min(values)
    y_range = max_value - min_value
    if y_range == 0:
        y_range = 1.0

    count = len(values)
    scale_x = plot_width / (count - 1) if count > 1 else 0.0
    scale_y = plot_height / y_range
    baseline = height - BOTTOM_MARGIN

    def x_at(index: int) -> float:
        return LEFT_MARGIN + index * scale_x

    points = tuple(
        (x_at(index), baseline - (value - min_value) * scale_y)
        for index, value in enumerate(values)
    )

    label_interval = count // VERTICAL_DIVISIONS + 1
    label_indices = tuple(range(0, count, label_interval))
    vertical_grid = tuple(x_at(index) for index in label_indices)

    y_labels = tuple(
        (y, f"{max_value - i * (y_range / HORIZONTAL_DIVISIONS):.2f}")
        for i, y in enumerate(horizontal_grid)
    )

    indices = range(count)
    min_index = min(indices, key=values.__getitem__)
    max_index = max(indices, key=values.__getitem__)

    return GraphGeometry(
        width=width,
        height=height,
        grid_step_y=grid_step_y,
        horizontal_grid=horizontal_grid,
        scale_x=scale_x,
        scale_y=scale_y,
        y_range=y_range,
        min_value=min_value,
        max_value=max_value,
        label_interval=label_interval,
        label_indices=label_indices,
        vertical_grid=vertical_grid,
        points=points,
        y_labels=y_labels,
        min_index=min_index,
        max_index=max_index,
    )


def _new_canvas(width: int, height: int) -> tuple[Figure, Any]:
    figure = Figure(figsize=(width / _DPI, height / _DPI), dpi=_DPI)
    FigureCanvasAgg(figure)
    axes = figure.add_axes((0, 0, 1, 1))
    axes.set_xlim(0, width)
    axes.set_ylim(height, 0)
    axes.set_axis_off()
    return figure, axes


def _draw_horizontal_grid(axes: Any, width: int, height: int) -> None:
    step = int((height - TOP_MARGIN - BOTTOM_MARGIN) / HORIZONTAL_DIVISIONS)
    for i in range(HORIZONTAL_DIVISIONS + 1):
        y = TOP_MARGIN + i * step
        axes.plot(
            [LEFT_MARGIN, width - RIGHT_MARGIN],
            [y, y],
            color=_GRID_COLOUR,
            linestyle=":",
            linewidth=1,
        )


def _highlight(axes: Any, point: tuple[float, float], colour: str, label: str) -> None:
    x, y = point
    axes.add_patch(Circle((x, y), 5, fill=False, edgecolor=colour, linewidth=2))
    axes.text(x + 5, y - 10, label, fontsize=10, ha="left", va="top")


def render_graph(
    sensors: Iterable[Mapping[str, Any]],
    path: str | Path,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
) -> SeriesSummary | None:
    """Draw the readings of the sensors as a graph image written to path.

    Returns the summary of the plotted series, or None when no sensor holds a
    reading; the image then shows only the empty grid.
    """
    readings = extract_readings(sensors)
    figure, axes = _new_canvas(width, height)
    _draw_horizontal_grid(axes, width, height)

    if not readings:
        figure.savefig(path)
        return None

    values = [reading.value for reading in readings]
    geometry = compute_geometry(values, width, height)
    summary = summarize(readings)

    for x in geometry.vertical_grid:
        axes.plot(
            [x, x],
            [TOP_MARGIN, geometry.baseline],
            color=_GRID_COLOUR,
            linestyle=":",
            linewidth=1,
        )

    for start, end in (geometry.x_axis, geometry.y_axis):
        axes.plot([start[0], end[0]], [start[1], end[1]], color="black", linewidth=1)

    xs = [x for x, _ in geometry.points]
    ys = [y for _, y in geometry.points]
    axes.plot(xs, ys, color="black", linewidth=1)
    for point in geometry.points:
        axes.add_patch(Circle(point, 3, facecolor="white", edgecolor="black", linewidth=1))

    for y, text in geometry.y_labels:
        axes.text(5, y - 7, text, fontsize=8, ha="left", va="top")

    for index, x in zip(geometry.label_indices, geometry.vertical_grid):
        axes.text(
            x,
            geometry.baseline + DATE_LABEL_OFFSET,
            readings[index].date,
            fontsize=8,
            rotation=90,
            rotation_mode="anchor",
            ha="left",
            va="top",
        )

    current_text, min_text, max_text, average_text, trend_text = summary.labels()
    _highlight(axes, geometry.points[geometry.min_index], "blue", min_text)
    _highlight(axes, geometry.points[geometry.max_index], "red", max_text)

    footer = (
        (current_text, LEFT_MARGIN, height - 40),
        (min_text, LEFT_MARGIN + 175, height - 40),
        (max_text, LEFT_MARGIN + 425, height - 40),
        (average_text, LEFT_MARGIN, height - 20),
        (trend_text, LEFT_MARGIN + 175, height - 20),
    )
    for text, x, y in footer:
        axes.text(x, y, text, fontsize=10, fontweight="bold", ha="left", va="top")

    figure.savefig(path)
    return summary