"""Turn bucket averages into a smooth chart path and summary statistics."""

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .models import BloodPressureStats, ChartPoint, CurveResult, CurveStats, VitalRecord

DEFAULT_MARGIN = 8.0

Segment = Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]


def _format(number: float) -> str:
    # Integral coordinates print without a trailing ".0"
    number = float(number)
    return str(int(number)) if number.is_integer() else repr(number)


def scale_points(
    values: Sequence[float],
    width: float,
    height: float,
    margin: float = DEFAULT_MARGIN,
) -> List[ChartPoint]:
    """Map values to evenly spaced screen coordinates (y grows downward).

    A flat series is drawn along the bottom edge rather than dividing by zero.
    """
    if len(values) == 0:
        return []

    data = np.asarray(values, dtype=float)
    n = len(data)
    min_v = data.min()
    value_range = (data.max() - min_v) or 1.0

    xs = np.arange(n) * (width / (n - 1)) if n > 1 else np.zeros(1)
    ys = height - ((data - min_v) / value_range) * (height - margin)

    return [
        ChartPoint(x=float(x), y=float(y), value=float(v))
        for x, y, v in zip(xs, ys, data)
    ]


def bezier_segments(points: Sequence[ChartPoint]) -> List[Segment]:
    """Catmull-Rom spline through the points, as cubic Bezier segments.

    Each segment is (start, control1, control2, end). Consecutive segments
    share endpoints and every end is one of the input points, so the curve
    passes through the data exactly. The first and last points reuse
    themselves as the missing neighbour.
    """
    coords = np.array([[p.x, p.y] for p in points], dtype=float)
    segments = []
    for i in range(len(coords) - 1):
        p0 = coords[i - 1] if i > 0 else coords[i]
        p1 = coords[i]
        p2 = coords[i + 1]
        p3 = coords[i + 2] if i + 2 < len(coords) else p2

        cp1 = p1 + (p2 - p0) / 6
        cp2 = p2 - (p3 - p1) / 6
        segments.append((p1, cp1, cp2, p2))
    return segments


def evaluate_segment(segment: Segment, t: float) -> np.ndarray:
    """Point on a cubic Bezier segment at parameter t in [0, 1]."""
    start, cp1, cp2, end = segment
    u = 1 - t
    return (u ** 3) * start + 3 * (u ** 2) * t * cp1 + 3 * u * (t ** 2) * cp2 + (t ** 3) * end


def catmull_rom_to_bezier(points: Sequence[ChartPoint]) -> str:
    """SVG path data for the smooth curve; '' for no points, a lone move-to for one."""
    if not points:
        return ""

    path = f"M {_format(points[0].x)} {_format(points[0].y)}"
    for _, cp1, cp2, end in bezier_segments(points):
        path += (
            f" C {_format(cp1[0])} {_format(cp1[1])},"
            f" {_format(cp2[0])} {_format(cp2[1])},"
            f" {_format(end[0])} {_format(end[1])}"
        )
    return path


def curve_stats(values: Sequence[float]) -> Optional[CurveStats]:
    if len(values) == 0:
        return None

    data = np.asarray(values, dtype=float)
    max_v = float(data.max())
    min_v = float(data.min())
    return CurveStats(
        average=round(float(data.mean()), 2),
        max=round(max_v, 2),
        min=round(min_v, 2),
        y_max_label=round(max_v, 1),
        y_mid_label=round((max_v + min_v) / 2, 1),
        y_min_label=round(min_v, 1),
    )


def build_curve(
    values: Sequence[float],
    width: float,
    height: float,
    margin: float = DEFAULT_MARGIN,
) -> CurveResult:
    """Build chart points, path data and stats for a value series.

    Args:
        values: Bucket averages, oldest first.
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        margin: Top inset so the highest point is not clipped.

    Returns:
        CurveResult. Empty input gives an empty result (is_empty) with no
        stats; a single value gives one point at x=0 and a move-to path.
    """
    points = scale_points(values, width, height, margin)
    return CurveResult(
        points=points,
        path_data=catmull_rom_to_bezier(points),
        stats=curve_stats(values),
    )


def blood_pressure_stats(records: Iterable[VitalRecord]) -> Optional[BloodPressureStats]:
    """Highest/lowest systolic and diastolic across raw readings.

    Uses every finite reading rather than bucket averages so peaks are not
    smoothed away. None when no record has a systolic value.
    """
    records = list(records)
    systolic = [r.systolic for r in records if r.systolic is not None]
    diastolic = [r.diastolic for r in records if r.diastolic is not None]

    if not systolic:
        return None

    return BloodPressureStats(
        systolic_max=max(systolic),
        systolic_min=min(systolic),
        diastolic_max=max(diastolic) if diastolic else None,
        diastolic_min=min(diastolic) if diastolic else None,
    )
