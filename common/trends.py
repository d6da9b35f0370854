"""Compose aggregation and curve building into a chart-ready trend view."""

from datetime import datetime, timezone, tzinfo
from typing import List, Optional, Sequence, Union
from xml.sax.saxutils import escape

from .aggregation import aggregate, resolve_timezone
from .config import settings
from .curve import blood_pressure_stats, build_curve
from .logging_utils import setup_logger
from .models import CurveResult, MetricKind, Timeframe, TrendView, VitalRecord

logger = setup_logger(__name__)

EMPTY_NO_RECORDS = "no_records"
EMPTY_NO_RECORDS_FOR_TIMEFRAME = "no_records_for_timeframe"

# Stroke/fill colour pairs used by the chart screen
METRIC_GRADIENTS = {
    MetricKind.TEMPERATURE: ("#EF4444", "#F97316"),
    MetricKind.HEART_RATE: ("#EF4444", "#DC2626"),
    MetricKind.BLOOD_PRESSURE: ("#9333ea", "#ec4899"),
}


def empty_message(state: Optional[str], metric: MetricKind) -> Optional[str]:
    if state == EMPTY_NO_RECORDS:
        return "Complete your first VitalSense kiosk scan to view your health trends."
    if state == EMPTY_NO_RECORDS_FOR_TIMEFRAME:
        return f"No {metric.value} records available for the selected timeframe."
    return None


def build_trend(
    records: Sequence[VitalRecord],
    metric: Union[MetricKind, str],
    timeframe: Union[Timeframe, str],
    width: Optional[float] = None,
    height: Optional[float] = None,
    now: Optional[datetime] = None,
    tz: Union[tzinfo, str, None] = None,
) -> TrendView:
    """Build the trend view for one metric and timeframe.

    When no bucket holds a reading the labels, values and curve are left
    empty and empty_state says why, so the screen shows a "no data" message
    instead of a flat line of zeros.

    Args:
        records: Raw vitals records.
        metric: Metric to chart.
        timeframe: daily, weekly or monthly.
        width: Canvas width (defaults to settings.CHART_WIDTH).
        height: Canvas height (defaults to settings.CHART_HEIGHT).
        now: Anchor instant (defaults to the current time).
        tz: Zone for bucket boundaries (defaults to settings.LOCAL_TIMEZONE).

    Returns:
        TrendView ready for serialisation.
    """
    metric = MetricKind(metric)
    timeframe = Timeframe(timeframe)
    width = settings.CHART_WIDTH if width is None else width
    height = settings.CHART_HEIGHT if height is None else height
    if width <= 0 or height <= 0:
        raise ValueError(f"Chart dimensions must be positive, got {width}x{height}")

    zone = resolve_timezone(tz)
    now = now or datetime.now(zone)
    records = list(records)

    result = aggregate(records, metric, timeframe, now=now, tz=zone)

    view = TrendView(
        metric=metric,
        timeframe=timeframe,
        unit=metric.unit,
        width=width,
        height=height,
        record_count=len(records),
        generated_at=now if now.tzinfo else now.replace(tzinfo=zone),
    )

    if result.has_real_data:
        view.labels = result.labels
        view.values = result.values
        view.curve = build_curve(result.values, width, height, settings.CHART_MARGIN)
        view.has_real_data = True
    else:
        view.curve = CurveResult()
        view.empty_state = EMPTY_NO_RECORDS if not records else EMPTY_NO_RECORDS_FOR_TIMEFRAME
        view.empty_message = empty_message(view.empty_state, metric)
        logger.info(f"No {metric.value} data for {timeframe.value} trend ({len(records)} records)")

    if metric == MetricKind.BLOOD_PRESSURE and records:
        view.bp_stats = blood_pressure_stats(records)

    return view


def build_all_trends(
    records: Sequence[VitalRecord],
    width: Optional[float] = None,
    height: Optional[float] = None,
    now: Optional[datetime] = None,
    tz: Union[tzinfo, str, None] = None,
) -> List[TrendView]:
    """Trend views for every metric and timeframe, metric-major."""
    now = now or datetime.now(timezone.utc)
    return [
        build_trend(records, metric, timeframe, width=width, height=height, now=now, tz=tz)
        for metric in MetricKind
        for timeframe in Timeframe
    ]


def render_svg(view: TrendView) -> str:
    """Standalone SVG document for a trend view (area fill, stroke, point markers)."""
    width, height = view.width, view.height
    start, end = METRIC_GRADIENTS[view.metric]
    title = escape(f"{view.metric.value} ({view.timeframe.value})")

    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">',
        f"<title>{title}</title>",
        "<defs>",
        '<linearGradient id="fill" x1="0" y1="0" x2="0" y2="1">'
        f'<stop offset="0" stop-color="{start}" stop-opacity="0.35"/>'
        f'<stop offset="1" stop-color="{end}" stop-opacity="0.05"/>'
        "</linearGradient>",
        '<linearGradient id="stroke" x1="0" y1="0" x2="1" y2="0">'
        f'<stop offset="0" stop-color="{start}"/>'
        f'<stop offset="1" stop-color="{end}"/>'
        "</linearGradient>",
        "</defs>",
    ]

    if view.curve.path_data:
        path = view.curve.path_data
        parts.append(f'<path d="{path} L {width} {height} L 0 {height} Z" fill="url(#fill)"/>')
        parts.append(
            f'<path d="{path}" fill="none" stroke="url(#stroke)" stroke-width="3" '
            'stroke-linejoin="round" stroke-linecap="round"/>'
        )
        for point in view.curve.points:
            parts.append(
                f'<circle cx="{point.x}" cy="{point.y}" r="3.5" fill="#fff" '
                f'stroke="{start}" stroke-width="2"/>'
            )
    else:
        message = escape(view.empty_message or "No data yet")
        parts.append(
            f'<text x="{width / 2}" y="{height / 2}" text-anchor="middle">{message}</text>'
        )

    parts.append("</svg>")
    return "\n".join(parts)
