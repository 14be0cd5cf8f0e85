"""SPC analytics engines: control charts and summary metrics."""

from bakeline.core.engine.control_chart import (
    ChartLimits,
    ChartPoint,
    ControlChart,
    calculate_limits,
    compute_control_chart,
)
from bakeline.core.engine.metrics import (
    DEFAULT_METRIC,
    MetricKind,
    MetricPoint,
    build_metric_points,
    coerce_duration,
    metric_value,
    parse_metric,
)
from bakeline.core.engine.query import RecordQuery, parse_filter_date
from bakeline.core.engine.summary import (
    MetricSummary,
    SummaryMetrics,
    compute_summary,
    summarize_values,
)

__all__ = [
    "ChartLimits",
    "ChartPoint",
    "ControlChart",
    "DEFAULT_METRIC",
    "MetricKind",
    "MetricPoint",
    "MetricSummary",
    "RecordQuery",
    "SummaryMetrics",
    "build_metric_points",
    "calculate_limits",
    "coerce_duration",
    "compute_control_chart",
    "compute_summary",
    "metric_value",
    "parse_filter_date",
    "parse_metric",
    "summarize_values",
]
