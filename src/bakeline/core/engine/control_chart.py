"""Shewhart individuals control chart with 3-sigma limits.

Given a time-ordered series of durations:
- center line = mean
- sigma = sample standard deviation (n - 1 denominator; 1 when n = 1)
- UCL = mean + 3 sigma
- LCL = max(mean - 3 sigma, 0), since durations cannot be negative

A point is out of control when it lies strictly outside [LCL, UCL]. No
run rules or smoothing are applied.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from bakeline.core.engine.metrics import MetricPoint

SIGMA_MULTIPLIER = 3.0


@dataclass(frozen=True)
class ChartLimits:
    """Center line and control limits of a chart.

    Attributes:
        center_line: Mean of the series
        ucl: Upper Control Limit
        lcl: Lower Control Limit, clamped at zero
        std_dev: Sample standard deviation
    """

    center_line: float
    ucl: float
    lcl: float
    std_dev: float

    def is_out_of_control(self, value: float) -> bool:
        return value > self.ucl or value < self.lcl


@dataclass(frozen=True)
class ChartPoint:
    point: MetricPoint
    out_of_control: bool


@dataclass(frozen=True)
class ControlChart:
    """Result of a control chart computation.

    Limit fields are None when the series is empty.
    """

    count: int
    center_line: float | None = None
    ucl: float | None = None
    lcl: float | None = None
    std_dev: float | None = None
    points: list[ChartPoint] = field(default_factory=list)

    @property
    def out_of_control_count(self) -> int:
        return sum(1 for p in self.points if p.out_of_control)


def calculate_limits(values: Sequence[float]) -> ChartLimits:
    """Compute 3-sigma individuals limits for a non-empty series.

    Args:
        values: Observations in time order

    Returns:
        ChartLimits for the series

    Raises:
        ValueError: If values is empty

    Examples:
        >>> calculate_limits([10, 10, 10])
        ChartLimits(center_line=10.0, ucl=10.0, lcl=10.0, std_dev=0.0)
    """
    if len(values) == 0:
        raise ValueError("Cannot compute control limits for an empty series")

    arr = np.asarray(values, dtype=np.float64)
    n = arr.size
    mean = float(np.mean(arr))
    squared = float(np.sum((arr - mean) ** 2))
    variance = squared / (n - 1 if n > 1 else 1)
    std_dev = math.sqrt(variance)

    ucl = mean + SIGMA_MULTIPLIER * std_dev
    lcl = max(mean - SIGMA_MULTIPLIER * std_dev, 0.0)
    return ChartLimits(center_line=mean, ucl=ucl, lcl=lcl, std_dev=std_dev)


def compute_control_chart(points: Sequence[MetricPoint]) -> ControlChart:
    """Build a control chart over ordered metric points.

    Args:
        points: Observations in record creation order

    Returns:
        ControlChart with every point flagged against the limits
    """
    if not points:
        return ControlChart(count=0)

    limits = calculate_limits([p.value for p in points])
    return ControlChart(
        count=len(points),
        center_line=limits.center_line,
        ucl=limits.ucl,
        lcl=limits.lcl,
        std_dev=limits.std_dev,
        points=[
            ChartPoint(point=p, out_of_control=limits.is_out_of_control(p.value))
            for p in points
        ],
    )
