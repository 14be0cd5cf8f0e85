"""Validated analytics query filters.

Every filter is checked here, before records are fetched or any
statistic is computed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from bakeline.core.engine.metrics import MetricKind, parse_metric
from bakeline.core.exceptions import InvalidArgumentError

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_filter_date(value: str | date | None, name: str) -> date | None:
    """Parse a ``YYYY-MM-DD`` filter date.

    Raises:
        InvalidArgumentError: If the value is not a valid calendar date
    """
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    text = value.strip()
    if not _DATE_PATTERN.match(text):
        raise InvalidArgumentError(f"{name} must be YYYY-MM-DD, got {value!r}")
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise InvalidArgumentError(f"{name} is not a valid date: {value!r}") from None


@dataclass(frozen=True)
class RecordQuery:
    """Filter for analytics reads.

    Attributes:
        panel: Restrict to one station (any value; unknown panels match nothing)
        date_from: Inclusive lower bound on the shift date
        date_to: Inclusive upper bound on the shift date
        metric: Metric analysed by the control chart
    """

    panel: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    metric: MetricKind = MetricKind.OVERALL

    @classmethod
    def parse(
        cls,
        panel: str | None = None,
        date_from: str | date | None = None,
        date_to: str | date | None = None,
        metric: str | MetricKind | None = None,
    ) -> RecordQuery:
        """Build a query from raw boundary values.

        Raises:
            InvalidArgumentError: On an unknown metric, a malformed date,
                or a date range that ends before it starts
        """
        start = parse_filter_date(date_from, "date_from")
        end = parse_filter_date(date_to, "date_to")
        if start is not None and end is not None and end < start:
            raise InvalidArgumentError("date_to must not be before date_from")
        return cls(
            panel=panel or None,
            date_from=start,
            date_to=end,
            metric=parse_metric(metric),
        )
