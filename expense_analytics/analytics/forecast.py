"""
Forecast Engine

Ordinary least-squares line through the daily totals, extrapolated a few
steps past the end of the series.

x is the 0-based position of each point in the ordered series, not its
calendar date. Gaps between days are ignored.

Predictions are not floored at zero. A falling trend can and will
produce negative values.
"""

from decimal import Decimal
from typing import Optional, Sequence

from expense_analytics.models.expense import ForecastPoint, TimeSeriesPoint


def fit_trend(series: Sequence[TimeSeriesPoint]) -> Optional[tuple[Decimal, Decimal]]:
    """
    Fit amount = slope * index + intercept.

    Returns:
        (slope, intercept), or None for fewer than two points
    """
    n = len(series)
    if n < 2:
        return None

    sum_x = Decimal(0)
    sum_y = Decimal(0)
    sum_xy = Decimal(0)
    sum_xx = Decimal(0)
    for i, point in enumerate(series):
        x = Decimal(i)
        y = Decimal(point.amount)
        sum_x += x
        sum_y += y
        sum_xy += x * y
        sum_xx += x * x

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        # Cannot happen for a dense 0..n-1 range; flat line at the mean.
        return Decimal(0), sum_y / n

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def predict(series: Sequence[TimeSeriesPoint], horizon: int) -> list[Decimal]:
    """
    Predict the next `horizon` amounts.

    Returns an empty list when the series has fewer than two points,
    otherwise exactly `horizon` values.
    """
    if isinstance(horizon, bool) or not isinstance(horizon, int) or horizon < 1:
        raise ValueError(f"horizon must be a positive integer, got {horizon!r}")

    trend = fit_trend(series)
    if trend is None:
        return []

    slope, intercept = trend
    n = len(series)
    return [slope * (n + i - 1) + intercept for i in range(1, horizon + 1)]


def forecast_points(series: Sequence[TimeSeriesPoint], horizon: int) -> list[ForecastPoint]:
    """Same as predict(), tagged with the step past the series end."""
    return [
        ForecastPoint(index=step, amount=amount)
        for step, amount in enumerate(predict(series, horizon), start=1)
    ]
