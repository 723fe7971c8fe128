"""Statistics over cumulative country series.

Pure functions: no I/O and no state kept between calls. Inputs are expected
to be validated already (see services.dates.parse_range).
"""

import math
from collections.abc import Mapping, Sequence
from datetime import date

from services.dates import iter_dates, previous_day
from services.models import CountrySeries


def daily_delta(dates: Mapping[date, int], day: date) -> int:
    """New cases on day, clamped at zero when upstream revised a total downwards."""
    current = dates.get(day)
    if current is None:
        return 0
    previous = dates.get(previous_day(day))
    if previous is None:
        return current
    return max(0, current - previous)


def ranged_delta(
    series_list: Sequence[CountrySeries], start: date, end: date
) -> dict[str, dict[date, int]]:
    """Daily deltas for every country and every day in [start, end]."""
    result: dict[str, dict[date, int]] = {series.country: {} for series in series_list}
    for day in iter_dates(start, end):
        for series in series_list:
            result[series.country][day] = daily_delta(series.dates, day)
    return result


def prevalence_ratio(series: CountrySeries, day: date) -> float:
    """Cumulative count on day over population, NaN when undefined."""
    count = series.dates.get(day)
    if count is None or series.population <= 0:
        return math.nan
    return count / series.population


def ranged_ratio_argmax(
    series_list: Sequence[CountrySeries], start: date, end: date
) -> dict[date, str]:
    """Country with the highest cumulative/population ratio on each day.

    Uses the raw cumulative value, not the daily delta. Ties keep the first
    country in series_list order; days where no ratio exceeds 0 are omitted.
    """
    result: dict[date, str] = {}
    for day in iter_dates(start, end):
        best_ratio = 0.0
        best_country = None
        for series in series_list:
            ratio = prevalence_ratio(series, day)
            # NaN compares False, so undefined ratios never win
            if ratio > best_ratio:
                best_ratio = ratio
                best_country = series.country
        if best_country is not None:
            result[day] = best_country
    return result
