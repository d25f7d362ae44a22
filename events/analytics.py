"""
Chart-ready aggregation of already-fetched rows.

Everything here works on plain values (strings, datetimes, dicts) so the
arithmetic can be checked without a database. Datetimes are expected to be
converted to the display timezone by the caller.
"""
import math
from collections import Counter
from typing import Dict, Iterable, List, Optional

TITLE_PREVIEW_LENGTH = 20
ATTENDANCE_CHART_LIMIT = 10
TOP_EVENTS_LIMIT = 5
TREND_DAYS_SHOWN = 30


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def event_type_distribution(event_types: Iterable[str]) -> List[Dict]:
    """Count events per type, in order of first appearance."""
    counts = Counter(event_types)
    return [{'name': event_type, 'value': count} for event_type, count in counts.items()]


def monthly_event_counts(created_dates) -> List[Dict]:
    """Bucket creation timestamps by calendar month, oldest month first."""
    counts = Counter((value.year, value.month) for value in created_dates)
    buckets = []
    for year, month in sorted(counts):
        label = f"{_month_abbr(month)} {year}"
        buckets.append({'month': label, 'events': counts[(year, month)]})
    return buckets


def daily_registration_counts(registration_dates, days_shown: int = TREND_DAYS_SHOWN) -> List[Dict]:
    """Bucket registration timestamps by day and keep the most recent ``days_shown`` days that have any."""
    counts = Counter(value.date() for value in registration_dates)
    days = sorted(counts)[-days_shown:] if days_shown else []
    return [
        {'date': f"{_month_abbr(day.month)} {day.day}", 'registrations': counts[day]}
        for day in days
    ]


def preview_title(title: Optional[str]) -> str:
    if not title:
        return "Unknown"
    return title[:TITLE_PREVIEW_LENGTH] + "..."


def attendance_rates(summaries: Iterable[Dict]) -> List[Dict]:
    """``summaries`` need ``title`` and ``attendance_percentage``; order is kept."""
    return [
        {
            'name': preview_title(item.get('title')),
            'attendance': round_half_up(item.get('attendance_percentage') or 0),
        }
        for item in summaries
    ]


def summary_cards(monthly_events, registration_trends, rates, top_events) -> Dict:
    total_events = sum(item['events'] for item in monthly_events)
    total_registrations = sum(item['registrations'] for item in registration_trends)

    if rates:
        avg_attendance = round_half_up(sum(item['attendance'] for item in rates) / len(rates))
    else:
        avg_attendance = 0

    if top_events:
        ratings = [item.get('avg_rating') or 0 for item in top_events]
        avg_rating = round_half_up(sum(ratings) / len(ratings) * 10) / 10
    else:
        avg_rating = 0.0

    return {
        'total_events': total_events,
        'total_registrations': total_registrations,
        'avg_attendance': avg_attendance,
        'avg_rating': avg_rating,
    }


_MONTHS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')


def _month_abbr(month: int) -> str:
    # strftime('%b') follows the process locale
    return _MONTHS[month - 1]
