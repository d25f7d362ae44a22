from datetime import datetime, timedelta

from events import analytics


def test_event_type_distribution_keeps_first_seen_order():
    result = analytics.event_type_distribution(['workshop', 'seminar', 'workshop', 'fest'])

    assert result == [
        {'name': 'workshop', 'value': 2},
        {'name': 'seminar', 'value': 1},
        {'name': 'fest', 'value': 1},
    ]


def test_event_type_distribution_empty():
    assert analytics.event_type_distribution([]) == []


def test_monthly_event_counts_are_chronological_across_years():
    dates = [
        datetime(2025, 3, 2, 9, 0),
        datetime(2024, 12, 30, 18, 0),
        datetime(2025, 1, 15, 12, 0),
        datetime(2024, 12, 1, 8, 0),
    ]

    assert analytics.monthly_event_counts(dates) == [
        {'month': 'Dec 2024', 'events': 2},
        {'month': 'Jan 2025', 'events': 1},
        {'month': 'Mar 2025', 'events': 1},
    ]


def test_daily_registration_counts_labels_and_totals():
    dates = [
        datetime(2025, 3, 5, 10, 0),
        datetime(2025, 3, 5, 23, 59),
        datetime(2025, 3, 7, 0, 1),
    ]

    assert analytics.daily_registration_counts(dates) == [
        {'date': 'Mar 5', 'registrations': 2},
        {'date': 'Mar 7', 'registrations': 1},
    ]


def test_daily_registration_counts_keeps_most_recent_days_with_data():
    start = datetime(2025, 1, 1, 12, 0)
    dates = [start + timedelta(days=offset) for offset in range(35)]

    result = analytics.daily_registration_counts(dates)

    assert len(result) == analytics.TREND_DAYS_SHOWN
    assert result[0]['date'] == 'Jan 6'
    assert result[-1]['date'] == 'Feb 4'


def test_preview_title():
    assert analytics.preview_title(None) == "Unknown"
    assert analytics.preview_title("") == "Unknown"
    assert analytics.preview_title("Short") == "Short..."
    assert analytics.preview_title("Annual Robotics Championship") == "Annual Robotics Cham..."


def test_attendance_rates_round_half_up():
    rows = [
        {'title': 'Career Fair', 'attendance_percentage': 66.5},
        {'title': 'Hackathon', 'attendance_percentage': 33.3},
        {'title': None, 'attendance_percentage': None},
    ]

    assert analytics.attendance_rates(rows) == [
        {'name': 'Career Fair...', 'attendance': 67},
        {'name': 'Hackathon...', 'attendance': 33},
        {'name': 'Unknown', 'attendance': 0},
    ]


def test_round_half_up_differs_from_bankers_rounding():
    assert analytics.round_half_up(2.5) == 3
    assert analytics.round_half_up(0.5) == 1
    assert analytics.round_half_up(1.49) == 1


def test_summary_cards_totals_and_averages():
    monthly = [{'month': 'Jan 2025', 'events': 3}, {'month': 'Feb 2025', 'events': 2}]
    trends = [{'date': 'Feb 1', 'registrations': 4}, {'date': 'Feb 2', 'registrations': 6}]
    rates = [{'name': 'A...', 'attendance': 67}, {'name': 'B...', 'attendance': 33}]
    top = [{'title': 'A', 'avg_rating': 4.5}, {'title': 'B', 'avg_rating': None}]

    assert analytics.summary_cards(monthly, trends, rates, top) == {
        'total_events': 5,
        'total_registrations': 10,
        'avg_attendance': 50,
        'avg_rating': 2.3,
    }


def test_summary_cards_empty_inputs():
    assert analytics.summary_cards([], [], [], []) == {
        'total_events': 0,
        'total_registrations': 0,
        'avg_attendance': 0,
        'avg_rating': 0.0,
    }
