from datetime import UTC, datetime, timedelta

from pumpwork.domain.display import format_date, format_sol, format_time_ago, truncate_address

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


def test_truncate_address():
    assert truncate_address("7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU") == "7xKX...gAsU"
    assert truncate_address("7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU", 6) == "7xKXtg...osgAsU"
    assert truncate_address(None) == ""
    assert truncate_address("") == ""


def test_format_sol():
    assert format_sol(1000) == "1,000 SOL"
    assert format_sol(1.5) == "1.5 SOL"
    assert format_sol(0) == "0 SOL"


def test_format_date():
    assert format_date(datetime(2025, 3, 1, tzinfo=UTC)) == "Mar 1, 2025"
    assert format_date("2024-12-25T08:30:00") == "Dec 25, 2024"
    assert format_date(None) == "N/A"
    assert format_date("not a date") == "N/A"


def test_format_time_ago():
    assert format_time_ago(NOW - timedelta(seconds=30), NOW) == "just now"
    assert format_time_ago(NOW - timedelta(minutes=5), NOW) == "5m ago"
    assert format_time_ago(NOW - timedelta(hours=3), NOW) == "3h ago"
    assert format_time_ago(NOW - timedelta(days=2), NOW) == "2d ago"
    assert format_time_ago(NOW - timedelta(days=9), NOW) == "Mar 1, 2025"
    assert format_time_ago(None, NOW) == "N/A"
