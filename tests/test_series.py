from app.analyzer.series_engine import monthly_series, normalize_series
from app.models.normalized_models import SearchRow
from app.models.report_models import MonthPoint


def point(month, clicks=0):
    return MonthPoint(month=month, clicks=clicks, impressions=0, ctr=0.0)


def test_keeps_most_recent_sixteen_in_order():
    months = [f"{2023 + (i // 12)}-{i % 12 + 1:02d}" for i in range(20)]
    series = normalize_series([point(m) for m in reversed(months)])
    assert len(series) == 16
    assert [p.month for p in series] == months[-16:]


def test_duplicate_month_last_occurrence_wins():
    series = normalize_series([point("2025-01", 1), point("2025-02", 2), point("2025-01", 9)])
    assert [(p.month, p.clicks) for p in series] == [("2025-01", 9), ("2025-02", 2)]


def test_empty_input():
    assert normalize_series([]) == []


def test_monthly_series_buckets_rows_by_month():
    rows = [
        SearchRow(key="2025-10-01", clicks=1, impressions=10, position=2.0),
        SearchRow(key="2025-10-20", clicks=2, impressions=10, position=4.0),
        SearchRow(key="2025-11-05", clicks=5, impressions=50),
        SearchRow(key="", clicks=99, impressions=99),
        SearchRow(key="dental chairs", clicks=99, impressions=99),
    ]
    series = monthly_series(rows)
    assert [p.month for p in series] == ["2025-10", "2025-11"]
    assert series[0].clicks == 3
    assert series[0].position == 3.0
    assert series[1].ctr == 10.0
    assert series[1].position is None
