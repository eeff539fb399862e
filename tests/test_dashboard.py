from datetime import date

from sqlalchemy import text

from posapp.services.dashboard import DashboardService

TODAY = date(2026, 10, 18)


def _add_sale(storage, receipt, grand_total, created_at):
    with storage.transaction() as conn:
        conn.execute(
            text("""
                INSERT INTO [Sales] ([ReceiptNumber], [SubTotal], [Tax], [Discount], [GrandTotal], [Status], [CreatedAt])
                VALUES (:receipt, :total, 0, 0, :total, 'Completed', :created_at)
            """),
            {"receipt": receipt, "total": grand_total, "created_at": created_at},
        )


def test_no_sales_gives_seven_zero_points(storage):
    """The trend is dense: every day of the window is present even without sales."""
    snapshot = DashboardService(storage).get_snapshot(today=TODAY)

    assert [point.label for point in snapshot.trend] == [
        "10/12", "10/13", "10/14", "10/15", "10/16", "10/17", "10/18",
    ]
    assert all(point.total == 0 for point in snapshot.trend)
    assert snapshot.today_sales == 0
    assert snapshot.weekly_sales == 0
    assert snapshot.total_users == 1
    assert snapshot.active_users == 1
    assert snapshot.active_products == 0


def test_sales_are_grouped_by_day(storage):
    _add_sale(storage, "R-1", 120.5, "2026-10-18 09:15:00")
    _add_sale(storage, "R-2", 79.5, "2026-10-18 18:40:00")
    _add_sale(storage, "R-3", 300, "2026-10-14 12:00:00")
    # Outside the 7-day window
    _add_sale(storage, "R-4", 999, "2026-10-11 23:59:59")

    snapshot = DashboardService(storage).get_snapshot(today=TODAY)
    totals = {point.label: point.total for point in snapshot.trend}

    assert totals["10/18"] == 200.0
    assert totals["10/14"] == 300.0
    assert totals["10/12"] == 0
    assert "10/11" not in totals
    assert snapshot.today_sales == 200.0
    assert snapshot.weekly_sales == 500.0


def test_window_crosses_month_boundary(storage):
    _add_sale(storage, "R-1", 50, "2026-09-30 10:00:00")

    snapshot = DashboardService(storage).get_snapshot(today=date(2026, 10, 3))
    labels = [point.label for point in snapshot.trend]

    assert labels[0] == "09/27"
    assert labels[-1] == "10/03"
    assert snapshot.trend[3].total == 50.0


def test_dashboard_route(admin_client):
    body = admin_client.get("/api/dashboard").json()

    assert len(body["trend"]) == 7
    assert body["total_users"] == 1


def test_dashboard_requires_session(client):
    assert client.get("/api/dashboard").status_code == 401
