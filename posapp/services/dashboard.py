import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Optional

from sqlalchemy import text

from posapp.schemas.dashboard import DashboardSnapshot, TrendPoint
from posapp.storage.base import StorageAdapter

logger = logging.getLogger(__name__)

TREND_DAYS = 7


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class DashboardService:
    def __init__(self, storage: StorageAdapter):
        self.storage = storage

    def get_snapshot(self, today: Optional[date] = None) -> DashboardSnapshot:
        """
        Totals plus a dense 7-day sales trend ending today (UTC, matching the
        server-side timestamps). Days without sales are reported as zero.
        """
        today = today or datetime.now(timezone.utc).date()
        start = today - timedelta(days=TREND_DAYS - 1)
        sale_date = self.storage.sql.date_sql("[CreatedAt]")
        params = {"today": today.isoformat(), "start": start.isoformat()}

        totals_query = text(f"""
            SELECT
                (SELECT COUNT(1) FROM [Users]) AS total_users,
                (SELECT COUNT(1) FROM [Users] WHERE [IsActive] = 1) AS active_users,
                (SELECT COUNT(1) FROM [Products] WHERE [IsActive] = 1) AS active_products,
                (SELECT COALESCE(SUM([GrandTotal]), 0) FROM [Sales] WHERE {sale_date} = :today) AS today_sales,
                (SELECT COALESCE(SUM([GrandTotal]), 0) FROM [Sales]
                  WHERE {sale_date} BETWEEN :start AND :today) AS weekly_sales
        """)
        trend_query = text(f"""
            SELECT {sale_date} AS sale_date, COALESCE(SUM([GrandTotal]), 0) AS total
            FROM [Sales]
            WHERE {sale_date} BETWEEN :start AND :today
            GROUP BY {sale_date}
        """)

        with self.storage.connect() as conn:
            totals = conn.execute(totals_query, params).mappings().one()
            rows = conn.execute(trend_query, params).fetchall()

        by_day: Dict[date, float] = {_as_date(row[0]): float(row[1] or 0) for row in rows}
        trend = []
        for offset in range(TREND_DAYS):
            day = start + timedelta(days=offset)
            trend.append(TrendPoint(label=day.strftime("%m/%d"), total=by_day.get(day, 0.0)))

        logger.debug(f"Dashboard snapshot computed for {today}")
        return DashboardSnapshot(
            total_users=totals["total_users"],
            active_users=totals["active_users"],
            active_products=totals["active_products"],
            today_sales=float(totals["today_sales"] or 0),
            weekly_sales=float(totals["weekly_sales"] or 0),
            trend=trend,
        )
