from typing import List

from pydantic import BaseModel


class TrendPoint(BaseModel):
    label: str  # MM/DD
    total: float


class DashboardSnapshot(BaseModel):
    total_users: int
    active_users: int
    active_products: int
    today_sales: float
    weekly_sales: float
    trend: List[TrendPoint]
