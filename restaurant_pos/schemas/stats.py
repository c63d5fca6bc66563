from pydantic import BaseModel, Field
from typing import List, Optional


# Input of the get-dashboard-stats function
class DashboardStatsRequest(BaseModel):
    date: str = Field(..., description="Local day, YYYY-MM-DD")
    timezone_offset: Optional[int] = Field(
        None, ge=-24 * 60, le=24 * 60,
        description="Minutes to add to local time to get UTC (browser convention)",
    )


class TopProduct(BaseModel):
    name: str
    quantity: int


class DashboardStats(BaseModel):
    income: float
    total_expenses: float
    net: float
    pending_orders: int
    completed_orders_count: int
    cancelled_orders_count: int
    average_order_value: float
    top_selling_products: List[TopProduct]
