from typing import List, Literal, Optional

from pydantic import BaseModel

class InventoryTotals(BaseModel):
    totalItems: int
    totalItemsInStock: int
    totalValue: float

class DailySales(BaseModel):
    date: str  # YYYY-MM-DD
    sales: float

class CategoryCount(BaseModel):
    category: str
    count: int

class DashboardSummary(BaseModel):
    inventory: Optional[InventoryTotals] = None
    dailySales: List[DailySales] = []
    trend: Optional[Literal["up", "down"]] = None
    yearSales: Optional[float] = None
    categories: List[CategoryCount] = []
