# stockpanel/services/dashboard.py
import logging
from collections import Counter
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple

from pymongo.errors import PyMongoError

from stockpanel.core.config import settings
from stockpanel.db import SALES, STOCK
from stockpanel.models.dashboard import CategoryCount, DailySales, DashboardSummary, InventoryTotals
from stockpanel.models.inventory import StockItemCreate

logger = logging.getLogger(__name__)

# ---- reducers ----
def inventory_totals(items: Iterable[StockItemCreate]) -> InventoryTotals:
    count, units, value = 0, 0, 0.0
    for item in items:
        count += 1
        units += item.stock
        value += item.stock * item.precioUSD
    return InventoryTotals(totalItems=count, totalItemsInStock=units, totalValue=value)

def daily_sales(sales: Iterable[Tuple[datetime, float]], today: date, days: int = 7) -> List[DailySales]:
    """One bucket per day for the ``days`` days ending today, zero when nothing sold, oldest first."""
    buckets = {(today - timedelta(days=i)).isoformat(): 0.0 for i in range(days)}
    for when, total in sales:
        key = when.date().isoformat()
        if key in buckets:
            buckets[key] += total or 0
    return [DailySales(date=day, sales=amount) for day, amount in sorted(buckets.items())]

def year_sales(sales: Iterable[Tuple[datetime, float]], year: int) -> float:
    return sum(total or 0 for when, total in sales if when.year == year)

def top_categories(categories: Iterable[str], n: int = 6) -> List[CategoryCount]:
    """Most frequent categories; equal counts are ordered by name."""
    counts = Counter(category for category in categories if category)
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [CategoryCount(category=category, count=count) for category, count in ranked[:n]]

def sales_trend(series: List[DailySales]) -> Optional[str]:
    if not series or len({day.sales for day in series}) == 1:
        return None
    return "up" if series[-1].sales > series[0].sales else "down"

# ---- store readers ----
async def fetch_inventory_totals(db) -> InventoryTotals:
    items = []
    async for doc in db[STOCK].find():
        items.append(StockItemCreate.from_document(doc))
    return inventory_totals(items)

async def fetch_daily_sales(db, today: Optional[date] = None, days: Optional[int] = None) -> List[DailySales]:
    today = today or date.today()
    days = days or settings.sales_window_days
    since = datetime.combine(today - timedelta(days=days - 1), time.min)
    sales = []
    async for doc in db[SALES].find({"date": {"$gte": since}}):
        sales.append((doc["date"], doc.get("total", 0)))
    return daily_sales(sales, today, days)

async def fetch_year_sales(db, year: Optional[int] = None) -> float:
    year = year or date.today().year
    start, end = datetime(year, 1, 1), datetime(year + 1, 1, 1)
    sales = []
    async for doc in db[SALES].find({"date": {"$gte": start, "$lt": end}}):
        sales.append((doc["date"], doc.get("total", 0)))
    return year_sales(sales, year)

async def fetch_top_categories(db, n: Optional[int] = None) -> List[CategoryCount]:
    categories = []
    async for doc in db[STOCK].find({}, {"categoria": 1}):
        categories.append(str(doc.get("categoria") or ""))
    return top_categories(categories, n or settings.top_categories)

async def build_summary(db, today: Optional[date] = None) -> DashboardSummary:
    """Every section is read on its own; one failing leaves the others intact."""
    summary = DashboardSummary()
    try:
        summary.inventory = await fetch_inventory_totals(db)
    except PyMongoError:
        logger.exception("Error fetching total items and value")
    try:
        summary.dailySales = await fetch_daily_sales(db, today)
        summary.trend = sales_trend(summary.dailySales)
    except PyMongoError:
        logger.exception("Error fetching sales data")
    try:
        summary.yearSales = await fetch_year_sales(db, (today or date.today()).year)
    except PyMongoError:
        logger.exception("Error fetching year sales")
    try:
        summary.categories = await fetch_top_categories(db)
    except PyMongoError:
        logger.exception("Error fetching category counts")
    return summary
