from fastapi import APIRouter, Depends
from typing import List
from stockpanel.db import get_db
from stockpanel.core.security import get_session
from stockpanel.models.dashboard import CategoryCount, DailySales, DashboardSummary, InventoryTotals
from stockpanel.services import dashboard

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"], dependencies=[Depends(get_session)])

@router.get("/", response_model=DashboardSummary)
async def summary(db=Depends(get_db)):
    return await dashboard.build_summary(db)

@router.get("/inventory", response_model=InventoryTotals)
async def inventory(db=Depends(get_db)):
    return await dashboard.fetch_inventory_totals(db)

@router.get("/daily-sales", response_model=List[DailySales])
async def daily_sales(db=Depends(get_db)):
    return await dashboard.fetch_daily_sales(db)

@router.get("/year-sales", response_model=float)
async def year_sales(db=Depends(get_db)):
    return await dashboard.fetch_year_sales(db)

@router.get("/categories", response_model=List[CategoryCount])
async def categories(db=Depends(get_db)):
    return await dashboard.fetch_top_categories(db)
