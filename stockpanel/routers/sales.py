# stockpanel/routers/sales.py
from fastapi import APIRouter, Depends, status
from typing import List
from pydantic import BaseModel
from stockpanel.db import get_db
from stockpanel.core.security import get_session
from stockpanel.models.sales import QuoteLine, SaleCreate, SaleDB, SaleLineItem, SaleReceipt
from stockpanel.models.user import Session
from stockpanel.services import sales, stock
from stockpanel.services.pricing import ExchangeRateProvider, current_rate, get_exchange_rate_provider

router = APIRouter(prefix="/api/sales", tags=["sales"])

class ExchangeRate(BaseModel):
    rate: float

@router.get("/exchange-rate", response_model=ExchangeRate)
async def exchange_rate(
    session: Session = Depends(get_session),
    provider: ExchangeRateProvider = Depends(get_exchange_rate_provider),
):
    return ExchangeRate(rate=await current_rate(provider))

@router.post("/quote", response_model=List[SaleLineItem])
async def quote(
    lines: List[QuoteLine],
    session: Session = Depends(get_session),
    provider: ExchangeRateProvider = Depends(get_exchange_rate_provider),
    db=Depends(get_db),
):
    """Price a cart from current stock; repeated ids add up into one line."""
    cart = sales.Cart(await current_rate(provider))
    for line in lines:
        cart.add(await stock.get_item(db, line.id), line.quantity)
    return cart.lines

@router.post("/", response_model=SaleReceipt, status_code=status.HTTP_201_CREATED)
async def register_sale(body: SaleCreate, session: Session = Depends(get_session), db=Depends(get_db)):
    return await sales.record_sale(db, session, body.items)

@router.get("/", response_model=List[SaleDB])
async def list_sales(session: Session = Depends(get_session), db=Depends(get_db)):
    return await sales.list_sales(db, session)
