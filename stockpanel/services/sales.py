# stockpanel/services/sales.py
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from fastapi import HTTPException
from pymongo.errors import PyMongoError

from stockpanel.core.config import settings
from stockpanel.db import SALES
from stockpanel.models.inventory import StockItemDB
from stockpanel.models.sales import SaleDB, SaleItem, SaleLineItem, SaleReceipt
from stockpanel.models.user import Session
from stockpanel.services.pricing import card_price, cash_price
from stockpanel.services.stock import decrement_lines, give_back_lines, take_lines

logger = logging.getLogger(__name__)


class Cart:
    """
    Lines of a sale being built. Prices are per unit and derived from the exchange
    rate when an item is first added; ``precioVenta`` starts at the cash price and
    stays whatever it is set to afterwards.
    """

    def __init__(self, exchange_rate: float, surcharge: Optional[float] = None, step: Optional[int] = None):
        self.exchange_rate = exchange_rate
        self.surcharge = settings.card_surcharge if surcharge is None else surcharge
        self.step = settings.price_rounding if step is None else step
        self.lines: List[SaleLineItem] = []

    def find(self, item_id: str) -> Optional[SaleLineItem]:
        return next((line for line in self.lines if line.id == item_id), None)

    def add(self, item: StockItemDB, quantity: int = 1) -> SaleLineItem:
        existing = self.find(item.id)
        if existing:
            existing.quantity += quantity
            return existing

        efectivo = cash_price(item.precioUSD, self.exchange_rate, self.step)
        line = SaleLineItem(
            **item.model_dump(),
            quantity=quantity,
            efectivo=efectivo,
            tarjeta=card_price(efectivo, self.surcharge, self.step),
            precioVenta=efectivo,
        )
        self.lines.append(line)
        return line

    def set_sell_price(self, item_id: str, price: float) -> None:
        line = self.find(item_id)
        if line is None:
            raise KeyError(item_id)
        line.precioVenta = price

    def remove(self, item_id: str) -> None:
        self.lines = [line for line in self.lines if line.id != item_id]

    def clear(self) -> None:
        self.lines = []

    @property
    def total(self) -> float:
        return sale_total((line.quantity, line.precioVenta) for line in self.lines)


def sale_total(pairs: Iterable) -> float:
    """Sum of quantity x unit price."""
    return sum(quantity * price for quantity, price in pairs)

async def insert_sale(db, session: Session, items: List[SaleItem], total: float) -> SaleDB:
    doc = {
        "items": [item.model_dump() for item in items],
        "date": datetime.now(),
        "total": total,
        "userId": session.user_id,
    }
    res = await db[SALES].insert_one(doc)
    return SaleDB(id=str(res.inserted_id), items=items, date=doc["date"], total=total, userId=session.user_id)

async def record_sale(db, session: Session, lines: List[SaleLineItem], mode: Optional[str] = None) -> SaleReceipt:
    """
    Persist a sale, then decrement stock line by line using the quantities captured in the cart.
    Stock writes that fail after the sale is stored are reported, not rolled back.

    In atomic mode stock is taken first and the sale is only stored when every
    line could be taken; otherwise nothing is written and a 409 is raised.
    """
    if not lines:
        raise HTTPException(status_code=400, detail="La venta no tiene productos")
    mode = mode or settings.stock_write_mode

    timestamp = datetime.now()
    items = [
        SaleItem(
            TIMESTAMP=timestamp,
            SKU=line.sku,
            PRODUCTO=line.producto,
            CANTIDAD=line.quantity,
            PRECIO_VENTA=line.precioVenta,
        )
        for line in lines
    ]
    total = sale_total((line.quantity, line.precioVenta) for line in lines)
    if mode == "atomic":
        stock = await take_lines(db, lines)
    try:
        sale = await insert_sale(db, session, items, total)
    except PyMongoError as exc:
        logger.exception("Error al registrar la venta")
        if mode == "atomic":
            await give_back_lines(db, lines)
        raise HTTPException(status_code=500, detail=f"Error al registrar la venta: {exc}")

    if mode != "atomic":
        stock = await decrement_lines(db, lines, mode)
    logger.info("Sale %s registered: %d lines, total %.2f", sale.id, len(lines), total)
    return SaleReceipt(sale=sale, stock=stock)

async def list_sales(db, session: Session) -> List[SaleDB]:
    sales = []
    async for doc in db[SALES].find({"userId": session.user_id}, sort=[("date", -1)]):
        sales.append(SaleDB(
            id=str(doc["_id"]),
            items=doc.get("items", []),
            date=doc["date"],
            total=doc.get("total", 0),
            userId=doc.get("userId", ""),
        ))
    return sales
