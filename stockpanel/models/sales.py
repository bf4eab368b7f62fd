# stockpanel/models/sales.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from stockpanel.models.inventory import StockItemDB

RESERVATION_PENDING = "pendiente"

# ---- cart ----
class SaleLineItem(StockItemDB):
    """A cart line: stock snapshot taken when the item was added, plus prices."""
    quantity: int = Field(1, ge=1)
    efectivo: float = 0
    tarjeta: float = 0
    precioVenta: float = 0

class QuoteLine(BaseModel):
    id: str
    quantity: int = Field(1, ge=1)

class SaleCreate(BaseModel):
    items: List[SaleLineItem] = Field(..., min_length=1)

# ---- ventas ----
class SaleItem(BaseModel):
    TIMESTAMP: Optional[datetime] = None
    SKU: str = ""
    PRODUCTO: str = ""
    CANTIDAD: int = 0
    PRECIO_VENTA: float = 0

class SaleDB(BaseModel):
    id: str
    items: List[SaleItem]
    date: datetime
    total: float
    userId: str

class StockUpdateSummary(BaseModel):
    updated: int = 0
    errors: List[str] = []

class SaleReceipt(BaseModel):
    sale: SaleDB
    stock: StockUpdateSummary

# ---- reservas ----
class ReservationItem(BaseModel):
    id: str
    sku: str = ""
    producto: str = ""
    cantidad: int = 0
    precioVenta: float = 0

class ReservationDB(BaseModel):
    id: str
    items: List[ReservationItem]
    date: datetime
    status: str = RESERVATION_PENDING
    userId: str

class ReservationUpdate(BaseModel):
    items: List[ReservationItem]

class ReservationReceipt(BaseModel):
    reservation: ReservationDB
    stock: StockUpdateSummary
