# stockpanel/services/reservations.py
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException
from pymongo.errors import PyMongoError

from stockpanel.core.config import settings
from stockpanel.db import RESERVATIONS, object_id
from stockpanel.models.sales import (
    RESERVATION_PENDING,
    ReservationDB,
    ReservationItem,
    ReservationReceipt,
    SaleItem,
    SaleLineItem,
    SaleReceipt,
    StockUpdateSummary,
)
from stockpanel.models.user import Session
from stockpanel.services.sales import insert_sale, sale_total
from stockpanel.services.stock import decrement_lines, give_back_lines, restore_lines, take_lines

logger = logging.getLogger(__name__)

def _from_document(doc: dict) -> ReservationDB:
    return ReservationDB(
        id=str(doc["_id"]),
        items=doc.get("items", []),
        date=doc["date"],
        status=doc.get("status", RESERVATION_PENDING),
        userId=doc.get("userId", ""),
    )

def _owned(session: Session, reservation_id: str) -> dict:
    return {"_id": object_id(reservation_id, "reservation"), "userId": session.user_id}

async def _load(db, session: Session, reservation_id: str) -> ReservationDB:
    """A reservation of the session user; anybody else's is reported as missing."""
    doc = await db[RESERVATIONS].find_one(_owned(session, reservation_id))
    if not doc:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _from_document(doc)

async def create_reservation(db, session: Session, lines: List[SaleLineItem],
                             mode: Optional[str] = None) -> ReservationReceipt:
    """
    Hold cart lines as a pending reservation; stock is taken out right away, as for a sale.
    In atomic mode a line without enough stock refuses the whole reservation with a 409.
    """
    if not lines:
        raise HTTPException(status_code=400, detail="La reserva no tiene productos")
    mode = mode or settings.stock_write_mode

    items = [
        ReservationItem(
            id=line.id,
            sku=line.sku,
            producto=line.producto,
            cantidad=line.quantity,
            precioVenta=line.precioVenta,
        )
        for line in lines
    ]
    doc = {
        "items": [item.model_dump() for item in items],
        "date": datetime.now(),
        "status": RESERVATION_PENDING,
        "userId": session.user_id,
    }
    if mode == "atomic":
        stock = await take_lines(db, lines)
    try:
        res = await db[RESERVATIONS].insert_one(doc)
    except PyMongoError as exc:
        logger.exception("Error al guardar la reserva")
        if mode == "atomic":
            await give_back_lines(db, lines)
        raise HTTPException(status_code=500, detail=f"Error al guardar la reserva: {exc}")

    reservation = ReservationDB(id=str(res.inserted_id), items=items, date=doc["date"],
                                status=RESERVATION_PENDING, userId=session.user_id)
    if mode != "atomic":
        stock = await decrement_lines(db, lines, mode)
    logger.info("Reservation %s saved with %d lines", reservation.id, len(items))
    return ReservationReceipt(reservation=reservation, stock=stock)

async def list_reservations(db, session: Session) -> List[ReservationDB]:
    reservations = []
    async for doc in db[RESERVATIONS].find({"userId": session.user_id}):
        reservations.append(_from_document(doc))
    return reservations

async def update_reservation_items(db, session: Session, reservation_id: str,
                                   items: List[ReservationItem]) -> ReservationDB:
    """
    Overwrite the reservation's lines.

    Stock is not adjusted: raising a quantity here does not hold more units, and
    lowering it does not give any back.
    """
    try:
        res = await db[RESERVATIONS].update_one(
            _owned(session, reservation_id), {"$set": {"items": [item.model_dump() for item in items]}}
        )
    except PyMongoError as exc:
        logger.exception("Error al actualizar la reserva %s", reservation_id)
        raise HTTPException(status_code=500, detail=f"Error al actualizar la reserva: {exc}")
    if not res.matched_count:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return await _load(db, session, reservation_id)

async def cancel_reservation(db, session: Session, reservation_id: str) -> ReservationReceipt:
    """Give the reserved units back to stock and drop the reservation."""
    reservation = await _load(db, session, reservation_id)
    stock = await restore_lines(db, reservation.items)
    try:
        await db[RESERVATIONS].delete_one(_owned(session, reservation_id))
    except PyMongoError as exc:
        logger.exception("Error al cancelar la reserva %s", reservation_id)
        raise HTTPException(status_code=500, detail=f"Error al cancelar la reserva: {exc}")
    logger.info("Reservation %s cancelled", reservation_id)
    return ReservationReceipt(reservation=reservation, stock=stock)

async def confirm_reservation(db, session: Session, reservation_id: str) -> SaleReceipt:
    """Turn the reservation into a sale. Stock was already taken when it was created."""
    reservation = await _load(db, session, reservation_id)
    timestamp = datetime.now()
    items = [
        SaleItem(
            TIMESTAMP=timestamp,
            SKU=item.sku,
            PRODUCTO=item.producto,
            CANTIDAD=item.cantidad,
            PRECIO_VENTA=item.precioVenta,
        )
        for item in reservation.items
    ]
    total = sale_total((item.cantidad, item.precioVenta) for item in reservation.items)
    try:
        sale = await insert_sale(db, session, items, total)
        await db[RESERVATIONS].delete_one(_owned(session, reservation_id))
    except PyMongoError as exc:
        logger.exception("Error al confirmar la reserva %s", reservation_id)
        raise HTTPException(status_code=500, detail=f"Error al confirmar la reserva: {exc}")
    logger.info("Reservation %s confirmed as sale %s", reservation_id, sale.id)
    return SaleReceipt(sale=sale, stock=StockUpdateSummary())
