# stockpanel/services/stock.py
import logging
from typing import Iterable, List, Optional

from fastapi import HTTPException
from pymongo.errors import PyMongoError

from stockpanel.core.config import settings
from stockpanel.db import STOCK, object_id
from stockpanel.models.inventory import SearchField, StockItemCreate, StockItemDB
from stockpanel.models.sales import StockUpdateSummary

logger = logging.getLogger(__name__)

class StockUpdateError(Exception):
    pass

# ---- reads ----
async def list_stock(db) -> List[StockItemDB]:
    """All stock items, oldest first."""
    items = []
    async for doc in db[STOCK].find({}, sort=[("_id", 1)]):
        items.append(StockItemDB.from_document(doc))
    return items

def filter_items(items: List[StockItemDB], term: str = "", field: SearchField = SearchField.sku,
                 limit: Optional[int] = None) -> List[StockItemDB]:
    """
    Case-insensitive substring match of ``term`` on one field.
    Returns at most ``limit`` items, most recently added first.
    """
    limit = settings.list_limit if limit is None else limit
    if term:
        needle = term.lower().strip()
        items = [item for item in items if needle in field.value_of(item).lower()]
    if limit <= 0:
        return []
    return list(reversed(items[-limit:]))

async def get_item(db, item_id: str) -> StockItemDB:
    doc = await db[STOCK].find_one({"_id": object_id(item_id)})
    if not doc:
        raise HTTPException(status_code=404, detail="Item not found")
    return StockItemDB.from_document(doc)

# ---- writes ----
async def create_item(db, item: StockItemCreate) -> StockItemDB:
    res = await db[STOCK].insert_one(item.model_dump())
    return StockItemDB(id=str(res.inserted_id), **item.model_dump())

async def update_item(db, item_id: str, item: StockItemCreate) -> StockItemDB:
    obj = object_id(item_id)
    res = await db[STOCK].update_one({"_id": obj}, {"$set": item.model_dump()})
    if not res.matched_count:
        raise HTTPException(status_code=404, detail="Item not found")
    return StockItemDB(id=item_id, **item.model_dump())

async def delete_item(db, item_id: str) -> None:
    res = await db[STOCK].delete_one({"_id": object_id(item_id)})
    if not res.deleted_count:
        raise HTTPException(status_code=404, detail="Item not found")

async def apply_decrement(db, item_id: str, snapshot: int, quantity: int, mode: Optional[str] = None) -> None:
    """
    Take ``quantity`` units out of an item.

    snapshot mode writes ``snapshot - quantity`` where snapshot is the quantity seen when the
    cart was built; concurrent writers can lose updates. atomic mode decrements server-side
    and refuses when fewer than ``quantity`` units are left.
    """
    mode = mode or settings.stock_write_mode
    obj = object_id(item_id)
    if mode == "atomic":
        res = await db[STOCK].update_one(
            {"_id": obj, "stock": {"$gte": quantity}}, {"$inc": {"stock": -quantity}}
        )
        if res.matched_count == 0:
            raise StockUpdateError("Item not found or insufficient stock")
    else:
        res = await db[STOCK].update_one({"_id": obj}, {"$set": {"stock": snapshot - quantity}})
        if res.matched_count == 0:
            raise StockUpdateError("Item not found")

async def restore_quantity(db, item_id: str, quantity: int) -> None:
    res = await db[STOCK].update_one({"_id": object_id(item_id)}, {"$inc": {"stock": quantity}})
    if res.matched_count == 0:
        raise StockUpdateError("Item not found")

async def _each_line(lines: Iterable, label, update) -> StockUpdateSummary:
    summary = StockUpdateSummary()
    for line in lines:
        try:
            await update(line)
            summary.updated += 1
        except (StockUpdateError, HTTPException, PyMongoError) as exc:
            detail = getattr(exc, "detail", None) or str(exc)
            logger.error("Stock update failed for %s: %s", label(line), detail)
            summary.errors.append(f"{label(line)}: {detail}")
    return summary

async def decrement_lines(db, lines, mode: Optional[str] = None) -> StockUpdateSummary:
    """Decrement stock for every cart line, one write at a time; failures are tallied, not raised."""
    return await _each_line(
        lines,
        lambda line: line.sku or line.id,
        lambda line: apply_decrement(db, line.id, line.stock, line.quantity, mode),
    )

async def restore_lines(db, items) -> StockUpdateSummary:
    """Give back reserved quantities."""
    return await _each_line(
        items,
        lambda item: item.sku or item.id,
        lambda item: restore_quantity(db, item.id, item.cantidad),
    )

async def give_back_lines(db, lines) -> StockUpdateSummary:
    """Undo a guarded decrement of cart lines."""
    return await _each_line(
        lines,
        lambda line: line.sku or line.id,
        lambda line: restore_quantity(db, line.id, line.quantity),
    )

async def take_lines(db, lines) -> StockUpdateSummary:
    """
    Guarded decrement of every cart line, all or nothing.

    When one line is refused the lines already taken are given back and a 409 is
    raised, so the caller stores nothing.
    """
    taken = []
    for line in lines:
        try:
            await apply_decrement(db, line.id, line.stock, line.quantity, "atomic")
        except (StockUpdateError, HTTPException, PyMongoError) as exc:
            detail = getattr(exc, "detail", None) or str(exc)
            logger.error("Stock refused for %s: %s", line.sku or line.id, detail)
            await give_back_lines(db, taken)
            raise HTTPException(status_code=409, detail=f"{line.sku or line.id}: {detail}")
        taken.append(line)
    return StockUpdateSummary(updated=len(taken))
