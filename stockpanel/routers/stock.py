# stockpanel/routers/stock.py
from fastapi import APIRouter, Depends, File, UploadFile, status
from typing import List
from stockpanel.db import get_db
from stockpanel.core.security import get_session
from stockpanel.models.inventory import Category, ImportSummary, SearchField, StockItemCreate, StockItemDB
from stockpanel.services import importer, stock

router = APIRouter(prefix="/api/stock", tags=["stock"], dependencies=[Depends(get_session)])

@router.get("/", response_model=List[StockItemDB])
async def search_stock(search: str = "", field: SearchField = SearchField.sku, db=Depends(get_db)):
    """Up to ten matches on one field, newest first. No search term -> the ten latest items."""
    items = await stock.list_stock(db)
    return stock.filter_items(items, search, field)

@router.get("/all", response_model=List[StockItemDB])
async def list_all_stock(db=Depends(get_db)):
    return await stock.list_stock(db)

@router.get("/categories", response_model=List[str])
async def list_categories():
    return [category.value for category in Category]

@router.post("/", response_model=StockItemDB, status_code=status.HTTP_201_CREATED)
async def create_item(item: StockItemCreate, db=Depends(get_db)):
    return await stock.create_item(db, item)

@router.post("/import", response_model=ImportSummary)
async def import_stock(file: UploadFile = File(...), db=Depends(get_db)):
    rows = importer.read_rows(await file.read())
    return await importer.import_rows(db, rows)

@router.get("/{item_id}", response_model=StockItemDB)
async def get_item(item_id: str, db=Depends(get_db)):
    return await stock.get_item(db, item_id)

@router.put("/{item_id}", response_model=StockItemDB)
async def update_item(item_id: str, item: StockItemCreate, db=Depends(get_db)):
    return await stock.update_item(db, item_id, item)

@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: str, db=Depends(get_db)):
    await stock.delete_item(db, item_id)
