# stockpanel/services/importer.py
import logging
from io import BytesIO
from typing import Any, Dict, List
from zipfile import BadZipFile

from fastapi import HTTPException
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from pymongo.errors import PyMongoError

from stockpanel.db import STOCK
from stockpanel.models.inventory import ImportSummary, StockItemCreate

logger = logging.getLogger(__name__)

COLUMNS = ("SKU", "PRODUCTO", "AUTOR", "CATEGORIA", "PRECIOUSD", "STOCK", "ESTANTE")
MAX_INT64 = 2 ** 63 - 1

def read_rows(content: bytes) -> List[Dict[str, Any]]:
    """Rows of the first worksheet as dicts keyed by the header row. Blank rows are skipped."""
    try:
        wb = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError) as exc:
        logger.error("Unreadable spreadsheet: %s", exc)
        raise HTTPException(status_code=400, detail="No se pudo leer el archivo")

    try:
        ws = wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)
        header = next(rows, None)
        if not header:
            return []
        keys = [str(cell).strip() if cell is not None else "" for cell in header]
        missing = [column for column in COLUMNS if column not in keys]
        if missing:
            logger.warning("Spreadsheet is missing columns: %s", ", ".join(missing))
        result = []
        for values in rows:
            if all(value is None or value == "" for value in values):
                continue
            result.append({key: value for key, value in zip(keys, values) if key})
        return result
    finally:
        wb.close()

def _text(value: Any) -> str:
    return str(value or "").strip()

def _number(column: str, value: Any, cast=float):
    if not value:
        return cast(0)
    try:
        number = cast(float(value))
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"{column} no es un número: {value!r}")
    if cast is int and abs(number) > MAX_INT64:
        raise ValueError(f"{column} fuera de rango: {value!r}")
    return number

def row_to_stock(row: Dict[str, Any]) -> StockItemCreate:
    """Map one spreadsheet row to a stock item. Missing text -> "", missing numbers -> 0."""
    return StockItemCreate(
        sku=_text(row.get("SKU")),
        producto=_text(row.get("PRODUCTO")),
        autor=_text(row.get("AUTOR")),
        categoria=_text(row.get("CATEGORIA")),
        precioUSD=_number("PRECIOUSD", row.get("PRECIOUSD")),
        stock=_number("STOCK", row.get("STOCK"), int),
        estante=_number("ESTANTE", row.get("ESTANTE"), int),
    )

async def import_rows(db, rows: List[Dict[str, Any]]) -> ImportSummary:
    """
    Insert one stock document per row, one at a time.
    A bad row is logged and counted; the rest of the file still goes in.
    Rows are not checked against existing SKUs.
    """
    summary = ImportSummary()
    for row in rows:
        try:
            item = row_to_stock(row)
            await db[STOCK].insert_one(item.model_dump())
            summary.uploaded += 1
        except (ValueError, OverflowError, PyMongoError) as exc:
            summary.errors += 1
            logger.error("Error al subir item: %s", exc)
            summary.messages.append(f"Error en item {summary.uploaded + summary.errors}: {exc}")
    logger.info(summary.status)
    return summary
