from io import BytesIO

import pytest
from fastapi import HTTPException
from openpyxl import Workbook

from stockpanel.db import STOCK
from stockpanel.services import importer

HEADER = ["SKU", "PRODUCTO", "AUTOR", "CATEGORIA", "PRECIOUSD", "STOCK", "ESTANTE"]


def workbook_bytes(rows, header=HEADER):
    wb = Workbook()
    ws = wb.active
    ws.append(header)
    for row in rows:
        ws.append(row)
    wb.create_sheet("ignored").append(HEADER)
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


ROWS = [
    ["LIB-001", "Rayuela", "Julio Cortázar", "LIBROS", 10, 4, 1],
    ["CAF-002", "Café molido", None, "CAFE", 3.5, 20, 2],
    ["LIB-003", "Ficciones", "Borges", "LIBROS", "no sabe", 1, 1],
    [1234, "Alfajor", "", "ALFAJORES", None, None, None],
]


def test_read_rows_uses_first_sheet_and_skips_blank_rows():
    rows = importer.read_rows(workbook_bytes([ROWS[0], [None] * 7, ROWS[1]]))
    assert [row["SKU"] for row in rows] == ["LIB-001", "CAF-002"]


def test_row_defaults():
    item = importer.row_to_stock({"SKU": 1234, "PRODUCTO": "Alfajor"})
    assert item.sku == "1234"
    assert item.autor == ""
    assert (item.precioUSD, item.stock, item.estante) == (0, 0, 0)


def test_row_with_bad_number():
    with pytest.raises(ValueError):
        importer.row_to_stock({"SKU": "X", "STOCK": "muchos"})


def test_out_of_range_count_is_a_row_error():
    with pytest.raises(ValueError):
        importer.row_to_stock({"SKU": "X", "STOCK": 1e20})
    with pytest.raises(ValueError):
        importer.row_to_stock({"SKU": "X", "ESTANTE": float("inf")})


@pytest.mark.anyio
async def test_huge_cell_does_not_stop_the_batch(mongo):
    rows = [{"SKU": "BIG", "STOCK": 1e20}, {"SKU": "OK", "STOCK": 2}]
    summary = await importer.import_rows(mongo, rows)

    assert (summary.uploaded, summary.errors) == (1, 1)
    assert summary.messages[0].startswith("Error en item 1")
    assert await mongo[STOCK].count_documents({"sku": "OK"}) == 1


def test_unreadable_file():
    with pytest.raises(HTTPException) as exc:
        importer.read_rows(b"not a spreadsheet")
    assert exc.value.status_code == 400


@pytest.mark.anyio
async def test_bad_row_is_skipped(mongo):
    summary = await importer.import_rows(mongo, importer.read_rows(workbook_bytes(ROWS)))

    assert summary.uploaded == 3
    assert summary.errors == 1
    assert summary.messages[0].startswith("Error en item 3")
    assert await mongo[STOCK].count_documents({}) == 3
    assert await mongo[STOCK].count_documents({"sku": "LIB-003"}) == 0


@pytest.mark.anyio
async def test_reimport_duplicates(mongo):
    content = workbook_bytes(ROWS[:1])
    await importer.import_rows(mongo, importer.read_rows(content))
    await importer.import_rows(mongo, importer.read_rows(content))
    assert await mongo[STOCK].count_documents({"sku": "LIB-001"}) == 2


def test_import_endpoint(client, auth_headers):
    files = {"file": ("stock.xlsx", workbook_bytes(ROWS), "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")}
    r = client.post("/api/stock/import", files=files, headers=auth_headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["uploaded"] == 3
    assert body["errors"] == 1
    assert body["status"] == "Carga completada. 3 items subidos. 1 errores."

    skus = {i["sku"] for i in client.get("/api/stock/all", headers=auth_headers).json()}
    assert skus == {"LIB-001", "CAF-002", "1234"}


def test_import_endpoint_rejects_garbage(client, auth_headers):
    r = client.post("/api/stock/import", files={"file": ("x.xlsx", b"garbage", "text/plain")}, headers=auth_headers)
    assert r.status_code == 400
