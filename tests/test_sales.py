import pytest
from fastapi import HTTPException

from conftest import read_stock, signup_and_login, stock_doc
from stockpanel.db import SALES, STOCK
from stockpanel.models.inventory import StockItemDB
from stockpanel.services import sales
from stockpanel.services.sales import Cart


def book(**kw):
    fields = dict(id="a1", sku="LIB-001", producto="Rayuela", precioUSD=10, stock=10)
    fields.update(kw)
    return StockItemDB(**fields)


def test_cart_prices_lines_at_add_time():
    cart = Cart(350)
    line = cart.add(book())
    assert (line.quantity, line.efectivo, line.tarjeta, line.precioVenta) == (1, 3500, 4000, 3500)

    cart.add(book())
    assert len(cart.lines) == 1
    assert cart.lines[0].quantity == 2
    assert cart.total == 7000


def test_edited_sell_price_is_kept():
    cart = Cart(350)
    cart.add(book())
    cart.set_sell_price("a1", 3000)
    cart.add(book())
    assert cart.lines[0].precioVenta == 3000
    assert cart.lines[0].efectivo == 3500
    assert cart.total == 6000
    with pytest.raises(KeyError):
        cart.set_sell_price("missing", 1)


def test_cart_remove_and_clear():
    cart = Cart(350)
    cart.add(book())
    cart.add(book(id="b2", sku="LIB-002", precioUSD=4))
    cart.remove("a1")
    assert [line.id for line in cart.lines] == ["b2"]
    cart.clear()
    assert cart.lines == [] and cart.total == 0


def test_quote_and_register_sale(client, auth_headers, seed_stock):
    [item_id] = seed_stock()

    r = client.post("/api/sales/quote", json=[{"id": item_id, "quantity": 2}], headers=auth_headers)
    assert r.status_code == 200
    lines = r.json()
    assert lines[0]["efectivo"] == 3500 and lines[0]["tarjeta"] == 4000 and lines[0]["stock"] == 10

    r = client.post("/api/sales/", json={"items": lines}, headers=auth_headers)
    assert r.status_code == 201, r.text
    receipt = r.json()
    assert receipt["sale"]["total"] == 7000
    assert receipt["sale"]["items"][0]["SKU"] == "LIB-001"
    assert receipt["sale"]["items"][0]["CANTIDAD"] == 2
    assert receipt["stock"] == {"updated": 1, "errors": []}

    r = client.get(f"/api/stock/{item_id}", headers=auth_headers)
    assert r.json()["stock"] == 8

    r = client.get("/api/sales/", headers=auth_headers)
    assert [s["total"] for s in r.json()] == [7000]


def test_empty_sale_is_rejected(client, auth_headers):
    r = client.post("/api/sales/", json={"items": []}, headers=auth_headers)
    assert r.status_code == 422


def test_sales_are_listed_per_user(client, auth_headers, seed_stock):
    [item_id] = seed_stock()
    lines = client.post("/api/sales/quote", json=[{"id": item_id}], headers=auth_headers).json()
    client.post("/api/sales/", json={"items": lines}, headers=auth_headers)

    other = signup_and_login(client, username="otra", email="otra@example.com")
    assert client.get("/api/sales/", headers=other).json() == []


@pytest.mark.anyio
async def test_decrement_uses_cart_snapshot(mongo, session):
    res = await mongo[STOCK].insert_one(stock_doc(stock=10))
    item = StockItemDB.from_document(await mongo[STOCK].find_one({"_id": res.inserted_id}))

    first, second = Cart(350), Cart(350)
    first.add(item, 2)
    second.add(item, 3)
    await sales.record_sale(mongo, session, first.lines)
    await sales.record_sale(mongo, session, second.lines)

    # both carts saw 10 units; the second write wins
    assert await read_stock(mongo, res.inserted_id) == 7
    assert await mongo[SALES].count_documents({}) == 2


@pytest.mark.anyio
async def test_atomic_mode_refuses_overselling(mongo, session):
    res = await mongo[STOCK].insert_one(stock_doc(stock=1))
    item = StockItemDB.from_document(await mongo[STOCK].find_one({"_id": res.inserted_id}))
    cart = Cart(350)
    cart.add(item, 3)

    with pytest.raises(HTTPException) as exc:
        await sales.record_sale(mongo, session, cart.lines, mode="atomic")

    assert exc.value.status_code == 409
    assert "insufficient stock" in exc.value.detail
    assert await read_stock(mongo, res.inserted_id) == 1
    assert await mongo[SALES].count_documents({}) == 0


@pytest.mark.anyio
async def test_atomic_mode_gives_back_lines_taken_before_a_refusal(mongo, session):
    plenty = await mongo[STOCK].insert_one(stock_doc(stock=5))
    scarce = await mongo[STOCK].insert_one(stock_doc(sku="LIB-002", stock=1))
    cart = Cart(350)
    for res in (plenty, scarce):
        cart.add(StockItemDB.from_document(await mongo[STOCK].find_one({"_id": res.inserted_id})), 2)

    with pytest.raises(HTTPException) as exc:
        await sales.record_sale(mongo, session, cart.lines, mode="atomic")

    assert exc.value.detail.startswith("LIB-002")
    assert await read_stock(mongo, plenty.inserted_id) == 5
    assert await read_stock(mongo, scarce.inserted_id) == 1


@pytest.mark.anyio
async def test_atomic_mode_takes_stock_for_a_valid_sale(mongo, session):
    res = await mongo[STOCK].insert_one(stock_doc(stock=4))
    cart = Cart(350)
    cart.add(StockItemDB.from_document(await mongo[STOCK].find_one({"_id": res.inserted_id})), 3)

    receipt = await sales.record_sale(mongo, session, cart.lines, mode="atomic")

    assert receipt.stock.updated == 1 and receipt.stock.errors == []
    assert await read_stock(mongo, res.inserted_id) == 1
    assert await mongo[SALES].count_documents({}) == 1


@pytest.mark.anyio
async def test_missing_stock_item_is_reported_not_raised(mongo, session):
    cart = Cart(350)
    cart.add(book(id="64b7f0c2a1b2c3d4e5f60718"))
    receipt = await sales.record_sale(mongo, session, cart.lines)
    assert receipt.sale.total == 3500
    assert receipt.stock.errors == ["LIB-001: Item not found"]


@pytest.mark.anyio
async def test_record_sale_needs_lines(mongo, session):
    with pytest.raises(HTTPException) as exc:
        await sales.record_sale(mongo, session, [])
    assert exc.value.status_code == 400
