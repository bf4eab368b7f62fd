from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorClient
from stockpanel.core.config import settings

client = AsyncIOMotorClient(settings.mongo_uri)
db = client[settings.db_name]

STOCK = "stock"
SALES = "ventas"
RESERVATIONS = "reservas"
USERS = "users"

def get_db():
    """FastAPI dependency; overridden in tests with an in-memory database."""
    return db

def object_id(value: str, what: str = "item") -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=f"Invalid {what} id")
