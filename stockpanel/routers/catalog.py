from fastapi import APIRouter, Depends
from typing import List
from pydantic import BaseModel
from stockpanel.core.security import get_session

router = APIRouter(prefix="/api", tags=["catalog"], dependencies=[Depends(get_session)])

class Book(BaseModel):
    id: int
    title: str
    author: str
    genre: str
    status: str

class Member(BaseModel):
    id: int
    name: str
    email: str
    membershipType: str
    joinDate: str

# fixed lists shown by the panel; not backed by a collection
BOOKS = [
    Book(id=1, title="Cien años de soledad", author="Gabriel García Márquez", genre="Realismo mágico", status="Disponible"),
    Book(id=2, title="1984", author="George Orwell", genre="Ciencia ficción", status="Prestado"),
    Book(id=3, title="El principito", author="Antoine de Saint-Exupéry", genre="Literatura infantil", status="Disponible"),
    Book(id=4, title="Don Quijote de la Mancha", author="Miguel de Cervantes", genre="Novela", status="En reparación"),
]

MEMBERS = [
    Member(id=1, name="Juan Pérez", email="juan@example.com", membershipType="Estándar", joinDate="2023-01-15"),
    Member(id=2, name="María González", email="maria@example.com", membershipType="Premium", joinDate="2022-11-03"),
    Member(id=3, name="Carlos Rodríguez", email="carlos@example.com", membershipType="Estándar", joinDate="2024-02-20"),
    Member(id=4, name="Ana Martínez", email="ana@example.com", membershipType="Premium", joinDate="2023-07-08"),
]

@router.get("/libros", response_model=List[Book])
async def list_books():
    return BOOKS

@router.get("/miembros", response_model=List[Member])
async def list_members():
    return MEMBERS
