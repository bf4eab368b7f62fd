# stockpanel/models/inventory.py
from enum import Enum
from typing import Any, Callable, Dict, List

from pydantic import BaseModel, Field, computed_field

class Category(str, Enum):
    """Known categories; the store also accepts any free-text category."""
    ALFAJORES = "ALFAJORES"
    AUDIOVISUAL = "AUDIOVISUAL"
    CAFE = "CAFE"
    CHOCOLATE = "CHOCOLATE"
    COMPUTACION = "COMPUTACION"
    ESCOLAR = "ESCOLAR"
    INGLES = "INGLES"
    JUEGOS = "JUEGOS"
    LIBRO = "LIBRO"
    LIBROS = "LIBROS"
    MANGA = "MANGA"
    VINOS = "VINOS"

    @classmethod
    def is_known(cls, value: str) -> bool:
        return value in cls._value2member_map_


def _text(value: Any) -> str:
    if value is None or value == "":
        return ""
    return str(value)

def _number(value: Any, cast: Callable = float):
    try:
        result = cast(value or 0)
    except (TypeError, ValueError, OverflowError):
        return cast(0)
    return result if result == result else cast(0)  # NaN -> 0


class StockItemCreate(BaseModel):
    sku: str = ""
    producto: str = ""
    autor: str = ""
    categoria: str = ""
    precioUSD: float = 0
    stock: int = 0
    estante: int = 0

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "StockItemCreate":
        """Lenient read of a stored document: missing strings -> "", missing numbers -> 0."""
        return cls(
            sku=_text(doc.get("sku")),
            producto=_text(doc.get("producto")),
            autor=_text(doc.get("autor")),
            categoria=_text(doc.get("categoria")),
            precioUSD=_number(doc.get("precioUSD")),
            stock=_number(doc.get("stock"), lambda v: int(float(v))),
            estante=_number(doc.get("estante"), lambda v: int(float(v))),
        )

class StockItemDB(StockItemCreate):
    id: str = Field(alias="id")

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "StockItemDB":
        base = StockItemCreate.from_document(doc)
        return cls(id=str(doc.get("_id", doc.get("id"))), **base.model_dump())


class SearchField(str, Enum):
    sku = "sku"
    autor = "autor"
    producto = "producto"

    def value_of(self, item: StockItemCreate) -> str:
        return SEARCH_FIELD_ACCESSORS[self](item)

SEARCH_FIELD_ACCESSORS: Dict[SearchField, Callable[[StockItemCreate], str]] = {
    SearchField.sku: lambda item: item.sku,
    SearchField.autor: lambda item: item.autor,
    SearchField.producto: lambda item: item.producto,
}


class ImportSummary(BaseModel):
    uploaded: int = 0
    errors: int = 0
    messages: List[str] = []

    @computed_field
    @property
    def status(self) -> str:
        return f"Carga completada. {self.uploaded} items subidos. {self.errors} errores."
