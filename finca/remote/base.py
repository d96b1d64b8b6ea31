"""
Contrato del almacén remoto de documentos.

Una colección por tipo de entidad, clave = identidad del registro.
Las escrituras son reemplazo completo (sin merge) y no hay reintentos
internos: los reintentos son responsabilidad del barrido.
"""

from abc import ABC, abstractmethod
from typing import Any, Literal

from pydantic import BaseModel

FilterOp = Literal["==", "<", "<=", ">", ">="]


class QueryFilter(BaseModel):
    field: str
    op: FilterOp = "=="
    value: Any = None

    def matches(self, document: dict) -> bool:
        if self.field not in document:
            return False
        current = document[self.field]
        if self.op == "==":
            return current == self.value
        if current is None or self.value is None:
            return False
        if self.op == "<":
            return current < self.value
        if self.op == "<=":
            return current <= self.value
        if self.op == ">":
            return current > self.value
        return current >= self.value


class RemoteStore(ABC):
    @abstractmethod
    async def upsert(self, collection: str, key: str, document: dict) -> None:
        """Reemplaza el documento completo."""

    @abstractmethod
    async def delete(self, collection: str, key: str) -> None:
        """Borra el documento; si no existe no es un error."""

    @abstractmethod
    async def get(self, collection: str, key: str) -> dict | None:
        ...

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: list[QueryFilter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        ...

    async def aclose(self) -> None:
        return None
