"""
Almacén remoto en memoria.

Se usa en desarrollo (REMOTE_STORE_BACKEND=memory) y en los tests. El
switch `online` simula pérdida de conectividad y `fail_next` inyecta
errores concretos para una colección/clave.
"""

import copy
import logging
from collections import defaultdict

from finca.core.exceptions import RemoteStoreError, RemoteUnavailableError
from finca.remote.base import QueryFilter, RemoteStore

logger = logging.getLogger(__name__)


class MemoryDocumentStore(RemoteStore):
    def __init__(self, online: bool = True):
        self.online = online
        self.collections: dict[str, dict[str, dict]] = defaultdict(dict)
        self.calls: list[tuple[str, str, str]] = []
        self._failures: dict[tuple[str, str], list[RemoteStoreError]] = defaultdict(list)

    def fail_next(self, collection: str, key: str, error: RemoteStoreError) -> None:
        """La próxima operación sobre (collection, key) lanza `error`."""
        self._failures[(collection, key)].append(error)

    def _check(self, operation: str, collection: str, key: str = "") -> None:
        self.calls.append((operation, collection, key))
        if not self.online:
            raise RemoteUnavailableError(f"{operation} {collection}/{key}: sin conexión")
        pending = self._failures.get((collection, key))
        if pending:
            raise pending.pop(0)

    async def upsert(self, collection: str, key: str, document: dict) -> None:
        self._check("upsert", collection, key)
        self.collections[collection][key] = copy.deepcopy(document)

    async def delete(self, collection: str, key: str) -> None:
        self._check("delete", collection, key)
        self.collections[collection].pop(key, None)

    async def get(self, collection: str, key: str) -> dict | None:
        self._check("get", collection, key)
        document = self.collections[collection].get(key)
        return copy.deepcopy(document) if document is not None else None

    async def query(
        self,
        collection: str,
        filters: list[QueryFilter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        self._check("query", collection)
        documents = [
            copy.deepcopy(doc)
            for doc in self.collections[collection].values()
            if all(f.matches(doc) for f in filters or [])
        ]
        if order_by:
            documents.sort(key=lambda doc: (doc.get(order_by) is None, doc.get(order_by)), reverse=descending)
        if limit is not None:
            documents = documents[:limit]
        return documents
