"""
Almacén remoto sobre una API HTTP de documentos (httpx).

PUT    {base}/collections/{c}/documents/{key}   — reemplazo completo
GET    {base}/collections/{c}/documents/{key}
DELETE {base}/collections/{c}/documents/{key}   — 404 cuenta como éxito
POST   {base}/collections/{c}:query             — {"documents": [...]}

Cada respuesta no exitosa se clasifica en transitoria o permanente; no se
reintenta aquí.
"""

import logging

import httpx

from finca.core.exceptions import (
    RemoteAuthError,
    RemoteRejectedError,
    RemoteStoreError,
    RemoteUnavailableError,
)
from finca.remote.base import QueryFilter, RemoteStore

logger = logging.getLogger(__name__)

# Códigos que se reintentan en el próximo barrido
_TRANSIENT_STATUS = {408, 425, 429}


def classify_response(response: httpx.Response, operation: str) -> RemoteStoreError:
    """Convierte una respuesta de error en la excepción correspondiente."""
    code = response.status_code
    try:
        data = response.json()
    except ValueError:
        data = {"body": response.text[:500]}
    if not isinstance(data, dict):
        data = {"body": data}

    message = f"{operation} rechazado por el almacén remoto (status {code})"
    if code in _TRANSIENT_STATUS or code >= 500:
        return RemoteUnavailableError(message, status_code=code, response_data=data)
    if code == 401:
        return RemoteAuthError(message, status_code=code, response_data=data)
    return RemoteRejectedError(message, status_code=code, response_data=data)


class HttpDocumentStore(RemoteStore):
    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _document_url(self, collection: str, key: str) -> str:
        return f"{self._base_url}/collections/{collection}/documents/{key}"

    async def _request(self, method: str, url: str, operation: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                return await client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.TimeoutException as exc:
            raise RemoteUnavailableError(f"Timeout en {operation}: {exc}") from exc
        except httpx.RequestError as exc:
            raise RemoteUnavailableError(f"Error de conexión en {operation}: {exc}") from exc

    # ── Operaciones ──────────────────────────────────

    async def upsert(self, collection: str, key: str, document: dict) -> None:
        operation = f"upsert {collection}/{key}"
        response = await self._request(
            "PUT", self._document_url(collection, key), operation, json=document
        )
        if not response.is_success:
            raise classify_response(response, operation)

    async def delete(self, collection: str, key: str) -> None:
        operation = f"delete {collection}/{key}"
        response = await self._request("DELETE", self._document_url(collection, key), operation)
        if response.status_code == 404:
            logger.debug(f"{operation}: el documento ya no existía")
            return
        if not response.is_success:
            raise classify_response(response, operation)

    async def get(self, collection: str, key: str) -> dict | None:
        operation = f"get {collection}/{key}"
        response = await self._request("GET", self._document_url(collection, key), operation)
        if response.status_code == 404:
            return None
        if not response.is_success:
            raise classify_response(response, operation)
        return response.json()

    async def query(
        self,
        collection: str,
        filters: list[QueryFilter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        operation = f"query {collection}"
        body = {
            "where": [f.model_dump(mode="json") for f in filters or []],
            "order_by": order_by,
            "descending": descending,
            "limit": limit,
        }
        response = await self._request(
            "POST", f"{self._base_url}/collections/{collection}:query", operation, json=body
        )
        if not response.is_success:
            raise classify_response(response, operation)
        return response.json().get("documents", [])
