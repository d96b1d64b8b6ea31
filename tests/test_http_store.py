"""
Tests del almacén remoto HTTP usando httpx.MockTransport.
"""

import json

import httpx
import pytest

from finca.core.exceptions import RemoteAuthError, RemoteRejectedError, RemoteUnavailableError
from finca.remote.base import QueryFilter
from finca.remote.http_store import HttpDocumentStore

BASE_URL = "https://docs.test/v1"


def make_store(handler) -> HttpDocumentStore:
    return HttpDocumentStore(
        base_url=BASE_URL + "/",
        token="secreto",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


async def test_upsert_puts_full_document_with_bearer_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    await make_store(handler).upsert("animals", "abc", {"id": "abc", "name": "Bella"})

    assert seen["method"] == "PUT"
    assert seen["url"] == f"{BASE_URL}/collections/animals/documents/abc"
    assert seen["auth"] == "Bearer secreto"
    assert seen["body"] == {"id": "abc", "name": "Bella"}


async def test_delete_treats_404_as_success():
    store = make_store(lambda request: httpx.Response(404))
    await store.delete("animals", "abc")


async def test_get_missing_document_returns_none():
    store = make_store(lambda request: httpx.Response(404))
    assert await store.get("animals", "abc") is None


async def test_query_sends_filters_and_returns_documents():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"documents": [{"id": "m1"}]})

    documents = await make_store(handler).query(
        "milk_productions",
        filters=[QueryFilter(field="animal_id", value="abc"), QueryFilter(field="quantity_liters", op=">", value=5)],
        order_by="date",
        descending=True,
        limit=10,
    )

    assert documents == [{"id": "m1"}]
    assert seen["url"] == f"{BASE_URL}/collections/milk_productions:query"
    assert seen["body"] == {
        "where": [
            {"field": "animal_id", "op": "==", "value": "abc"},
            {"field": "quantity_liters", "op": ">", "value": 5},
        ],
        "order_by": "date",
        "descending": True,
        "limit": 10,
    }


@pytest.mark.parametrize(
    ("status_code", "error_type"),
    [
        (500, RemoteUnavailableError),
        (503, RemoteUnavailableError),
        (429, RemoteUnavailableError),
        (408, RemoteUnavailableError),
        (401, RemoteAuthError),
        (400, RemoteRejectedError),
        (403, RemoteRejectedError),
        (404, RemoteRejectedError),
        (422, RemoteRejectedError),
    ],
)
async def test_upsert_error_classification(status_code, error_type):
    store = make_store(lambda request: httpx.Response(status_code, json={"error": "x"}))

    with pytest.raises(error_type) as exc_info:
        await store.upsert("animals", "abc", {})

    assert exc_info.value.status_code == status_code
    assert exc_info.value.permanent is (error_type is RemoteRejectedError)


async def test_connection_error_is_transient():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("sin red", request=request)

    with pytest.raises(RemoteUnavailableError) as exc_info:
        await make_store(handler).upsert("animals", "abc", {})

    assert exc_info.value.permanent is False


async def test_timeout_is_transient():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("lento", request=request)

    with pytest.raises(RemoteUnavailableError):
        await make_store(handler).delete("animals", "abc")
