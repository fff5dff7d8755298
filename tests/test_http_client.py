"""
HTTP client and error mapping tests against a local aiohttp server.
"""

import aiohttp
import pytest
from aiohttp import web
from aiohttp import test_utils

from contact_directory.client.api import ContactPagesAPI
from contact_directory.client.errors import error_from_response
from contact_directory.core.exceptions import (
    AppException,
    ConflictError,
    InvalidRoleError,
    NotFoundError,
    PartialFailureError,
    ValidationError,
)
from contact_directory.core.integrations.http.http_client import HttpClient


def _error(message, details=None):
    return {"error": {"message": message, "details": details, "path": "/x"}}


@pytest.mark.parametrize(
    "status, payload, expected",
    [
        (404, _error("Member not found"), NotFoundError),
        (409, _error("Contact already added"), ConflictError),
        (400, _error("Label is required"), ValidationError),
        (400, _error("Invalid role", {"role": "boss", "allowed": ["sales", "operations", "daily"]}), InvalidRoleError),
        (422, _error("Validation error", []), ValidationError),
        (500, _error("Internal server error"), AppException),
        (502, "Bad Gateway", AppException),
    ],
)
def test_error_from_response(status, payload, expected):
    error = error_from_response(status, payload)

    assert type(error) is expected
    assert error.status_code == status


def test_partial_failure_keeps_failed_ids():
    error = error_from_response(
        207,
        _error("1 of 2 reorder updates failed", {"success": False, "failures": [{"member_id": "m2", "reason": "x"}]}),
    )

    assert isinstance(error, PartialFailureError)
    assert error.failed_ids == ["m2"]


@pytest.fixture
async def server():
    requests = []

    async def handler(request):
        requests.append((request.method, request.path, request.headers.get("Authorization")))
        if request.path == "/api/v1/contact-pages/p1/members":
            return web.json_response({"items": [{"id": "m1"}], "total": 1})
        if request.path == "/api/v1/contact-pages/members/m1" and request.method == "DELETE":
            return web.Response(status=204)
        if request.path == "/api/v1/contact-pages/p1/members/reorder":
            body = await request.json()
            failures = [{"member_id": body["order"][0]["member_id"], "reason": "Member not found on this page"}]
            return web.json_response(
                _error("1 of 1 reorder updates failed", {"success": False, "failures": failures}),
                status=207,
            )
        return web.json_response(_error("Contact page not found"), status=404)

    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", handler)
    test_server = test_utils.TestServer(app)
    await test_server.start_server()
    test_server.requests = requests
    yield test_server
    await test_server.close()


@pytest.fixture
async def api(server):
    api = ContactPagesAPI(base_url=str(server.make_url("/api/v1")), token="secret")
    yield api
    await api.close()


@pytest.mark.asyncio
async def test_api_sends_bearer_token_and_unwraps_items(api, server):
    members = await api.get_members("p1")

    assert members == [{"id": "m1"}]
    assert server.requests == [("GET", "/api/v1/contact-pages/p1/members", "Bearer secret")]


@pytest.mark.asyncio
async def test_no_content_returns_none(api):
    assert await api.remove_member("m1") is None


@pytest.mark.asyncio
async def test_error_status_raises_mapped_error(api):
    with pytest.raises(NotFoundError) as exc_info:
        await api.get_page("missing")

    assert exc_info.value.message == "Contact page not found"


@pytest.mark.asyncio
async def test_multi_status_is_a_partial_failure(api):
    with pytest.raises(PartialFailureError) as exc_info:
        await api.reorder_members("p1", [{"member_id": "m9", "order_index": 0}])

    assert exc_info.value.failed_ids == ["m9"]


@pytest.mark.asyncio
async def test_connection_errors_retry_idempotent_requests(unused_tcp_port, caplog):
    client = HttpClient(base_url=f"http://127.0.0.1:{unused_tcp_port}", max_retries=3, retry_delay=0)

    with pytest.raises(aiohttp.ClientConnectionError):
        await client.get("/anything")
    await client.close()

    retries = [record for record in caplog.records if "Retrying" in record.getMessage()]
    assert len(retries) == 2


@pytest.mark.asyncio
async def test_post_is_not_retried(unused_tcp_port, caplog):
    client = HttpClient(base_url=f"http://127.0.0.1:{unused_tcp_port}", max_retries=3, retry_delay=0)

    with pytest.raises(aiohttp.ClientConnectionError):
        await client.post("/anything", json={})
    await client.close()

    assert not [record for record in caplog.records if "Retrying" in record.getMessage()]
