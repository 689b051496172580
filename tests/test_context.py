"""Tests for scan context registration and the engine probe."""

import httpx
import pytest
import respx
from httpx import Response

from zapscan.modules.scan import (
    CancellationToken,
    ContextRegistrar,
    EngineUnreachableError,
    ScanCancelledError,
    normalize_target,
    probe_engine,
)
from zapscan.modules.scan.context import include_pattern
from zapscan.tools.http import ZapClient

BASE_URL = "http://zap.test"
ZAP = f"{BASE_URL}/zap"


def fixed_clock() -> float:
    return 1700000000.0


class TestContextRegistrar:
    """Test ContextRegistrar.ensure."""

    @respx.mock
    async def test_reuses_context_covering_target(self):
        respx.get(f"{ZAP}/JSON/context/view/contextList/").mock(
            return_value=Response(200, json={"contextList": "[Default Context, shop]"})
        )

        def view(request):
            name = request.url.params["contextName"]
            if name == "shop":
                return Response(
                    200,
                    json={
                        "context": {
                            "id": "4",
                            "name": "shop",
                            "includeRegexs": "[https://example\\.com.*]",
                        }
                    },
                )
            return Response(200, json={"context": {"id": "1", "name": name, "includeRegexs": "[]"}})

        respx.get(f"{ZAP}/JSON/context/view/context/").mock(side_effect=view)

        async with ZapClient(base_url=BASE_URL) as client:
            registration = await ContextRegistrar(client).ensure(
                normalize_target("https://example.com/app")
            )

        assert registration is not None
        assert registration.name == "shop"
        assert registration.context_id == "4"
        assert not registration.created

    @respx.mock
    async def test_creates_context_when_none_covers_target(self):
        respx.get(f"{ZAP}/JSON/context/view/contextList/").mock(
            return_value=Response(200, json={"contextList": ["Default Context"]})
        )
        respx.get(f"{ZAP}/JSON/context/view/context/").mock(
            return_value=Response(200, json={"context": {"id": "1", "includeRegexs": []}})
        )
        new_route = respx.get(f"{ZAP}/JSON/context/action/newContext/").mock(
            return_value=Response(200, json={"contextId": "9"})
        )
        include_route = respx.get(f"{ZAP}/JSON/context/action/includeInContext/").mock(
            return_value=Response(200, json={"Result": "OK"})
        )

        async with ZapClient(base_url=BASE_URL) as client:
            registration = await ContextRegistrar(client, clock=fixed_clock).ensure(
                normalize_target("https://example.com/app")
            )

        assert registration.name == "scan-context-1700000000000"
        assert registration.context_id == "9"
        assert registration.created
        assert new_route.calls.last.request.url.params["contextName"] == registration.name
        include_params = include_route.calls.last.request.url.params
        assert include_params["regex"] == include_pattern("https://example.com/app")

    @respx.mock
    async def test_failure_falls_back_to_none(self):
        respx.get(f"{ZAP}/JSON/context/view/contextList/").mock(
            return_value=Response(500, text="internal error")
        )

        async with ZapClient(base_url=BASE_URL) as client:
            registration = await ContextRegistrar(client).ensure(
                normalize_target("https://example.com/")
            )

        assert registration is None

    def test_include_pattern_covers_subpaths(self):
        import re

        pattern = include_pattern("https://example.com/app")
        assert re.fullmatch(pattern, "https://example.com/app/login")
        assert not re.fullmatch(pattern, "https://exampleXcom/app")


class TestProbeEngine:
    """Test probe_engine."""

    @respx.mock
    async def test_returns_version(self):
        route = respx.get(f"{ZAP}/JSON/core/view/version/").mock(
            return_value=Response(200, json={"version": "2.15.0"})
        )

        async with ZapClient(base_url=BASE_URL) as client:
            assert await probe_engine(client) == "2.15.0"

        assert route.call_count == 1

    @respx.mock
    async def test_connection_refused_is_unreachable(self):
        route = respx.get(f"{ZAP}/JSON/core/view/version/").mock(
            side_effect=httpx.ConnectError("Connection refused")
        )

        async with ZapClient(base_url=BASE_URL) as client:
            with pytest.raises(EngineUnreachableError) as exc_info:
                await probe_engine(client)

        assert route.call_count == 1
        assert exc_info.value.endpoint == f"{BASE_URL}/zap"
        assert "No response from ZAP" in exc_info.value.user_message

    @respx.mock
    async def test_http_failure_is_unreachable_with_status(self):
        respx.get(f"{ZAP}/JSON/core/view/version/").mock(
            return_value=Response(403, text="Forbidden origin")
        )

        async with ZapClient(base_url=BASE_URL) as client:
            with pytest.raises(EngineUnreachableError) as exc_info:
                await probe_engine(client)

        assert exc_info.value.status == 403
        assert "HTTP 403 - Forbidden origin" in exc_info.value.user_message


class TestContextCancellation:
    """Test that registration stops issuing calls once cancelled."""

    @respx.mock
    async def test_cancel_during_listing_stops_registration(self):
        token = CancellationToken()

        def listing(request):
            token.cancel()
            return Response(200, json={"contextList": "[]"})

        respx.get(f"{ZAP}/JSON/context/view/contextList/").mock(side_effect=listing)
        new_route = respx.get(f"{ZAP}/JSON/context/action/newContext/").mock(
            return_value=Response(200, json={"contextId": "9"})
        )
        include_route = respx.get(f"{ZAP}/JSON/context/action/includeInContext/").mock(
            return_value=Response(200, json={"Result": "OK"})
        )

        async with ZapClient(base_url=BASE_URL) as client:
            registrar = ContextRegistrar(client, is_cancelled=token)
            with pytest.raises(ScanCancelledError):
                await registrar.ensure(normalize_target("https://example.com/app"))

        assert not new_route.called
        assert not include_route.called

    @respx.mock
    async def test_cancel_between_context_views(self):
        token = CancellationToken()
        respx.get(f"{ZAP}/JSON/context/view/contextList/").mock(
            return_value=Response(200, json={"contextList": ["one", "two"]})
        )

        def view(request):
            token.cancel()
            return Response(200, json={"context": {"id": "1", "includeRegexs": []}})

        view_route = respx.get(f"{ZAP}/JSON/context/view/context/").mock(side_effect=view)

        async with ZapClient(base_url=BASE_URL) as client:
            with pytest.raises(ScanCancelledError):
                await ContextRegistrar(client, is_cancelled=token).ensure(
                    normalize_target("https://example.com/app")
                )

        assert view_route.call_count == 1
