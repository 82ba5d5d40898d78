"""Google token verification tests against a mocked Google API."""

import httpx
import pytest

from audiobook.config import get_settings
from audiobook.services.google import TOKENINFO_URL, USERINFO_URL, GoogleAuthService

PROFILE = {"email": "reader@gmail.com", "name": "Google Reader", "picture": "https://pic"}


def _service(handler, client_id: str | None = "client-123") -> GoogleAuthService:
    service = GoogleAuthService(transport=httpx.MockTransport(handler))
    service.settings = get_settings().model_copy(update={"google_client_id": client_id})
    return service


def _route(tokeninfo: httpx.Response, userinfo: httpx.Response, calls: list[str]):
    def handler(request: httpx.Request) -> httpx.Response:
        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        calls.append(url)
        if url == TOKENINFO_URL:
            return tokeninfo
        if url == USERINFO_URL:
            return userinfo
        return httpx.Response(404)

    return handler


class TestGoogleVerification:
    @pytest.mark.asyncio
    async def test_valid_id_token(self):
        calls = []
        claims = {**PROFILE, "aud": "client-123"}
        service = _service(_route(httpx.Response(200, json=claims), httpx.Response(401), calls))

        profile = await service.verify("id-token")

        assert profile["email"] == "reader@gmail.com"
        assert calls == [TOKENINFO_URL]

    @pytest.mark.asyncio
    async def test_id_token_for_other_client_is_rejected(self):
        calls = []
        claims = {**PROFILE, "aud": "someone-else"}
        service = _service(_route(httpx.Response(200, json=claims), httpx.Response(401), calls))

        assert await service.verify("id-token") is None
        assert calls == [TOKENINFO_URL, USERINFO_URL]

    @pytest.mark.asyncio
    async def test_falls_back_to_userinfo_for_access_tokens(self):
        calls = []
        service = _service(
            _route(
                httpx.Response(400, json={"error": "invalid_token"}),
                httpx.Response(200, json=PROFILE),
                calls,
            )
        )

        profile = await service.verify("access-token")

        assert profile == PROFILE
        assert calls == [TOKENINFO_URL, USERINFO_URL]

    @pytest.mark.asyncio
    async def test_userinfo_sends_bearer_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/tokeninfo"):
                assert request.url.params["id_token"] == "access-token"
                return httpx.Response(400)
            seen["authorization"] = request.headers["Authorization"]
            return httpx.Response(200, json=PROFILE)

        await _service(handler).verify("access-token")
        assert seen["authorization"] == "Bearer access-token"

    @pytest.mark.asyncio
    async def test_network_error_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        assert await _service(handler).verify("id-token") is None

    @pytest.mark.asyncio
    async def test_non_json_body_returns_none(self):
        calls = []
        service = _service(
            _route(httpx.Response(200, text="<html>"), httpx.Response(200, text="<html>"), calls)
        )

        assert await service.verify("id-token") is None

    @pytest.mark.asyncio
    async def test_any_audience_accepted_without_client_id(self):
        calls = []
        claims = {**PROFILE, "aud": "whatever"}
        service = _service(
            _route(httpx.Response(200, json=claims), httpx.Response(401), calls), client_id=None
        )

        assert (await service.verify("id-token"))["aud"] == "whatever"
