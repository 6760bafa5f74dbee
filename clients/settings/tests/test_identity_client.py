import json
import unittest
from pathlib import Path
import tempfile

from aiohttp import web
from aiohttp.test_utils import TestServer

from settings_app import session_store
from settings_app.identity_client import (
    BIND_PATH,
    THREEPID_PATH,
    UNBIND_PATH,
    HttpIdentityService,
    IdentityServiceError,
    validate_identity_server_url,
)
from settings_app.pid_state import IdentifierKind, SharedState

TOKEN = "syt_test_token"


def _create_app(threepids, requests):
    async def _authorized(request: web.Request) -> bool:
        return request.headers.get("Authorization") == f"Bearer {TOKEN}"

    async def list_threepids(request: web.Request) -> web.Response:
        requests.append(("GET", request.path, None))
        if not await _authorized(request):
            return web.json_response({"errcode": "M_UNKNOWN_TOKEN", "error": "Invalid token"}, status=401)
        return web.json_response({"threepids": threepids})

    async def bind(request: web.Request) -> web.Response:
        body = await request.json()
        requests.append(("POST", request.path, body))
        if body["address"] == "denied@example.org":
            return web.json_response({"errcode": "M_THREEPID_DENIED", "error": "not allowed"}, status=403)
        return web.json_response({})

    async def unbind(request: web.Request) -> web.Response:
        body = await request.json()
        requests.append(("POST", request.path, body))
        return web.json_response({"state": "not_shared"})

    app = web.Application()
    app.router.add_get(THREEPID_PATH, list_threepids)
    app.router.add_post(BIND_PATH, bind)
    app.router.add_post(UNBIND_PATH, unbind)
    return app


class HttpIdentityServiceTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.state_path = Path(self.tmpdir.name) / "session.json"
        self.requests = []
        self.threepids = [
            {"medium": "email", "address": "a@b.com", "bound": False},
            {"medium": "email", "address": "c@d.com", "bound": True},
            {"medium": "email", "address": "p@q.com", "pending": True},
            {"medium": "msisdn", "address": "+33 6 12 34 56 78", "state": "shared"},
            {"medium": "email", "address": "u@v.com"},
        ]
        self.server = TestServer(_create_app(self.threepids, self.requests))
        await self.server.start_server()
        self.binding = session_store.SessionBinding(
            homeserver_url=str(self.server.make_url("/")),
            access_token=TOKEN,
            identity_server_url="https://is.example.org",
        )
        session_store.save_binding(self.binding, self.state_path)
        self.service = HttpIdentityService(self.binding, state_path=self.state_path, timeout_s=5)

    async def asyncTearDown(self) -> None:
        await self.service.close()
        await self.server.close()
        self.tmpdir.cleanup()

    async def test_lists_identifiers_by_kind(self):
        emails = await self.service.list_bound_identifiers(IdentifierKind.EMAIL)
        self.assertEqual(
            emails,
            [
                ("a@b.com", SharedState.NOT_SHARED),
                ("c@d.com", SharedState.SHARED),
                ("p@q.com", SharedState.PENDING),
                ("u@v.com", SharedState.UNKNOWN),
            ],
        )
        phones = await self.service.list_bound_identifiers(IdentifierKind.PHONE)
        self.assertEqual(phones, [("33612345678", SharedState.SHARED)])

    async def test_bind_defaults_to_pending_and_sends_id_server_host(self):
        state = await self.service.bind_identifier(IdentifierKind.EMAIL, "a@b.com")
        self.assertIs(state, SharedState.PENDING)
        method, path, body = self.requests[-1]
        self.assertEqual((method, path), ("POST", BIND_PATH))
        self.assertEqual(body, {"medium": "email", "address": "a@b.com", "id_server": "is.example.org"})

    async def test_unbind_uses_server_state(self):
        state = await self.service.unbind_identifier(IdentifierKind.PHONE, "33612345678")
        self.assertIs(state, SharedState.NOT_SHARED)
        self.assertEqual(self.requests[-1][2]["medium"], "msisdn")

    async def test_error_response_raises_with_errcode(self):
        with self.assertRaises(IdentityServiceError) as ctx:
            await self.service.bind_identifier(IdentifierKind.EMAIL, "denied@example.org")
        self.assertEqual(ctx.exception.code, "M_THREEPID_DENIED")
        self.assertEqual(ctx.exception.status, 403)

    async def test_bad_token_is_rejected(self):
        service = HttpIdentityService(
            session_store.SessionBinding(self.binding.homeserver_url, "wrong", "https://is.example.org"),
            state_path=self.state_path,
        )
        try:
            with self.assertRaises(IdentityServiceError) as ctx:
                await service.list_bound_identifiers(IdentifierKind.EMAIL)
        finally:
            await service.close()
        self.assertEqual(ctx.exception.code, "M_UNKNOWN_TOKEN")

    async def test_calls_without_identity_server_fail_fast(self):
        await self.service.set_identity_server(None)
        self.assertIsNone(self.service.get_identity_server_url())
        with self.assertRaises(IdentityServiceError) as ctx:
            await self.service.list_bound_identifiers(IdentifierKind.EMAIL)
        self.assertEqual(ctx.exception.code, "no_identity_server")
        self.assertEqual(self.requests, [])

    async def test_blank_identity_server_url_clears_binding(self):
        await self.service.set_identity_server("   ")
        self.assertIsNone(self.service.get_identity_server_url())
        stored = json.loads(self.state_path.read_text(encoding="utf-8"))
        self.assertIsNone(stored["identity_server_url"])

    async def test_set_identity_server_persists_binding(self):
        await self.service.set_identity_server("matrix.example.org/")
        self.assertEqual(self.service.get_identity_server_url(), "https://matrix.example.org")
        stored = json.loads(self.state_path.read_text(encoding="utf-8"))
        self.assertEqual(stored["identity_server_url"], "https://matrix.example.org")

    async def test_unreachable_homeserver_is_network_error(self):
        service = HttpIdentityService(
            session_store.SessionBinding("http://127.0.0.1:9", TOKEN, "https://is.example.org"),
            state_path=self.state_path,
            timeout_s=2,
        )
        try:
            with self.assertRaises(IdentityServiceError) as ctx:
                await service.list_bound_identifiers(IdentifierKind.EMAIL)
        finally:
            await service.close()
        self.assertEqual(ctx.exception.code, "network_error")


class ValidateIdentityServerUrlTests(unittest.TestCase):
    def test_adds_https_scheme_and_strips_slash(self):
        self.assertEqual(validate_identity_server_url("vector.im/"), "https://vector.im")

    def test_rejects_other_schemes(self):
        with self.assertRaises(IdentityServiceError):
            validate_identity_server_url("ftp://vector.im")
