"""
Tests for the portal API client against a local aiohttp server
"""
import contextlib

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from courtage.api.client import TOKEN_KEY, ApiClient, ApiError
from courtage.api.models import CMSContent, Partner
from courtage.api.portal import MAX_CACHED_LOGO_SIZE, PortalAPI, strip_large_logos
from courtage.cache.config import CacheKeys, CacheTTL

LARGE_LOGO = "A" * (MAX_CACHED_LOGO_SIZE + 1)

PARTNERS = [
    {"id": 1, "nom": "Swiss Life", "category": "coa", "is_active": True, "logo_content": LARGE_LOGO},
    {"id": 2, "nom": "Generali", "category": "cif", "is_active": True, "logo_content": "c21hbGw="},
]


def build_portal_app(requests):
    """Minimal portal API recording every request it receives"""

    async def record(request):
        requests.append(
            {
                "path": request.path,
                "method": request.method,
                "query": dict(request.query),
                "token": request.headers.get("x-auth-token"),
            }
        )

    async def partners(request):
        await record(request)
        return web.json_response(PARTNERS)

    async def login(request):
        await record(request)
        body = await request.json()
        if body.get("password") != "secret":
            return web.json_response({"error": "Identifiants invalides"}, status=401)
        return web.json_response({"token": "tok-123", "user": {"email": body["email"], "role": "user"}})

    async def logout(request):
        await record(request)
        return web.json_response({"error": "Session introuvable"}, status=500)

    async def cms_home(request):
        await record(request)
        return web.json_response({"content": '{"welcomeTitle": "Bienvenue chez Alliance Courtage"}'})

    async def recent_archives(request):
        await record(request)
        return web.json_response({"error": "Droits insuffisants"}, status=403)

    async def broken(request):
        await record(request)
        return web.Response(status=502, text="Bad gateway")

    app = web.Application()
    app.router.add_get("/api/partners", partners)
    app.router.add_post("/api/auth/login", login)
    app.router.add_post("/api/auth/logout", logout)
    app.router.add_get("/api/cms/home", cms_home)
    app.router.add_get("/api/archives/recent", recent_archives)
    app.router.add_get("/api/broken", broken)
    return app


@contextlib.asynccontextmanager
async def portal_client(store, requests):
    async with TestServer(build_portal_app(requests)) as server:
        async with ApiClient(base_url=str(server.make_url("/api")), store=store) as client:
            yield client


class TestApiClient:
    """Test request building and error handling"""

    @pytest.mark.asyncio
    async def test_sends_stored_token(self, store):
        requests = []
        store.set_item(TOKEN_KEY, "tok-abc")
        async with portal_client(store, requests) as client:
            data = await client.request("/partners", params={"active": False})

        assert [p["id"] for p in data] == [1, 2]
        assert requests[0]["token"] == "tok-abc"
        assert requests[0]["query"] == {"active": "false"}

    @pytest.mark.asyncio
    async def test_no_token_header_without_login(self, store):
        requests = []
        async with portal_client(store, requests) as client:
            await client.request("/partners")

        assert requests[0]["token"] is None

    @pytest.mark.asyncio
    async def test_error_message_from_server(self, store):
        async with portal_client(store, []) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.request("/archives/recent")

        assert exc_info.value.message == "Droits insuffisants"
        assert exc_info.value.status == 403

    @pytest.mark.asyncio
    async def test_non_json_error(self, store):
        async with portal_client(store, []) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.request("/broken")

        assert exc_info.value.message == "Erreur serveur"
        assert exc_info.value.status == 502

    @pytest.mark.asyncio
    async def test_connection_error(self, store):
        async with ApiClient(base_url="http://127.0.0.1:1/api", store=store, timeout=2) as client:
            with pytest.raises(ApiError):
                await client.request("/partners")

    @pytest.mark.asyncio
    async def test_login_stores_token(self, store):
        requests = []
        async with portal_client(store, requests) as client:
            data = await client.login("courtier@example.com", "secret")
            await client.request("/partners")

        assert data["user"]["role"] == "user"
        assert store.get_item(TOKEN_KEY) == "tok-123"
        assert requests[-1]["token"] == "tok-123"

    @pytest.mark.asyncio
    async def test_login_failure(self, store):
        async with portal_client(store, []) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.login("courtier@example.com", "wrong")

        assert exc_info.value.message == "Identifiants invalides"
        assert store.get_item(TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_logout_drops_token_even_on_error(self, store):
        store.set_item(TOKEN_KEY, "tok-123")
        async with portal_client(store, []) as client:
            with pytest.raises(ApiError):
                await client.logout()

        assert store.get_item(TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_clearing_cache_keeps_token(self, store, cache):
        store.set_item(TOKEN_KEY, "tok-123")
        cache.set_cached_data(CacheKeys.PARTNERS, PARTNERS, CacheTTL.LONG)

        cache.clear_all_cache()

        assert store.get_item(TOKEN_KEY) == "tok-123"


class TestPortalAPI:
    """Test portal fetchers wired to the cache"""

    @pytest.mark.asyncio
    async def test_partner_resource_fetches_once(self, store, cache):
        requests = []
        async with portal_client(store, requests) as client:
            portal = PortalAPI(client, cache=cache)

            first = portal.resource(CacheKeys.PARTNERS)
            await first.activate()
            second = portal.resource(CacheKeys.PARTNERS)
            await second.activate()

        assert len(requests) == 1
        assert first.ttl == CacheTTL.LONG
        assert "logo_content" not in first.data[0]
        assert first.data[1]["logo_content"] == "c21hbGw="
        assert second.data == first.data

    @pytest.mark.asyncio
    async def test_partner_models(self, store):
        async with portal_client(store, []) as client:
            partners = await PortalAPI(client).get_partner_models()

        assert all(isinstance(p, Partner) for p in partners)
        assert partners[0].nom == "Swiss Life"

    @pytest.mark.asyncio
    async def test_cms_resource(self, store, cache):
        async with portal_client(store, []) as client:
            resource = PortalAPI(client, cache=cache).resource(CacheKeys.CMS_ACCUEIL)
            await resource.activate()

        assert resource.data["page"] == "home"
        content = CMSContent.model_validate(resource.data)
        assert content.parsed() == {"welcomeTitle": "Bienvenue chez Alliance Courtage"}
        assert cache.get_cached_data(CacheKeys.CMS_ACCUEIL) == resource.data

    @pytest.mark.asyncio
    async def test_resource_error_state(self, store, cache):
        async with portal_client(store, []) as client:
            resource = PortalAPI(client, cache=cache).resource(CacheKeys.ARCHIVES_RECENT)
            await resource.activate()

        assert resource.ttl == CacheTTL.SHORT
        assert isinstance(resource.error, ApiError)
        assert resource.data is None
        assert resource.loading is False

    def test_unknown_key(self, store, cache):
        portal = PortalAPI(ApiClient(base_url="http://localhost/api", store=store), cache=cache)
        with pytest.raises(KeyError):
            portal.resource("unknown")

    def test_resource_ttl_override(self, store, cache):
        portal = PortalAPI(ApiClient(base_url="http://localhost/api", store=store), cache=cache)

        assert portal.resource(CacheKeys.ARCHIVES, ttl=CacheTTL.SHORT).ttl == CacheTTL.SHORT
        with pytest.raises(ValueError):
            portal.resource(CacheKeys.ARCHIVES, ttl=0)


class TestStripLargeLogos:
    """Test logo filtering before caching"""

    def test_only_large_logos_removed(self):
        stripped = strip_large_logos(PARTNERS)
        assert "logo_content" not in stripped[0]
        assert stripped[1] == PARTNERS[1]
        # Input is left untouched
        assert PARTNERS[0]["logo_content"] == LARGE_LOGO

    def test_cms_content_parsing(self):
        assert CMSContent(page="home", content="not json").parsed() == {}
        assert CMSContent(page="home", content={"a": 1}).parsed() == {"a": 1}
        assert CMSContent(page="home").parsed() == {}
