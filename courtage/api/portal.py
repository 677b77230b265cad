"""
Portal API fetchers for the reference data the client caches
"""
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from ..cache.config import CacheKeys, CacheTTL
from ..cache.hooks import CachedResource
from ..cache.manager import CacheManager
from .client import ApiClient
from .models import CMSContent, Partner

logger = logging.getLogger(__name__)

# Base64 logos above this size are not worth keeping in the cache
MAX_CACHED_LOGO_SIZE = 100 * 1024

CMS_PAGES = {
    CacheKeys.CMS_ACCUEIL: "home",
    CacheKeys.CMS_GAMME_PRODUITS: "gamme-produits",
    CacheKeys.CMS_FORMATIONS: "formations",
    CacheKeys.CMS_PRODUITS_STRUCTURES: "produits-structures",
    CacheKeys.CMS_RENCONTRES: "rencontres",
}


def strip_large_logos(partners: List[Dict[str, Any]], max_size: int = MAX_CACHED_LOGO_SIZE) -> List[Dict[str, Any]]:
    """Copy of the partner list without oversized ``logo_content`` values"""
    stripped = []
    for partner in partners:
        logo = partner.get("logo_content") if isinstance(partner, dict) else None
        if logo and len(logo) > max_size:
            logger.warning(
                f"Removing large logo_content from partner {partner.get('id')} ({len(logo) / 1024:.2f}KB)"
            )
            partner = {k: v for k, v in partner.items() if k != "logo_content"}
        stripped.append(partner)
    return stripped


class PortalAPI:
    """Read endpoints of the portal, each usable as a zero-argument fetch function"""

    def __init__(self, client: ApiClient, cache: Optional[CacheManager] = None):
        self.client = client
        self.cache = cache

    async def get_partners(self) -> List[Dict[str, Any]]:
        return await self.client.request("/partners", params={"active": False})

    async def get_partner_models(self) -> List[Partner]:
        return [Partner.model_validate(p) for p in await self.get_partners()]

    async def get_partners_by_category(self, category: str) -> List[Dict[str, Any]]:
        return await self.client.request("/partners", params={"category": category})

    async def get_partner_categories(self) -> List[str]:
        return await self.client.request("/partners/categories/list")

    async def get_assurances(self) -> List[str]:
        """Insurer names that have structured products"""
        return await self.client.request("/structured-products/assurances")

    async def get_assurances_montants(self) -> List[Dict[str, Any]]:
        """Active insurers with their reserved and available amounts"""
        return await self.client.request("/assurances")

    async def get_structured_products(self, **filters: Any) -> List[Dict[str, Any]]:
        return await self.client.request("/structured-products", params=filters or None)

    async def get_structured_product_categories(self) -> List[str]:
        return await self.client.request("/structured-products/categories")

    async def get_archives(self, **filters: Any) -> List[Dict[str, Any]]:
        return await self.client.request("/archives", params=filters or None)

    async def get_recent_archives(self) -> List[Dict[str, Any]]:
        return await self.client.request("/archives/recent")

    async def get_financial_documents(self, **filters: Any) -> List[Dict[str, Any]]:
        return await self.client.request("/financial-documents", params=filters or None)

    async def get_cms_content(self, page: str) -> Dict[str, Any]:
        data = await self.client.request(f"/cms/{page}")
        return CMSContent.model_validate({"page": page, **(data or {})}).model_dump()

    def _fetchers(self) -> Dict[str, Tuple[Callable[[], Awaitable[Any]], int]]:
        fetchers: Dict[str, Tuple[Callable[[], Awaitable[Any]], int]] = {
            CacheKeys.PARTNERS: (self._get_partners_for_cache, CacheTTL.LONG),
            CacheKeys.PARTNERS_COA: (lambda: self.get_partners_by_category("coa"), CacheTTL.LONG),
            CacheKeys.PARTNERS_CIF: (lambda: self.get_partners_by_category("cif"), CacheTTL.LONG),
            CacheKeys.ASSURANCES: (self.get_assurances, CacheTTL.VERY_LONG),
            CacheKeys.ASSURANCES_MONTANTS: (self.get_assurances_montants, CacheTTL.MEDIUM),
            CacheKeys.STRUCTURED_PRODUCTS: (self.get_structured_products, CacheTTL.MEDIUM),
            CacheKeys.STRUCTURED_PRODUCTS_CATEGORIES: (self.get_structured_product_categories, CacheTTL.VERY_LONG),
            CacheKeys.ARCHIVES: (self.get_archives, CacheTTL.MEDIUM),
            CacheKeys.ARCHIVES_RECENT: (self.get_recent_archives, CacheTTL.SHORT),
            CacheKeys.FINANCIAL_DOCUMENTS: (self.get_financial_documents, CacheTTL.MEDIUM),
        }
        for key, page in CMS_PAGES.items():
            fetchers[key] = (self._cms_fetcher(page), CacheTTL.LONG)
        return fetchers

    def _cms_fetcher(self, page: str) -> Callable[[], Awaitable[Dict[str, Any]]]:
        async def fetch() -> Dict[str, Any]:
            return await self.get_cms_content(page)
        return fetch

    async def _get_partners_for_cache(self) -> List[Dict[str, Any]]:
        return strip_large_logos(await self.get_partners())

    def resource(self, key: str, ttl: Optional[int] = None, **options: Any) -> CachedResource:
        """CachedResource for one of the known cache keys

        Options are passed to ``CachedResource`` (``enabled``, ``invalidate_on_mount``).
        """
        fetchers = self._fetchers()
        if key not in fetchers:
            raise KeyError(f"No fetcher registered for cache key '{key}'")
        fetch_fn, default_ttl = fetchers[key]
        return CachedResource(fetch_fn, key=key, ttl=default_ttl if ttl is None else ttl, cache=self.cache, **options)
