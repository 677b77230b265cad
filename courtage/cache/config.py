"""
Cache configuration settings
"""
import os


class CacheTTL:
    """TTL tiers in milliseconds"""

    SHORT = 1 * 60 * 1000  # 1 minute
    MEDIUM = 5 * 60 * 1000  # 5 minutes (default)
    LONG = 15 * 60 * 1000  # 15 minutes
    VERY_LONG = 30 * 60 * 1000  # 30 minutes
    ONE_HOUR = 60 * 60 * 1000  # 1 hour


class CacheKeys:
    """Logical cache keys shared by every consumer of the portal data"""

    PARTNERS = "partners"
    PARTNERS_COA = "partners_coa"
    PARTNERS_CIF = "partners_cif"
    ASSURANCES = "assurances"
    ASSURANCES_MONTANTS = "assurances_montants"
    STRUCTURED_PRODUCTS = "structured_products"
    STRUCTURED_PRODUCTS_CATEGORIES = "structured_products_categories"
    ARCHIVES = "archives"
    ARCHIVES_RECENT = "archives_recent"
    FINANCIAL_DOCUMENTS = "financial_documents"
    CMS_ACCUEIL = "cms_accueil"
    CMS_GAMME_PRODUITS = "cms_gamme_produits"
    CMS_FORMATIONS = "cms_formations"
    CMS_PRODUITS_STRUCTURES = "cms_produits_structures"
    CMS_RENCONTRES = "cms_rencontres"


class CacheConfig:
    """Configuration class for cache settings"""

    # Prefix separating cache entries from other data in the shared store
    NAMESPACE = os.getenv("CACHE_NAMESPACE", "cache_")

    # Durations in milliseconds
    DEFAULT_TTL = int(os.getenv("CACHE_DEFAULT_TTL_MS", str(CacheTTL.MEDIUM)))
    EVICTION_HORIZON = int(os.getenv("CACHE_EVICTION_HORIZON_MS", str(CacheTTL.ONE_HOUR)))

    # Entries larger than this are never written
    MAX_ENTRY_BYTES = int(os.getenv("CACHE_MAX_ENTRY_BYTES", str(2 * 1024 * 1024)))

    @classmethod
    def get_namespaced_key(cls, key: str) -> str:
        """Get the store key for a logical cache key"""
        if not isinstance(key, str) or not key:
            raise ValueError("Cache key must be a non-empty string")
        return f"{cls.NAMESPACE}{key}"

    @classmethod
    def validate_ttl(cls, ttl: int) -> int:
        """Return ``ttl`` if it is a positive integer of milliseconds, raise ValueError otherwise"""
        if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl <= 0:
            raise ValueError(f"Cache TTL must be a positive integer of milliseconds, got {ttl!r}")
        return ttl

    @classmethod
    def is_namespaced(cls, store_key: str) -> bool:
        """Check whether a store key belongs to the cache namespace"""
        return store_key.startswith(cls.NAMESPACE)
