"""
Alliance Courtage client data layer
TTL caching, cache-aware fetch resources, pagination and the portal API client
"""

__version__ = "1.0.0"
