"""
Alliance Courtage REST API client
"""

from .client import ApiClient, ApiError
from .models import CMSContent, Partner
from .portal import PortalAPI, strip_large_logos

__all__ = ["ApiClient", "ApiError", "CMSContent", "Partner", "PortalAPI", "strip_large_logos"]
