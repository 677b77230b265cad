"""
Portal API response models
"""
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class PartnerDocument(BaseModel):
    nom: str
    type: str
    date: str


class Partner(BaseModel):
    """Insurance or investment partner listed on the portal"""
    model_config = ConfigDict(extra="allow")

    id: int
    nom: str
    description: Optional[str] = None
    website: Optional[str] = None
    site: Optional[str] = None
    logo_url: Optional[str] = None
    logo_content: Optional[str] = None
    category: Optional[str] = None
    is_active: Optional[bool] = None
    documents: List[PartnerDocument] = []


class CMSContent(BaseModel):
    """Editable page content; ``content`` holds a JSON document as text"""
    page: str
    content: Any = None

    def parsed(self) -> Dict[str, Any]:
        """Decode ``content`` when it is stored as a JSON string"""
        if isinstance(self.content, dict):
            return self.content
        if not self.content:
            return {}
        try:
            parsed = json.loads(self.content)
        except (TypeError, ValueError):
            return {}
        return parsed if isinstance(parsed, dict) else {}
