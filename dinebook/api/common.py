"""
Query helpers shared by the listing endpoints
"""

from typing import Optional

from dinebook.core.config import get_settings

settings = get_settings()


def page_limit(limit: Optional[int]) -> int:
    """Apply the configured default and ceiling to a requested page size"""
    if limit is None:
        return settings.DEFAULT_PAGE_SIZE
    return min(limit, settings.MAX_PAGE_SIZE)
