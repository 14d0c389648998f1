"""
TVB Anywhere (North America) scraping: page fetching and HTML extraction.
"""

from dramabox_backend.integrations.tvb.fetcher import NetworkError, PageFetcher, check_online
from dramabox_backend.integrations.tvb.parser import (
    ParseError,
    flatten_catalog,
    parse_catalog_page,
    parse_show_detail_page,
)

__all__ = [
    "NetworkError",
    "PageFetcher",
    "ParseError",
    "check_online",
    "flatten_catalog",
    "parse_catalog_page",
    "parse_show_detail_page",
]
