"""Noise classification for captured exchanges.

Analytics, tracking, image and font traffic is excluded from listings and
searches by default. The lists below are plain data: append to them to filter
more. A miss only lets noise through, so entries should stay specific enough
never to drop useful API traffic.
"""

from __future__ import annotations

import re

# Matched as substrings of the lower-cased URL
FILTERED_DOMAINS: list[str] = [
    "analytics.google.com",
    "google-analytics.com",
    "googletagmanager.com",
    "googleads.g.doubleclick.net",
    "doubleclick.net",
    "analytics.tiktok.com",
    "facebook.com",
    "connect.facebook.net",
    "clarity.ms",
    "j.clarity.ms",
    "fonts.googleapis.com",
    "fonts.gstatic.com",
    "cdnjs.cloudflare.com",
    "cdn.jsdelivr.net",
    "google.com/ccm",
    "google.com/pagead",
    "google.com/privacy_sandbox",
    "widget.privy.com",
    "api.privy.com",
    "tracking.midway.la",
    "scripts.clarity.ms",
]

IMAGE_EXTENSIONS = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg|ico|bmp|tiff)(\?|$)", re.IGNORECASE)

IMAGE_PATHS = re.compile(r"/imgs/", re.IGNORECASE)

NOISE_RESOURCE_TYPES = frozenset({"image", "font"})


def is_filtered_domain(url: str) -> bool:
    """Check whether the URL belongs to a known tracking/analytics host."""
    url_lower = url.lower()
    return any(domain in url_lower for domain in FILTERED_DOMAINS)


def is_image_url(url: str) -> bool:
    """Check whether the URL looks like an image by extension or path."""
    return bool(IMAGE_EXTENSIONS.search(url) or IMAGE_PATHS.search(url))


def should_filter(url: str, resource_type: str | None = None) -> bool:
    """Decide whether an exchange is noise.

    Args:
        url: Request URL
        resource_type: Browser resource type label, None when unknown

    Returns:
        True if the exchange should be excluded by default
    """
    if is_filtered_domain(url):
        return True
    if is_image_url(url):
        return True
    return resource_type in NOISE_RESOURCE_TYPES
