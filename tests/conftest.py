"""Pytest configuration and shared fixtures for netsift tests.

This module provides capture store fixtures used across unit and
integration tests.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest

from netsift.browser.session import CaptureSession, CaptureSessionManager
from netsift.capture.store import CaptureStore
from tests.factories import make_exchange

# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def shop_store() -> CaptureStore:
    """Store with an image, an API call and a tracking script.

    Returns:
        CaptureStore in capture order
    """
    return CaptureStore(
        [
            make_exchange(
                "https://shop.example.com/a.png",
                content_type="image/png",
                resource_type="image",
                body="\x89PNG",
            ),
            make_exchange(
                "https://shop.example.com/api/items?page=1",
                body='{"items":["Soap"]}',
            ),
            make_exchange(
                "https://googletagmanager.com/gtag.js",
                content_type="application/javascript",
                resource_type="script",
                body="window.dataLayer=[];",
            ),
        ]
    )


# ============================================================================
# Session Fixtures
# ============================================================================


@pytest.fixture
def active_session(shop_store: CaptureStore) -> Generator[CaptureSession, None, None]:
    """Install a capture session (without a browser) as the active session.

    Yields:
        The active CaptureSession, whose store is ``shop_store``
    """
    session = CaptureSession(headless=True, body_timeout=1.0)
    session.store = shop_store
    CaptureSessionManager._instance = session
    yield session
    CaptureSessionManager._instance = None


@pytest.fixture
def no_session() -> Generator[None, None, None]:
    """Ensure no capture session is active."""
    CaptureSessionManager._instance = None
    yield
    CaptureSessionManager._instance = None
