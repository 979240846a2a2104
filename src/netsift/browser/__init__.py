"""Browser module for netsift.

Provides the Playwright session that records network traffic.
"""

from netsift.browser.session import CaptureSession, CaptureSessionManager

__all__ = ["CaptureSession", "CaptureSessionManager"]
