"""Test utilities for switchyard routers.

Drive a router through its ASGI interface without a server::

    from switchyard.testing import TestClient
"""

from switchyard.testing.client import TestClient, TestResponse

__all__ = [
    "TestClient",
    "TestResponse",
]
