"""Test utilities for stiff applications.

    from stiff.testing import TestClient
"""

from stiff.testing.client import TestClient

__all__ = ["TestClient"]
