"""Shared test fixtures.

All network traffic in the suite is served by ``respx`` or replaced with
mocks, so the DNS-based private-address check in the fetcher is switched off
for every test; the fetcher tests that exercise it patch it back explicitly.
"""

from unittest.mock import AsyncMock, patch

import pytest


@pytest.fixture(autouse=True)
def public_hosts():
    with patch(
        "siteprofile.services.fetcher._is_private_address", new=AsyncMock(return_value=False)
    ):
        yield
