"""Reference data providers module."""

from portfolio_analytics.providers.reference_data_provider import ReferenceDataProvider
from portfolio_analytics.providers.stub_provider import StubReferenceDataProvider

__all__ = [
    "ReferenceDataProvider",
    "StubReferenceDataProvider",
]
