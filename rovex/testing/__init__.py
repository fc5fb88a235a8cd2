"""Rovex testing utilities.

Provides a mock async client and factories for testing applications that use
the review engine.
"""

from rovex.testing.fixtures import (
    SAMPLE_DIFF,
    create_mock_chunk,
    create_mock_comparison,
    create_mock_diff,
    create_mock_finding,
    create_mock_persisted_run,
    create_mock_progress_event,
    create_mock_review_run,
)
from rovex.testing.mock import MockAsyncRovexClient, MockCall, MockResponse

__all__ = [
    # Mock client
    "MockAsyncRovexClient",
    "MockCall",
    "MockResponse",
    # Helper functions
    "SAMPLE_DIFF",
    "create_mock_chunk",
    "create_mock_comparison",
    "create_mock_diff",
    "create_mock_finding",
    "create_mock_persisted_run",
    "create_mock_progress_event",
    "create_mock_review_run",
]
