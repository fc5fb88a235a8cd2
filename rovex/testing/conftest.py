"""
Rovex fixtures bundled as a pytest plugin.

Load them from a project's top-level conftest.py with either

    pytest_plugins = ["rovex.testing.conftest"]

or a star import of this module. The fixtures themselves live in
``rovex.testing.fixtures``.
"""

from rovex.testing.fixtures import (
    mock_client,
    sample_chunk,
    sample_comparison,
    sample_diff,
    sample_finding,
    sample_persisted_run,
    sample_review_run,
)

__all__ = [
    "mock_client",
    "sample_diff",
    "sample_comparison",
    "sample_chunk",
    "sample_finding",
    "sample_persisted_run",
    "sample_review_run",
]
