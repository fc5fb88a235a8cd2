"""Shared fixtures for the Rovex test suite."""

from rovex.testing.conftest import *  # noqa: F401,F403
