"""
Pytest configuration for typed route tests.

Provides:
- Shared fixtures (app, client, routes)
"""

import sys
from pathlib import Path

# Make the shared sample_app module importable from every test module
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

import pytest

from sample_app import build_test_app


@pytest.fixture
def app():
    """Create test Flask application with the sample typed routes."""
    return build_test_app()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def routes(app):
    """The TypedRoutes registry of the test app."""
    return app.extensions["typed_routes"]
