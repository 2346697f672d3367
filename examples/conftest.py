"""Shared pytest configuration for deferbars examples."""

import runpy
from pathlib import Path
from types import SimpleNamespace

import pytest


@pytest.fixture
def example_app(request: pytest.FixtureRequest) -> SimpleNamespace:
    """Run the app.py beside the requesting test; expose its globals as attributes."""
    app = Path(request.path).with_name("app.py")
    return SimpleNamespace(**runpy.run_path(str(app), run_name=f"example_{app.parent.name}"))
