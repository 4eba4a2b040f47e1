"""Fixtures for the runnable nestling examples.

Every example directory has an ``app.py`` that builds a module-level
``app`` and registers its modules without calling ``run()``. The
``example_app`` fixture executes that file again for each test, so the
registry is filled exactly once per test and the test decides when to
start the app.
"""

import importlib.util
from pathlib import Path

import pytest

from nestling.app import App


@pytest.fixture
def example_app(request: pytest.FixtureRequest) -> App:
    """The unstarted ``app`` from the app.py next to the requesting test."""
    source = Path(request.path).with_name("app.py")
    spec = importlib.util.spec_from_file_location(f"{source.parent.name}_app", source)
    if spec is None or spec.loader is None:
        msg = f"Cannot load example app from {source}"
        raise ImportError(msg)
    namespace = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(namespace)
    app: App = namespace.app
    assert app.status == "stop", f"{source} must not call app.run()"
    return app
