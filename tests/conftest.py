"""
Shared pytest fixtures for the soypot test suite.

Usage in tests:
    def test_something(soy_factory):
        soy_factory.add_file("app.soy", soy_file("app", greet="..."))
        document = soy_factory.extract()

    def test_parse(parse):
        tree = parse('{namespace a}{template .t}x{/template}')
"""

import pytest

from soypot.config import ConfigManager
from soypot.core.parsing import parse_file
from soypot.core.registry import TemplateRegistry
from tests.factories import SoyTestFactory


@pytest.fixture
def soy_factory(tmp_path):
    """
    Create an empty SoyTestFactory rooted in tmp_path.

    Example:
        def test_extract(soy_factory):
            soy_factory.add_file("a.soy", source)
            assert len(soy_factory.extract()) == 1
    """
    return SoyTestFactory(tmp_path)


@pytest.fixture
def parse():
    """Parse Soy source held in memory (file name defaults to test.soy)."""
    def _parse(source, path="test.soy"):
        return parse_file(path, source)
    return _parse


@pytest.fixture
def registry():
    """Fresh, empty TemplateRegistry."""
    return TemplateRegistry()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the developer's ~/.soypot and SOYPOT_* variables out of tests."""
    monkeypatch.setattr(
        ConfigManager, "USER_CONFIG_FILE", tmp_path / "home" / ".soypot" / "config.yaml"
    )
    for name in ("SOYPOT_EXTENSIONS", "SOYPOT_CATALOG_PROJECT",
                 "SOYPOT_CATALOG_WIDTH", "SOYPOT_PROJECT_PATH"):
        monkeypatch.delenv(name, raising=False)
