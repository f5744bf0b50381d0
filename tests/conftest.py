"""
Pytest configuration and shared fixtures for all irmatch tests.

Pattern graphs are parsed once per session; graphs are never mutated by the
matcher, so sharing them across tests is safe.
"""

import pytest

from irmatch.frontend.parser import parse_ir


MUL_ADD_PATTERN = """
graph(%x, %y, %z):
  %b = aten::mul(%x, %y)
  %c = aten::add(%b, %z)
  return (%c)
"""

DIAMOND_PATTERN = """
graph(%x):
  %a = aten::relu(%x)
  %b = aten::neg(%a)
  %c = aten::exp(%a)
  %d = aten::add(%b, %c)
  return (%d)
"""


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def mul_add_pattern():
    """`b = mul(x, y); c = add(b, z)` returning `c`."""
    return parse_ir(MUL_ADD_PATTERN, "mul_add.ir")


@pytest.fixture(scope="session")
def diamond_pattern():
    """A relu whose output feeds two branches that are joined again by an add."""
    return parse_ir(DIAMOND_PATTERN, "diamond.ir")


# =============================================================================
# Helper fixtures
# =============================================================================

@pytest.fixture
def write_ir(tmp_path):
    """Factory fixture writing textual IR to a file under tmp_path."""
    def _write_ir(name: str, source: str):
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path

    return _write_ir


def pytest_configure(config):
    """Register custom markers for test organization."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
