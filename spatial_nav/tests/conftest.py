import os

import pytest

# caplog only sees SpatialNav records when the package logger propagates.
os.environ.setdefault("SPATIAL_NAV_PROPAGATE_LOGS", "1")
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from spatial_nav.memory_host import InMemoryHost  # noqa: E402
from spatial_nav.navigator import SpatialNavigator  # noqa: E402


def pytest_runtest_setup(item):
    if item.get_closest_marker("pyqt_required"):
        if not os.getenv("PYQT_TESTS"):
            pytest.skip("PYQT_TESTS not set; skipping PyQt-dependent test")


@pytest.fixture
def host():
    return InMemoryHost()


@pytest.fixture
def navigator(host):
    nav = SpatialNavigator(host)
    nav.init()
    yield nav
    nav.uninit()


@pytest.fixture
def grid(host):
    """Two rows of three 100x40 cells with 20px gaps, class ``cell``."""

    cells = {}
    for row, top in enumerate((0, 60)):
        for col, left in enumerate((0, 120, 240)):
            name = f"r{row}c{col}"
            cells[name] = host.add(name, (left, top, 100, 40), classes=["cell"])
    return cells
