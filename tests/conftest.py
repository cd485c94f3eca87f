import pytest

from models.schemas import Package


@pytest.fixture
def make_package():
    """Build a Package with tablet defaults."""
    def _make(size, identifier=None, unit="tablet", active=True):
        return Package(
            identifier=identifier or f"pkg-{size}",
            unit=unit,
            quantity_per_package=size,
            active=active,
        )
    return _make
