import pytest

from backend import deps


@pytest.fixture(autouse=True)
def clean_test_data(tmp_path):
    """Point the backend at a fresh data directory before every test."""
    deps.init_storage(tmp_path / "data-tests")
    yield
