import pytest

from saferpc import reset_configuration


@pytest.fixture(autouse=True)
def _default_configuration():
    reset_configuration()
    yield
    reset_configuration()
