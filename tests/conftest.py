import pytest

from config import ApplicationConfig


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    # Production cost factor makes the suite crawl
    monkeypatch.setattr(ApplicationConfig, "BCRYPT_ROUNDS", 4)
