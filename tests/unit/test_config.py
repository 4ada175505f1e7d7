"""Unit tests for environment-based configuration."""

import pytest

from streamstore import config


def test_db_url_from_env(monkeypatch):
    monkeypatch.setenv(config.DB_URL_ENV, "sqlite:///events.db")
    assert config.get_db_url() == "sqlite:///events.db"


@pytest.mark.parametrize("value", [None, ""])
def test_db_url_missing(monkeypatch, value):
    if value is None:
        monkeypatch.delenv(config.DB_URL_ENV, raising=False)
    else:
        monkeypatch.setenv(config.DB_URL_ENV, value)
    with pytest.raises(config.DatabaseUrlNotSetError):
        config.get_db_url()


@pytest.mark.parametrize(
    "value,expected", [(None, config.DEFAULT_PAGE_SIZE), (" ", 1000), ("25", 25)]
)
def test_page_size(monkeypatch, value, expected):
    if value is None:
        monkeypatch.delenv(config.PAGE_SIZE_ENV, raising=False)
    else:
        monkeypatch.setenv(config.PAGE_SIZE_ENV, value)
    assert config.get_page_size() == expected


@pytest.mark.parametrize("value", ["ten", "0", "-3"])
def test_invalid_page_size(monkeypatch, value):
    monkeypatch.setenv(config.PAGE_SIZE_ENV, value)
    with pytest.raises(config.InvalidPageSizeError):
        config.get_page_size()
