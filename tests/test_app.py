import pytest

from canteen.database import connection


def test_engine_is_built_from_injected_configuration(make_client):
    make_client(database_url="sqlite:///./injected-test.db")

    assert str(connection.get_engine().url) == "sqlite:///./injected-test.db"


def test_engine_follows_the_latest_configuration(make_client):
    make_client(database_url="sqlite:///./first.db")
    make_client(database_url="sqlite:///./second.db")

    assert connection.get_engine().url.database == "./second.db"


def test_engine_requires_initialization(monkeypatch):
    monkeypatch.setattr(connection, "_engine", None)

    with pytest.raises(RuntimeError):
        connection.get_engine()
