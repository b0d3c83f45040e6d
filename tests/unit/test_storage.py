import pytest

from client.errors import AlreadyExistsError
from client.storage import LocalStore, Session, SESSION_KEY, USERS_KEY


# first use reads as empty
def test_reads_default_when_nothing_stored(persistence):
    assert persistence.list_users() == []
    assert persistence.get_session() is None
    assert persistence.list_news_suggestions() == []
    assert persistence.list_orders() == []


def test_append_user_persists_to_disk(tmp_path, persistence):
    persistence.append_user({"name": "Ann", "email": "A@X.com", "password": "secret1"})

    reopened = LocalStore(tmp_path / "storage.json")
    assert reopened.get_item(USERS_KEY) == [{"name": "Ann", "email": "a@x.com", "password": "secret1"}]


def test_append_user_rejects_duplicate_email(persistence):
    persistence.append_user({"name": "Ann", "email": "a@x.com", "password": "secret1"})
    with pytest.raises(AlreadyExistsError):
        persistence.append_user({"name": "Other", "email": " A@x.COM", "password": "another"})
    assert len(persistence.list_users()) == 1


def test_find_user_requires_matching_password(persistence):
    persistence.append_user({"name": "Ann", "email": "a@x.com", "password": "secret1"})
    assert persistence.find_user("A@x.com", "secret1")["name"] == "Ann"
    assert persistence.find_user("a@x.com", "wrong") is None
    assert persistence.find_user("b@x.com", "secret1") is None


def test_session_lifecycle(persistence):
    persistence.set_session(Session(name="Ann", email="a@x.com"))
    assert persistence.get_session() == Session(name="Ann", email="a@x.com")
    assert persistence.store.get_item(SESSION_KEY) == {"name": "Ann", "email": "a@x.com"}

    persistence.clear_session()
    assert persistence.get_session() is None


def test_corrupt_store_reads_as_empty(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")
    store = LocalStore(path)
    assert store.get_item(USERS_KEY, []) == []

    store.set_item("orders", [{"id": 1}])
    assert store.get_item("orders") == [{"id": 1}]


def test_remove_item_of_missing_key_is_noop(tmp_path):
    store = LocalStore(tmp_path / "nested" / "storage.json")
    store.remove_item("anything")
    assert not (tmp_path / "nested" / "storage.json").exists()
