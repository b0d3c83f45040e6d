import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("SECRET_KEY", "test")
os.environ.setdefault("PEPPER", "test-pepper")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from app import create_app
from client.forms import Storefront
from client.gateway import Gateway
from client.notifications import Notifier
from client.storage import LocalPersistence, LocalStore
from models import db
from tests.fakes import API_BASE, FlaskClientSession, UnreachableSession


@pytest.fixture()
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'unit.db'}",
        "BCRYPT_ROUNDS": 4,
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def unavailable_client(tmp_path):
    # parent directory never exists, so every connection attempt fails
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'missing' / 'unit.db'}",
        "BCRYPT_ROUNDS": 4,
    })
    return app.test_client()


@pytest.fixture()
def persistence(tmp_path):
    return LocalPersistence(LocalStore(tmp_path / "storage.json"))


@pytest.fixture()
def online_storefront(client, persistence):
    session = FlaskClientSession(client)
    gateway = Gateway(API_BASE, session=session)
    return Storefront(gateway, persistence, Notifier())


@pytest.fixture()
def offline_storefront(persistence):
    gateway = Gateway(API_BASE, session=UnreachableSession())
    return Storefront(gateway, persistence, Notifier())
