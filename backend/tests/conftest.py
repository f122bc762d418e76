import mongomock
import pytest
from bson import ObjectId
from flask_jwt_extended import create_access_token

from splitledger import create_app
from splitledger.config import TestingConfig
from splitledger.extensions import get_db


@pytest.fixture
def app():
    app = create_app(TestingConfig, mongo_client=mongomock.MongoClient())
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users(app):
    """Three registered users keyed by name."""
    people = {}
    for name in ("alice", "bob", "carol"):
        oid = ObjectId()
        get_db().users.insert_one({"_id": oid, "name": name, "email": f"{name}@example.com"})
        people[name] = str(oid)
    return people


@pytest.fixture
def auth_headers(app):
    def _headers(user_id):
        with app.app_context():
            token = create_access_token(identity=user_id)
        return {"Authorization": f"Bearer {token}"}
    return _headers
