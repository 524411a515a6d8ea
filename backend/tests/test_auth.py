"""
Tests for `services/auth_service.py`, `utils/tokenJWT.py` and the /auth routes.
"""

import pytest
from jose import jwt

from config import settings
from models.log import Log
from models.users import UserRole
from repositories.entity_store import SqlEntityStore
from services.auth_service import AuthService
from utils.exceptions import BusinessRuleError, InvalidInputError


@pytest.fixture
def service(store, clock) -> AuthService:
    return AuthService(store, clock)


def test_create_user_normalizes_username_and_hashes_password(service):
    user = service.create_user("  Alice ", "secret1", "Alice", UserRole.SELLER)

    assert user.username == "alice"
    assert user.password_hash != "secret1"
    assert user.active is True


def test_duplicate_username_is_rejected(service):
    service.create_user("alice", "secret1", "Alice", UserRole.SELLER)

    with pytest.raises(BusinessRuleError) as exc_info:
        service.create_user("ALICE", "secret2", "Other", UserRole.MANAGER)

    assert exc_info.value.code == "USERNAME_TAKEN"


def test_create_user_requires_fields(service):
    with pytest.raises(InvalidInputError):
        service.create_user("", "secret1", "Alice", UserRole.SELLER)


def test_authenticate(service, db):
    user = service.create_user("alice", "secret1", "Alice", UserRole.SELLER)

    assert service.authenticate("alice", "secret1").id == user.id
    assert service.authenticate("Alice", "secret1").id == user.id
    assert service.authenticate("alice", "wrong") is None
    assert service.authenticate("nobody", "secret1") is None

    user.active = False
    db.commit()
    assert service.authenticate("alice", "secret1") is None


def test_issued_token_carries_subject_and_role(service):
    user = service.create_user("alice", "secret1", "Alice", UserRole.MANAGER)

    payload = jwt.decode(service.issue_token(user), settings.SECRET_KEY, algorithms=[settings.ALGORITHM])

    assert payload["sub"] == "alice"
    assert payload["role"] == "MANAGER"
    assert "exp" in payload


def test_ensure_admin_only_bootstraps_empty_store(service, store):
    admin = service.ensure_admin("root", "rootpass", "Root")

    assert admin.role == UserRole.ADMIN
    assert service.ensure_admin("root2", "rootpass", "Root 2") is None
    assert store.count_users() == 1


# ==================== HTTP ====================

def test_login_returns_token_and_user(client, users, db):
    response = client.post("/auth/login", json={"username": "seller", "password": "seller123"})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "SELLER"
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.json()["username"] == "seller"
    assert db.query(Log).filter(Log.action == "LOGIN", Log.status == "SUCCESS").count() == 1


def test_failed_login_is_rejected_and_audited(client, users, db):
    response = client.post("/auth/login", json={"username": "seller", "password": "nope"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"
    assert db.query(Log).filter(Log.action == "LOGIN", Log.status == "FAIL").count() == 1


def test_me_requires_token(client):
    response = client.get("/auth/me")

    assert response.status_code == 401
    assert response.json()["error_code"] == "UNAUTHORIZED"


def test_garbage_token_is_rejected(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_only_admin_creates_users(client, auth_headers):
    payload = {"username": "newbie", "password": "newbie123", "name": "Newbie", "role": "SELLER"}

    denied = client.post("/auth/users", json=payload, headers=auth_headers(UserRole.SELLER))
    created = client.post("/auth/users", json=payload, headers=auth_headers(UserRole.ADMIN))
    duplicate = client.post("/auth/users", json=payload, headers=auth_headers(UserRole.ADMIN))

    assert denied.status_code == 403
    assert created.status_code == 201
    assert created.json()["role"] == "SELLER"
    assert duplicate.status_code == 409
    assert duplicate.json()["error_code"] == "USERNAME_TAKEN"


class _StaleUsernameStore(SqlEntityStore):
    """Username lookup that ran before a concurrent insert committed."""

    def find_user_by_username(self, username):
        return None


def test_username_lost_to_unique_constraint_is_business_rule(db, clock, service):
    service.create_user("alice", "secret1", "Alice", UserRole.SELLER)
    racing = AuthService(_StaleUsernameStore(db), clock)

    with pytest.raises(BusinessRuleError) as exc_info:
        racing.create_user("alice", "secret2", "Other", UserRole.MANAGER)

    assert exc_info.value.code == "USERNAME_TAKEN"
