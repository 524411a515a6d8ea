# backend/services/auth_service.py
import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError

from models.factories import new_user
from models.users import User, UserRole
from repositories.entity_store import EntityStore
from utils.exceptions import BusinessRuleError, InvalidInputError
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import create_access_token

logger = logging.getLogger(__name__)


class AuthService:

    def __init__(self, store: EntityStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """Return the active user matching the credentials, or None."""
        user = self.store.find_user_by_username(username or "")
        if not user or not user.active or not verify_password(password, user.password_hash):
            return None
        return user

    def issue_token(self, user: User) -> str:
        return create_access_token(data={"sub": user.username, "role": user.role.value})

    def create_user(self, username: str, password: str, name: str, role: UserRole) -> User:
        if not username or not username.strip() or not password or not name or not name.strip():
            raise InvalidInputError("Username, password and name are required")
        username = username.strip().lower()

        with self.store.atomic():
            if self.store.find_user_by_username(username):
                raise BusinessRuleError("Username already exists", "USERNAME_TAKEN")
            try:
                user = self.store.save(new_user(username, get_password_hash(password), name.strip(), role, now=self.clock()))
            except IntegrityError:
                raise BusinessRuleError("Username already exists", "USERNAME_TAKEN")
        logger.info("User %s created with role %s", user.username, user.role.value)
        return user

    def ensure_admin(self, username: str, password: str, name: str) -> Optional[User]:
        """Create the bootstrap administrator when no account exists yet."""
        if self.store.count_users() > 0:
            return None
        logger.info("No users found, creating bootstrap administrator '%s'", username)
        return self.create_user(username, password, name, UserRole.ADMIN)
