import logging
from collections import namedtuple

from sqlalchemy.exc import IntegrityError

from models import User
from repositories import RoleRepository, UserRepository
from security import hash_password, verify_password
from services.errors import Result

logger = logging.getLogger(__name__)

CLIENT_ROLE = "ROLE_CLIENT"
ADMIN_ROLE = "ROLE_ADMIN"

AuthenticationDetail = namedtuple("AuthenticationDetail", ["username", "password", "roles"])


def fold_user_details(rows):
    """Collapse (username, password, role) rows of one user into a single record."""
    username = password = None
    roles = set()
    for row in rows:
        username = row.username
        password = row.password
        roles.add(row.authority)
    return AuthenticationDetail(username, password, frozenset(roles))


class UserService:

    def __init__(self, repository=None, role_repository=None):
        self.repository = repository or UserRepository()
        self.role_repository = role_repository or RoleRepository()

    def current_user(self, identity):
        """Resolve the caller identity (the JWT subject) to a stored User."""
        if not isinstance(identity, str) or not identity.strip():
            logger.info("Rejected malformed identity %r", identity)
            return Result.authentication_failure()
        user = self.repository.find_by_username(identity)
        if user is None:
            logger.info("No user for identity %s", identity)
            return Result.authentication_failure()
        return Result.success(user)

    def load_for_authentication(self, username):
        rows = self.repository.search_user_and_roles_by_username(username)
        if not rows:
            return Result.authentication_failure("User not found")
        return Result.success(fold_user_details(rows))

    def authenticate(self, username, password):
        result = self.load_for_authentication(username)
        if not result.ok:
            return result
        if not verify_password(password, result.value.password):
            logger.info("Invalid password for %s", username)
            return Result.authentication_failure("Invalid password")
        return result

    def register(self, username, password):
        if self.repository.find_by_username(username) is not None:
            return Result.conflict("User already exists")
        user = User(username=username, password=hash_password(password))
        role = self.role_repository.find_by_authority(CLIENT_ROLE)
        if role is not None:
            user.roles.append(role)
        try:
            user = self.repository.save(user)
        except IntegrityError:
            return Result.conflict("User already exists")
        logger.info("User %s registered", username)
        return Result.success(user)
