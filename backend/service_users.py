"""
Service layer for user accounts.

Business rules only; SQL lives in `repo_users`. Every update runs the
same steps, and the first failing step ends the call before anything is
written:

1. existence check (NotFound)
2. authorization: the caller is the account owner or an admin
3. password sanitization (see `sanitize_password`)
4. partial UPDATE through the repository (no row back -> BadRequest)

The existence check and the write are separate statements with no
transaction around them. A row deleted in between surfaces as the
BadRequest of step 4, not as NotFound.
"""

import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional

from errors import BadRequestError, NotFoundError, UnauthorizedError
from models import Principal, Role, UserRegister
from policy import ensure_self_or_admin
from repo_users import UserRepo, public
from security import PasswordHasher, TokenService

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
PASSWORD_TOO_SHORT = "Password must be at least 8 characters"


def sanitize_password(
    fields: Dict[str, Any], stored_hash: str, hasher: PasswordHasher
) -> Dict[str, Any]:
    """Apply the password rules to an update field map, in place.

    - absent (or null): the column is left out of the update
    - empty string: the stored hash is written back unchanged
    - shorter than 8 characters: BadRequest
    - otherwise: replaced by a fresh hash
    """

    if "password" not in fields:
        return fields
    password = fields["password"]
    if password is None:
        del fields["password"]
    elif len(password) == 0:
        fields["password"] = stored_hash
    elif len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequestError(PASSWORD_TOO_SHORT)
    else:
        fields["password"] = hasher.hash(password)
    return fields


class UserService:
    """Registration, login and self-service account changes."""

    def __init__(self, repo: UserRepo, hasher: PasswordHasher, tokens: TokenService):
        self.repo = repo
        self.hasher = hasher
        self.tokens = tokens

    def create_account(self, row: Dict[str, Any], password: str, role: Role) -> Dict[str, Any]:
        """Shared by user and admin registration. Returns {"user", "token"}."""

        if len(password) < MIN_PASSWORD_LENGTH:
            raise BadRequestError(PASSWORD_TOO_SHORT)
        if self.repo.get_by_email(row["email"]) is not None:
            raise BadRequestError("Email is already registered.")

        row = {
            "userid": str(uuid.uuid4()),
            **row,
            "password": self.hasher.hash(password),
            "usertype": role.value,
        }
        user = self.repo.insert(row)
        if user is None:
            raise BadRequestError("There was an error creating the user.")
        logger.info("registered %s %s", role.value, user["userid"])
        return {"user": user, "token": self.tokens.issue(user["userid"], role)}

    def register(self, data: UserRegister) -> Dict[str, Any]:
        if data.usertype == Role.ADMIN:
            raise BadRequestError("Admin accounts cannot self-register.")
        row = {"name": data.name, "email": data.email, "artistname": data.artistname}
        return self.create_account(row, data.password, data.usertype)

    def authenticate(self, email: str, password: str) -> Dict[str, Any]:
        """Check credentials and return the public user with a fresh token."""

        user = self.repo.get_by_email_with_hash(email)
        if user is None:
            raise NotFoundError("User not found")
        if not self.hasher.verify(password, user["password"]):
            logger.warning("failed login for user %s", user["userid"])
            raise UnauthorizedError("Invalid username/password")
        try:
            role = Role(user["usertype"])
        except ValueError:
            logger.warning("login for user %s with unknown role %r", user["userid"], user["usertype"])
            raise UnauthorizedError("Invalid username/password")
        user = public(user)
        return {"user": user, "token": self.tokens.issue(user["userid"], role)}

    def find_all(self) -> List[Dict[str, Any]]:
        users = self.repo.list_all()
        if not users:
            raise NotFoundError("No users found")
        return users

    def get_by_email(self, email: str) -> Dict[str, Any]:
        user = self.repo.get_by_email(email)
        if user is None:
            raise BadRequestError(f"No user found for {email}.")
        return user

    def get_by_id(self, userid: str, principal: Optional[Principal]) -> Dict[str, Any]:
        ensure_self_or_admin(principal, userid, "You are not authorized to access this user.")
        user = self.repo.get_by_id(userid)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update(
        self, userid: str, fields: Mapping[str, Any], principal: Optional[Principal]
    ) -> Dict[str, Any]:
        existing = self.repo.get_by_id_with_hash(userid)
        if existing is None:
            logger.warning("update of missing user %s", userid)
            raise NotFoundError("User not found.")
        ensure_self_or_admin(principal, userid)

        fields = sanitize_password(dict(fields), existing["password"], self.hasher)
        if not fields:
            raise BadRequestError("No fields to update.")
        new_email = fields.get("email")
        if new_email and new_email != existing["email"] and self.repo.get_by_email(new_email):
            raise BadRequestError("Email is already registered.")

        user = self.repo.update(userid, fields)
        if user is None:
            raise BadRequestError("There was an error updating the user.")
        logger.info("updated user %s (%s)", userid, ", ".join(fields))
        return public(user)

    def delete(self, userid: str) -> Dict[str, Any]:
        """Hard delete. Callers gate this to admins."""

        if self.repo.get_by_id(userid) is None:
            raise NotFoundError("User not found.")
        user = self.repo.delete(userid)
        if user is None:
            raise BadRequestError("There was an error deleting the user.")
        logger.info("deleted user %s", userid)
        return {"deleted": user}
