"""
Service layer for administrator accounts and admin-only operations.

Every operation here except registration and login requires the Admin
role, and the role check runs before the target row is looked up. The
actual writes go through the user and event request services, so admin
edits get exactly the same password and empty-update rules.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from errors import UnauthorizedError
from models import AdminRegister, Principal, Role
from policy import ensure_admin
from repo_users import public
from service_event_requests import EventRequestService
from service_users import UserService

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, users: UserService, requests: EventRequestService):
        self.users = users
        self.requests = requests

    def register(self, data: AdminRegister) -> Dict[str, Any]:
        row = {
            "name": data.name,
            "email": data.email,
            "artistname": data.artistname,
            "venuename": data.venuename,
            "location": data.location,
        }
        return self.users.create_account(row, data.password, Role.ADMIN)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Credential check for admin accounts.

        Unknown email, wrong password and non-admin accounts all get the
        same answer.
        """

        user = self.users.repo.get_by_email_with_hash(email)
        if (
            user is None
            or user["usertype"] != Role.ADMIN.value
            or not self.users.hasher.verify(password, user["password"])
        ):
            raise UnauthorizedError("Invalid email/password.")
        user = public(user)
        return {"user": user, "token": self.users.tokens.issue(user["userid"], Role.ADMIN)}

    def list_users(self, principal: Optional[Principal]) -> List[Dict[str, Any]]:
        ensure_admin(principal, "You are not authorized to access all users.")
        return self.users.find_all()

    def update_user(
        self, userid: str, fields: Mapping[str, Any], principal: Optional[Principal]
    ) -> Dict[str, Any]:
        ensure_admin(principal, "You are not authorized to update this user.")
        return self.users.update(userid, fields, principal)

    def delete_user(self, userid: str, principal: Optional[Principal]) -> Dict[str, Any]:
        ensure_admin(principal, "You are not authorized to delete this user.")
        return self.users.delete(userid)

    def list_event_requests(self, principal: Optional[Principal]) -> List[Dict[str, Any]]:
        return self.requests.list_all(principal)

    def update_event_request(
        self, requestid: str, fields: Mapping[str, Any], principal: Optional[Principal]
    ) -> Dict[str, Any]:
        ensure_admin(principal, "You are not authorized to update this request.")
        return self.requests.update(requestid, fields, principal)

    def delete_event_request(self, requestid: str, principal: Optional[Principal]) -> Dict[str, Any]:
        ensure_admin(principal, "You are not authorized to delete this request.")
        return self.requests.delete(requestid, principal)
