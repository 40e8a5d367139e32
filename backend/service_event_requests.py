"""
Service layer for calendar event booking requests.

Single reads, updates and deletes follow the same order as user updates:
load the row (NotFound), check that the caller owns it or is an admin
(Unauthorized), then read or write. A write that returns no row after the
row was seen is a BadRequest.
"""

import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional

from errors import BadRequestError, NotFoundError
from models import EventRequestIn, Principal
from policy import ensure_admin, ensure_self_or_admin
from repo_event_requests import EventRequestRepo

logger = logging.getLogger(__name__)


class EventRequestService:
    def __init__(self, repo: EventRequestRepo):
        self.repo = repo

    def create(self, data: EventRequestIn, principal: Optional[Principal]) -> Dict[str, Any]:
        """Create a request owned by the caller.

        Admins may file a request on behalf of another user by naming
        `userid`; anyone else naming a different user is refused.
        """

        owner = data.userid or (principal.subject_id if principal else None)
        ensure_self_or_admin(principal, owner, "You are not authorized to create this request.")

        row = {
            "requestid": str(uuid.uuid4()),
            "eventid": str(uuid.uuid4()),
            "userid": owner,
            "status": data.status or "Pending",
            "requestdate": data.requestdate,
            "artistname": data.artistname,
            "eventname": data.eventname,
            "starttime": data.starttime,
            "endtime": data.endtime,
            "amount": data.amount,
        }
        created = self.repo.insert(row)
        if created is None:
            raise BadRequestError("There was an error creating the event request.")
        logger.info("created event request %s for user %s", created["requestid"], owner)
        return created

    def get(self, requestid: str, principal: Optional[Principal]) -> Dict[str, Any]:
        return self._load_owned(requestid, principal, "access")

    def list_all(self, principal: Optional[Principal]) -> List[Dict[str, Any]]:
        ensure_admin(principal, "You are not authorized to access all requests.")
        found = self.repo.list_all()
        if not found:
            raise NotFoundError("No event requests found.")
        return found

    def list_for_user(self, userid: str, principal: Optional[Principal]) -> List[Dict[str, Any]]:
        ensure_self_or_admin(principal, userid, "You are not authorized to access these requests.")
        return self.repo.list_for_user(userid)

    def find_by_status(self, status: str) -> List[Dict[str, Any]]:
        return self.repo.find_by_status(status)

    def _load_owned(self, requestid: str, principal: Optional[Principal], action: str) -> Dict[str, Any]:
        found = self.repo.get(requestid)
        if found is None:
            logger.warning("%s of missing event request %s", action, requestid)
            raise NotFoundError("Event request not found.")
        ensure_self_or_admin(
            principal, found["userid"], f"You are not authorized to {action} this request."
        )
        return found

    def update(
        self, requestid: str, fields: Mapping[str, Any], principal: Optional[Principal]
    ) -> Dict[str, Any]:
        self._load_owned(requestid, principal, "update")
        fields = dict(fields)
        if not fields:
            raise BadRequestError("No fields to update.")

        updated = self.repo.update(requestid, fields)
        if updated is None:
            raise BadRequestError("There was an error updating the request.")
        logger.info("updated event request %s (%s)", requestid, ", ".join(fields))
        return updated

    def delete(self, requestid: str, principal: Optional[Principal]) -> Dict[str, Any]:
        self._load_owned(requestid, principal, "delete")
        deleted = self.repo.delete(requestid)
        if deleted is None:
            raise BadRequestError("There was an error deleting the event request.")
        logger.info("deleted event request %s", requestid)
        return {"deleted": deleted}
