"""
Authorization rules.

Two shapes only: "the caller is the owner or an admin", and "the caller
is an admin". Both raise `UnauthorizedError` on denial and return None
otherwise, so services can call them as plain guard statements.
"""

import logging
from typing import Optional

from errors import UnauthorizedError
from models import Principal

logger = logging.getLogger(__name__)


def ensure_self_or_admin(
    principal: Optional[Principal],
    owner_id: str,
    message: str = "You are not authorized to access this resource.",
) -> None:
    if principal is None:
        raise UnauthorizedError("Requester information is missing.")
    if principal.is_admin or principal.subject_id == owner_id:
        return
    logger.warning("denied %s access to resource owned by %s", principal.subject_id, owner_id)
    raise UnauthorizedError(message)


def ensure_admin(
    principal: Optional[Principal],
    message: str = "Unauthorized",
) -> None:
    if principal is not None and principal.is_admin:
        return
    logger.warning(
        "denied admin-only operation to %s",
        principal.subject_id if principal else "<anonymous>",
    )
    raise UnauthorizedError(message)
