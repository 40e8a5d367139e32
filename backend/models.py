"""
Pydantic models used across the backend.

Input shapes validate request bodies at the FastAPI route boundary. Update
shapes double as column whitelists: only the fields declared here can
ever reach `partial_update_sql`, and `columns()` turns the fields a client
actually sent into a column -> value map. An explicit null for a NOT NULL
column is dropped rather than written.

`Principal` is the only representation of "who is calling"; it is built
by `security.TokenService.verify` and nowhere else.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple

from pydantic import BaseModel, Field


class Role(str, Enum):
    ARTIST = "Artist"
    ADMIN = "Admin"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller: subject id plus role."""

    subject_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class LoginIn(BaseModel):
    email: str
    password: str


class UserRegister(BaseModel):
    name: str
    email: str
    password: str
    artistname: Optional[str] = None
    usertype: Role = Role.ARTIST


class AdminRegister(BaseModel):
    name: str
    email: str
    password: str
    artistname: Optional[str] = None
    venuename: Optional[str] = None
    location: Optional[str] = None


class _PartialUpdate(BaseModel):
    # columns declared NOT NULL; an explicit null for these is ignored
    not_null: ClassVar[Tuple[str, ...]] = ()

    def columns(self) -> Dict[str, Any]:
        """Fields the client sent, in declaration order."""

        return {
            k: v
            for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None or k not in self.not_null
        }


class UserUpdate(_PartialUpdate):
    """Fields a user may change on their own account."""

    not_null: ClassVar[Tuple[str, ...]] = ("name", "email")

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    artistname: Optional[str] = None


class AdminUserUpdate(UserUpdate):
    """Admins may additionally change role and venue details."""

    not_null: ClassVar[Tuple[str, ...]] = ("name", "email", "usertype")

    usertype: Optional[Role] = None
    venuename: Optional[str] = None
    location: Optional[str] = None

    def columns(self) -> Dict[str, Any]:
        cols = super().columns()
        if "usertype" in cols:
            cols["usertype"] = cols["usertype"].value
        return cols


class EventRequestIn(BaseModel):
    artistname: str = Field(min_length=1)
    eventname: Optional[str] = None
    status: str = "Pending"
    requestdate: Optional[date] = None
    starttime: Optional[datetime] = None
    endtime: Optional[datetime] = None
    amount: Optional[Decimal] = None
    userid: Optional[str] = None


class EventRequestUpdate(_PartialUpdate):
    not_null: ClassVar[Tuple[str, ...]] = ("status",)

    artistname: Optional[str] = None
    eventname: Optional[str] = None
    status: Optional[str] = None
    requestdate: Optional[date] = None
    starttime: Optional[datetime] = None
    endtime: Optional[datetime] = None
    amount: Optional[Decimal] = None
