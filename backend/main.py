import logging
import time
from contextlib import contextmanager
from typing import Optional

import psycopg
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from db import PgStore, Store
from errors import AppError, UnauthorizedError
from models import (
    AdminRegister,
    AdminUserUpdate,
    EventRequestIn,
    EventRequestUpdate,
    LoginIn,
    Principal,
    UserRegister,
    UserUpdate,
)
from repo_event_requests import EventRequestRepo
from repo_users import UserRepo
from security import PasswordHasher, TokenService
from service_admins import AdminService
from service_event_requests import EventRequestService
from service_users import UserService
from settings import Settings, settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="GigMatch Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One store per process. Services are cheap and built per request from
# the providers below, so tests only need to override `get_store` and
# `get_settings`.
store = PgStore()

# Missing or non-Bearer headers are turned into 401 by `get_principal`.
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings() -> Settings:
    return settings


def get_store() -> Store:
    return store


def get_tokens(config: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(config)


def get_user_service(
    db: Store = Depends(get_store),
    config: Settings = Depends(get_settings),
    tokens: TokenService = Depends(get_tokens),
) -> UserService:
    return UserService(UserRepo(db), PasswordHasher(config), tokens)


def get_request_service(db: Store = Depends(get_store)) -> EventRequestService:
    return EventRequestService(EventRequestRepo(db))


def get_admin_service(
    users: UserService = Depends(get_user_service),
    requests: EventRequestService = Depends(get_request_service),
) -> AdminService:
    return AdminService(users, requests)


def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_tokens),
) -> Principal:
    try:
        if credentials is None:
            raise UnauthorizedError("Access token missing or invalid.")
        return tokens.verify(credentials.credentials)
    except UnauthorizedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


@contextmanager
def service_errors():
    """Map service and store failures to HTTP errors."""

    try:
        yield
    except AppError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except psycopg.IntegrityError as e:
        raise HTTPException(status_code=400, detail=f"Constraint violated: {e.diag.message_primary}")
    except psycopg.Error as e:
        logger.exception("store call failed")
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed
    )
    return response


@app.get("/health")
def health(db: Store = Depends(get_store)):
    try:
        db.ping()
        return {"ok": True}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"DB health check failed: {e}")


# --- users ---

@app.post("/user/login")
def user_login(payload: LoginIn, users: UserService = Depends(get_user_service)):
    with service_errors():
        return users.authenticate(payload.email, payload.password)


@app.post("/user/register", status_code=status.HTTP_201_CREATED)
def user_register(payload: UserRegister, users: UserService = Depends(get_user_service)):
    with service_errors():
        return users.register(payload)


@app.get("/user")
def list_users(
    users: UserService = Depends(get_user_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return {"users": users.find_all()}


@app.get("/user/email/{email}")
def user_by_email(
    email: str,
    users: UserService = Depends(get_user_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return {"user": users.get_by_email(email)}


@app.get("/user/events/{userid}")
def user_event_requests(
    userid: str,
    requests: EventRequestService = Depends(get_request_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        found = requests.list_for_user(userid, principal)
    if not found:
        return {"message": "No event requests found for this user.", "eventRequests": []}
    return {"eventRequests": found}


@app.get("/user/{userid}")
def user_by_id(
    userid: str,
    users: UserService = Depends(get_user_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return {"user": users.get_by_id(userid, principal)}


@app.put("/user/{userid}")
def update_user(
    userid: str,
    payload: UserUpdate,
    users: UserService = Depends(get_user_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return users.update(userid, payload.columns(), principal)


# --- admins ---

@app.post("/admin/register", status_code=status.HTTP_201_CREATED)
def admin_register(payload: AdminRegister, admins: AdminService = Depends(get_admin_service)):
    with service_errors():
        return admins.register(payload)


@app.post("/admin/login")
def admin_login(payload: LoginIn, admins: AdminService = Depends(get_admin_service)):
    with service_errors():
        return admins.login(payload.email, payload.password)


@app.get("/admin/users")
def admin_list_users(
    admins: AdminService = Depends(get_admin_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return admins.list_users(principal)


@app.put("/admin/users/{userid}")
def admin_update_user(
    userid: str,
    payload: AdminUserUpdate,
    admins: AdminService = Depends(get_admin_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return admins.update_user(userid, payload.columns(), principal)


@app.delete("/admin/users/{userid}")
def admin_delete_user(
    userid: str,
    admins: AdminService = Depends(get_admin_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return admins.delete_user(userid, principal)


@app.get("/admin/event-requests")
def admin_list_event_requests(
    admins: AdminService = Depends(get_admin_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return admins.list_event_requests(principal)


@app.put("/admin/event-requests/{requestid}")
def admin_update_event_request(
    requestid: str,
    payload: EventRequestUpdate,
    admins: AdminService = Depends(get_admin_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return admins.update_event_request(requestid, payload.columns(), principal)


@app.delete("/admin/event-requests/{requestid}")
def admin_delete_event_request(
    requestid: str,
    admins: AdminService = Depends(get_admin_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return admins.delete_event_request(requestid, principal)


# --- event requests ---

@app.post("/event", status_code=status.HTTP_201_CREATED)
def create_event_request(
    payload: EventRequestIn,
    requests: EventRequestService = Depends(get_request_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return {"eventRequest": requests.create(payload, principal)}


@app.get("/event")
def list_event_requests(
    requests: EventRequestService = Depends(get_request_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return requests.list_all(principal)


@app.get("/event/user/{userid}")
def event_requests_for_user(
    userid: str,
    requests: EventRequestService = Depends(get_request_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        found = requests.list_for_user(userid, principal)
    if not found:
        return {"message": "No event requests found for this user.", "eventRequests": []}
    return {"eventRequests": found}


@app.get("/event/status/{status_name}")
def event_requests_by_status(
    status_name: str,
    requests: EventRequestService = Depends(get_request_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return requests.find_by_status(status_name)


@app.get("/event/{requestid}")
def get_event_request(
    requestid: str,
    requests: EventRequestService = Depends(get_request_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return requests.get(requestid, principal)


@app.put("/event/{requestid}")
def update_event_request(
    requestid: str,
    payload: EventRequestUpdate,
    requests: EventRequestService = Depends(get_request_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return requests.update(requestid, payload.columns(), principal)


@app.delete("/event/{requestid}")
def delete_event_request(
    requestid: str,
    requests: EventRequestService = Depends(get_request_service),
    principal: Principal = Depends(get_principal),
):
    with service_errors():
        return requests.delete(requestid, principal)
