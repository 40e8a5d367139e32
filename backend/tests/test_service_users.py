"""Tests for UserService: registration, login and partial updates."""
import pytest

from errors import BadRequestError, NotFoundError, UnauthorizedError
from models import Role, UserRegister
from repo_users import public
from service_users import sanitize_password
from tests.conftest import ADMIN, OWNER, STRANGER, user_row


class TestSanitizePassword:

    def test_absent_password_untouched(self, hasher):
        assert sanitize_password({"name": "Jane"}, "H", hasher) == {"name": "Jane"}

    def test_empty_password_keeps_stored_hash(self, hasher):
        assert sanitize_password({"password": ""}, "H", hasher) == {"password": "H"}

    def test_null_password_dropped(self, hasher):
        assert sanitize_password({"password": None, "name": "Jane"}, "H", hasher) == {"name": "Jane"}

    def test_short_password_rejected(self, hasher):
        with pytest.raises(BadRequestError, match="at least 8 characters"):
            sanitize_password({"password": "abc"}, "H", hasher)

    def test_long_password_rehashed(self, hasher):
        fields = sanitize_password({"password": "0123456789"}, "H", hasher)
        assert fields["password"] not in ("H", "0123456789")
        assert hasher.verify("0123456789", fields["password"])


class TestUpdate:

    def test_owner_updates_name(self, users, store):
        store.queue([user_row()], [user_row(name="Jane")])
        result = users.update("u1", {"name": "Jane"}, OWNER)
        assert store.calls[1] == (
            'UPDATE "users" SET "name"=$1 WHERE "userid"=$2 RETURNING *',
            ["Jane", "u1"],
        )
        assert result["name"] == "Jane"
        assert "password" not in result

    def test_missing_user_is_not_found_before_any_write(self, users, store):
        with pytest.raises(NotFoundError):
            users.update("missing-id", {"name": "Jane"}, OWNER)
        assert len(store.calls) == 1
        assert store.statements[0].startswith("SELECT")

    def test_stranger_is_unauthorized(self, users, store):
        store.queue([user_row()])
        with pytest.raises(UnauthorizedError):
            users.update("u1", {"name": "Jane"}, STRANGER)
        assert len(store.calls) == 1

    def test_admin_may_update_anyone(self, users, store):
        store.queue([user_row()], [user_row(name="Jane")])
        assert users.update("u1", {"name": "Jane"}, ADMIN)["name"] == "Jane"

    def test_blank_password_writes_back_stored_hash(self, users, store):
        store.queue([user_row(password="H")], [user_row(password="H")])
        users.update("u1", {"password": ""}, OWNER)
        statement, args = store.calls[1]
        assert statement == 'UPDATE "users" SET "password"=$1 WHERE "userid"=$2 RETURNING *'
        assert args == ["H", "u1"]

    def test_short_password_rejected_without_write(self, users, store):
        store.queue([user_row()])
        with pytest.raises(BadRequestError, match="Password must be at least 8 characters"):
            users.update("u1", {"password": "abc"}, OWNER)
        assert len(store.calls) == 1

    def test_new_password_is_hashed(self, users, store, hasher):
        store.queue([user_row(password="H")], [user_row()])
        users.update("u1", {"password": "0123456789"}, OWNER)
        written = store.calls[1][1][0]
        assert written not in ("H", "0123456789")
        assert hasher.verify("0123456789", written)

    def test_empty_update_rejected_before_compile(self, users, store):
        store.queue([user_row()])
        with pytest.raises(BadRequestError, match="No fields to update"):
            users.update("u1", {}, OWNER)
        assert len(store.calls) == 1

    def test_no_row_returned_is_bad_request(self, users, store):
        store.queue([user_row()], [])
        with pytest.raises(BadRequestError, match="error updating the user"):
            users.update("u1", {"name": "Jane"}, OWNER)

    def test_taken_email_rejected(self, users, store):
        store.queue([user_row()], [user_row(userid="u9", email="taken@example.com")])
        with pytest.raises(BadRequestError, match="already registered"):
            users.update("u1", {"email": "taken@example.com"}, OWNER)
        assert not any(s.startswith("UPDATE") for s in store.statements)


class TestRegisterAndLogin:

    def _payload(self, **overrides):
        data = {"name": "Jo", "email": "jo@example.com", "password": "longenough", "artistname": "DJ Jo"}
        data.update(overrides)
        return UserRegister(**data)

    def test_register_hashes_and_issues_token(self, users, store, tokens, hasher):
        store.queue([], [public(user_row(userid="new"))])
        result = users.register(self._payload())
        statement, args = store.calls[1]
        assert statement.startswith("INSERT INTO users (userid, name, email, artistname, password, usertype)")
        assert "longenough" not in args
        assert hasher.verify("longenough", args[4])
        assert args[5] == "Artist"
        assert tokens.verify(result["token"]).subject_id == "new"
        assert "password" not in result["user"]

    def test_register_short_password(self, users, store):
        with pytest.raises(BadRequestError):
            users.register(self._payload(password="short"))
        assert store.calls == []

    def test_register_duplicate_email(self, users, store):
        store.queue([user_row()])
        with pytest.raises(BadRequestError, match="already registered"):
            users.register(self._payload())

    def test_register_as_admin_refused(self, users):
        with pytest.raises(BadRequestError):
            users.register(self._payload(usertype=Role.ADMIN))

    def test_authenticate(self, users, store, hasher, tokens):
        store.queue([user_row(password=hasher.hash("longenough"))])
        result = users.authenticate("u1@example.com", "longenough")
        assert "password" not in result["user"]
        assert tokens.verify(result["token"]).role == Role.ARTIST

    def test_authenticate_unknown_email(self, users):
        with pytest.raises(NotFoundError):
            users.authenticate("nobody@example.com", "longenough")

    def test_authenticate_wrong_password(self, users, store, hasher):
        store.queue([user_row(password=hasher.hash("longenough"))])
        with pytest.raises(UnauthorizedError):
            users.authenticate("u1@example.com", "wrong-password")

    def test_authenticate_unknown_stored_role(self, users, store, hasher):
        store.queue([user_row(usertype="Venue", password=hasher.hash("longenough"))])
        with pytest.raises(UnauthorizedError):
            users.authenticate("u1@example.com", "longenough")


class TestReads:

    def test_find_all_empty(self, users):
        with pytest.raises(NotFoundError):
            users.find_all()

    def test_get_by_email_missing(self, users):
        with pytest.raises(BadRequestError, match="No user found for x@example.com."):
            users.get_by_email("x@example.com")

    def test_get_by_id_checks_caller_first(self, users, store):
        with pytest.raises(UnauthorizedError):
            users.get_by_id("u1", STRANGER)
        assert store.calls == []

    def test_get_by_id_missing(self, users):
        with pytest.raises(NotFoundError):
            users.get_by_id("u1", OWNER)


class TestDelete:

    def test_delete(self, users, store):
        store.queue([user_row()], [{"userid": "u1", "name": "Jo", "email": "u1@example.com", "usertype": "Artist"}])
        assert users.delete("u1")["deleted"]["userid"] == "u1"
        assert store.calls[1] == (
            "DELETE FROM users WHERE userid = $1 RETURNING userid, name, email, usertype",
            ["u1"],
        )

    def test_delete_missing(self, users, store):
        with pytest.raises(NotFoundError):
            users.delete("u1")
        assert len(store.calls) == 1

    def test_delete_vanished(self, users, store):
        store.queue([user_row()], [])
        with pytest.raises(BadRequestError):
            users.delete("u1")
