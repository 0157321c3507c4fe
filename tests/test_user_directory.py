"""Service-level tests for the admin user directory."""

import pytest

from app.config.settings import settings
from app.models.admin_user import AdminUser, UserRole
from app.services import user_directory
from app.utils.auth import Caller
from app.utils.errors import (
    ConflictError,
    ForbiddenError,
    InvariantViolationError,
    NotFoundError,
    UnauthorizedError,
    ValidationFailedError,
)
from app.utils.passwords import verify_password


def create(run_db, caller, username, role="admin", password="pw"):
    async def _go(session):
        return await user_directory.create_user(session, caller, username, role, password)
    return run_db(_go)


def list_usernames(run_db, caller):
    async def _go(session):
        return [u.username for u in await user_directory.list_users(session, caller)]
    return run_db(_go)


def as_caller(user: AdminUser) -> Caller:
    return Caller(id=user.id, username=user.username, role=UserRole(user.role))


class TestCreateUser:
    def test_operator_lifecycle(self, run_db, bootstrap_caller):
        """Create ops1, see it listed, then fail to create it again."""
        user = create(run_db, bootstrap_caller, "ops1", password="secret")

        assert user.id is not None
        assert "ops1" in list_usernames(run_db, bootstrap_caller)

        with pytest.raises(ConflictError):
            create(run_db, bootstrap_caller, "ops1", password="other")

        assert list_usernames(run_db, bootstrap_caller).count("ops1") == 1

    def test_password_is_stored_hashed(self, run_db, bootstrap_caller):
        user = create(run_db, bootstrap_caller, "ops1", password="secret")

        assert user.hashed_password != "secret"
        assert user.hashed_password.startswith("$2")
        assert verify_password("secret", user.hashed_password)

    def test_role_defaults_to_admin(self, run_db, bootstrap_caller):
        user = create(run_db, bootstrap_caller, "ops1", role="")
        assert user.role == "admin"

    def test_unknown_role_rejected(self, run_db, bootstrap_caller):
        with pytest.raises(ValidationFailedError):
            create(run_db, bootstrap_caller, "ops1", role="root")

    def test_blank_password_rejected(self, run_db, bootstrap_caller):
        with pytest.raises(ValidationFailedError):
            create(run_db, bootstrap_caller, "ops1", password="")

    def test_creation_is_audited(self, run_db, bootstrap_caller):
        user = create(run_db, bootstrap_caller, "ops1", role="super_admin")

        async def _go(session):
            return await user_directory.get_user_logs(session, bootstrap_caller, user.id)

        entries = run_db(_go)
        assert len(entries) == 1
        assert entries[0].change_type == "CREATE"
        assert entries[0].change_details == "User created with role super_admin"
        assert entries[0].admin_user == "admin"


class TestBootstrapAccount:
    def test_bootstrap_cannot_be_demoted(self, run_db, bootstrap_caller):
        async def _demote(session):
            await user_directory.update_user(session, bootstrap_caller, bootstrap_caller.id, role="admin")

        with pytest.raises(InvariantViolationError):
            run_db(_demote)

        async def _role(session):
            return (await session.get(AdminUser, bootstrap_caller.id)).role

        assert run_db(_role) == "super_admin"

    def test_bootstrap_password_can_change(self, run_db, bootstrap_caller):
        async def _go(session):
            await user_directory.update_user(session, bootstrap_caller, bootstrap_caller.id, password="new-pass")
            return await user_directory.authenticate(session, "admin", "new-pass")

        assert run_db(_go).username == "admin"

    def test_bootstrap_cannot_be_deleted_by_another_super_admin(self, run_db, bootstrap_caller):
        other = as_caller(create(run_db, bootstrap_caller, "root2", role="super_admin"))

        async def _go(session):
            await user_directory.delete_user(session, other, bootstrap_caller.id)

        with pytest.raises(InvariantViolationError):
            run_db(_go)
        assert "admin" in list_usernames(run_db, bootstrap_caller)


class TestDeleteUser:
    def test_cannot_delete_self(self, run_db, bootstrap_caller):
        other = as_caller(create(run_db, bootstrap_caller, "root2", role="super_admin"))

        async def _go(session):
            await user_directory.delete_user(session, other, other.id)

        with pytest.raises(InvariantViolationError):
            run_db(_go)
        assert "root2" in list_usernames(run_db, bootstrap_caller)

    def test_delete_other_user(self, run_db, bootstrap_caller):
        user = create(run_db, bootstrap_caller, "ops1")

        async def _go(session):
            await user_directory.delete_user(session, bootstrap_caller, user.id)
            return await user_directory.get_user_logs(session, bootstrap_caller, user.id)

        entries = run_db(_go)
        assert "ops1" not in list_usernames(run_db, bootstrap_caller)
        assert [e.change_type for e in entries] == ["DELETE", "CREATE"]

    def test_delete_missing_user(self, run_db, bootstrap_caller):
        async def _go(session):
            await user_directory.delete_user(session, bootstrap_caller, 9999)

        with pytest.raises(NotFoundError):
            run_db(_go)


class TestRoleGating:
    def test_plain_admin_is_forbidden_everywhere(self, run_db, bootstrap_caller):
        admin = as_caller(create(run_db, bootstrap_caller, "ops1"))
        before = list_usernames(run_db, bootstrap_caller)

        async def _list(session):
            await user_directory.list_users(session, admin)

        async def _create(session):
            await user_directory.create_user(session, admin, "sneaky", "super_admin", "pw")

        async def _promote(session):
            await user_directory.update_user(session, admin, admin.id, role="super_admin")

        async def _delete(session):
            await user_directory.delete_user(session, admin, bootstrap_caller.id)

        for operation in (_list, _create, _promote, _delete):
            with pytest.raises(ForbiddenError):
                run_db(operation)

        assert list_usernames(run_db, bootstrap_caller) == before

        async def _role(session):
            return (await session.get(AdminUser, admin.id)).role

        assert run_db(_role) == "admin"

    def test_forbidden_checked_before_lookup(self, run_db, bootstrap_caller):
        admin = as_caller(create(run_db, bootstrap_caller, "ops1"))

        async def _go(session):
            await user_directory.update_user(session, admin, 9999, role="admin")

        with pytest.raises(ForbiddenError):
            run_db(_go)


class TestUpdateUser:
    def test_empty_fields_are_ignored(self, run_db, bootstrap_caller):
        user = create(run_db, bootstrap_caller, "ops1", password="secret")

        async def _go(session):
            updated = await user_directory.update_user(session, bootstrap_caller, user.id, role="", password="")
            return updated.role, verify_password("secret", updated.hashed_password)

        assert run_db(_go) == ("admin", True)

    def test_promote_user(self, run_db, bootstrap_caller):
        user = create(run_db, bootstrap_caller, "ops1")

        async def _go(session):
            await user_directory.update_user(session, bootstrap_caller, user.id, role="super_admin")
            return await user_directory.get_user_logs(session, bootstrap_caller, user.id)

        entries = run_db(_go)
        assert entries[0].change_details == "Updated role: admin -> super_admin"


class TestAuthenticate:
    def test_valid_credentials(self, run_db, bootstrap_caller):
        async def _go(session):
            return await user_directory.authenticate(session, "admin", settings.BOOTSTRAP_ADMIN_PASSWORD)

        assert run_db(_go).role == "super_admin"

    @pytest.mark.parametrize("username,password", [("admin", "wrong"), ("ghost", "anything")])
    def test_invalid_credentials(self, run_db, bootstrap_caller, username, password):
        async def _go(session):
            await user_directory.authenticate(session, username, password)

        with pytest.raises(UnauthorizedError):
            run_db(_go)

    def test_client_code_enforced_when_configured(self, run_db, bootstrap_caller, monkeypatch):
        monkeypatch.setattr(settings, "CLIENT_CODE", "TENANT-A")

        async def _wrong(session):
            await user_directory.authenticate(session, "admin", settings.BOOTSTRAP_ADMIN_PASSWORD, client_code="TENANT-B")

        async def _right(session):
            return await user_directory.authenticate(session, "admin", settings.BOOTSTRAP_ADMIN_PASSWORD, client_code="TENANT-A")

        with pytest.raises(UnauthorizedError):
            run_db(_wrong)
        assert run_db(_right).username == "admin"
