"""
Tests for the create_admin bootstrap script.
"""

from festivalhub.core.permissions import AccountStatus, UserRole
from festivalhub.core.security import verify_password
from scripts.create_admin import create_admin


class TestCreateAdmin:
    async def test_creates_admin(self, session_factory, user_service):
        admin = await create_admin("root_admin", "Root@1234", session_factory=session_factory)

        stored = await user_service.get_user(admin.id)
        assert stored.role == UserRole.ADMIN.value
        assert stored.is_active
        assert verify_password("Root@1234", stored.password_hash)

    async def test_resets_existing_account(self, session_factory, user_service, create_user):
        existing = await create_user(UserRole.USER, "root_admin", AccountStatus.INACTIVE)

        admin = await create_admin("root_admin", "Fresh@1234", session_factory=session_factory)

        assert admin.id == existing.id
        stored = await user_service.get_user(existing.id)
        assert stored.role == "ADMIN"
        assert stored.account_status == "ACTIVE"
        assert verify_password("Fresh@1234", stored.password_hash)

    async def test_admin_can_log_in(self, session_factory, user_service):
        await create_admin("root_admin", "Root@1234", session_factory=session_factory)
        tokens = await user_service.login("root_admin", "Root@1234")
        assert tokens["access_token"]
