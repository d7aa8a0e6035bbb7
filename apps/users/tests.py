"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for users and role permissions.
-------------------------------------------------------------------------
"""
from unittest import mock

from django.contrib.admin.sites import site
from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase

from apps.core.exceptions import UnauthorizedRoleException
from apps.core.models import ActionType, AuditLog, EntityType
from apps.users.admin import CustomUserAdmin
from apps.users.models import UserRole, UserStatus
from apps.users.permissions import (
    ALL_PERMISSIONS,
    Permission,
    can_delete,
    can_write,
    has_permission,
    permissions_for_user,
    require_permission,
)


User = get_user_model()


class PermissionTests(TestCase):
    """Tests for the role permission table."""

    def setUp(self) -> None:
        """Create one user per role."""
        self.admin = User.objects.create_user(
            email='admin@wdts.test', password='testpass123', first_name='Admin', role=UserRole.ADMIN
        )
        self.editor = User.objects.create_user(
            email='editor@wdts.test', password='testpass123', first_name='Editor', role=UserRole.EDITOR
        )
        self.viewer = User.objects.create_user(
            email='viewer@wdts.test', password='testpass123', first_name='Viewer', role=UserRole.VIEWER
        )

    def test_admin_holds_every_permission(self) -> None:
        """Test that admins are granted the full table."""
        self.assertEqual(permissions_for_user(self.admin), ALL_PERMISSIONS)
        self.assertTrue(can_delete(self.admin))

    def test_editor_writes_but_cannot_delete(self) -> None:
        """Test that editors can write data but not delete it."""
        self.assertTrue(can_write(self.editor))
        self.assertFalse(can_delete(self.editor))
        self.assertTrue(has_permission(self.editor, Permission.INVENTORY_WRITE))
        self.assertFalse(has_permission(self.editor, Permission.USERS_WRITE))

    def test_viewer_is_read_only(self) -> None:
        """Test that viewers only read."""
        self.assertTrue(has_permission(self.viewer, Permission.DATA_READ))
        self.assertFalse(can_write(self.viewer))
        self.assertTrue(self.viewer.is_read_only())

    def test_inactive_status_removes_permissions(self) -> None:
        """Test that inactive accounts hold nothing."""
        self.admin.status = UserStatus.INACTIVE
        self.admin.save()

        self.assertEqual(permissions_for_user(self.admin), frozenset())
        self.assertFalse(self.admin.can_write())

    def test_require_permission_raises_for_viewer(self) -> None:
        """Test that the guard rejects a missing permission."""
        with self.assertRaises(UnauthorizedRoleException) as ctx:
            require_permission(self.viewer, Permission.DATA_WRITE)

        self.assertEqual(ctx.exception.details['permission'], Permission.DATA_WRITE)
        self.assertEqual(ctx.exception.details['role'], UserRole.VIEWER)

    def test_require_permission_trusts_internal_callers(self) -> None:
        """Test that a None user is treated as a trusted caller."""
        require_permission(None, Permission.DATA_DELETE)

    def test_permission_codes_on_user(self) -> None:
        """Test the model helpers that wrap the table."""
        self.assertIn(Permission.DATA_WRITE, self.editor.get_permission_codes())
        self.assertTrue(self.editor.has_app_permission(Permission.DATA_READ))


class CustomUserManagerTests(TestCase):
    """Tests for CustomUserManager."""

    def test_superuser_defaults_to_admin_role(self) -> None:
        """Test that superusers get the admin role and staff flag."""
        user = User.objects.create_superuser(email='root@wdts.test', password='testpass123', first_name='Root')

        self.assertEqual(user.role, UserRole.ADMIN)
        self.assertTrue(user.is_staff)

    def test_email_is_required(self) -> None:
        """Test that a blank email is rejected."""
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='testpass123')


class LoginAuditTests(TestCase):
    """Tests for login and logout audit entries."""

    def setUp(self) -> None:
        """Set up test data."""
        self.user = User.objects.create_user(
            email='editor@wdts.test', password='testpass123', first_name='Editor', role=UserRole.EDITOR
        )

    def test_login_and_logout_are_audited(self) -> None:
        """Test that signing in and out writes LOGIN and LOGOUT entries."""
        self.client.login(email='editor@wdts.test', password='testpass123')
        self.client.logout()

        actions = list(
            AuditLog.objects.filter(entity_type=EntityType.USER).order_by('id').values_list('action_type', flat=True)
        )
        self.assertEqual(actions, [ActionType.LOGIN, ActionType.LOGOUT])

    def test_failed_login_writes_no_entry(self) -> None:
        """Test that a failed login is only logged."""
        self.assertFalse(self.client.login(email='editor@wdts.test', password='wrong'))

        self.assertFalse(AuditLog.objects.exists())


class CustomUserAdminTests(TestCase):
    """Tests for the account status admin actions."""

    def setUp(self) -> None:
        """Set up test data."""
        self.admin = User.objects.create_superuser(email='root@wdts.test', password='testpass123', first_name='Root')
        self.viewer = User.objects.create_user(
            email='viewer@wdts.test', password='testpass123', first_name='Viewer'
        )
        self.model_admin = CustomUserAdmin(User, site)
        self.request = RequestFactory().post('/admin/users/customuser/')
        self.request.user = self.admin

    def test_deactivate_skips_acting_user(self) -> None:
        """Test that admins cannot deactivate themselves and changes are audited."""
        with mock.patch.object(self.model_admin, 'message_user'):
            self.model_admin.deactivate_accounts(self.request, User.objects.all())

        self.viewer.refresh_from_db()
        self.admin.refresh_from_db()
        self.assertEqual(self.viewer.status, UserStatus.INACTIVE)
        self.assertEqual(self.admin.status, UserStatus.ACTIVE)
        log = AuditLog.objects.get(action_type=ActionType.STATUS_CHANGE)
        self.assertEqual(log.details['new_status'], UserStatus.INACTIVE)

    def test_access_level_column(self) -> None:
        """Test the access summary shown in the user list."""
        self.assertEqual(str(self.model_admin.access_level(self.admin)), 'Read, write & delete')
        self.assertEqual(str(self.model_admin.access_level(self.viewer)), 'Read only')
