"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Custom User model with role-based access control (RBAC).
             Implements the admin / editor / viewer hierarchy used to
             gate create, update, delete and export actions.
-------------------------------------------------------------------------
"""
import uuid
from typing import List, Optional
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.translation import gettext_lazy as _


class UserRole(models.TextChoices):
    """Roles recognised by the permission table."""
    ADMIN = 'admin', _('Administrator')
    EDITOR = 'editor', _('Editor')
    VIEWER = 'viewer', _('Viewer')


class UserStatus(models.TextChoices):
    """Account status. Inactive users hold no permissions."""
    ACTIVE = 'active', _('Active')
    INACTIVE = 'inactive', _('Inactive')


class CustomUserManager(BaseUserManager):
    """Creates staff accounts keyed by email address."""

    def create_user(
        self,
        email: str,
        password: Optional[str] = None,
        **extra_fields
    ) -> 'CustomUser':
        """
        Create a staff account. New accounts are viewers unless a role is given.

        Raises:
            ValueError: If email is blank.
        """
        if not (email or '').strip():
            raise ValueError(_('An email address is required for every staff account.'))

        extra_fields.setdefault('role', UserRole.VIEWER)
        user = self.model(email=self.normalize_email(email.strip()), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(
        self,
        email: str,
        password: Optional[str] = None,
        **extra_fields
    ) -> 'CustomUser':
        """Superusers always carry the admin role."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields['role'] = UserRole.ADMIN

        if not extra_fields['is_staff'] or not extra_fields['is_superuser']:
            raise ValueError(_('Superusers need both is_staff and is_superuser.'))

        return self.create_user(email, password, **extra_fields)


class CustomUser(AbstractUser):
    """
    Custom User model for WDTS.

    Uses the email address as the login identifier.

    Attributes:
        email: Unique email address.
        role: admin, editor or viewer.
        status: active or inactive.
        phone: Contact phone number.
    """

    # Remove username field, use email instead
    username = None

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        db_index=True,
        verbose_name=_('Public ID'),
        help_text=_('Stable reference used in exports and audit entries.')
    )
    email = models.EmailField(
        unique=True,
        verbose_name=_('Email Address')
    )
    role = models.CharField(
        max_length=10,
        choices=UserRole.choices,
        default=UserRole.VIEWER,
        db_index=True,
        verbose_name=_('Role')
    )
    status = models.CharField(
        max_length=10,
        choices=UserStatus.choices,
        default=UserStatus.ACTIVE,
        db_index=True,
        verbose_name=_('Status')
    )
    phone = models.CharField(
        max_length=20,
        blank=True,
        verbose_name=_('Phone Number')
    )

    objects = CustomUserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name']

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        ordering = ['first_name', 'last_name', 'email']

    def __str__(self) -> str:
        """Return user's name (or email) and role."""
        return f"{self.get_full_name() or self.email} ({self.get_role_display()})"

    @property
    def is_active_member(self) -> bool:
        """True when the account may act at all."""
        return self.is_active and self.status == UserStatus.ACTIVE

    def get_permission_codes(self) -> List[str]:
        """Return the permission codes granted by the user's role."""
        from apps.users.permissions import permissions_for_user
        return sorted(permissions_for_user(self))

    def has_app_permission(self, code: str) -> bool:
        """
        Check a single permission code such as 'data:write'.

        Args:
            code: Permission code.

        Returns:
            True if the role grants the permission.
        """
        from apps.users.permissions import has_permission
        return has_permission(self, code)

    def can_write(self) -> bool:
        return self.is_active_member and (
            self.is_superuser or self.role in (UserRole.ADMIN, UserRole.EDITOR)
        )

    def can_delete(self) -> bool:
        return self.is_active_member and (self.is_superuser or self.role == UserRole.ADMIN)

    def is_read_only(self) -> bool:
        return not self.can_write()
