"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Reusable model mixins for audit trail fields, timestamps
             and soft-delete flags.
-------------------------------------------------------------------------
"""
import uuid
from typing import Optional
from django.db import models
from django.conf import settings


class UUIDMixin(models.Model):
    """Adds public_id, the reference quoted in exports and audit entries."""

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        db_index=True,
        verbose_name="Public ID",
        help_text="Stable reference used in exports and audit entries."
    )

    class Meta:
        abstract = True


class TimeStampedMixin(UUIDMixin):
    """
    Entry and change timestamps.

    Beneficiary records are listed newest first by created_at.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
        help_text="When the record was entered."
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
        help_text="When the record was last changed."
    )

    class Meta:
        abstract = True


class AuditLogMixin(TimeStampedMixin):
    """Who entered a record and who last changed it."""

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="%(class)s_created",
        null=True,
        blank=True,
        verbose_name="Created By",
        help_text="Staff member who entered the record."
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="%(class)s_updated",
        null=True,
        blank=True,
        verbose_name="Updated By",
        help_text="Staff member who last changed the record."
    )

    class Meta:
        abstract = True

    def save_with_user(self, user: Optional[object] = None, *args, **kwargs) -> None:
        """
        Save and stamp the acting staff member.

        Anonymous or unsaved users leave the audit fields untouched.
        With update_fields, the audit fields are saved too.
        """
        if getattr(user, 'pk', None) is not None:
            if self._state.adding:
                self.created_by = user
            self.updated_by = user
            update_fields = kwargs.get('update_fields')
            if update_fields is not None:
                kwargs['update_fields'] = set(update_fields) | {'updated_by', 'updated_at'}
        self.save(*args, **kwargs)


class StatusMixin(models.Model):
    """
    Abstract mixin for soft-deletable master records.

    Inactive records stay referenced by history but are hidden from pickers.
    """

    is_active = models.BooleanField(
        default=True,
        verbose_name="Is Active",
        help_text="Inactive records stay in history but leave the pickers."
    )

    class Meta:
        abstract = True
