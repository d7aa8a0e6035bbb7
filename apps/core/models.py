"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Shared master and audit models: District (budget holder
             and application number anchor) and AuditLog.
-------------------------------------------------------------------------
"""
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin, StatusMixin


class District(AuditLogMixin, StatusMixin):
    """
    District master record.

    Each district holds an allotted budget that district beneficiary
    entries are charged against. The application_number, once issued,
    is reused by every later submission for the district.
    """

    district_name = models.CharField(
        max_length=100,
        unique=True,
        verbose_name=_('District Name')
    )
    president_name = models.CharField(
        max_length=150,
        blank=True,
        verbose_name=_('President Name')
    )
    mobile_number = models.CharField(
        max_length=20,
        blank=True,
        verbose_name=_('Mobile Number')
    )
    allotted_budget = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        verbose_name=_('Allotted Budget'),
        help_text=_('Budget ceiling for district beneficiary entries.')
    )
    application_number = models.CharField(
        max_length=20,
        blank=True,
        default='',
        verbose_name=_('Application Number'),
        help_text=_('Application number issued on the first district submission.')
    )

    class Meta:
        verbose_name = _('District')
        verbose_name_plural = _('Districts')
        ordering = ['district_name']

    def __str__(self) -> str:
        return self.district_name


class ActionType(models.TextChoices):
    """Audit log action types."""
    CREATE = 'CREATE', _('Create')
    UPDATE = 'UPDATE', _('Update')
    DELETE = 'DELETE', _('Delete')
    LOGIN = 'LOGIN', _('Login')
    LOGOUT = 'LOGOUT', _('Logout')
    EXPORT = 'EXPORT', _('Export')
    STATUS_CHANGE = 'STATUS_CHANGE', _('Status Change')


class EntityType(models.TextChoices):
    """Audit log entity types."""
    ARTICLE = 'article', _('Article')
    DISTRICT = 'district', _('District')
    DISTRICT_BENEFICIARY = 'district_beneficiary', _('District Beneficiary')
    PUBLIC_BENEFICIARY = 'public_beneficiary', _('Public Beneficiary')
    INSTITUTION_BENEFICIARY = 'institution_beneficiary', _('Institution Beneficiary')
    FUND_REQUEST = 'fund_request', _('Fund Request')
    ORDER = 'order', _('Order')
    USER = 'user', _('User')
    SYSTEM = 'system', _('System')


class AuditLog(models.Model):
    """
    Audit trail for state-changing operations.

    Attributes:
        user: User who performed the action (nullable for system actions)
        action_type: Type of action performed
        entity_type: Kind of record affected
        entity_id: Identifier of the affected record
        details: Structured payload (new/old/deleted values, status change)
        ip_address: IP address of the user
        user_agent: Client user agent
        created_at: When the action occurred
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        verbose_name=_('User')
    )
    action_type = models.CharField(
        max_length=20,
        choices=ActionType.choices,
        verbose_name=_('Action')
    )
    entity_type = models.CharField(
        max_length=30,
        choices=EntityType.choices,
        verbose_name=_('Entity Type')
    )
    entity_id = models.CharField(
        max_length=64,
        blank=True,
        default='',
        verbose_name=_('Entity ID')
    )
    details = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_('Details')
    )
    ip_address = models.GenericIPAddressField(
        null=True,
        blank=True,
        verbose_name=_('IP Address')
    )
    user_agent = models.TextField(
        blank=True,
        verbose_name=_('User Agent')
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        verbose_name=_('Timestamp')
    )

    class Meta:
        verbose_name = _('Audit Log')
        verbose_name_plural = _('Audit Logs')
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='core_audit_entity_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action_type} {self.entity_type} {self.entity_id}".strip()
