"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Beneficiary entry models. Each row pairs one beneficiary
             with one article; rows sharing an application number form
             one submission and are replaced together.
-------------------------------------------------------------------------
"""
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin


class BeneficiaryType(models.TextChoices):
    """Beneficiary kinds recognised by fund request recipients."""
    DISTRICT = 'District', _('District')
    PUBLIC = 'Public', _('Public')
    INSTITUTIONS = 'Institutions', _('Institutions')
    OTHERS = 'Others', _('Others')


class EntryStatus(models.TextChoices):
    """Beneficiary entry lifecycle."""
    PENDING = 'pending', _('Pending')
    APPROVED = 'approved', _('Approved')
    REJECTED = 'rejected', _('Rejected')
    COMPLETED = 'completed', _('Completed')


class InstitutionType(models.TextChoices):
    """Institution entries are split into institutions and others."""
    INSTITUTIONS = 'institutions', _('Institutions')
    OTHERS = 'others', _('Others')


class Gender(models.TextChoices):
    MALE = 'Male', _('Male')
    FEMALE = 'Female', _('Female')
    TRANSGENDER = 'Transgender', _('Transgender')


class FemaleStatus(models.TextChoices):
    SINGLE_MOTHER = 'Single Mother', _('Single Mother')
    WIDOW = 'Widow', _('Widow')
    MARRIED = 'Married', _('Married')
    UNMARRIED = 'Unmarried', _('Unmarried')


class BeneficiaryEntry(AuditLogMixin):
    """
    Abstract (beneficiary, article) pairing.

    total_amount is always recomputed from quantity and cost on save.
    """

    application_number = models.CharField(
        max_length=20,
        blank=True,
        default='',
        db_index=True,
        verbose_name=_('Application Number')
    )
    article = models.ForeignKey(
        'inventory.Article',
        on_delete=models.PROTECT,
        related_name='%(class)s_rows',
        verbose_name=_('Article')
    )
    quantity = models.PositiveIntegerField(
        default=1,
        verbose_name=_('Quantity')
    )
    article_cost_per_unit = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name=_('Cost Per Unit')
    )
    total_amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        verbose_name=_('Total Amount')
    )
    notes = models.TextField(
        blank=True,
        verbose_name=_('Notes')
    )
    status = models.CharField(
        max_length=10,
        choices=EntryStatus.choices,
        default=EntryStatus.PENDING,
        verbose_name=_('Status')
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Recompute the line total before saving."""
        from apps.budgeting.services import line_total
        self.total_amount = line_total(self.quantity, self.article_cost_per_unit)
        super().save(*args, **kwargs)


class DistrictBeneficiaryEntry(BeneficiaryEntry):
    """Article allotted to a district, charged against its budget."""

    district = models.ForeignKey(
        'core.District',
        on_delete=models.PROTECT,
        related_name='beneficiary_entries',
        verbose_name=_('District')
    )

    class Meta:
        verbose_name = _('District Beneficiary Entry')
        verbose_name_plural = _('District Beneficiary Entries')
        ordering = ['-created_at', 'id']

    def __str__(self) -> str:
        return f"{self.application_number} - {self.district} - {self.article}"


class PublicBeneficiaryEntry(BeneficiaryEntry):
    """Individual applicant. One row per beneficiary."""

    name = models.CharField(
        max_length=255,
        verbose_name=_('Name')
    )
    aadhar_number = models.CharField(
        max_length=20,
        db_index=True,
        verbose_name=_('Aadhaar Number'),
        help_text=_('12-digit Aadhaar number.')
    )
    is_handicapped = models.BooleanField(
        default=False,
        verbose_name=_('Is Handicapped')
    )
    gender = models.CharField(
        max_length=15,
        choices=Gender.choices,
        blank=True,
        verbose_name=_('Gender')
    )
    female_status = models.CharField(
        max_length=15,
        choices=FemaleStatus.choices,
        blank=True,
        verbose_name=_('Female Status')
    )
    address = models.TextField(
        blank=True,
        verbose_name=_('Address')
    )
    mobile = models.CharField(
        max_length=20,
        blank=True,
        verbose_name=_('Mobile')
    )

    class Meta:
        verbose_name = _('Public Beneficiary Entry')
        verbose_name_plural = _('Public Beneficiary Entries')
        ordering = ['-created_at', 'id']

    def __str__(self) -> str:
        return f"{self.application_number} - {self.name}"


class InstitutionBeneficiaryEntry(BeneficiaryEntry):
    """Article requested by an institution (or an 'others' applicant)."""

    institution_name = models.CharField(
        max_length=255,
        verbose_name=_('Institution Name')
    )
    institution_type = models.CharField(
        max_length=15,
        choices=InstitutionType.choices,
        default=InstitutionType.INSTITUTIONS,
        db_index=True,
        verbose_name=_('Institution Type')
    )
    address = models.TextField(
        blank=True,
        verbose_name=_('Address')
    )
    mobile = models.CharField(
        max_length=20,
        blank=True,
        verbose_name=_('Mobile')
    )

    class Meta:
        verbose_name = _('Institution Beneficiary Entry')
        verbose_name_plural = _('Institution Beneficiary Entries')
        ordering = ['-created_at', 'id']

    def __str__(self) -> str:
        return f"{self.application_number} - {self.institution_name}"
