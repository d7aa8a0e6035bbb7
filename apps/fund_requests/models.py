"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Fund request models. An Aid request carries recipients,
             an Article request carries supplier article lines.
-------------------------------------------------------------------------
"""
from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.beneficiaries.models import BeneficiaryType
from apps.core.mixins import AuditLogMixin


class FundRequestType(models.TextChoices):
    AID = 'Aid', _('Aid')
    ARTICLE = 'Article', _('Article')


class FundRequestStatus(models.TextChoices):
    """Only DRAFT is set here; later transitions are external."""
    DRAFT = 'draft', _('Draft')
    SUBMITTED = 'submitted', _('Submitted')
    APPROVED = 'approved', _('Approved')
    REJECTED = 'rejected', _('Rejected')
    COMPLETED = 'completed', _('Completed')


class FundRequest(AuditLogMixin):
    """
    Batched request for disbursement (Aid) or purchase (Article).

    total_amount is derived from the child rows on every save and
    never trusted from input.
    """

    fund_request_type = models.CharField(
        max_length=10,
        choices=FundRequestType.choices,
        verbose_name=_('Fund Request Type')
    )
    fund_request_number = models.CharField(
        max_length=30,
        unique=True,
        verbose_name=_('Fund Request Number')
    )
    status = models.CharField(
        max_length=10,
        choices=FundRequestStatus.choices,
        default=FundRequestStatus.DRAFT,
        db_index=True,
        verbose_name=_('Status')
    )
    total_amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        verbose_name=_('Total Amount')
    )
    aid_type = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Aid Type')
    )
    notes = models.TextField(
        blank=True,
        verbose_name=_('Notes')
    )

    # Supplier header (Article type only)
    gst_number = models.CharField(max_length=30, blank=True, verbose_name=_('GST Number'))
    supplier_name = models.CharField(max_length=255, blank=True, verbose_name=_('Supplier Name'))
    supplier_address = models.TextField(blank=True, verbose_name=_('Supplier Address'))
    supplier_city = models.CharField(max_length=100, blank=True, verbose_name=_('Supplier City'))
    supplier_state = models.CharField(max_length=100, blank=True, verbose_name=_('Supplier State'))
    supplier_pincode = models.CharField(max_length=10, blank=True, verbose_name=_('Supplier Pincode'))
    purchase_order_number = models.CharField(
        max_length=30,
        blank=True,
        verbose_name=_('Purchase Order Number')
    )

    class Meta:
        verbose_name = _('Fund Request')
        verbose_name_plural = _('Fund Requests')
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f"{self.fund_request_number} ({self.fund_request_type})"


class FundRequestRecipient(models.Model):
    """
    Aid recipient line.

    beneficiary keeps the display string chosen in the form;
    application_number is the structured key stored beside it.
    """

    fund_request = models.ForeignKey(
        FundRequest,
        on_delete=models.CASCADE,
        related_name='recipients',
        verbose_name=_('Fund Request')
    )
    beneficiary_type = models.CharField(
        max_length=15,
        choices=BeneficiaryType.choices,
        verbose_name=_('Beneficiary Type')
    )
    beneficiary = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        verbose_name=_('Beneficiary')
    )
    application_number = models.CharField(
        max_length=20,
        blank=True,
        db_index=True,
        verbose_name=_('Application Number')
    )
    recipient_name = models.CharField(max_length=255, verbose_name=_('Recipient Name'))
    name_of_beneficiary = models.CharField(max_length=255, blank=True, verbose_name=_('Name of Beneficiary'))
    name_of_institution = models.CharField(max_length=255, blank=True, verbose_name=_('Name of Institution'))
    details = models.TextField(blank=True, verbose_name=_('Details'))
    fund_requested = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        verbose_name=_('Fund Requested')
    )
    aadhar_number = models.CharField(max_length=20, blank=True, verbose_name=_('Aadhaar Number'))
    address = models.TextField(blank=True, verbose_name=_('Address'))
    cheque_in_favour = models.CharField(max_length=255, blank=True, verbose_name=_('Cheque in Favour'))
    cheque_no = models.CharField(max_length=50, blank=True, verbose_name=_('Cheque No'))
    notes = models.TextField(blank=True, verbose_name=_('Notes'))
    district_name = models.CharField(max_length=100, blank=True, verbose_name=_('District Name'))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Created At'))

    class Meta:
        verbose_name = _('Fund Request Recipient')
        verbose_name_plural = _('Fund Request Recipients')
        ordering = ['fund_request', 'id']

    def __str__(self) -> str:
        return self.beneficiary or self.recipient_name


class FundRequestArticle(models.Model):
    """Supplier article line of an Article fund request."""

    fund_request = models.ForeignKey(
        FundRequest,
        on_delete=models.CASCADE,
        related_name='articles',
        verbose_name=_('Fund Request')
    )
    article = models.ForeignKey(
        'inventory.Article',
        on_delete=models.PROTECT,
        related_name='fund_request_lines',
        verbose_name=_('Article')
    )
    sl_no = models.PositiveIntegerField(default=1, verbose_name=_('Sl. No'))
    beneficiary = models.CharField(max_length=255, blank=True, verbose_name=_('Beneficiary'))
    article_name = models.CharField(max_length=255, verbose_name=_('Article Name'))
    gst_no = models.CharField(max_length=30, blank=True, verbose_name=_('GST No'))
    quantity = models.PositiveIntegerField(default=1, verbose_name=_('Quantity'))
    unit_price = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0.00'), verbose_name=_('Unit Price'))
    price_including_gst = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal('0.00'), verbose_name=_('Price Including GST')
    )
    value = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0.00'), verbose_name=_('Value'))
    cumulative = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0.00'), verbose_name=_('Cumulative'))
    supplier_article_name = models.CharField(max_length=255, blank=True, verbose_name=_('Supplier Article Name'))
    cheque_in_favour = models.CharField(max_length=255, blank=True, verbose_name=_('Cheque in Favour'))
    cheque_no = models.CharField(max_length=50, blank=True, verbose_name=_('Cheque No'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Created At'))

    class Meta:
        verbose_name = _('Fund Request Article')
        verbose_name_plural = _('Fund Request Articles')
        ordering = ['fund_request', 'sl_no']

    def __str__(self) -> str:
        return f"{self.sl_no}. {self.article_name}"
