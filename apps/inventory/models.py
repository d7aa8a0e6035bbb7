"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Article catalog and order tracking models. Articles are
             soft-deleted through is_active and never hard-deleted.
-------------------------------------------------------------------------
"""
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin, StatusMixin, TimeStampedMixin


class ItemType(models.TextChoices):
    """Catalog item types."""
    ARTICLE = 'Article', _('Article')
    AID = 'Aid', _('Aid')
    PROJECT = 'Project', _('Project')


class ArticleQuerySet(models.QuerySet):
    """Common catalog filters."""

    def active(self):
        return self.filter(is_active=True)

    def of_type(self, item_type: str):
        return self.filter(item_type=item_type)


class Article(AuditLogMixin, StatusMixin):
    """
    Catalog entry for a distributable article, aid or project.

    Split articles created by fund request saves are stored inactive
    with combo=True so they never reappear in ordinary pickers.
    """

    article_name = models.CharField(
        max_length=255,
        verbose_name=_('Article Name')
    )
    article_name_tk = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_('Token Name'),
        help_text=_('Article name printed on tokens.')
    )
    cost_per_unit = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name=_('Cost Per Unit')
    )
    item_type = models.CharField(
        max_length=10,
        choices=ItemType.choices,
        default=ItemType.ARTICLE,
        db_index=True,
        verbose_name=_('Item Type')
    )
    category = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Category')
    )
    master_category = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Master Category')
    )
    comments = models.TextField(
        blank=True,
        verbose_name=_('Comments')
    )
    combo = models.BooleanField(
        default=False,
        verbose_name=_('Split / Combo'),
        help_text=_('Marks split articles created for order management.')
    )

    objects = ArticleQuerySet.as_manager()

    class Meta:
        verbose_name = _('Article')
        verbose_name_plural = _('Articles')
        ordering = ['article_name']

    def __str__(self) -> str:
        return self.article_name


class OrderStatus(models.TextChoices):
    """Order entry lifecycle."""
    PENDING = 'pending', _('Pending')
    ORDERED = 'ordered', _('Ordered')
    RECEIVED = 'received', _('Received')
    CANCELLED = 'cancelled', _('Cancelled')


class OrderEntry(TimeStampedMixin):
    """
    Purchase order line for an article.

    Created best-effort when a fund request is saved; removed together
    with the fund request lines it was created from.
    """

    article = models.ForeignKey(
        Article,
        on_delete=models.PROTECT,
        related_name='order_entries',
        verbose_name=_('Article')
    )
    fund_request = models.ForeignKey(
        'fund_requests.FundRequest',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='order_entries',
        verbose_name=_('Fund Request')
    )
    quantity_ordered = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        verbose_name=_('Quantity Ordered')
    )
    order_date = models.DateField(
        verbose_name=_('Order Date')
    )
    status = models.CharField(
        max_length=10,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        db_index=True,
        verbose_name=_('Status')
    )
    supplier_name = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_('Supplier Name')
    )
    unit_price = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        verbose_name=_('Unit Price')
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

    class Meta:
        verbose_name = _('Order Entry')
        verbose_name_plural = _('Order Entries')
        ordering = ['-order_date', '-created_at']

    def __str__(self) -> str:
        return f"{self.article} x {self.quantity_ordered} ({self.get_status_display()})"
