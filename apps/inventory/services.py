"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Article catalog services, order consolidation across
             beneficiary entries and order entry tracking.
-------------------------------------------------------------------------
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from apps.beneficiaries.identity import normalize_article_name
from apps.budgeting.services import ZERO, amount_too_large, to_money
from apps.core.exceptions import StoreUnavailableException, ValidationFailedException
from apps.core.models import ActionType, EntityType
from apps.core.services import AuditLogService, snapshot, store_call
from apps.inventory.models import Article, ItemType, OrderEntry, OrderStatus
from apps.users.permissions import Permission, require_permission

logger = logging.getLogger(__name__)


SPLIT_PREFIX = 'split::'
ARTICLE_FIELDS = ['article_name', 'article_name_tk', 'cost_per_unit', 'item_type',
                  'category', 'master_category', 'comments', 'combo']


# Split (virtual) article ids

def split_article_id(article_name: str) -> str:
    return f"{SPLIT_PREFIX}{article_name}"


def is_split_article_id(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(SPLIT_PREFIX)


def split_article_name(value: str) -> str:
    return value[len(SPLIT_PREFIX):] if is_split_article_id(value) else ''


# Catalog

def validate_article(data: Dict[str, Any]) -> Dict[str, str]:
    """
    Validate the article management form.

    Returns:
        Field -> message map, empty when valid.
    """
    errors: Dict[str, str] = {}
    if not (data.get('article_name') or '').strip():
        errors['article_name'] = 'Article name is required'
    if 'cost_per_unit' in data:
        if amount_too_large(data.get('cost_per_unit')):
            errors['cost_per_unit'] = 'Cost per unit is too large'
        elif to_money(data.get('cost_per_unit')) < ZERO:
            errors['cost_per_unit'] = 'Cost per unit cannot be negative'
    item_type = data.get('item_type') or ItemType.ARTICLE
    if item_type not in ItemType.values:
        errors['item_type'] = 'Select a valid item type'
    return errors


def _article_values(data: Dict[str, Any]) -> Dict[str, Any]:
    values = {}
    for name in ARTICLE_FIELDS:
        if name not in data:
            continue
        value = data[name]
        if name == 'cost_per_unit':
            value = to_money(value)
        elif name == 'combo':
            value = bool(value)
        elif isinstance(value, str):
            value = value.strip()
        values[name] = value
    return values


def fetch_articles(include_inactive: bool = False, item_type: Optional[str] = None) -> List[Article]:
    """Catalog rows ordered by name."""
    queryset = Article.objects.all()
    if not include_inactive:
        queryset = queryset.active()
    if item_type:
        queryset = queryset.of_type(item_type)
    with store_call('fetch_articles'):
        return list(queryset.order_by('article_name'))


@transaction.atomic
def create_article(data: Dict[str, Any], user=None) -> Article:
    """
    Create a catalog article.

    Raises:
        ValidationFailedException: If the form is invalid.
        UnauthorizedRoleException: If the user cannot write inventory.
    """
    require_permission(user, Permission.INVENTORY_WRITE)
    errors = validate_article(data)
    if errors:
        raise ValidationFailedException(details={'errors': errors})

    article = Article(**_article_values(data))
    article.is_active = data.get('is_active', True)
    with store_call('create_article'):
        article.save_with_user(user)

    AuditLogService.log_action(
        user, ActionType.CREATE, EntityType.ARTICLE, article.pk,
        {'new_values': snapshot(article, ARTICLE_FIELDS + ['is_active'])}
    )
    logger.info("Created article %s (%s)", article.article_name, article.item_type)
    return article


@transaction.atomic
def update_article(article: Article, data: Dict[str, Any], user=None) -> Article:
    """Update catalog fields of an article."""
    require_permission(user, Permission.INVENTORY_WRITE)
    errors = validate_article({**snapshot(article, ARTICLE_FIELDS), **data})
    if errors:
        raise ValidationFailedException(details={'errors': errors})

    values = _article_values(data)
    old_values = snapshot(article, list(values))
    for name, value in values.items():
        setattr(article, name, value)
    with store_call('update_article'):
        article.save_with_user(user)

    AuditLogService.log_action(
        user, ActionType.UPDATE, EntityType.ARTICLE, article.pk,
        {'old_values': old_values, 'new_values': snapshot(article, list(values))}
    )
    return article


@transaction.atomic
def toggle_article_status(article: Article, user=None) -> Article:
    """
    Flip is_active. Articles are never hard-deleted.
    """
    require_permission(user, Permission.INVENTORY_WRITE)
    previous = article.is_active
    article.is_active = not previous
    with store_call('toggle_article_status'):
        article.save(update_fields=['is_active', 'updated_at'])

    AuditLogService.log_action(
        user, ActionType.STATUS_CHANGE, EntityType.ARTICLE, article.pk,
        {'previous_status': 'active' if previous else 'inactive',
         'new_status': 'active' if article.is_active else 'inactive'}
    )
    return article


def find_aid_article(aid_type: Optional[str]) -> Optional[Article]:
    """
    Match an aid type text to an active Aid article.

    Tried in order: exact name, exact category, partial name, partial
    category, then an article name contained in the aid type.
    """
    aid_type = (aid_type or '').strip()
    if not aid_type:
        return None

    with store_call('find_aid_article'):
        articles = list(Article.objects.active().of_type(ItemType.AID).order_by('article_name', 'id'))

    needle = aid_type.lower()
    strategies = (
        lambda article: article.article_name.lower() == needle,
        lambda article: (article.category or '').lower() == needle,
        lambda article: needle in article.article_name.lower(),
        lambda article: bool(article.category) and needle in article.category.lower(),
        lambda article: bool(article.article_name) and article.article_name.lower() in needle,
    )
    for matches in strategies:
        for article in articles:
            if matches(article):
                return article
    logger.warning("No Aid article matches aid type '%s'", aid_type)
    return None


# Orders

@dataclass
class OrderSummary:
    """Ordered and received quantities of one article."""
    article_id: Any
    total_quantity_ordered: int = 0
    total_quantity_received: int = 0
    total_value_ordered: Decimal = ZERO
    orders: List[OrderEntry] = field(default_factory=list)


def order_summary_by_article(article_ids: Iterable[Any]) -> Dict[Any, OrderSummary]:
    """
    Summarise order entries per article.

    Cancelled orders are ignored. Received orders count as both ordered
    and received.
    """
    article_ids = list(article_ids)
    summaries: Dict[Any, OrderSummary] = {}
    if not article_ids:
        return summaries

    queryset = (
        OrderEntry.objects.filter(article_id__in=article_ids)
        .exclude(status=OrderStatus.CANCELLED)
        .order_by('-order_date', '-created_at')
    )
    with store_call('order_summary_by_article'):
        for order in queryset:
            summary = summaries.setdefault(order.article_id, OrderSummary(article_id=order.article_id))
            summary.orders.append(order)
            summary.total_quantity_ordered += order.quantity_ordered
            summary.total_value_ordered += order.total_amount
            if order.status == OrderStatus.RECEIVED:
                summary.total_quantity_received += order.quantity_ordered
    return summaries


def create_order_entry(article: Article, quantity: int, unit_price: Any, total_amount: Any,
                       fund_request=None, supplier_name: str = '', notes: str = '',
                       status: str = OrderStatus.PENDING, user=None) -> OrderEntry:
    order = OrderEntry.objects.create(
        article=article,
        fund_request=fund_request,
        quantity_ordered=max(1, int(quantity or 1)),
        order_date=timezone.localdate(),
        status=status,
        supplier_name=supplier_name or '',
        unit_price=to_money(unit_price),
        total_amount=to_money(total_amount),
        notes=notes,
    )
    AuditLogService.log_action(
        user, ActionType.CREATE, EntityType.ORDER, order.pk,
        {'new_values': snapshot(order, ['article', 'quantity_ordered', 'order_date', 'status',
                                        'total_amount', 'supplier_name', 'unit_price'])}
    )
    return order


def delete_order_entries_for_fund_request(fund_request) -> int:
    """Remove the order entries created from a fund request."""
    deleted, _ = OrderEntry.objects.filter(fund_request=fund_request).delete()
    return deleted


# Consolidation

@dataclass
class ConsolidatedArticle:
    """Quantity of one article needed across every beneficiary type."""
    article_id: Any
    article_name: str
    item_type: str
    total_quantity: int = 0
    breakdown: Dict[str, int] = field(default_factory=lambda: {'district': 0, 'public': 0, 'institutions': 0})
    total_value: Decimal = ZERO
    quantity_ordered: Optional[int] = None
    quantity_received: Optional[int] = None
    quantity_pending: Optional[int] = None
    order_summary: Optional[OrderSummary] = None


@dataclass
class OrderConsolidation:
    articles: List[ConsolidatedArticle]
    total_articles: int
    total_value: Decimal


def consolidate_orders(with_tracking: bool = False) -> OrderConsolidation:
    """
    Total quantity and value per article across all beneficiary entries.

    Args:
        with_tracking: Attach ordered, received and pending quantities.

    Returns:
        OrderConsolidation sorted by article name.
    """
    from apps.beneficiaries.models import (
        DistrictBeneficiaryEntry,
        InstitutionBeneficiaryEntry,
        PublicBeneficiaryEntry,
    )

    sources = (
        ('district', DistrictBeneficiaryEntry),
        ('public', PublicBeneficiaryEntry),
        ('institutions', InstitutionBeneficiaryEntry),
    )
    consolidated: Dict[Any, ConsolidatedArticle] = {}
    with store_call('consolidate_orders'):
        for bucket, model in sources:
            rows = model.objects.values(
                'article_id', 'article__article_name', 'article__item_type'
            ).annotate(quantity=Sum('quantity'), value=Sum('total_amount'))
            for row in rows:
                item = consolidated.get(row['article_id'])
                if item is None:
                    item = ConsolidatedArticle(
                        article_id=row['article_id'],
                        article_name=row['article__article_name'],
                        item_type=row['article__item_type'],
                    )
                    consolidated[row['article_id']] = item
                quantity = row['quantity'] or 0
                item.total_quantity += quantity
                item.breakdown[bucket] += quantity
                item.total_value += to_money(row['value'])

    articles = sorted(consolidated.values(), key=lambda item: (item.article_name.lower(), str(item.article_id)))

    if with_tracking:
        summaries = order_summary_by_article(item.article_id for item in articles)
        for item in articles:
            summary = summaries.get(item.article_id)
            item.order_summary = summary
            item.quantity_ordered = summary.total_quantity_ordered if summary else 0
            item.quantity_received = summary.total_quantity_received if summary else 0
            item.quantity_pending = max(0, item.total_quantity - item.quantity_ordered)

    return OrderConsolidation(
        articles=articles,
        total_articles=len(articles),
        total_value=sum((item.total_value for item in articles), ZERO),
    )


@dataclass(frozen=True)
class ArticleChoice:
    """Row of the Article fund request picker."""
    id: str
    article_name: str
    cost_per_unit: Decimal
    item_type: str
    is_split: bool = False


def fund_request_article_choices() -> List[ArticleChoice]:
    """
    Articles offered on Article fund requests.

    Active Article-type catalog rows, plus a split row for every
    consolidated Article-type name with no active catalog row. Split
    rows carry a zero cost until a supplier quotes. If consolidation
    cannot be read the catalog rows are returned alone.
    """
    catalog = fetch_articles(item_type=ItemType.ARTICLE)
    choices = [
        ArticleChoice(str(article.pk), article.article_name, article.cost_per_unit, article.item_type)
        for article in catalog
    ]
    known = {normalize_article_name(article.article_name) for article in catalog}

    try:
        consolidation = consolidate_orders()
    except StoreUnavailableException as exc:
        logger.warning("Consolidated articles unavailable, showing catalog only: %s", exc)
        return choices

    for item in consolidation.articles:
        key = normalize_article_name(item.article_name)
        if item.item_type != ItemType.ARTICLE or key in known:
            continue
        known.add(key)
        choices.append(ArticleChoice(
            split_article_id(item.article_name), item.article_name, ZERO, ItemType.ARTICLE, is_split=True
        ))
    return sorted(choices, key=lambda choice: choice.article_name.lower())
