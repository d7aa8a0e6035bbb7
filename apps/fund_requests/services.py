"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Fund request validation, numbering and the assembler that
             saves Aid requests (recipients) and Article requests
             (supplier lines), including split article resolution.
-------------------------------------------------------------------------
"""
import re
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Sum
from django.utils import timezone

from apps.beneficiaries.identity import (
    DISPLAY_SEPARATOR,
    extract_application_number,
    is_valid_aadhar,
    normalize_article_name,
    normalize_identity,
)
from apps.beneficiaries.models import BeneficiaryType
from apps.beneficiaries.services_allocation import ApplicationNumberAllocator
from apps.budgeting.services import (
    ZERO,
    aggregate_total,
    amount_too_large,
    cumulative_totals,
    line_total,
    quantity_too_large,
    sum_amounts,
    to_money,
    to_quantity,
)
from apps.core.exceptions import (
    BeneficiaryInUseException,
    FundRequestNotFoundException,
    ValidationFailedException,
    WelfareException,
)
from apps.core.models import ActionType, EntityType
from apps.core.services import AuditLogService, snapshot, store_call
from apps.fund_requests.drafts import FundRequestDraftStore
from apps.fund_requests.logging import FundRequestLogger
from apps.fund_requests.models import (
    FundRequest,
    FundRequestArticle,
    FundRequestRecipient,
    FundRequestStatus,
    FundRequestType,
)
from apps.fund_requests.services_usage import (
    BeneficiaryUsageTracker,
    recipient_identity,
    used_beneficiaries,
)
from apps.inventory.models import Article, ItemType
from apps.inventory.services import (
    create_order_entry,
    delete_order_entries_for_fund_request,
    find_aid_article,
    is_split_article_id,
    split_article_name,
)
from apps.users.permissions import Permission, require_permission


# Constants
FUND_REQUEST_NUMBER_RE = re.compile(r'^FR-(\d+)$')
LEGACY_FUND_REQUEST_NUMBER_RE = re.compile(r'^FR-\d{4}-(\d+)$')
ARTICLE_LINE_BENEFICIARY = 'Dist & Public'
SUPPLIER_FIELDS = ('supplier_name', 'supplier_address', 'supplier_city', 'supplier_state', 'supplier_pincode')
HEADER_FIELDS = ('aid_type', 'notes', 'gst_number') + SUPPLIER_FIELDS
AUDIT_FIELDS = ['fund_request_type', 'fund_request_number', 'status', 'total_amount',
                'aid_type', 'purchase_order_number']


# Numbering

def generate_fund_request_number() -> str:
    """
    Next fund request number, e.g. FR-001.

    Legacy FR-2026-0001 numbers count towards the sequence.
    """
    highest = 0
    with store_call('generate_fund_request_number'):
        numbers = list(FundRequest.objects.values_list('fund_request_number', flat=True))
    for number in numbers:
        match = FUND_REQUEST_NUMBER_RE.match(number) or LEGACY_FUND_REQUEST_NUMBER_RE.match(number)
        if match:
            highest = max(highest, int(match.group(1)))
    return f"FR-{highest + 1:03d}"


def generate_purchase_order_number(today: Optional[date] = None) -> str:
    """
    Next purchase order number, e.g. MASM/MNP00126.

    The number is the prefix, a 3-digit sequence and a 2-digit year.
    Only numbers of the current year count towards the sequence.
    """
    prefix = settings.PURCHASE_ORDER_PREFIX
    year_suffix = (today or timezone.localdate()).year % 100
    pattern = re.compile(rf'{re.escape(prefix)}(\d{{3}})(\d{{2}})$')

    highest = 0
    with store_call('generate_purchase_order_number'):
        numbers = list(
            FundRequest.objects.exclude(purchase_order_number='')
            .values_list('purchase_order_number', flat=True)
        )
    for number in numbers:
        match = pattern.search(number or '')
        if match and int(match.group(2)) == year_suffix:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}{highest + 1:03d}{year_suffix:02d}"


# Validation

def _blank(value: Any) -> bool:
    return not str(value or '').strip()


def validate_aid_request(header: Dict[str, Any], recipients: List[Dict[str, Any]]) -> Dict[str, str]:
    """
    Validate an Aid fund request.

    Every problem is collected so the form can show them all at once.

    Args:
        header: Fund request header values.
        recipients: Recipient rows in form order.

    Returns:
        Field -> message map, empty when valid.
    """
    errors: Dict[str, str] = {}
    if not recipients:
        errors['recipients'] = 'At least one recipient is required'

    for index, recipient in enumerate(recipients):
        beneficiary_type = recipient.get('beneficiary_type')
        if not beneficiary_type:
            errors[f'beneficiary_type_{index}'] = 'Beneficiary type is required'
        elif beneficiary_type not in BeneficiaryType.values:
            errors[f'beneficiary_type_{index}'] = 'Select a valid beneficiary type'
        if _blank(recipient.get('name_of_beneficiary')) and _blank(recipient.get('recipient_name')):
            errors[f'name_of_beneficiary_{index}'] = 'Name of beneficiary is required'
        if amount_too_large(recipient.get('fund_requested')):
            errors[f'fund_requested_{index}'] = 'Fund requested is too large'
        elif to_money(recipient.get('fund_requested')) <= ZERO:
            errors[f'fund_requested_{index}'] = 'Fund requested must be greater than 0'
        if _blank(recipient.get('name_of_institution')):
            errors[f'name_of_institution_{index}'] = 'Name of Institution is required'
        if _blank(recipient.get('aadhar_number')):
            errors[f'aadhar_number_{index}'] = 'Aadhar number is required'
        elif not is_valid_aadhar(recipient.get('aadhar_number')):
            errors[f'aadhar_number_{index}'] = 'Aadhar number must be exactly 12 digits'
        if _blank(recipient.get('details')) and _blank(recipient.get('notes')):
            errors[f'details_{index}'] = 'Details are required'
    if amount_too_large(sum_amounts(recipient.get('fund_requested') for recipient in recipients)):
        errors['total_amount'] = 'Total fund requested is too large'
    return errors


def validate_article_request(header: Dict[str, Any], lines: List[Dict[str, Any]]) -> Dict[str, str]:
    """
    Validate an Article fund request.

    Args:
        header: Header values including GST number and supplier fields.
        lines: Article lines in form order.

    Returns:
        Field -> message map, empty when valid.
    """
    errors: Dict[str, str] = {}
    if _blank(header.get('gst_number')):
        errors['gst_number'] = 'GST number is required'
    for name in SUPPLIER_FIELDS:
        if _blank(header.get(name)):
            errors[name] = f"{name.replace('_', ' ').capitalize()} is required"

    if not lines:
        errors['articles'] = 'At least one article is required'
    for index, line in enumerate(lines):
        if _blank(line.get('article_id')):
            errors[f'article_{index}'] = 'Article is required'
        price = _line_price(line)
        if amount_too_large(price):
            errors[f'price_{index}'] = 'Price including GST is too large'
        elif to_money(price) <= ZERO:
            errors[f'price_{index}'] = 'Price including GST must be greater than 0'
        quantity = line.get('quantity')
        if to_quantity(quantity) < 1:
            errors[f'quantity_{index}'] = 'Quantity must be at least 1'
        elif quantity_too_large(quantity):
            errors[f'quantity_{index}'] = 'Quantity is too large'
        elif f'price_{index}' not in errors and amount_too_large(line_total(quantity, price)):
            errors[f'price_{index}'] = 'Line total is too large'
    if amount_too_large(aggregate_total(
        {'quantity': line.get('quantity'), 'cost_per_unit': _line_price(line)} for line in lines
    )):
        errors['total_amount'] = 'Total amount is too large'
    return errors


def _line_price(line: Dict[str, Any]) -> Any:
    for name in ('cost_per_unit', 'price_including_gst', 'unit_price'):
        if not _blank(line.get(name)):
            return line[name]
    return None


# Split articles

class SplitArticleResolver:
    """
    Resolve split (virtual) article ids to catalog articles.

    Holds a normalised name -> article map for one form session. A split
    name matching an active catalog article uses it; otherwise an
    inactive combo article is created once and reused.
    """

    def __init__(self) -> None:
        self._resolved: Dict[str, Article] = {}

    def __contains__(self, name: str) -> bool:
        return normalize_article_name(name) in self._resolved

    def _lookup(self, key: str) -> Optional[Article]:
        with store_call('resolve_split_article'):
            active = [
                article for article in Article.objects.active().order_by('id')
                if normalize_article_name(article.article_name) == key
            ]
            if active:
                return active[0]
            combos = [
                article for article in Article.objects.filter(is_active=False, combo=True).order_by('id')
                if normalize_article_name(article.article_name) == key
            ]
        return combos[0] if combos else None

    def resolve(self, article_ref: Any, article_name: str = '', cost_per_unit: Any = ZERO,
                user=None, fund_request_number: str = '') -> Article:
        """
        Article for a fund request line.

        Args:
            article_ref: Catalog id or a 'split::<name>' id.
            article_name: Line name, used when the split id carries none.
            cost_per_unit: Cost given to a newly created split article.
            user: Acting user, recorded on created articles.
            fund_request_number: Used in the log line.

        Raises:
            ValidationFailedException: If a catalog id does not exist.
        """
        if not is_split_article_id(article_ref):
            try:
                with store_call('resolve_article'):
                    return Article.objects.get(pk=article_ref)
            except (Article.DoesNotExist, ValueError):
                raise ValidationFailedException(details={'errors': {'articles': f"Article {article_ref} does not exist"}})

        name = (split_article_name(article_ref) or article_name).strip()
        key = normalize_article_name(name)
        if key in self._resolved:
            return self._resolved[key]

        article = self._lookup(key)
        if article is None:
            article = Article(
                article_name=name,
                cost_per_unit=to_money(cost_per_unit),
                item_type=ItemType.ARTICLE,
                combo=True,
                is_active=False,
            )
            with store_call('create_split_article'):
                article.save_with_user(user)
            AuditLogService.log_action(
                user, ActionType.CREATE, EntityType.ARTICLE, article.pk,
                {'new_values': snapshot(article, ['article_name', 'cost_per_unit', 'item_type', 'combo', 'is_active'])}
            )
            FundRequestLogger.log_split_article_created(article, fund_request_number)

        self._resolved[key] = article
        return article

    def clear(self) -> None:
        self._resolved.clear()


# Reads

def fetch_fund_requests(fund_request_type: Optional[str] = None, status: Optional[str] = None,
                        start_date=None, end_date=None) -> List[FundRequest]:
    """Fund requests newest first, with optional filters."""
    queryset = FundRequest.objects.all()
    if fund_request_type:
        queryset = queryset.filter(fund_request_type=fund_request_type)
    if status:
        queryset = queryset.filter(status=status)
    if start_date:
        queryset = queryset.filter(created_at__gte=start_date)
    if end_date:
        queryset = queryset.filter(created_at__lte=end_date)
    with store_call('fetch_fund_requests'):
        return list(queryset.order_by('-created_at', '-id'))


def fetch_fund_request(fund_request_id) -> FundRequest:
    """
    Fund request with recipients and article lines.

    Raises:
        FundRequestNotFoundException: If the id does not exist.
    """
    try:
        with store_call('fetch_fund_request'):
            return FundRequest.objects.prefetch_related('recipients', 'articles').get(pk=fund_request_id)
    except (FundRequest.DoesNotExist, ValueError):
        raise FundRequestNotFoundException(details={'fund_request_id': fund_request_id})


def fetch_existing_aid_types() -> List[str]:
    """Distinct aid types used by Aid fund requests, sorted."""
    with store_call('fetch_existing_aid_types'):
        values = FundRequest.objects.filter(
            fund_request_type=FundRequestType.AID
        ).exclude(aid_type='').values_list('aid_type', flat=True).distinct()
        return sorted(set(values))


def previous_fund_requests_total(fund_request: FundRequest) -> Decimal:
    """Total of every fund request created before this one."""
    with store_call('previous_fund_requests_total'):
        total = FundRequest.objects.filter(
            created_at__lt=fund_request.created_at
        ).exclude(pk=fund_request.pk).aggregate(total=Sum('total_amount'))['total']
    return to_money(total)


# Assembler

def _district_name_from_display(display_text: str) -> str:
    parts = (display_text or '').split(DISPLAY_SEPARATOR)
    if len(parts) < 2:
        return ''
    return parts[1].strip()


class FundRequestAssembler:
    """
    Saves fund requests for one open form.

    Owns the session's split article map and beneficiary usage tracker;
    close() tears both down.
    """

    def __init__(self, user=None, fund_request_id: Optional[int] = None) -> None:
        self.user = user
        self.fund_request_id = fund_request_id
        self.split_resolver = SplitArticleResolver()
        self.usage = BeneficiaryUsageTracker(fund_request_id)

    def __enter__(self) -> 'FundRequestAssembler':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.split_resolver.clear()
        self.usage.close()

    def open(self) -> Optional[FundRequest]:
        """
        Prepare the session: load the used set and, when editing, mark
        each stored recipient as selected by its own row.
        """
        self.usage.refresh_used(self.fund_request_id)
        if not self.fund_request_id:
            return None
        fund_request = fetch_fund_request(self.fund_request_id)
        for index, recipient in enumerate(fund_request.recipients.all()):
            self.usage.select(index, recipient.beneficiary_type, recipient.beneficiary)
        return fund_request

    def draft_store(self, fund_request_type: str) -> FundRequestDraftStore:
        return FundRequestDraftStore(fund_request_type, self.fund_request_id)

    # Aid

    def _recipient_application_number(self, recipient: Dict[str, Any]) -> str:
        beneficiary_type = recipient.get('beneficiary_type')
        explicit = (recipient.get('application_number') or '').strip()
        beneficiary = (recipient.get('beneficiary') or '').strip()
        allocator = ApplicationNumberAllocator(beneficiary_type)
        allocation = allocator.reuse(
            explicit or extract_application_number(beneficiary),
            aadhar_number=recipient.get('aadhar_number') if beneficiary_type == BeneficiaryType.PUBLIC else None,
        )
        return allocation.application_number if allocation else ''

    def _check_recipient_usage(self, recipients: List[Dict[str, Any]], application_numbers: List[str],
                               fund_request_id: Optional[int]) -> None:
        errors: Dict[str, str] = {}
        identities: Dict[str, int] = {}
        for index, recipient in enumerate(recipients):
            identity = recipient_identity(
                recipient.get('beneficiary_type'),
                recipient.get('beneficiary'),
                application_numbers[index] if recipient.get('beneficiary') else '',
            )
            if identity is None:
                continue
            if identity in identities:
                errors[f'beneficiary_{index}'] = (
                    f"This beneficiary is already selected in row {identities[identity] + 1}"
                )
            else:
                identities[identity] = index
        if errors:
            raise ValidationFailedException(details={'errors': errors})

        conflicts = set(identities) & used_beneficiaries(fund_request_id)
        if conflicts:
            FundRequestLogger.log_beneficiary_conflict(conflicts, fund_request_id)
            raise BeneficiaryInUseException(details={
                'beneficiaries': sorted(conflicts),
                'rows': sorted(identities[identity] for identity in conflicts),
            })

    def save_aid(self, header: Dict[str, Any], recipients: List[Dict[str, Any]],
                 fund_request_id: Optional[int] = None) -> FundRequest:
        """
        Create or update an Aid fund request.

        Args:
            header: aid_type, notes and optionally fund_request_number.
            recipients: Recipient rows in form order.
            fund_request_id: Id of the fund request being edited.

        Returns:
            The saved FundRequest.

        Raises:
            ValidationFailedException: If the form is invalid.
            BeneficiaryInUseException: If a beneficiary is paid elsewhere.
            FundRequestNotFoundException: If fund_request_id is unknown.
        """
        require_permission(self.user, Permission.DATA_WRITE)
        fund_request_id = fund_request_id or self.fund_request_id
        errors = validate_aid_request(header, recipients)
        if errors:
            FundRequestLogger.log_validation_error('save_aid', errors, {'fund_request_id': fund_request_id})
            raise ValidationFailedException(details={'errors': errors})

        application_numbers = [self._recipient_application_number(recipient) for recipient in recipients]
        self._check_recipient_usage(recipients, application_numbers, fund_request_id)

        with transaction.atomic():
            fund_request, old_values = self._save_header(FundRequestType.AID, header, fund_request_id)
            fund_request.total_amount = sum_amounts(recipient.get('fund_requested') for recipient in recipients)
            fund_request.save(update_fields=['total_amount', 'updated_at'])

            with store_call('save_recipients'):
                fund_request.recipients.all().delete()
                saved = FundRequestRecipient.objects.bulk_create([
                    self._build_recipient(fund_request, recipient, application_numbers[index])
                    for index, recipient in enumerate(recipients)
                ])

            self._replace_aid_order_entries(fund_request, saved)
            self._log_save(fund_request, old_values)

        self._finish_save(fund_request, old_values is None)
        return fund_request

    def _build_recipient(self, fund_request: FundRequest, recipient: Dict[str, Any],
                         application_number: str) -> FundRequestRecipient:
        beneficiary_type = recipient['beneficiary_type']
        beneficiary = (recipient.get('beneficiary') or '').strip() or None
        district_name = (recipient.get('district_name') or '').strip()
        if beneficiary_type == BeneficiaryType.DISTRICT and not district_name and beneficiary:
            district_name = _district_name_from_display(beneficiary)
        name_of_beneficiary = (recipient.get('name_of_beneficiary') or '').strip()

        return FundRequestRecipient(
            fund_request=fund_request,
            beneficiary_type=beneficiary_type,
            beneficiary=beneficiary,
            application_number=application_number,
            recipient_name=(recipient.get('recipient_name') or '').strip() or name_of_beneficiary,
            name_of_beneficiary=name_of_beneficiary,
            name_of_institution=(recipient.get('name_of_institution') or '').strip(),
            details=recipient.get('details') or '',
            fund_requested=to_money(recipient.get('fund_requested')),
            aadhar_number=normalize_identity(recipient.get('aadhar_number')),
            address=recipient.get('address') or '',
            cheque_in_favour=recipient.get('cheque_in_favour') or '',
            cheque_no=recipient.get('cheque_no') or '',
            notes=recipient.get('notes') or '',
            district_name=district_name,
        )

    # Article

    def save_article(self, header: Dict[str, Any], lines: List[Dict[str, Any]],
                     fund_request_id: Optional[int] = None) -> FundRequest:
        """
        Create or update an Article fund request.

        Split article ids are resolved to catalog articles, creating
        inactive combo articles where needed. Line values are always
        recomputed from quantity and price.

        Args:
            header: GST number, supplier fields and notes.
            lines: Article lines in form order.
            fund_request_id: Id of the fund request being edited.

        Returns:
            The saved FundRequest.
        """
        require_permission(self.user, Permission.DATA_WRITE)
        fund_request_id = fund_request_id or self.fund_request_id
        errors = validate_article_request(header, lines)
        if errors:
            FundRequestLogger.log_validation_error('save_article', errors, {'fund_request_id': fund_request_id})
            raise ValidationFailedException(details={'errors': errors})

        priced_lines = [
            {**line, 'quantity': to_quantity(line.get('quantity')), 'cost_per_unit': to_money(_line_price(line))}
            for line in lines
        ]
        running = cumulative_totals(priced_lines)

        try:
            with transaction.atomic():
                fund_request, old_values = self._save_header(FundRequestType.ARTICLE, header, fund_request_id)
                if not fund_request.purchase_order_number:
                    fund_request.purchase_order_number = generate_purchase_order_number()
                fund_request.total_amount = aggregate_total(priced_lines)
                fund_request.save(update_fields=['purchase_order_number', 'total_amount', 'updated_at'])

                rows = []
                for index, line in enumerate(priced_lines):
                    article = self.split_resolver.resolve(
                        line.get('article_id'), line.get('article_name') or '', line['cost_per_unit'],
                        self.user, fund_request.fund_request_number
                    )
                    rows.append(FundRequestArticle(
                        fund_request=fund_request,
                        article=article,
                        sl_no=index + 1,
                        beneficiary=ARTICLE_LINE_BENEFICIARY,
                        article_name=(line.get('article_name') or '').strip() or article.article_name,
                        gst_no=fund_request.gst_number,
                        quantity=line['quantity'],
                        unit_price=line['cost_per_unit'],
                        price_including_gst=line['cost_per_unit'],
                        value=line_total(line['quantity'], line['cost_per_unit']),
                        cumulative=running[index],
                        supplier_article_name=line.get('supplier_article_name') or '',
                        cheque_in_favour=line.get('cheque_in_favour') or '',
                        cheque_no=line.get('cheque_no') or '',
                        description=line.get('description') or '',
                    ))

                with store_call('save_article_lines'):
                    fund_request.articles.all().delete()
                    saved = FundRequestArticle.objects.bulk_create(rows)

                self._replace_article_order_entries(fund_request, saved)
                self._log_save(fund_request, old_values)
        except Exception:
            # Articles created inside the rolled back transaction no longer exist
            self.split_resolver.clear()
            raise

        self._finish_save(fund_request, old_values is None)
        return fund_request

    # Shared

    def _save_header(self, fund_request_type: str, header: Dict[str, Any],
                     fund_request_id: Optional[int]):
        values = {name: str(header.get(name) or '').strip() for name in HEADER_FIELDS}
        if fund_request_type == FundRequestType.AID:
            for name in ('gst_number',) + SUPPLIER_FIELDS:
                values[name] = ''
        else:
            values['aid_type'] = ''

        if fund_request_id:
            fund_request = fetch_fund_request(fund_request_id)
            if fund_request.fund_request_type != fund_request_type:
                raise ValidationFailedException(details={'errors': {
                    'fund_request_type': 'The fund request type cannot be changed'
                }})
            old_values = snapshot(fund_request, AUDIT_FIELDS + list(HEADER_FIELDS))
            for name, value in values.items():
                setattr(fund_request, name, value)
            with store_call('update_fund_request'):
                fund_request.save_with_user(self.user)
            return fund_request, old_values

        number = (header.get('fund_request_number') or '').strip() or generate_fund_request_number()
        if FundRequest.objects.filter(fund_request_number=number).exists():
            raise ValidationFailedException(details={'errors': {
                'fund_request_number': 'Fund request number already exists'
            }})
        fund_request = FundRequest(
            fund_request_type=fund_request_type,
            fund_request_number=number,
            status=FundRequestStatus.DRAFT,
            **values
        )
        with store_call('create_fund_request'):
            fund_request.save_with_user(self.user)
        return fund_request, None

    def _log_save(self, fund_request: FundRequest, old_values: Optional[Dict[str, Any]]) -> None:
        new_values = snapshot(fund_request, AUDIT_FIELDS + list(HEADER_FIELDS))
        if old_values is None:
            AuditLogService.log_action(
                self.user, ActionType.CREATE, EntityType.FUND_REQUEST, fund_request.pk,
                {'entity_name': fund_request.fund_request_number, 'new_values': new_values}
            )
        else:
            AuditLogService.log_action(
                self.user, ActionType.UPDATE, EntityType.FUND_REQUEST, fund_request.pk,
                {'entity_name': fund_request.fund_request_number,
                 'old_values': old_values, 'new_values': new_values}
            )

    def _finish_save(self, fund_request: FundRequest, created: bool) -> None:
        if created:
            FundRequestDraftStore(fund_request.fund_request_type).clear()
        FundRequestDraftStore(fund_request.fund_request_type, fund_request.pk).clear()
        self.fund_request_id = fund_request.pk
        self.usage.fund_request_id = fund_request.pk
        self.usage.clear_cache()
        FundRequestLogger.log_saved(fund_request, self.user, created)

    # Order entries are best-effort: failures are logged, never raised

    def _replace_aid_order_entries(self, fund_request: FundRequest,
                                   recipients: List[FundRequestRecipient]) -> None:
        try:
            with transaction.atomic():
                delete_order_entries_for_fund_request(fund_request)
                if not fund_request.aid_type:
                    return
                article = find_aid_article(fund_request.aid_type)
                if article is None:
                    FundRequestLogger.log_order_entries_skipped(
                        fund_request, f"no Aid article matches '{fund_request.aid_type}'"
                    )
                    return
                for recipient in recipients:
                    label = recipient.recipient_name or recipient.name_of_beneficiary or 'Recipient'
                    create_order_entry(
                        article, 1, recipient.fund_requested, recipient.fund_requested,
                        fund_request=fund_request,
                        notes=f"Created from Aid Fund Request: {fund_request.fund_request_number} - {label}",
                        user=self.user,
                    )
        except (DatabaseError, WelfareException) as exc:
            FundRequestLogger.log_error('aid_order_entries', exc, {'fund_request_id': fund_request.pk})

    def _replace_article_order_entries(self, fund_request: FundRequest,
                                       lines: List[FundRequestArticle]) -> None:
        try:
            with transaction.atomic():
                delete_order_entries_for_fund_request(fund_request)
                for line in lines:
                    create_order_entry(
                        line.article, line.quantity, line.unit_price, line.value,
                        fund_request=fund_request,
                        supplier_name=fund_request.supplier_name,
                        notes=f"Created from Fund Request: {fund_request.fund_request_number}",
                        user=self.user,
                    )
        except (DatabaseError, WelfareException) as exc:
            FundRequestLogger.log_error('article_order_entries', exc, {'fund_request_id': fund_request.pk})

    # Delete

    def delete(self, fund_request_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Delete a fund request, its lines and its order entries.

        Returns:
            Snapshot of the deleted fund request.
        """
        require_permission(self.user, Permission.DATA_DELETE)
        fund_request = fetch_fund_request(fund_request_id or self.fund_request_id)
        deleted_values = snapshot(fund_request, AUDIT_FIELDS)
        deleted_values['recipient_count'] = fund_request.recipients.count()
        deleted_values['article_count'] = fund_request.articles.count()
        number = fund_request.fund_request_number
        pk = fund_request.pk

        with store_call('delete_fund_request'), transaction.atomic():
            delete_order_entries_for_fund_request(fund_request)
            fund_request.delete()

        AuditLogService.log_action(
            self.user, ActionType.DELETE, EntityType.FUND_REQUEST, pk,
            {'entity_name': number, 'deleted_values': deleted_values}
        )
        FundRequestDraftStore(deleted_values['fund_request_type'], pk).clear()
        FundRequestLogger.log_deleted(number, self.user)
        if self.fund_request_id == pk:
            self.fund_request_id = None
            self.usage.fund_request_id = None
        return deleted_values
