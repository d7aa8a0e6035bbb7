"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Groups flat per-article entry rows into beneficiary
             records keyed by application number, for the district
             and institution views.
-------------------------------------------------------------------------
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from apps.beneficiaries.models import (
    DistrictBeneficiaryEntry,
    InstitutionBeneficiaryEntry,
    PublicBeneficiaryEntry,
)
from apps.core.services import store_call

logger = logging.getLogger(__name__)

IDENTITY_FIELDS = (
    'district_id', 'district_name',
    'institution_name', 'institution_type',
    'name', 'aadhar_number', 'address', 'mobile', 'status',
)


@dataclass
class LineItem:
    """One article of a beneficiary record."""
    article_id: Any
    article_name: str
    quantity: int
    cost_per_unit: Decimal
    total_value: Decimal
    notes: str = ''


@dataclass
class BeneficiaryRecord:
    """All rows sharing one application number."""
    application_number: str
    created_at: Optional[datetime]
    identity: Dict[str, Any] = field(default_factory=dict)
    line_items: List[LineItem] = field(default_factory=list)
    total_accrued: Decimal = Decimal('0.00')
    entry_ids: List[Any] = field(default_factory=list)


def _identity_of(row) -> Dict[str, Any]:
    identity = {}
    for name in IDENTITY_FIELDS:
        if name == 'district_name':
            district = getattr(row, 'district', None)
            if district is not None:
                identity[name] = district.district_name
            continue
        if hasattr(row, name):
            identity[name] = getattr(row, name)
    return identity


def _line_item(row) -> LineItem:
    article = row.article
    cost = row.article_cost_per_unit
    if not cost:
        cost = article.cost_per_unit if article is not None else Decimal('0.00')
    return LineItem(
        article_id=row.article_id,
        article_name=article.article_name if article is not None else '',
        quantity=row.quantity,
        cost_per_unit=cost,
        total_value=row.total_amount or Decimal('0.00'),
        notes=row.notes or '',
    )


def _newest_first_key(record: BeneficiaryRecord) -> float:
    if record.created_at is None:
        return float('-inf')
    return record.created_at.timestamp()


def group_entries_by_application_number(rows: Iterable) -> List[BeneficiaryRecord]:
    """
    Group entry rows into BeneficiaryRecords.

    Rows without an application number are dropped. Identity fields come
    from the first row of each bucket; created_at is the earliest row's.
    The result is ordered newest first, ties keeping input order.

    Args:
        rows: District or institution entry rows (article loaded).

    Returns:
        List of BeneficiaryRecord.
    """
    records: Dict[str, BeneficiaryRecord] = {}
    for row in rows:
        application_number = (row.application_number or '').strip()
        if not application_number:
            continue

        record = records.get(application_number)
        if record is None:
            record = BeneficiaryRecord(
                application_number=application_number,
                created_at=row.created_at,
                identity=_identity_of(row),
            )
            records[application_number] = record
        elif row.created_at and (record.created_at is None or row.created_at < record.created_at):
            record.created_at = row.created_at

        item = _line_item(row)
        record.line_items.append(item)
        record.total_accrued += item.total_value
        record.entry_ids.append(getattr(row, 'pk', None))

    # sorted() keeps input order for equal timestamps, also with reverse=True
    return sorted(records.values(), key=_newest_first_key, reverse=True)


def public_records(rows: Iterable) -> List[BeneficiaryRecord]:
    """Public entries are one row per beneficiary; each row is its own record."""
    records = []
    for row in rows:
        item = _line_item(row)
        records.append(BeneficiaryRecord(
            application_number=row.application_number,
            created_at=row.created_at,
            identity=_identity_of(row),
            line_items=[item],
            total_accrued=item.total_value,
            entry_ids=[getattr(row, 'pk', None)],
        ))
    return records


def fetch_district_records(district_id: Optional[int] = None) -> List[BeneficiaryRecord]:
    """Grouped district records, optionally for one district."""
    queryset = DistrictBeneficiaryEntry.objects.select_related('district', 'article')
    if district_id:
        queryset = queryset.filter(district_id=district_id)
    with store_call('fetch_district_records'):
        return group_entries_by_application_number(queryset.order_by('created_at', 'id'))


def fetch_district_record(district_id: int) -> Optional[BeneficiaryRecord]:
    """Most recent grouped record of a district, or None."""
    records = fetch_district_records(district_id)
    return records[0] if records else None


def fetch_institution_records(institution_type: Optional[str] = None) -> List[BeneficiaryRecord]:
    """Grouped institution records, optionally for institutions or others."""
    queryset = InstitutionBeneficiaryEntry.objects.select_related('article')
    if institution_type:
        queryset = queryset.filter(institution_type=institution_type)
    with store_call('fetch_institution_records'):
        return group_entries_by_application_number(queryset.order_by('created_at', 'id'))


def fetch_public_records() -> List[BeneficiaryRecord]:
    """Public records, newest first."""
    queryset = PublicBeneficiaryEntry.objects.select_related('article').order_by('-created_at', 'id')
    with store_call('fetch_public_records'):
        return public_records(queryset)


def custom_costs_for_district(district_id: int) -> Dict[Any, Decimal]:
    """
    Most recent cost per article recorded for a district.

    Returns:
        Mapping of article id to the cost on its latest entry.
    """
    costs: Dict[Any, Decimal] = {}
    queryset = DistrictBeneficiaryEntry.objects.filter(district_id=district_id).order_by('-created_at', '-id')
    with store_call('custom_costs_for_district'):
        for article_id, cost in queryset.values_list('article_id', 'article_cost_per_unit'):
            costs.setdefault(article_id, cost)
    return costs
