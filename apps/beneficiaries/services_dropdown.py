"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Candidate beneficiary lists for the fund request recipient
             dropdown. Only Aid articles count; rows are grouped by
             application number with summed amounts.
-------------------------------------------------------------------------
"""
import logging
from collections import OrderedDict
from typing import List, Optional

from django.db.models import Q, QuerySet

from apps.beneficiaries.identity import (
    BeneficiaryOption,
    DistrictOption,
    InstitutionsOption,
    OthersOption,
    PublicOption,
)
from apps.beneficiaries.models import (
    BeneficiaryType,
    DistrictBeneficiaryEntry,
    InstitutionBeneficiaryEntry,
    InstitutionType,
    PublicBeneficiaryEntry,
)
from apps.core.services import store_call
from apps.inventory.models import ItemType

logger = logging.getLogger(__name__)


def _aid_rows(queryset: QuerySet, aid_type: Optional[str]) -> QuerySet:
    """Restrict to Aid articles, optionally matching the aid type text."""
    queryset = queryset.filter(article__item_type=ItemType.AID).exclude(application_number='')
    aid_type = (aid_type or '').strip()
    if aid_type:
        queryset = queryset.filter(
            Q(article__article_name__icontains=aid_type) | Q(article__category__icontains=aid_type)
        )
    return queryset.order_by('-application_number', 'id')


def _group(rows, build) -> List[BeneficiaryOption]:
    """Group rows by application number, keeping the first row's identity."""
    grouped: 'OrderedDict[str, dict]' = OrderedDict()
    for row in rows:
        bucket = grouped.get(row.application_number)
        if bucket is None:
            grouped[row.application_number] = {'first': row, 'total': row.total_amount}
        else:
            bucket['total'] += row.total_amount
    return [build(app_no, bucket['first'], bucket['total']) for app_no, bucket in grouped.items()]


def district_candidates(aid_type: Optional[str] = None,
                        district_id: Optional[int] = None) -> List[BeneficiaryOption]:
    """
    District candidates, one option per application number.

    A district filter only narrows the rows; the options stay grouped so
    a district record has the same identity with or without the filter.
    """
    queryset = _aid_rows(
        DistrictBeneficiaryEntry.objects.select_related('district', 'article'), aid_type
    )
    if district_id:
        queryset = queryset.filter(district_id=district_id)
    with store_call('district_candidates'):
        return _group(queryset, lambda app_no, row, total: DistrictOption(
            application_number=app_no,
            total_amount=total,
            district_id=row.district_id,
            district_name=row.district.district_name,
        ))


def public_candidates(aid_type: Optional[str] = None) -> List[BeneficiaryOption]:
    queryset = _aid_rows(PublicBeneficiaryEntry.objects.select_related('article'), aid_type)
    with store_call('public_candidates'):
        return _group(queryset, lambda app_no, row, total: PublicOption(
            application_number=app_no,
            total_amount=total,
            name=row.name,
            aadhar_number=row.aadhar_number,
        ))


def institution_candidates(institution_type: str,
                           aid_type: Optional[str] = None) -> List[BeneficiaryOption]:
    option_class = OthersOption if institution_type == InstitutionType.OTHERS else InstitutionsOption
    queryset = _aid_rows(
        InstitutionBeneficiaryEntry.objects.select_related('article').filter(
            institution_type=institution_type
        ),
        aid_type
    )
    with store_call('institution_candidates'):
        return _group(queryset, lambda app_no, row, total: option_class(
            application_number=app_no,
            total_amount=total,
            institution_name=row.institution_name,
        ))


def candidates_for_type(beneficiary_type: str,
                        aid_type: Optional[str] = None,
                        district_id: Optional[int] = None) -> List[BeneficiaryOption]:
    """
    Fetch dropdown candidates for a beneficiary type.

    Args:
        beneficiary_type: One of BeneficiaryType values.
        aid_type: Optional case-insensitive filter on article name or category.
        district_id: Optional district filter (District type only).

    Returns:
        List of BeneficiaryOption variants.

    Raises:
        ValueError: If the beneficiary type is unknown.
        StoreUnavailableException: If the store cannot be reached.
    """
    if beneficiary_type == BeneficiaryType.DISTRICT:
        return district_candidates(aid_type, district_id)
    if beneficiary_type == BeneficiaryType.PUBLIC:
        return public_candidates(aid_type)
    if beneficiary_type == BeneficiaryType.INSTITUTIONS:
        return institution_candidates(InstitutionType.INSTITUTIONS, aid_type)
    if beneficiary_type == BeneficiaryType.OTHERS:
        return institution_candidates(InstitutionType.OTHERS, aid_type)
    raise ValueError(f"Unknown beneficiary type: {beneficiary_type}")
