"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Save services for district, public and institution
             beneficiary entries. Each save resolves the application
             number, replaces the prior rows and writes the audit log.
-------------------------------------------------------------------------
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.db import transaction

from apps.beneficiaries.identity import is_valid_aadhar, normalize_identity
from apps.beneficiaries.models import (
    BeneficiaryType,
    DistrictBeneficiaryEntry,
    FemaleStatus,
    Gender,
    InstitutionBeneficiaryEntry,
    InstitutionType,
    PublicBeneficiaryEntry,
)
from apps.beneficiaries.services_aggregation import (
    BeneficiaryRecord,
    group_entries_by_application_number,
    public_records,
)
from apps.beneficiaries.services_allocation import (
    ENTRY_MODELS,
    Allocation,
    ApplicationNumberAllocator,
    find_public_by_aadhar,
    replace_entries,
)
from apps.budgeting.services import (
    BudgetPosition,
    aggregate_total,
    district_remaining_fund,
    find_duplicate_lines,
    to_money,
    to_quantity,
    validate_line_costs,
)
from apps.core.exceptions import DuplicateBeneficiaryException, ValidationFailedException
from apps.core.models import ActionType, EntityType
from apps.core.services import AuditLogService, snapshot, store_call
from apps.inventory.models import Article
from apps.users.permissions import Permission, require_permission

logger = logging.getLogger(__name__)


ON_CONFLICT_UPDATE = 'update'

ENTITY_TYPES = {
    BeneficiaryType.DISTRICT: EntityType.DISTRICT_BENEFICIARY,
    BeneficiaryType.PUBLIC: EntityType.PUBLIC_BENEFICIARY,
    BeneficiaryType.INSTITUTIONS: EntityType.INSTITUTION_BENEFICIARY,
    BeneficiaryType.OTHERS: EntityType.INSTITUTION_BENEFICIARY,
}


@dataclass
class SaveOutcome:
    """What a beneficiary save produced."""
    allocation: Allocation
    record: BeneficiaryRecord
    deleted: List[Dict[str, Any]] = field(default_factory=list)
    budget: Optional[BudgetPosition] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def application_number(self) -> str:
        return self.allocation.application_number


def _acting_user(user):
    return user if getattr(user, 'pk', None) else None


def _validate_lines(lines: List[Dict[str, Any]]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not lines:
        errors['articles'] = 'Please add at least one article'
        return errors

    article_ids = {str(line.get('article_id')) for line in lines if str(line.get('article_id') or '').isdigit()}
    with store_call('validate_articles'):
        known = {str(pk) for pk in Article.objects.filter(pk__in=article_ids).values_list('pk', flat=True)}
    for index, line in enumerate(lines):
        if not line.get('article_id'):
            errors[f'article_{index}'] = 'Article is required'
        elif str(line['article_id']) not in known:
            errors[f'article_{index}'] = 'Selected article does not exist'

    errors.update(validate_line_costs(lines, allow_zero=False))
    return errors


def _build_rows(model, lines: List[Dict[str, Any]], user, notes: str = '', **identity) -> List[Any]:
    acting = _acting_user(user)
    return [
        model(
            article_id=line['article_id'],
            quantity=to_quantity(line.get('quantity')),
            article_cost_per_unit=to_money(line.get('cost_per_unit')),
            notes=line.get('notes') or notes,
            created_by=acting,
            updated_by=acting,
            **identity
        )
        for line in lines
    ]


def _log_replace(user, beneficiary_type: str, application_number: str, result) -> None:
    new_values = [snapshot(row) for row in result.inserted]
    if result.deleted:
        AuditLogService.log_action(
            user, ActionType.UPDATE, ENTITY_TYPES[beneficiary_type], application_number,
            {'old_values': {'rows': result.deleted}, 'new_values': {'rows': new_values}}
        )
    else:
        AuditLogService.log_action(
            user, ActionType.CREATE, ENTITY_TYPES[beneficiary_type], application_number,
            {'new_values': {'rows': new_values}}
        )


@transaction.atomic
def save_district_entries(
    district,
    lines: List[Dict[str, Any]],
    user=None,
    application_number: Optional[str] = None,
    notes: str = ''
) -> SaveOutcome:
    """
    Save the article allotment of a district.

    The district's stored application number is reused; the first ever
    submission issues one and stores it on the district. Budget overrun
    is returned as a warning.

    Args:
        district: District instance.
        lines: Dicts with article_id, quantity, cost_per_unit and notes.
        user: Acting user.
        application_number: Number of the record being edited.
        notes: Fallback notes for lines without their own.

    Returns:
        SaveOutcome with the grouped record and budget position.

    Raises:
        ValidationFailedException: If a line is invalid.
        UnauthorizedRoleException: If the user cannot write.
    """
    require_permission(user, Permission.DATA_WRITE)
    errors = _validate_lines(lines)
    if errors:
        raise ValidationFailedException(details={'errors': errors})

    allocation = ApplicationNumberAllocator(BeneficiaryType.DISTRICT).allocate(
        application_number, anchor=district
    )
    rows = _build_rows(DistrictBeneficiaryEntry, lines, user, notes, district=district)
    result = replace_entries(
        DistrictBeneficiaryEntry, allocation.application_number, rows, expect_empty=allocation.is_generated
    )
    _log_replace(user, BeneficiaryType.DISTRICT, allocation.application_number, result)

    budget = district_remaining_fund(district)
    warnings = find_duplicate_lines(lines)
    if budget.warning:
        warnings.append(budget.warning)

    logger.info(
        "Saved district %s entries under %s: %d lines, total %s",
        district, allocation.application_number, len(rows), aggregate_total(rows)
    )
    return SaveOutcome(
        allocation=allocation,
        record=group_entries_by_application_number(result.inserted)[0],
        deleted=result.deleted,
        budget=budget,
        warnings=warnings,
    )


def validate_public_entry(data: Dict[str, Any]) -> Dict[str, str]:
    """
    Validate the public beneficiary form.

    Returns:
        Field -> message map, empty when valid.
    """
    errors: Dict[str, str] = {}
    if not (data.get('name') or '').strip():
        errors['name'] = 'Name is required'
    if not is_valid_aadhar(data.get('aadhar_number')):
        errors['aadhar_number'] = 'Aadhaar number must be exactly 12 digits'
    gender = data.get('gender') or ''
    if gender and gender not in Gender.values:
        errors['gender'] = 'Select a valid gender'
    female_status = data.get('female_status') or ''
    if female_status:
        if gender != Gender.FEMALE:
            errors['female_status'] = 'Female status applies only when gender is Female'
        elif female_status not in FemaleStatus.values:
            errors['female_status'] = 'Select a valid female status'

    for key, message in _validate_lines([data]).items():
        errors[key.replace('_0', '')] = message
    return errors


@transaction.atomic
def save_public_entry(
    data: Dict[str, Any],
    user=None,
    application_number: Optional[str] = None,
    on_conflict: Optional[str] = None
) -> SaveOutcome:
    """
    Save one public beneficiary.

    A new entry whose Aadhaar number already belongs to another record
    is a conflict. The caller either retries with on_conflict='update',
    which overwrites the existing record, or loads the existing record
    for editing.

    Args:
        data: Form values (name, aadhar_number, article_id, quantity,
              cost_per_unit, gender, female_status, address, mobile...).
        user: Acting user.
        application_number: Number of the record being edited.
        on_conflict: 'update' to overwrite a conflicting record.

    Returns:
        SaveOutcome for the saved record.

    Raises:
        ValidationFailedException: If the form is invalid.
        DuplicateBeneficiaryException: If the Aadhaar number is taken.
        ApplicationNumberException: If a new number was taken by a
            concurrent save.
    """
    require_permission(user, Permission.DATA_WRITE)
    errors = validate_public_entry(data)
    if errors:
        raise ValidationFailedException(details={'errors': errors})

    aadhar_number = normalize_identity(data['aadhar_number'])
    existing = find_public_by_aadhar(aadhar_number)
    if existing is not None and existing.application_number != (application_number or ''):
        if on_conflict != ON_CONFLICT_UPDATE:
            logger.warning(
                "Aadhaar conflict: %s already registered under %s",
                aadhar_number[-4:].rjust(len(aadhar_number), '*'), existing.application_number
            )
            raise DuplicateBeneficiaryException(details={
                'application_number': existing.application_number,
                'existing': snapshot(existing),
            })
        application_number = existing.application_number

    allocation = ApplicationNumberAllocator(BeneficiaryType.PUBLIC).allocate(
        application_number, aadhar_number=aadhar_number
    )
    gender = data.get('gender') or ''
    rows = _build_rows(
        PublicBeneficiaryEntry, [data], user, data.get('notes') or '',
        name=data['name'].strip(),
        aadhar_number=aadhar_number,
        is_handicapped=bool(data.get('is_handicapped')),
        gender=gender,
        female_status=(data.get('female_status') or '') if gender == Gender.FEMALE else '',
        address=data.get('address') or '',
        mobile=data.get('mobile') or '',
    )
    result = replace_entries(
        PublicBeneficiaryEntry, allocation.application_number, rows, expect_empty=allocation.is_generated
    )
    _log_replace(user, BeneficiaryType.PUBLIC, allocation.application_number, result)

    return SaveOutcome(
        allocation=allocation,
        record=public_records(result.inserted)[0],
        deleted=result.deleted,
    )


@transaction.atomic
def save_institution_entries(
    institution_name: str,
    lines: List[Dict[str, Any]],
    user=None,
    institution_type: str = InstitutionType.INSTITUTIONS,
    application_number: Optional[str] = None,
    address: str = '',
    mobile: str = '',
    notes: str = ''
) -> SaveOutcome:
    """
    Save the articles requested by an institution or other applicant.

    Args:
        institution_name: Name of the institution.
        lines: Dicts with article_id, quantity, cost_per_unit and notes.
        user: Acting user.
        institution_type: 'institutions' or 'others'.
        application_number: Number of the record being edited.
        address: Institution address.
        mobile: Contact number.
        notes: Fallback notes for lines without their own.

    Returns:
        SaveOutcome with the grouped record.
    """
    require_permission(user, Permission.DATA_WRITE)
    errors = _validate_lines(lines)
    if not (institution_name or '').strip():
        errors['institution_name'] = 'Institution name is required'
    if institution_type not in InstitutionType.values:
        errors['institution_type'] = 'Select a valid institution type'
    if errors:
        raise ValidationFailedException(details={'errors': errors})

    beneficiary_type = (
        BeneficiaryType.OTHERS if institution_type == InstitutionType.OTHERS else BeneficiaryType.INSTITUTIONS
    )
    allocation = ApplicationNumberAllocator(beneficiary_type).allocate(application_number)
    rows = _build_rows(
        InstitutionBeneficiaryEntry, lines, user, notes,
        institution_name=institution_name.strip(),
        institution_type=institution_type,
        address=address or '',
        mobile=mobile or '',
    )
    result = replace_entries(
        InstitutionBeneficiaryEntry, allocation.application_number, rows, expect_empty=allocation.is_generated
    )
    _log_replace(user, beneficiary_type, allocation.application_number, result)

    return SaveOutcome(
        allocation=allocation,
        record=group_entries_by_application_number(result.inserted)[0],
        deleted=result.deleted,
        warnings=find_duplicate_lines(lines),
    )


@transaction.atomic
def delete_entries_by_application_number(beneficiary_type: str, application_number: str,
                                         user=None) -> List[Dict[str, Any]]:
    """
    Delete every entry stored under an application number.

    Returns:
        Snapshots of the deleted rows.
    """
    require_permission(user, Permission.DATA_DELETE)
    model = ENTRY_MODELS[beneficiary_type]
    with store_call('delete_entries'):
        queryset = model.objects.filter(application_number=application_number)
        deleted = [snapshot(row) for row in queryset]
        queryset.delete()

    if deleted:
        AuditLogService.log_action(
            user, ActionType.DELETE, ENTITY_TYPES[beneficiary_type], application_number,
            {'deleted_values': {'rows': deleted, 'total_amount': sum(
                (Decimal(str(row.get('total_amount') or 0)) for row in deleted), Decimal('0.00')
            )}}
        )
    logger.info("Deleted %d %s rows under %s", len(deleted), beneficiary_type, application_number)
    return deleted
