"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Application number issuance and the replace (delete then
             insert) step used by every beneficiary save.
-------------------------------------------------------------------------
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Type

from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, models, transaction

from apps.beneficiaries.identity import normalize_identity, is_valid_aadhar
from apps.beneficiaries.models import (
    BeneficiaryType,
    DistrictBeneficiaryEntry,
    InstitutionBeneficiaryEntry,
    PublicBeneficiaryEntry,
)
from apps.core.exceptions import ApplicationNumberException, EntryReplaceException
from apps.core.services import snapshot, store_call

logger = logging.getLogger(__name__)


# Institutions and Others share the I sequence
APPLICATION_PREFIXES: Dict[str, str] = {
    BeneficiaryType.DISTRICT: 'D',
    BeneficiaryType.PUBLIC: 'P',
    BeneficiaryType.INSTITUTIONS: 'I',
    BeneficiaryType.OTHERS: 'I',
}

ENTRY_MODELS: Dict[str, Type[models.Model]] = {
    BeneficiaryType.DISTRICT: DistrictBeneficiaryEntry,
    BeneficiaryType.PUBLIC: PublicBeneficiaryEntry,
    BeneficiaryType.INSTITUTIONS: InstitutionBeneficiaryEntry,
    BeneficiaryType.OTHERS: InstitutionBeneficiaryEntry,
}

SEQUENCE_WIDTH = 3
APPLICATION_NUMBER_RE = re.compile(r'^([DPI])\s?(\d{3,})$')


class AllocationSource:
    """How an application number was resolved."""
    EDIT = 'edit'
    ANCHOR = 'anchor'
    AADHAR = 'aadhar'
    GENERATED = 'generated'


def _prefix_for(beneficiary_type: str) -> str:
    try:
        return APPLICATION_PREFIXES[beneficiary_type]
    except KeyError:
        raise ApplicationNumberException(
            f"Unknown beneficiary type: {beneficiary_type}",
            details={'beneficiary_type': beneficiary_type}
        )


def _sequence_of(application_number: str, prefix: str) -> Optional[int]:
    """Numeric part of D001 or the legacy 'D 001' form."""
    match = re.match(rf'^{prefix}\s*(\d+)$', (application_number or '').strip())
    return int(match.group(1)) if match else None


def _existing_numbers(beneficiary_type: str) -> Iterable[str]:
    from apps.core.models import District

    model = ENTRY_MODELS[beneficiary_type]
    numbers = list(
        model.objects.exclude(application_number='').values_list('application_number', flat=True)
    )
    if beneficiary_type == BeneficiaryType.DISTRICT:
        numbers.extend(
            District.objects.exclude(application_number='').values_list('application_number', flat=True)
        )
    return numbers


def generate_application_number(beneficiary_type: str) -> str:
    """
    Issue the next application number for a beneficiary type.

    Format is the type prefix (D, P or I) followed by a zero padded
    sequence, e.g. D001. Legacy numbers written as 'D 001' count
    towards the sequence.

    The next number is max + 1 over the stored numbers and nothing is
    reserved, so two concurrent saves can be issued the same number.
    Callers pass expect_empty=True to replace_entries for a generated
    number so the second save fails instead of overwriting the first.

    Args:
        beneficiary_type: One of BeneficiaryType values.

    Returns:
        The new application number.

    Raises:
        ApplicationNumberException: If the type is unknown.
        StoreUnavailableException: If existing numbers cannot be read.
    """
    prefix = _prefix_for(beneficiary_type)
    with store_call('generate_application_number'):
        sequences = [
            sequence for sequence in (
                _sequence_of(number, prefix) for number in _existing_numbers(beneficiary_type)
            )
            if sequence is not None
        ]
    next_sequence = max(sequences, default=0) + 1
    application_number = f"{prefix}{next_sequence:0{SEQUENCE_WIDTH}d}"
    logger.info("Issued application number %s for %s", application_number, beneficiary_type)
    return application_number


def is_valid_application_number(value: Optional[str]) -> bool:
    return bool(APPLICATION_NUMBER_RE.match((value or '').strip()))


def beneficiary_type_from_application_number(value: Optional[str]) -> Optional[str]:
    """
    Beneficiary type implied by the prefix.

    'I' numbers are reported as Institutions; Others share the prefix.
    """
    match = APPLICATION_NUMBER_RE.match((value or '').strip())
    if not match:
        return None
    return {
        'D': BeneficiaryType.DISTRICT,
        'P': BeneficiaryType.PUBLIC,
        'I': BeneficiaryType.INSTITUTIONS,
    }[match.group(1)]


def find_public_by_aadhar(aadhar_number: Optional[str]) -> Optional[PublicBeneficiaryEntry]:
    """
    Most recent public entry carrying the same Aadhaar number.

    Stored numbers are compared after normalisation, so spaced and
    hyphenated forms match. Malformed input never matches.
    """
    if not is_valid_aadhar(aadhar_number):
        return None
    target = normalize_identity(aadhar_number)
    queryset = PublicBeneficiaryEntry.objects.select_related('article').order_by('-created_at', '-id')
    with store_call('find_public_by_aadhar'):
        exact = queryset.filter(aadhar_number=target).first()
        if exact is not None:
            return exact
        for entry in queryset.filter(aadhar_number__contains=target[-4:]):
            if normalize_identity(entry.aadhar_number) == target:
                return entry
    return None


@dataclass(frozen=True)
class Allocation:
    """Result of resolving an application number."""
    application_number: str
    source: str
    replaced: bool

    @property
    def is_generated(self) -> bool:
        return self.source == AllocationSource.GENERATED


@dataclass
class ReplaceResult:
    """Rows removed and rows written by one replace."""
    application_number: str
    deleted: List[Dict[str, Any]] = field(default_factory=list)
    inserted: List[models.Model] = field(default_factory=list)

    @property
    def was_update(self) -> bool:
        return bool(self.deleted)


class ApplicationNumberAllocator:
    """
    Resolve the application number for a beneficiary save.

    Resolution order:
        1. A known application number (editing) is reused.
        2. An anchor row (District) or a matching Aadhaar number supplies
           a previously issued number.
        3. A new number is generated and stored on the anchor.
    """

    def __init__(self, beneficiary_type: str, entry_filter: Optional[Dict[str, Any]] = None) -> None:
        _prefix_for(beneficiary_type)
        self.beneficiary_type = beneficiary_type
        self.model = ENTRY_MODELS[beneficiary_type]
        self.entry_filter = entry_filter or {}

    def _has_entries(self, application_number: str) -> bool:
        with store_call('allocation_lookup'):
            return self.model.objects.filter(
                application_number=application_number, **self.entry_filter
            ).exists()

    def _legacy_anchor_number(self, anchor) -> str:
        """Number already used by the anchor's entries, newest first."""
        with store_call('allocation_lookup'):
            return (
                self.model.objects.filter(district=anchor)
                .exclude(application_number='')
                .order_by('-created_at', '-id')
                .values_list('application_number', flat=True)
                .first()
            ) or ''

    def _persist_on_anchor(self, anchor, application_number: str) -> None:
        if anchor is None or anchor.application_number == application_number:
            return
        anchor.application_number = application_number
        with store_call('persist_anchor_number'):
            anchor.save(update_fields=['application_number', 'updated_at'])

    def reuse(
        self,
        application_number: Optional[str] = None,
        anchor=None,
        aadhar_number: Optional[str] = None
    ) -> Optional[Allocation]:
        """
        Resolve an already issued application number, never generating one.

        Returns:
            Allocation, or None when nothing can be reused.
        """
        application_number = (application_number or '').strip()
        if application_number:
            if anchor is not None and not anchor.application_number:
                self._persist_on_anchor(anchor, application_number)
            return Allocation(application_number, AllocationSource.EDIT, self._has_entries(application_number))

        if anchor is not None:
            anchor_number = (anchor.application_number or '').strip() or self._legacy_anchor_number(anchor)
            if anchor_number:
                self._persist_on_anchor(anchor, anchor_number)
                return Allocation(anchor_number, AllocationSource.ANCHOR, self._has_entries(anchor_number))

        if aadhar_number and self.beneficiary_type == BeneficiaryType.PUBLIC:
            existing = find_public_by_aadhar(aadhar_number)
            if existing is not None and existing.application_number:
                return Allocation(existing.application_number, AllocationSource.AADHAR, True)
        return None

    def allocate(
        self,
        application_number: Optional[str] = None,
        anchor=None,
        aadhar_number: Optional[str] = None
    ) -> Allocation:
        """
        Resolve the application number to save under.

        Args:
            application_number: Number of the record being edited, if any.
            anchor: District whose number should be reused.
            aadhar_number: Public beneficiary Aadhaar number.

        Returns:
            Allocation with the number, its source and whether prior rows
            will be replaced.
        """
        allocation = self.reuse(application_number, anchor, aadhar_number)
        if allocation is not None:
            return allocation

        generated = generate_application_number(self.beneficiary_type)
        self._persist_on_anchor(anchor, generated)
        return Allocation(generated, AllocationSource.GENERATED, False)


def replace_entries(
    model: Type[models.Model],
    application_number: str,
    rows: Iterable[models.Model],
    entry_filter: Optional[Dict[str, Any]] = None,
    expect_empty: bool = False
) -> ReplaceResult:
    """
    Replace every row stored under an application number.

    The delete runs first and its rows are captured for the audit log,
    then the new rows are inserted. Both phases share one transaction.

    A freshly generated number is not reserved (see
    generate_application_number). With expect_empty=True any row already
    stored under the number means another save claimed it first; the
    replace is refused and those rows are left untouched. Two saves that
    both find the number empty can still interleave on a database without
    serializable transactions.

    Args:
        model: Entry model class.
        application_number: Number the rows are stored under.
        rows: Unsaved entry instances.
        entry_filter: Extra filter narrowing the rows to delete.
        expect_empty: Refuse to replace rows that already exist.

    Returns:
        ReplaceResult with the deleted snapshots and inserted rows.

    Raises:
        ApplicationNumberException: If the number is missing, or taken
            while expect_empty is set.
        EntryReplaceException: If the insert phase fails.
        StoreUnavailableException: If the store cannot be reached.
    """
    if not application_number:
        raise ApplicationNumberException("Cannot replace entries without an application number.")

    result = ReplaceResult(application_number=application_number)
    with store_call('replace_entries'), transaction.atomic():
        previous = model.objects.select_for_update().filter(
            application_number=application_number, **(entry_filter or {})
        )
        result.deleted = [snapshot(row) for row in previous]
        if expect_empty and result.deleted:
            logger.warning(
                "Application number %s was taken by another save (%d rows)",
                application_number, len(result.deleted)
            )
            raise ApplicationNumberException(
                f"Application number {application_number} was just used by another save. Please save again.",
                details={'application_number': application_number, 'existing_count': len(result.deleted)}
            )
        previous.delete()

        try:
            for row in rows:
                row.application_number = application_number
                row.save()
                result.inserted.append(row)
        except (IntegrityError, ValidationError, DatabaseError) as exc:
            logger.error(
                "Insert phase failed for %s %s after deleting %d rows: %s",
                model.__name__, application_number, len(result.deleted), exc
            )
            raise EntryReplaceException(details={
                'application_number': application_number,
                'deleted_count': len(result.deleted),
                'error': str(exc),
            }) from exc

    logger.info(
        "Replaced %s %s: %d deleted, %d inserted",
        model.__name__, application_number, len(result.deleted), len(result.inserted)
    )
    return result
