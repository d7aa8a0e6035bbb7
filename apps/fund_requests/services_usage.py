"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Tracks which beneficiaries are already paid out by fund
             requests so the recipient dropdown never offers them twice.
-------------------------------------------------------------------------
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Optional, Set

from apps.beneficiaries.identity import BeneficiaryOption, beneficiary_identity, extract_application_number
from apps.beneficiaries.models import BeneficiaryType
from apps.beneficiaries.services_dropdown import candidates_for_type
from apps.core.services import store_call
from apps.fund_requests.models import FundRequestRecipient

logger = logging.getLogger(__name__)


def recipient_identity(beneficiary_type: str, beneficiary: Optional[str],
                       application_number: Optional[str] = '') -> Optional[str]:
    """
    Identity of a stored recipient.

    The structured application number is preferred over parsing the
    display string. District recipients always use the display string.
    """
    if beneficiary_type != BeneficiaryType.DISTRICT and (application_number or '').strip():
        return application_number.strip()
    return beneficiary_identity(beneficiary_type, beneficiary)


def used_beneficiaries(exclude_fund_request_id: Optional[int] = None) -> Set[str]:
    """
    Identities used by any persisted fund request.

    Args:
        exclude_fund_request_id: Fund request being edited, left out.

    Returns:
        Set of identities.

    Raises:
        StoreUnavailableException: If the store cannot be reached.
    """
    queryset = FundRequestRecipient.objects.exclude(beneficiary__isnull=True).exclude(beneficiary='')
    if exclude_fund_request_id:
        queryset = queryset.exclude(fund_request_id=exclude_fund_request_id)

    used = set()
    with store_call('used_beneficiaries'):
        for beneficiary_type, beneficiary, application_number in queryset.values_list(
            'beneficiary_type', 'beneficiary', 'application_number'
        ):
            identity = recipient_identity(beneficiary_type, beneficiary, application_number)
            if identity:
                used.add(identity)
    return used


@dataclass(frozen=True)
class SelectedOption(BeneficiaryOption):
    """A row's current value, kept even when no candidate carries it."""
    text: str = ''
    selected_type: str = ''

    @property
    def label(self) -> str:
        parts = self.text.split(' - ')
        return parts[1].strip() if len(parts) >= 2 else self.text

    @property
    def display_text(self) -> str:
        return self.text

    @property
    def identity(self) -> Optional[str]:
        return beneficiary_identity(self.selected_type, self.text)


CandidateSource = Callable[..., List[BeneficiaryOption]]


class BeneficiaryUsageTracker:
    """
    Exclusion state for one open fund request form.

    available = candidates - (used | session) | {row's own value}

    Candidate lists are cached per beneficiary type only when no aid
    type or district filter applies.
    """

    def __init__(self, fund_request_id: Optional[int] = None,
                 candidate_source: CandidateSource = candidates_for_type) -> None:
        self.fund_request_id = fund_request_id
        self.used: Set[str] = set()
        self.session_selected: Dict[Hashable, str] = {}
        self._row_values: Dict[Hashable, tuple] = {}
        self._candidate_source = candidate_source
        self._cache: Dict[str, List[BeneficiaryOption]] = {}

    def __enter__(self) -> 'BeneficiaryUsageTracker':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def refresh_used(self, exclude_fund_request_id: Optional[int] = None) -> Set[str]:
        """Reload identities used by other fund requests."""
        if exclude_fund_request_id is not None:
            self.fund_request_id = exclude_fund_request_id
        self.used = used_beneficiaries(self.fund_request_id)
        return self.used

    def select(self, row: Hashable, beneficiary_type: str, display_text: Optional[str]) -> Optional[str]:
        """
        Record the value chosen by a recipient row.

        Changing a row's value replaces its previous identity. A blank
        value deselects the row.
        """
        identity = beneficiary_identity(beneficiary_type, display_text)
        if identity is None:
            self.deselect(row)
            return None
        self.session_selected[row] = identity
        self._row_values[row] = (beneficiary_type, display_text)
        return identity

    def deselect(self, row: Hashable) -> None:
        self.session_selected.pop(row, None)
        self._row_values.pop(row, None)

    @property
    def session_identities(self) -> Set[str]:
        return set(self.session_selected.values())

    def excluded(self) -> Set[str]:
        return self.used | self.session_identities

    def candidates(self, beneficiary_type: str, aid_type: Optional[str] = None,
                   district_id: Optional[int] = None) -> List[BeneficiaryOption]:
        """Candidate list for a type, from the cache when unfiltered."""
        filtered = bool((aid_type or '').strip()) or bool(district_id)
        if not filtered and beneficiary_type in self._cache:
            return self._cache[beneficiary_type]

        options = self._candidate_source(beneficiary_type, aid_type=aid_type, district_id=district_id)
        if not filtered:
            self._cache[beneficiary_type] = options
        return options

    def available_options(self, row: Hashable, beneficiary_type: str,
                          aid_type: Optional[str] = None,
                          district_id: Optional[int] = None) -> List[BeneficiaryOption]:
        """
        Options for one recipient row's dropdown.

        Args:
            row: Key of the recipient row in the form.
            beneficiary_type: One of BeneficiaryType values.
            aid_type: Optional aid type filter.
            district_id: Optional district filter.

        Returns:
            Candidates not used elsewhere, plus the row's own value.
        """
        own_identity = self.session_selected.get(row)
        excluded = self.excluded()
        options = [
            option for option in self.candidates(beneficiary_type, aid_type, district_id)
            if option.identity not in excluded or option.identity == own_identity
        ]

        row_value = self._row_values.get(row)
        if own_identity and row_value and row_value[0] == beneficiary_type:
            if not any(option.identity == own_identity for option in options):
                selected_type, text = row_value
                options.insert(0, SelectedOption(
                    application_number=extract_application_number(text),
                    total_amount=None,
                    text=text,
                    selected_type=selected_type,
                ))
        return options

    def clear_cache(self) -> None:
        self._cache.clear()

    def close(self) -> None:
        """Tear down the session state when the form closes."""
        self.clear_cache()
        self.session_selected.clear()
        self._row_values.clear()
        self.used = set()
