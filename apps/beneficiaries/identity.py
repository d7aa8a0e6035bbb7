"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Identity normalisation for beneficiaries. Turns Aadhaar
             numbers and "<app no> - <name> - ₹ <amount>" display
             strings into comparable keys.
-------------------------------------------------------------------------
"""
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Dict, Iterable, Optional, Type

from apps.beneficiaries.models import BeneficiaryType

AADHAR_LENGTH = 12
CURRENCY_SYMBOL = '₹'
DISPLAY_SEPARATOR = ' - '

NON_DIGIT_RE = re.compile(r'\D')
WHITESPACE_RE = re.compile(r'\s+')


def normalize_identity(raw: Optional[str]) -> str:
    """
    Strip every non-digit character from an identity number.

    A result shorter than 12 digits is a "no match" for callers,
    never an error.
    """
    return NON_DIGIT_RE.sub('', raw or '')


def is_valid_aadhar(raw: Optional[str]) -> bool:
    """True when the value holds exactly 12 digits after normalisation."""
    return len(normalize_identity(raw)) == AADHAR_LENGTH


def extract_application_number(display_text: Optional[str]) -> str:
    """
    Return the text before the first hyphen, trimmed.

    Application numbers containing a hyphen are truncated at it.
    """
    if not display_text:
        return ''
    return display_text.split('-', 1)[0].strip()


def beneficiary_identity(beneficiary_type: str, display_text: Optional[str]) -> Optional[str]:
    """
    Key used to detect a beneficiary being paid twice.

    District rows are keyed by the whole display string because one
    district application number covers several aid lines. Every other
    type is keyed by its application number.

    Args:
        beneficiary_type: One of BeneficiaryType values.
        display_text: The stored beneficiary display string.

    Returns:
        The identity, or None when there is no beneficiary.
    """
    if not display_text or not display_text.strip():
        return None
    if beneficiary_type == BeneficiaryType.DISTRICT:
        return display_text.strip()
    return extract_application_number(display_text) or None


def format_amount(amount) -> str:
    """Thousands separators, decimals only when there is a fraction."""
    value = Decimal(str(amount or 0)).quantize(Decimal('0.01'))
    if value == value.to_integral_value():
        return f"{int(value):,}"
    return f"{value:,.2f}".rstrip('0')


def format_display_text(application_number: str, label: str, amount) -> str:
    """Build "<app no> - <label> - ₹ <amount>"."""
    return DISPLAY_SEPARATOR.join([
        application_number,
        label,
        f"{CURRENCY_SYMBOL} {format_amount(amount)}",
    ])


def normalize_article_name(name: Optional[str]) -> str:
    """Case and whitespace insensitive key for article names."""
    return WHITESPACE_RE.sub('', name or '').casefold()


def format_beneficiary_types(recipients: Iterable) -> str:
    """
    Summarise the beneficiary types of a set of recipients.

    "District", "District & Public", "District, Public & Institutions".
    """
    types = []
    for recipient in recipients:
        value = recipient.get('beneficiary_type') if isinstance(recipient, dict) else getattr(recipient, 'beneficiary_type', None)
        if value and value not in types:
            types.append(value)

    if not types:
        return ''
    if len(types) == 1:
        return types[0]
    return f"{', '.join(types[:-1])} & {types[-1]}"


def beneficiary_display_value(recipient, fund_request_type: str) -> str:
    """
    Beneficiary column value used by exports.

    Article requests are issued to all districts and the public. District
    recipients show the district name, other types their application number.
    """
    if fund_request_type == 'Article':
        return 'All Districts & Public'
    if recipient is None:
        return ''

    beneficiary = recipient.beneficiary or ''
    if recipient.beneficiary_type == BeneficiaryType.DISTRICT:
        if recipient.district_name:
            return recipient.district_name
        parts = beneficiary.split(DISPLAY_SEPARATOR)
        return parts[1] if len(parts) >= 2 else beneficiary
    if recipient.beneficiary_type in (BeneficiaryType.PUBLIC, BeneficiaryType.INSTITUTIONS, BeneficiaryType.OTHERS):
        return beneficiary.split(DISPLAY_SEPARATOR)[0].strip() if beneficiary else ''
    return beneficiary


# Beneficiary options, one variant per beneficiary type

@dataclass(frozen=True)
class BeneficiaryOption:
    """
    Dropdown candidate for a fund request recipient.

    Subclasses fix beneficiary_type and supply the label.
    """

    application_number: str
    total_amount: Decimal

    beneficiary_type: ClassVar[str] = ''

    @property
    def label(self) -> str:
        raise NotImplementedError

    @property
    def display_text(self) -> str:
        return format_display_text(self.application_number, self.label, self.total_amount)

    @property
    def identity(self) -> Optional[str]:
        return beneficiary_identity(self.beneficiary_type, self.display_text)


@dataclass(frozen=True)
class DistrictOption(BeneficiaryOption):
    district_id: Optional[int] = None
    district_name: str = ''

    beneficiary_type: ClassVar[str] = BeneficiaryType.DISTRICT

    @property
    def label(self) -> str:
        return self.district_name


@dataclass(frozen=True)
class PublicOption(BeneficiaryOption):
    name: str = ''
    aadhar_number: str = ''

    beneficiary_type: ClassVar[str] = BeneficiaryType.PUBLIC

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class InstitutionsOption(BeneficiaryOption):
    institution_name: str = ''

    beneficiary_type: ClassVar[str] = BeneficiaryType.INSTITUTIONS

    @property
    def label(self) -> str:
        return self.institution_name


@dataclass(frozen=True)
class OthersOption(InstitutionsOption):
    beneficiary_type: ClassVar[str] = BeneficiaryType.OTHERS


OPTION_CLASSES: Dict[str, Type[BeneficiaryOption]] = {
    BeneficiaryType.DISTRICT: DistrictOption,
    BeneficiaryType.PUBLIC: PublicOption,
    BeneficiaryType.INSTITUTIONS: InstitutionsOption,
    BeneficiaryType.OTHERS: OthersOption,
}
