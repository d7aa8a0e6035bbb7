"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Budget and total calculations for beneficiary entries and
             fund requests. Budget overrun is a soft warning, never a
             validation failure.
-------------------------------------------------------------------------
"""
import logging
from collections import Counter
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from django.db import DatabaseError
from django.db.models import Q, Sum

from apps.beneficiaries.identity import CURRENCY_SYMBOL, format_amount

logger = logging.getLogger(__name__)


# Constants
ZERO = Decimal('0.00')
MONEY_PLACES = Decimal('0.01')
# DecimalField(max_digits=15, decimal_places=2) and PositiveIntegerField limits
MAX_AMOUNT = Decimal('9999999999999.99')
MAX_QUANTITY = 2147483647
SPENT_STATUSES = ('approved', 'completed')


def _parse_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).replace(',', '').strip())
    except (InvalidOperation, ValueError):
        return None


def to_money(value: Any) -> Decimal:
    """
    Coerce a form value to a 2-place Decimal.

    Blank, malformed, infinite or unrepresentable input counts as zero.
    """
    if value is None or value == '':
        return ZERO
    amount = _parse_decimal(value)
    if amount is None or not amount.is_finite():
        return ZERO
    try:
        return amount.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return ZERO


def to_quantity(value: Any) -> int:
    """Coerce a form value to a whole quantity; malformed input is zero."""
    try:
        return int(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError, TypeError, OverflowError):
        return 0


def amount_too_large(value: Any) -> bool:
    """True when the value is a number beyond what an amount field stores."""
    if value is None or value == '':
        return False
    amount = _parse_decimal(value)
    return amount is not None and amount.is_finite() and abs(amount) > MAX_AMOUNT


def quantity_too_large(value: Any) -> bool:
    return to_quantity(value) > MAX_QUANTITY


def _read(line: Any, *names: str) -> Any:
    for name in names:
        if isinstance(line, dict):
            if name in line:
                return line[name]
        elif hasattr(line, name):
            return getattr(line, name)
    return None


def line_total(quantity: Any, cost_per_unit: Any) -> Decimal:
    """
    Total of one line: quantity x cost per unit.

    Args:
        quantity: Number of units.
        cost_per_unit: Unit cost.

    Returns:
        Decimal rounded to 2 places.
    """
    try:
        return (to_quantity(quantity) * to_money(cost_per_unit)).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return ZERO


def line_cost(line: Any) -> Decimal:
    return to_money(_read(line, 'cost_per_unit', 'article_cost_per_unit', 'unit_price'))


def aggregate_total(lines: Iterable[Any]) -> Decimal:
    """
    Sum of line totals.

    Lines are dicts or objects with quantity and cost_per_unit
    (article_cost_per_unit and unit_price are accepted as well).
    """
    total = ZERO
    for line in lines:
        total += line_total(_read(line, 'quantity'), line_cost(line))
    return total


def sum_amounts(amounts: Iterable[Any]) -> Decimal:
    """Sum of money values such as recipient fund_requested amounts."""
    total = ZERO
    for amount in amounts:
        total += to_money(amount)
    return total


def cumulative_totals(lines: Iterable[Any]) -> List[Decimal]:
    """
    Running prefix sums of line totals in list order.

    Reordering the lines changes every later value.
    """
    running = ZERO
    result = []
    for line in lines:
        running += line_total(_read(line, 'quantity'), line_cost(line))
        result.append(running)
    return result


@dataclass(frozen=True)
class BudgetPosition:
    """Remaining budget of a district, possibly negative."""
    allotted: Decimal
    used: Decimal
    in_progress: Decimal
    remaining: Decimal

    @property
    def is_overrun(self) -> bool:
        return self.remaining < ZERO

    @property
    def warning(self) -> Optional[str]:
        if not self.is_overrun:
            return None
        return f"Budget exceeded by {CURRENCY_SYMBOL} {format_amount(-self.remaining)}"


def remaining_budget(district: Any, existing_total: Any, in_progress_total: Any = ZERO) -> BudgetPosition:
    """
    Allotted budget minus recorded totals minus the open form's total.

    Never clamps: a negative remaining value is returned with a warning.

    Args:
        district: District instance, or the allotted amount itself.
        existing_total: Total already recorded against the district.
        in_progress_total: Total of the form being edited.

    Returns:
        BudgetPosition.
    """
    allotted = to_money(getattr(district, 'allotted_budget', district))
    used = to_money(existing_total)
    in_progress = to_money(in_progress_total)
    return BudgetPosition(
        allotted=allotted,
        used=used,
        in_progress=in_progress,
        remaining=allotted - used - in_progress,
    )


def district_recorded_total(district: Any, exclude_application_number: Optional[str] = None) -> Decimal:
    """Total of every entry recorded for the district."""
    from apps.beneficiaries.models import DistrictBeneficiaryEntry

    queryset = DistrictBeneficiaryEntry.objects.filter(district=district)
    if exclude_application_number:
        queryset = queryset.exclude(application_number=exclude_application_number)
    return to_money(queryset.aggregate(total=Sum('total_amount'))['total'])


def district_remaining_fund(
    district: Any,
    in_progress_total: Any = ZERO,
    exclude_application_number: Optional[str] = None
) -> BudgetPosition:
    """
    Remaining fund for the district entry form.

    When an existing record is being edited its persisted rows are
    excluded, since the form total replaces them.

    Args:
        district: District instance.
        in_progress_total: Current form total.
        exclude_application_number: Application number being edited.

    Returns:
        BudgetPosition. Overrun is logged as a warning only.
    """
    position = remaining_budget(
        district,
        district_recorded_total(district, exclude_application_number),
        in_progress_total,
    )
    if position.is_overrun:
        logger.warning(
            "District %s over budget: allotted=%s used=%s in_progress=%s",
            district, position.allotted, position.used, position.in_progress
        )
    return position


def validate_line_costs(lines: Iterable[Any], allow_zero: bool = False) -> Dict[str, str]:
    """
    Check quantities and unit costs of entry lines.

    Args:
        lines: Entry lines in form order.
        allow_zero: True for Article fund request lines awaiting a quotation.

    Returns:
        Field -> message map, empty when valid.
    """
    errors: Dict[str, str] = {}
    for index, line in enumerate(lines):
        quantity = _read(line, 'quantity')
        if to_quantity(quantity) < 1:
            errors[f'quantity_{index}'] = 'Quantity must be at least 1'
        elif quantity_too_large(quantity):
            errors[f'quantity_{index}'] = 'Quantity is too large'
        cost = line_cost(line)
        if amount_too_large(_read(line, 'cost_per_unit', 'article_cost_per_unit', 'unit_price')):
            errors[f'cost_per_unit_{index}'] = 'Cost per unit is too large'
        elif cost < ZERO or (cost == ZERO and not allow_zero):
            errors[f'cost_per_unit_{index}'] = 'Cost per unit must be greater than 0'
        elif amount_too_large(line_total(quantity, cost)):
            errors[f'cost_per_unit_{index}'] = 'Line total is too large'
    return errors


def find_duplicate_lines(lines: Iterable[Any]) -> List[str]:
    """
    Informational warnings for articles listed more than once.

    Returns:
        One message per repeated article; empty when none repeat.
    """
    names: Dict[Any, str] = {}
    counts: Counter = Counter()
    for line in lines:
        article_id = _read(line, 'article_id', 'article')
        if not article_id:
            continue
        key = getattr(article_id, 'pk', article_id)
        counts[key] += 1
        names.setdefault(key, _read(line, 'article_name') or str(article_id))

    return [
        f"'{names[key]}' is listed {count} times. Consider one line with the combined "
        f"quantity, or split the quantity deliberately."
        for key, count in counts.items() if count > 1
    ]


def district_budget_summary() -> List[Dict[str, Any]]:
    """
    Allotted, spent and remaining budget per district.

    Only approved and completed entries count as spent. This is a
    secondary read: store failures return an empty list.
    """
    from apps.core.models import District

    try:
        districts = list(
            District.objects.annotate(
                total_spent=Sum(
                    'beneficiary_entries__total_amount',
                    filter=Q(beneficiary_entries__status__in=SPENT_STATUSES)
                )
            ).order_by('district_name')
        )
    except DatabaseError as exc:
        logger.warning("Could not load district budget summary: %s", exc)
        return []

    summary = []
    for district in districts:
        spent = to_money(district.total_spent)
        allotted = to_money(district.allotted_budget)
        utilisation = ZERO
        if allotted > ZERO:
            utilisation = (spent / allotted * 100).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
        summary.append({
            'district_id': district.pk,
            'district_name': district.district_name,
            'allotted_budget': allotted,
            'total_spent': spent,
            'remaining_budget': allotted - spent,
            'utilization_percentage': utilisation,
            'is_active': district.is_active,
        })
    return summary
