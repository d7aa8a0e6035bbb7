"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for the budgeting module.
-------------------------------------------------------------------------
"""
from decimal import Decimal
from unittest import mock

from django.db import OperationalError
from django.test import SimpleTestCase, TestCase

from apps.beneficiaries.models import DistrictBeneficiaryEntry, EntryStatus
from apps.budgeting.services import (
    aggregate_total,
    amount_too_large,
    cumulative_totals,
    district_budget_summary,
    district_remaining_fund,
    find_duplicate_lines,
    line_total,
    quantity_too_large,
    remaining_budget,
    sum_amounts,
    to_money,
    to_quantity,
    validate_line_costs,
)
from apps.core.models import District
from apps.inventory.models import Article


class ServiceFunctionTests(SimpleTestCase):
    """Tests for budgeting calculation functions."""

    def test_line_total(self) -> None:
        """Test that a line total is quantity times cost."""
        self.assertEqual(line_total(3, Decimal('1250.50')), Decimal('3751.50'))

    def test_malformed_input_counts_as_zero(self) -> None:
        """Test that blank or malformed costs are treated as zero."""
        self.assertEqual(to_money(''), Decimal('0.00'))
        self.assertEqual(to_money('abc'), Decimal('0.00'))
        self.assertEqual(to_money('1,200'), Decimal('1200.00'))
        self.assertEqual(line_total('x', '100'), Decimal('0.00'))

    def test_oversized_input_does_not_raise(self) -> None:
        """Test that huge or infinite values coerce to zero instead of raising."""
        self.assertEqual(to_money('1' + '0' * 30), Decimal('0.00'))
        self.assertEqual(to_money('inf'), Decimal('0.00'))
        self.assertEqual(to_quantity('inf'), 0)
        self.assertEqual(to_quantity('-Infinity'), 0)
        self.assertEqual(line_total('inf', '1' + '0' * 30), Decimal('0.00'))

    def test_storage_limits(self) -> None:
        """Test that amounts and quantities beyond the stored field limits are flagged."""
        self.assertTrue(amount_too_large('10000000000000'))
        self.assertTrue(amount_too_large('1' + '0' * 30))
        self.assertFalse(amount_too_large('9999999999999.99'))
        self.assertFalse(amount_too_large('abc'))
        self.assertFalse(amount_too_large(None))
        self.assertTrue(quantity_too_large('2147483648'))
        self.assertFalse(quantity_too_large('2147483647'))

    def test_aggregate_total_accepts_field_aliases(self) -> None:
        """Test that totals read cost_per_unit, article_cost_per_unit or unit_price."""
        lines = [
            {'quantity': 2, 'cost_per_unit': '100'},
            {'quantity': 1, 'article_cost_per_unit': Decimal('250.00')},
            {'quantity': 4, 'unit_price': 10},
        ]

        self.assertEqual(aggregate_total(lines), Decimal('490.00'))

    def test_sum_amounts(self) -> None:
        """Test that recipient amounts are summed as money."""
        self.assertEqual(sum_amounts(['5000', Decimal('2500.25'), None]), Decimal('7500.25'))

    def test_cumulative_follows_list_order(self) -> None:
        """Test that cumulative values are running prefix sums."""
        lines = [
            {'quantity': 1, 'cost_per_unit': '100'},
            {'quantity': 2, 'cost_per_unit': '50'},
            {'quantity': 1, 'cost_per_unit': '25'},
        ]

        self.assertEqual(cumulative_totals(lines), [Decimal('100.00'), Decimal('200.00'), Decimal('225.00')])
        self.assertEqual(
            cumulative_totals(list(reversed(lines))),
            [Decimal('25.00'), Decimal('125.00'), Decimal('225.00')]
        )

    def test_remaining_budget_never_clamps(self) -> None:
        """Test that an overrun yields a negative remaining value and a warning."""
        position = remaining_budget(Decimal('100000.00'), Decimal('80000.00'), Decimal('30000.00'))

        self.assertEqual(position.remaining, Decimal('-10000.00'))
        self.assertTrue(position.is_overrun)
        self.assertEqual(position.warning, 'Budget exceeded by ₹ 10,000')

    def test_remaining_budget_within_limit(self) -> None:
        """Test that no warning is produced within budget."""
        position = remaining_budget(Decimal('100000.00'), Decimal('20000.00'))

        self.assertEqual(position.remaining, Decimal('80000.00'))
        self.assertIsNone(position.warning)

    def test_validate_line_costs(self) -> None:
        """Test that zero quantities and costs are reported per line."""
        lines = [
            {'quantity': 0, 'cost_per_unit': '100'},
            {'quantity': 1, 'cost_per_unit': '0'},
            {'quantity': 2, 'cost_per_unit': '10'},
        ]

        errors = validate_line_costs(lines)

        self.assertEqual(set(errors), {'quantity_0', 'cost_per_unit_1'})
        self.assertNotIn('cost_per_unit_1', validate_line_costs(lines, allow_zero=True))

    def test_validate_line_costs_rejects_oversized_values(self) -> None:
        """Test that values beyond the stored field limits are reported per line."""
        lines = [
            {'quantity': '99999999999', 'cost_per_unit': '100'},
            {'quantity': 1, 'cost_per_unit': '1' + '0' * 30},
            {'quantity': 1000000, 'cost_per_unit': '9999999999999'},
            {'quantity': 'inf', 'cost_per_unit': '10'},
        ]

        errors = validate_line_costs(lines)

        self.assertEqual(errors['quantity_0'], 'Quantity is too large')
        self.assertEqual(errors['cost_per_unit_1'], 'Cost per unit is too large')
        self.assertEqual(errors['cost_per_unit_2'], 'Line total is too large')
        self.assertEqual(errors['quantity_3'], 'Quantity must be at least 1')

    def test_find_duplicate_lines(self) -> None:
        """Test that repeated articles produce one informational warning."""
        lines = [
            {'article_id': 1, 'article_name': 'Sewing Machine'},
            {'article_id': 2, 'article_name': 'Laptop'},
            {'article_id': 1, 'article_name': 'Sewing Machine'},
        ]

        warnings = find_duplicate_lines(lines)

        self.assertEqual(len(warnings), 1)
        self.assertIn("'Sewing Machine' is listed 2 times", warnings[0])


class DistrictBudgetTests(TestCase):
    """Tests for district budget positions backed by the store."""

    def setUp(self) -> None:
        """Set up test data."""
        self.district = District.objects.create(
            district_name='Madurai',
            allotted_budget=Decimal('100000.00')
        )
        self.article = Article.objects.create(
            article_name='Sewing Machine',
            cost_per_unit=Decimal('8000.00')
        )
        DistrictBeneficiaryEntry.objects.create(
            application_number='D001',
            district=self.district,
            article=self.article,
            quantity=5,
            article_cost_per_unit=Decimal('8000.00'),
            status=EntryStatus.APPROVED
        )
        DistrictBeneficiaryEntry.objects.create(
            application_number='D001',
            district=self.district,
            article=self.article,
            quantity=2,
            article_cost_per_unit=Decimal('8000.00')
        )

    def test_remaining_fund_counts_recorded_entries(self) -> None:
        """Test that recorded entries and the open form reduce the budget."""
        position = district_remaining_fund(self.district, Decimal('10000.00'))

        self.assertEqual(position.used, Decimal('56000.00'))
        self.assertEqual(position.remaining, Decimal('34000.00'))

    def test_remaining_fund_excludes_record_being_edited(self) -> None:
        """Test that the edited application number is not counted twice."""
        position = district_remaining_fund(
            self.district, Decimal('120000.00'), exclude_application_number='D001'
        )

        self.assertEqual(position.used, Decimal('0.00'))
        self.assertEqual(position.remaining, Decimal('-20000.00'))
        self.assertTrue(position.is_overrun)

    def test_summary_counts_only_approved_entries(self) -> None:
        """Test that pending entries are not spent."""
        summary = district_budget_summary()

        self.assertEqual(len(summary), 1)
        row = summary[0]
        self.assertEqual(row['total_spent'], Decimal('40000.00'))
        self.assertEqual(row['remaining_budget'], Decimal('60000.00'))
        self.assertEqual(row['utilization_percentage'], Decimal('40.00'))

    def test_summary_degrades_on_store_failure(self) -> None:
        """Test that the summary is empty when the store is down."""
        with mock.patch.object(District.objects, 'annotate', side_effect=OperationalError('down')):
            self.assertEqual(district_budget_summary(), [])
