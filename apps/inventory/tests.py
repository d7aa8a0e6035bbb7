"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for the article catalog, order consolidation
             and order tracking.
-------------------------------------------------------------------------
"""
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase

from apps.beneficiaries.models import (
    DistrictBeneficiaryEntry,
    InstitutionBeneficiaryEntry,
    PublicBeneficiaryEntry,
)
from apps.core.exceptions import StoreUnavailableException, UnauthorizedRoleException, ValidationFailedException
from apps.core.models import ActionType, AuditLog, District
from apps.inventory import services
from apps.inventory.models import Article, ItemType, OrderStatus
from apps.inventory.services import (
    consolidate_orders,
    create_article,
    create_order_entry,
    fetch_articles,
    find_aid_article,
    fund_request_article_choices,
    is_split_article_id,
    order_summary_by_article,
    split_article_id,
    split_article_name,
    toggle_article_status,
    update_article,
)
from apps.users.models import UserRole


User = get_user_model()


class ArticleCatalogTests(TestCase):
    """Tests for catalog create, update and status changes."""

    def setUp(self) -> None:
        """Set up test data."""
        self.editor = User.objects.create_user(
            email='editor@wdts.test', password='testpass123', first_name='Editor', role=UserRole.EDITOR
        )
        self.viewer = User.objects.create_user(
            email='viewer@wdts.test', password='testpass123', first_name='Viewer', role=UserRole.VIEWER
        )

    def test_create_article(self) -> None:
        """Test that articles are created with the audit trail."""
        article = create_article({
            'article_name': '  Wheel Chair ', 'cost_per_unit': '5200', 'item_type': ItemType.ARTICLE
        }, user=self.editor)

        self.assertEqual(article.article_name, 'Wheel Chair')
        self.assertEqual(article.cost_per_unit, Decimal('5200.00'))
        self.assertEqual(article.created_by, self.editor)
        self.assertTrue(AuditLog.objects.filter(action_type=ActionType.CREATE, entity_id=str(article.pk)).exists())

    def test_create_article_validation(self) -> None:
        """Test that blank names and negative costs are rejected."""
        with self.assertRaises(ValidationFailedException) as ctx:
            create_article({'article_name': '', 'cost_per_unit': '-1', 'item_type': 'Gift'}, user=self.editor)

        self.assertEqual(set(ctx.exception.errors), {'article_name', 'cost_per_unit', 'item_type'})

    def test_oversized_cost_is_rejected(self) -> None:
        """Test that a cost beyond the stored field limit is a field error."""
        with self.assertRaises(ValidationFailedException) as ctx:
            create_article({'article_name': 'Tractor', 'cost_per_unit': '1' + '0' * 30}, user=self.editor)

        self.assertEqual(ctx.exception.errors, {'cost_per_unit': 'Cost per unit is too large'})
        self.assertFalse(Article.objects.filter(article_name='Tractor').exists())

    def test_viewer_cannot_create(self) -> None:
        """Test that viewers cannot write the catalog."""
        with self.assertRaises(UnauthorizedRoleException):
            create_article({'article_name': 'Laptop'}, user=self.viewer)

    def test_update_article_logs_changed_fields(self) -> None:
        """Test that updates record old and new values."""
        article = create_article({'article_name': 'Laptop', 'cost_per_unit': '30000'}, user=self.editor)

        update_article(article, {'cost_per_unit': '32000'}, user=self.editor)

        log = AuditLog.objects.get(action_type=ActionType.UPDATE)
        self.assertEqual(log.details['updated_fields'], ['cost_per_unit'])
        self.assertEqual(log.details['new_values']['cost_per_unit'], '32000.00')

    def test_toggle_hides_article_from_catalog(self) -> None:
        """Test that deactivated articles leave the default catalog."""
        article = create_article({'article_name': 'Laptop'}, user=self.editor)

        toggle_article_status(article, user=self.editor)

        self.assertFalse(article.is_active)
        self.assertEqual(fetch_articles(), [])
        self.assertEqual(fetch_articles(include_inactive=True), [article])

    def test_split_article_ids(self) -> None:
        """Test the split id helpers."""
        value = split_article_id('Steel Cupboard')

        self.assertTrue(is_split_article_id(value))
        self.assertFalse(is_split_article_id('12'))
        self.assertEqual(split_article_name(value), 'Steel Cupboard')


class FindAidArticleTests(TestCase):
    """Tests for matching aid types to Aid articles."""

    def setUp(self) -> None:
        """Set up test data."""
        self.education = Article.objects.create(
            article_name='Education Aid', item_type=ItemType.AID, category='Education'
        )
        self.medical = Article.objects.create(
            article_name='Medical Aid', item_type=ItemType.AID, category='Health'
        )
        Article.objects.create(article_name='Education Kit', item_type=ItemType.ARTICLE, category='Education')

    def test_exact_name(self) -> None:
        """Test that an exact name wins."""
        self.assertEqual(find_aid_article('medical aid'), self.medical)

    def test_category(self) -> None:
        """Test that the category is matched next."""
        self.assertEqual(find_aid_article('Health'), self.medical)

    def test_partial_and_contained(self) -> None:
        """Test partial name and article-name-in-text matches."""
        self.assertEqual(find_aid_article('educ'), self.education)
        self.assertEqual(find_aid_article('Medical Aid for surgery'), self.medical)

    def test_no_match(self) -> None:
        """Test that unknown or blank aid types give None."""
        self.assertIsNone(find_aid_article('Housing'))
        self.assertIsNone(find_aid_article(''))


class OrderConsolidationTests(TestCase):
    """Tests for consolidation across beneficiary types."""

    def setUp(self) -> None:
        """Set up test data."""
        self.district = District.objects.create(district_name='Salem', allotted_budget=Decimal('250000.00'))
        self.machine = Article.objects.create(article_name='Sewing Machine', cost_per_unit=Decimal('7500.00'))
        self.cupboard = Article.objects.create(
            article_name='Steel Cupboard', cost_per_unit=Decimal('9000.00'), is_active=False
        )
        DistrictBeneficiaryEntry.objects.create(
            application_number='D001', district=self.district, article=self.machine,
            quantity=4, article_cost_per_unit=Decimal('7500.00')
        )
        PublicBeneficiaryEntry.objects.create(
            application_number='P001', name='Kumar', aadhar_number='123456789012',
            article=self.machine, quantity=1, article_cost_per_unit=Decimal('7500.00')
        )
        InstitutionBeneficiaryEntry.objects.create(
            application_number='I001', institution_name='Govt School', article=self.cupboard,
            quantity=2, article_cost_per_unit=Decimal('9000.00')
        )

    def test_consolidation_totals(self) -> None:
        """Test that quantities and values are summed per article."""
        result = consolidate_orders()

        self.assertEqual(result.total_articles, 2)
        self.assertEqual(result.total_value, Decimal('55500.00'))
        machine = result.articles[0]
        self.assertEqual(machine.article_name, 'Sewing Machine')
        self.assertEqual(machine.total_quantity, 5)
        self.assertEqual(machine.breakdown, {'district': 4, 'public': 1, 'institutions': 0})

    def test_tracking_counts_orders(self) -> None:
        """Test that cancelled orders are ignored and pending never goes negative."""
        create_order_entry(self.machine, 3, '7500', '22500')
        create_order_entry(self.machine, 1, '7500', '7500', status=OrderStatus.RECEIVED)
        create_order_entry(self.machine, 10, '7500', '75000', status=OrderStatus.CANCELLED)
        create_order_entry(self.cupboard, 5, '9000', '45000')

        result = consolidate_orders(with_tracking=True)
        machine, cupboard = result.articles

        self.assertEqual(machine.quantity_ordered, 4)
        self.assertEqual(machine.quantity_received, 1)
        self.assertEqual(machine.quantity_pending, 1)
        self.assertEqual(cupboard.quantity_pending, 0)

    def test_order_summary(self) -> None:
        """Test the per-article order summary."""
        create_order_entry(self.machine, 2, '7500', '15000', status=OrderStatus.RECEIVED)

        summary = order_summary_by_article([self.machine.pk])[self.machine.pk]

        self.assertEqual(summary.total_quantity_ordered, 2)
        self.assertEqual(summary.total_quantity_received, 2)
        self.assertEqual(summary.total_value_ordered, Decimal('15000.00'))
        self.assertEqual(order_summary_by_article([]), {})

    def test_article_choices_include_split_rows(self) -> None:
        """Test that consolidated names missing from the catalog become split rows."""
        choices = fund_request_article_choices()

        self.assertEqual([choice.article_name for choice in choices], ['Sewing Machine', 'Steel Cupboard'])
        self.assertFalse(choices[0].is_split)
        self.assertTrue(choices[1].is_split)
        self.assertEqual(choices[1].id, split_article_id('Steel Cupboard'))
        self.assertEqual(choices[1].cost_per_unit, Decimal('0.00'))

    def test_article_choices_degrade_to_catalog(self) -> None:
        """Test that a consolidation failure still returns the catalog."""
        with mock.patch.object(services, 'consolidate_orders', side_effect=StoreUnavailableException()):
            choices = fund_request_article_choices()

        self.assertEqual([choice.article_name for choice in choices], ['Sewing Machine'])


class SeedMastersCommandTests(TestCase):
    """Tests for the seed_masters command."""

    def test_seed_is_idempotent(self) -> None:
        """Test that running twice creates nothing new."""
        call_command('seed_masters', stdout=StringIO())
        districts = District.objects.count()
        articles = Article.objects.count()

        call_command('seed_masters', stdout=StringIO())

        self.assertGreater(districts, 0)
        self.assertEqual(District.objects.count(), districts)
        self.assertEqual(Article.objects.count(), articles)
