"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for fund requests - validation, numbering,
             saves, split articles, beneficiary usage and drafts.
-------------------------------------------------------------------------
"""
from datetime import date, timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone

from apps.beneficiaries.models import BeneficiaryType
from apps.beneficiaries.services import save_district_entries, save_public_entry
from apps.core.exceptions import (
    BeneficiaryInUseException,
    FundRequestNotFoundException,
    UnauthorizedRoleException,
    ValidationFailedException,
)
from apps.core.models import ActionType, AuditLog, District, EntityType
from apps.fund_requests import services
from apps.fund_requests.drafts import (
    DraftSaveScheduler,
    DraftSnapshot,
    FundRequestDraftStore,
    draft_key,
    serialize_form_state,
)
from apps.fund_requests.models import FundRequest, FundRequestStatus, FundRequestType
from apps.fund_requests.services import (
    FundRequestAssembler,
    SplitArticleResolver,
    fetch_existing_aid_types,
    fetch_fund_request,
    fetch_fund_requests,
    generate_fund_request_number,
    generate_purchase_order_number,
    previous_fund_requests_total,
    validate_aid_request,
    validate_article_request,
)
from apps.fund_requests.services_usage import BeneficiaryUsageTracker, recipient_identity, used_beneficiaries
from apps.inventory.models import Article, ItemType, OrderEntry
from apps.inventory.services import split_article_id
from apps.users.models import UserRole


User = get_user_model()

SUPPLIER = {
    'gst_number': '33AABCU9603R1ZM',
    'supplier_name': 'Sri Murugan Traders',
    'supplier_address': '12 Anna Salai',
    'supplier_city': 'Chennai',
    'supplier_state': 'Tamil Nadu',
    'supplier_pincode': '600002',
}


class FundRequestTestMixin:
    """Shared fixtures: users, a district, articles and beneficiary entries."""

    def create_fixtures(self) -> None:
        cache.clear()
        self.admin = User.objects.create_user(
            email='admin@wdts.test', password='testpass123', first_name='Admin', role=UserRole.ADMIN
        )
        self.editor = User.objects.create_user(
            email='editor@wdts.test', password='testpass123', first_name='Editor', role=UserRole.EDITOR
        )
        self.district = District.objects.create(district_name='Madurai', allotted_budget=Decimal('100000.00'))
        self.machine = Article.objects.create(
            article_name='Sewing Machine', cost_per_unit=Decimal('8000.00'), item_type=ItemType.AID
        )
        self.laptop = Article.objects.create(
            article_name='Laptop', cost_per_unit=Decimal('30000.00'), item_type=ItemType.ARTICLE
        )
        save_district_entries(self.district, [
            {'article_id': self.machine.pk, 'quantity': 3, 'cost_per_unit': '8000'},
        ])
        save_public_entry({
            'name': 'Lakshmi', 'aadhar_number': '1234 5678 9012', 'article_id': self.machine.pk,
            'quantity': 1, 'cost_per_unit': '8000',
        })
        save_public_entry({
            'name': 'Ravi', 'aadhar_number': '2222 3333 4444', 'article_id': self.machine.pk,
            'quantity': 1, 'cost_per_unit': '8000',
        })

    def recipient(self, **values):
        row = {
            'beneficiary_type': BeneficiaryType.PUBLIC,
            'beneficiary': 'P001 - Lakshmi - ₹ 8,000',
            'recipient_name': 'Lakshmi',
            'name_of_beneficiary': 'Lakshmi',
            'name_of_institution': 'Self',
            'fund_requested': '8000',
            'aadhar_number': '1234 5678 9012',
            'details': 'Sewing machine for tailoring',
        }
        row.update(values)
        return row


class ValidationTests(SimpleTestCase):
    """Tests for the fund request validators."""

    def test_aid_request_requires_recipients(self) -> None:
        """Test that an empty Aid request is rejected."""
        self.assertEqual(validate_aid_request({}, []), {'recipients': 'At least one recipient is required'})

    def test_aid_recipient_fields(self) -> None:
        """Test that every recipient problem is keyed by row."""
        errors = validate_aid_request({}, [{
            'beneficiary_type': '', 'fund_requested': '0', 'aadhar_number': '1234',
        }])

        self.assertEqual(set(errors), {
            'beneficiary_type_0', 'name_of_beneficiary_0', 'fund_requested_0',
            'name_of_institution_0', 'aadhar_number_0', 'details_0',
        })
        self.assertEqual(errors['aadhar_number_0'], 'Aadhar number must be exactly 12 digits')

    def test_recipient_name_satisfies_name_rule(self) -> None:
        """Test that recipient_name stands in for name_of_beneficiary."""
        errors = validate_aid_request({}, [{
            'beneficiary_type': 'Public', 'recipient_name': 'Ravi', 'fund_requested': '500',
            'name_of_institution': 'Self', 'aadhar_number': '2222-3333-4444', 'notes': 'Medical',
        }])

        self.assertEqual(errors, {})

    def test_article_request_fields(self) -> None:
        """Test supplier and line rules for Article requests."""
        errors = validate_article_request({'gst_number': ' '}, [
            {'article_id': '', 'quantity': 1, 'cost_per_unit': '0'},
        ])

        self.assertIn('gst_number', errors)
        self.assertEqual(errors['supplier_pincode'], 'Supplier pincode is required')
        self.assertEqual(errors['price_0'], 'Price including GST must be greater than 0')
        self.assertIn('article_0', errors)
        self.assertEqual(validate_article_request(SUPPLIER, [])['articles'], 'At least one article is required')

    def test_oversized_fund_requested_is_a_field_error(self) -> None:
        """Test that an amount beyond the stored limit is reported, not raised."""
        errors = validate_aid_request({}, [{
            'beneficiary_type': 'Public', 'recipient_name': 'Ravi', 'fund_requested': '1' + '0' * 30,
            'name_of_institution': 'Self', 'aadhar_number': '222233334444', 'notes': 'Medical',
        }])

        self.assertEqual(errors, {'fund_requested_0': 'Fund requested is too large'})

    def test_total_beyond_stored_limit_is_rejected(self) -> None:
        """Test that recipients within the limit can still exceed it together."""
        recipient = {
            'beneficiary_type': 'Public', 'recipient_name': 'Ravi', 'fund_requested': '9000000000000',
            'name_of_institution': 'Self', 'aadhar_number': '222233334444', 'notes': 'Medical',
        }

        errors = validate_aid_request({}, [recipient, dict(recipient)])

        self.assertEqual(errors, {'total_amount': 'Total fund requested is too large'})

    def test_infinite_quantity_is_a_field_error(self) -> None:
        """Test that an infinite quantity is reported as an invalid quantity."""
        errors = validate_article_request(SUPPLIER, [
            {'article_id': 1, 'quantity': 'inf', 'cost_per_unit': '100'},
        ])

        self.assertEqual(errors, {'quantity_0': 'Quantity must be at least 1'})

    def test_oversized_article_line_is_a_field_error(self) -> None:
        """Test that price, quantity and line total limits are checked per line."""
        errors = validate_article_request(SUPPLIER, [
            {'article_id': 1, 'quantity': 1, 'cost_per_unit': '10000000000000'},
            {'article_id': 1, 'quantity': '3000000000', 'cost_per_unit': '10'},
            {'article_id': 1, 'quantity': 1000000, 'cost_per_unit': '9999999999999'},
        ])

        self.assertEqual(errors, {
            'price_0': 'Price including GST is too large',
            'quantity_1': 'Quantity is too large',
            'price_2': 'Line total is too large',
            'total_amount': 'Total amount is too large',
        })


class NumberingTests(TestCase):
    """Tests for fund request and purchase order numbers."""

    def test_first_fund_request_number(self) -> None:
        """Test that numbering starts at FR-001."""
        self.assertEqual(generate_fund_request_number(), 'FR-001')

    def test_legacy_numbers_count(self) -> None:
        """Test that FR-YYYY-NNNN numbers advance the sequence."""
        FundRequest.objects.create(fund_request_type=FundRequestType.AID, fund_request_number='FR-2025-0007')
        FundRequest.objects.create(fund_request_type=FundRequestType.AID, fund_request_number='FR-003')

        self.assertEqual(generate_fund_request_number(), 'FR-008')

    @override_settings(PURCHASE_ORDER_PREFIX='MASM/MNP')
    def test_purchase_order_number_per_year(self) -> None:
        """Test that only the current year's numbers count."""
        FundRequest.objects.create(
            fund_request_type=FundRequestType.ARTICLE, fund_request_number='FR-001',
            purchase_order_number='MASM/MNP00526'
        )
        FundRequest.objects.create(
            fund_request_type=FundRequestType.ARTICLE, fund_request_number='FR-002',
            purchase_order_number='MASM/MNP00925'
        )

        self.assertEqual(generate_purchase_order_number(date(2026, 10, 19)), 'MASM/MNP00626')
        self.assertEqual(generate_purchase_order_number(date(2027, 1, 2)), 'MASM/MNP00127')


class AidFundRequestTests(FundRequestTestMixin, TestCase):
    """Tests for saving Aid fund requests."""

    def setUp(self) -> None:
        """Set up test data."""
        self.create_fixtures()

    def test_create_aid_request(self) -> None:
        """Test that an Aid request is numbered, totalled and audited."""
        with FundRequestAssembler(self.editor) as assembler:
            fund_request = assembler.save_aid({'aid_type': 'Sewing Machine'}, [
                self.recipient(),
                self.recipient(
                    beneficiary_type=BeneficiaryType.DISTRICT,
                    beneficiary='D001 - Madurai - ₹ 24,000',
                    recipient_name='District Collector',
                    fund_requested='24000',
                    aadhar_number='999988887777',
                ),
            ])

        self.assertEqual(fund_request.fund_request_number, 'FR-001')
        self.assertEqual(fund_request.status, FundRequestStatus.DRAFT)
        self.assertEqual(fund_request.total_amount, Decimal('32000.00'))
        public, district = fund_request.recipients.order_by('id')
        self.assertEqual(public.application_number, 'P001')
        self.assertEqual(public.aadhar_number, '123456789012')
        self.assertEqual(district.district_name, 'Madurai')
        self.assertTrue(AuditLog.objects.filter(
            action_type=ActionType.CREATE, entity_type=EntityType.FUND_REQUEST, entity_id=str(fund_request.pk)
        ).exists())

    def test_aid_order_entries(self) -> None:
        """Test that one order entry is created per recipient."""
        fund_request = FundRequestAssembler(self.editor).save_aid({'aid_type': 'sewing machine'}, [self.recipient()])

        order = OrderEntry.objects.get(fund_request=fund_request)
        self.assertEqual(order.article, self.machine)
        self.assertEqual(order.quantity_ordered, 1)
        self.assertEqual(order.total_amount, Decimal('8000.00'))
        self.assertEqual(order.notes, 'Created from Aid Fund Request: FR-001 - Lakshmi')

    def test_order_entry_failure_does_not_fail_save(self) -> None:
        """Test that order entries are best-effort."""
        with mock.patch.object(services, 'create_order_entry', side_effect=DatabaseError('locked')):
            fund_request = FundRequestAssembler(self.editor).save_aid(
                {'aid_type': 'Sewing Machine'}, [self.recipient()]
            )

        self.assertTrue(FundRequest.objects.filter(pk=fund_request.pk).exists())
        self.assertFalse(OrderEntry.objects.exists())

    def test_same_beneficiary_twice_in_one_request(self) -> None:
        """Test that a beneficiary cannot be selected in two rows."""
        with self.assertRaises(ValidationFailedException) as ctx:
            FundRequestAssembler(self.editor).save_aid({}, [self.recipient(), self.recipient()])

        self.assertIn('beneficiary_1', ctx.exception.errors)
        self.assertFalse(FundRequest.objects.exists())

    def test_beneficiary_used_by_another_request(self) -> None:
        """Test that a beneficiary paid by one request is rejected by another."""
        FundRequestAssembler(self.editor).save_aid({}, [self.recipient()])

        with self.assertRaises(BeneficiaryInUseException) as ctx:
            FundRequestAssembler(self.editor).save_aid({}, [self.recipient()])

        self.assertEqual(ctx.exception.details['beneficiaries'], ['P001'])
        self.assertEqual(FundRequest.objects.count(), 1)

    def test_editing_keeps_own_beneficiaries_and_status(self) -> None:
        """Test that an update excludes its own recipients and keeps the status."""
        fund_request = FundRequestAssembler(self.editor).save_aid({}, [self.recipient()])
        FundRequest.objects.filter(pk=fund_request.pk).update(status=FundRequestStatus.APPROVED)

        updated = FundRequestAssembler(self.editor, fund_request.pk).save_aid(
            {'notes': 'Revised'}, [self.recipient(fund_requested='9000')]
        )

        self.assertEqual(updated.pk, fund_request.pk)
        self.assertEqual(updated.status, FundRequestStatus.APPROVED)
        self.assertEqual(updated.total_amount, Decimal('9000.00'))
        self.assertEqual(updated.recipients.count(), 1)
        self.assertTrue(AuditLog.objects.filter(
            action_type=ActionType.UPDATE, entity_type=EntityType.FUND_REQUEST
        ).exists())

    def test_manual_public_recipient_reuses_aadhar_number(self) -> None:
        """Test that a typed-in public recipient picks up the issued number."""
        fund_request = FundRequestAssembler(self.editor).save_aid({}, [
            self.recipient(beneficiary='', aadhar_number='2222-3333-4444', recipient_name='Ravi'),
        ])

        recipient = fund_request.recipients.get()
        self.assertIsNone(recipient.beneficiary)
        self.assertEqual(recipient.application_number, 'P002')

    def test_unknown_fund_request(self) -> None:
        """Test that editing a missing fund request raises."""
        with self.assertRaises(FundRequestNotFoundException):
            FundRequestAssembler(self.editor).save_aid({}, [self.recipient()], fund_request_id=9999)

    def test_save_clears_new_form_draft(self) -> None:
        """Test that a successful save discards the draft of the new form."""
        store = FundRequestDraftStore(FundRequestType.AID)
        store.save({'form_data': {'aid_type': 'Sewing Machine'}})

        FundRequestAssembler(self.editor).save_aid({}, [self.recipient()])

        self.assertIsNone(store.restore())

    def test_delete(self) -> None:
        """Test that deletion removes lines and orders and is audited."""
        fund_request = FundRequestAssembler(self.editor).save_aid(
            {'aid_type': 'Sewing Machine'}, [self.recipient()]
        )

        with self.assertRaises(UnauthorizedRoleException):
            FundRequestAssembler(self.editor).delete(fund_request.pk)

        deleted = FundRequestAssembler(self.admin).delete(fund_request.pk)

        self.assertEqual(deleted['fund_request_number'], 'FR-001')
        self.assertEqual(deleted['recipient_count'], 1)
        self.assertFalse(FundRequest.objects.exists())
        self.assertFalse(OrderEntry.objects.exists())
        self.assertTrue(AuditLog.objects.filter(
            action_type=ActionType.DELETE, entity_type=EntityType.FUND_REQUEST
        ).exists())
        self.assertEqual(used_beneficiaries(), set())

    def test_reads(self) -> None:
        """Test list, detail and summary reads."""
        first = FundRequestAssembler(self.editor).save_aid({'aid_type': 'Sewing Machine'}, [self.recipient()])
        second = FundRequestAssembler(self.editor).save_aid({'aid_type': 'Medical'}, [
            self.recipient(beneficiary='P002 - Ravi - ₹ 8,000', aadhar_number='222233334444', fund_requested='500'),
        ])
        FundRequest.objects.filter(pk=first.pk).update(created_at=timezone.now() - timedelta(days=1))
        second.refresh_from_db()

        self.assertEqual([fr.pk for fr in fetch_fund_requests(FundRequestType.AID)], [second.pk, first.pk])
        self.assertEqual(fetch_fund_request(first.pk).recipients.count(), 1)
        self.assertEqual(fetch_existing_aid_types(), ['Medical', 'Sewing Machine'])
        self.assertEqual(previous_fund_requests_total(second), Decimal('8000.00'))
        with self.assertRaises(FundRequestNotFoundException):
            fetch_fund_request(9999)


class ArticleFundRequestTests(FundRequestTestMixin, TestCase):
    """Tests for saving Article fund requests."""

    def setUp(self) -> None:
        """Set up test data."""
        self.create_fixtures()

    def test_create_article_request(self) -> None:
        """Test line values, running totals and the purchase order number."""
        fund_request = FundRequestAssembler(self.editor).save_article(SUPPLIER, [
            {'article_id': str(self.laptop.pk), 'quantity': 2, 'cost_per_unit': '30000'},
            {'article_id': split_article_id('Steel Cupboard'), 'quantity': 3, 'cost_per_unit': '9000'},
        ])

        lines = list(fund_request.articles.order_by('sl_no'))
        self.assertEqual(fund_request.total_amount, Decimal('87000.00'))
        self.assertEqual([line.sl_no for line in lines], [1, 2])
        self.assertEqual([line.value for line in lines], [Decimal('60000.00'), Decimal('27000.00')])
        self.assertEqual([line.cumulative for line in lines], [Decimal('60000.00'), Decimal('87000.00')])
        self.assertEqual(lines[0].beneficiary, 'Dist & Public')
        self.assertEqual(lines[0].gst_no, SUPPLIER['gst_number'])
        self.assertTrue(fund_request.purchase_order_number.endswith(f"{timezone.localdate().year % 100:02d}"))
        self.assertEqual(OrderEntry.objects.filter(fund_request=fund_request).count(), 2)
        self.assertEqual(
            OrderEntry.objects.filter(fund_request=fund_request).first().notes,
            'Created from Fund Request: FR-001'
        )

    def test_split_article_materialised_once(self) -> None:
        """Test that a split name becomes one inactive combo article."""
        assembler = FundRequestAssembler(self.editor)
        assembler.save_article(SUPPLIER, [
            {'article_id': split_article_id('Steel Cupboard'), 'quantity': 1, 'cost_per_unit': '9000'},
            {'article_id': split_article_id('steel  cupboard'), 'quantity': 1, 'cost_per_unit': '9000'},
        ])
        FundRequestAssembler(self.editor).save_article(SUPPLIER, [
            {'article_id': split_article_id('Steel Cupboard'), 'quantity': 1, 'cost_per_unit': '9500'},
        ])

        cupboard = Article.objects.get(article_name='Steel Cupboard')
        self.assertFalse(cupboard.is_active)
        self.assertTrue(cupboard.combo)
        self.assertEqual(cupboard.item_type, ItemType.ARTICLE)
        self.assertIn('steel cupboard', assembler.split_resolver)

    def test_split_name_matching_catalog_uses_catalog(self) -> None:
        """Test that a split name equal to an active article resolves to it."""
        resolver = SplitArticleResolver()

        self.assertEqual(resolver.resolve(split_article_id('LAPTOP')), self.laptop)
        self.assertEqual(Article.objects.count(), 2)

    def test_unknown_catalog_article_rolls_back(self) -> None:
        """Test that a missing catalog id saves nothing."""
        assembler = FundRequestAssembler(self.editor)

        with self.assertRaises(ValidationFailedException):
            assembler.save_article(SUPPLIER, [
                {'article_id': split_article_id('Steel Cupboard'), 'quantity': 1, 'cost_per_unit': '9000'},
                {'article_id': '9999', 'quantity': 1, 'cost_per_unit': '10'},
            ])

        self.assertFalse(FundRequest.objects.exists())
        self.assertFalse(Article.objects.filter(article_name='Steel Cupboard').exists())
        self.assertNotIn('Steel Cupboard', assembler.split_resolver)

    def test_update_replaces_lines_and_keeps_po_number(self) -> None:
        """Test that an update rewrites lines and order entries."""
        fund_request = FundRequestAssembler(self.editor).save_article(SUPPLIER, [
            {'article_id': self.laptop.pk, 'quantity': 1, 'cost_per_unit': '30000'},
        ])
        po_number = fund_request.purchase_order_number

        updated = FundRequestAssembler(self.editor, fund_request.pk).save_article(SUPPLIER, [
            {'article_id': self.laptop.pk, 'quantity': 2, 'cost_per_unit': '28000'},
            {'article_id': self.machine.pk, 'quantity': 1, 'cost_per_unit': '8000'},
        ])

        self.assertEqual(updated.purchase_order_number, po_number)
        self.assertEqual(updated.articles.count(), 2)
        self.assertEqual(updated.total_amount, Decimal('64000.00'))
        self.assertEqual(OrderEntry.objects.filter(fund_request=updated).count(), 2)

    def test_type_cannot_change(self) -> None:
        """Test that an Aid request cannot be saved as an Article request."""
        fund_request = FundRequestAssembler(self.editor).save_aid({}, [self.recipient()])

        with self.assertRaises(ValidationFailedException) as ctx:
            FundRequestAssembler(self.editor).save_article(SUPPLIER, [
                {'article_id': self.laptop.pk, 'quantity': 1, 'cost_per_unit': '30000'},
            ], fund_request_id=fund_request.pk)

        self.assertIn('fund_request_type', ctx.exception.errors)


class BeneficiaryUsageTests(FundRequestTestMixin, TestCase):
    """Tests for recipient dropdown exclusion."""

    def setUp(self) -> None:
        """Set up test data."""
        self.create_fixtures()

    def test_used_beneficiaries_are_hidden_elsewhere(self) -> None:
        """Test that a paid beneficiary is offered only to its own request."""
        fund_request = FundRequestAssembler(self.editor).save_aid({}, [self.recipient()])

        other = FundRequestAssembler(self.editor)
        other.open()
        own = FundRequestAssembler(self.editor, fund_request.pk)
        own.open()

        other_options = [option.application_number for option in other.usage.available_options(0, 'Public')]
        own_options = [option.application_number for option in own.usage.available_options(0, 'Public')]
        self.assertEqual(other_options, ['P002'])
        self.assertEqual(own_options, ['P002', 'P001'])

    def test_session_selection_excludes_other_rows(self) -> None:
        """Test that a value chosen in one row disappears from the others."""
        with BeneficiaryUsageTracker() as tracker:
            tracker.refresh_used()
            tracker.select(0, 'Public', 'P002 - Ravi - ₹ 8,000')

            row_0 = [option.application_number for option in tracker.available_options(0, 'Public')]
            row_1 = [option.application_number for option in tracker.available_options(1, 'Public')]

            self.assertEqual(row_0, ['P002', 'P001'])
            self.assertEqual(row_1, ['P001'])

            tracker.deselect(0)
            self.assertEqual(len(tracker.available_options(1, 'Public')), 2)

    def test_row_value_missing_from_candidates_is_kept(self) -> None:
        """Test that a row's stored value stays selectable when filtered out."""
        tracker = BeneficiaryUsageTracker()
        tracker.select(0, 'Public', 'P001 - Lakshmi - ₹ 8,000')

        options = tracker.available_options(0, 'Public', aid_type='education')

        self.assertEqual(len(options), 1)
        self.assertEqual(options[0].display_text, 'P001 - Lakshmi - ₹ 8,000')
        self.assertEqual(options[0].identity, 'P001')

    def test_unfiltered_candidates_are_cached(self) -> None:
        """Test that only unfiltered lists are cached."""
        source = mock.Mock(return_value=[])
        tracker = BeneficiaryUsageTracker(candidate_source=source)

        tracker.candidates('Public')
        tracker.candidates('Public')
        tracker.candidates('Public', aid_type='Medical')
        tracker.candidates('Public', aid_type='Medical')

        self.assertEqual(source.call_count, 3)
        tracker.close()
        tracker.candidates('Public')
        self.assertEqual(source.call_count, 4)

    def district_recipient(self, option):
        return self.recipient(
            beneficiary_type=BeneficiaryType.DISTRICT,
            beneficiary=option.display_text,
            recipient_name='District Collector',
            fund_requested=str(option.total_amount),
            aadhar_number='999988887777',
        )

    def test_district_paid_unfiltered_is_hidden_under_district_filter(self) -> None:
        """Test that a district paid from the full list is not offered again when filtered."""
        option = BeneficiaryUsageTracker().available_options(0, BeneficiaryType.DISTRICT)[0]
        FundRequestAssembler(self.editor).save_aid({}, [self.district_recipient(option)])

        tracker = BeneficiaryUsageTracker()
        tracker.refresh_used()
        self.assertEqual(tracker.available_options(0, BeneficiaryType.DISTRICT, district_id=self.district.pk), [])

        filtered = BeneficiaryUsageTracker().candidates(BeneficiaryType.DISTRICT, district_id=self.district.pk)[0]
        with self.assertRaises(BeneficiaryInUseException):
            FundRequestAssembler(self.editor).save_aid({}, [self.district_recipient(filtered)])
        self.assertEqual(FundRequest.objects.count(), 1)

    def test_district_paid_filtered_is_hidden_from_full_list(self) -> None:
        """Test that a district paid under a district filter leaves the full list."""
        filtered = BeneficiaryUsageTracker().candidates(BeneficiaryType.DISTRICT, district_id=self.district.pk)[0]
        FundRequestAssembler(self.editor).save_aid({}, [self.district_recipient(filtered)])

        tracker = BeneficiaryUsageTracker()
        tracker.refresh_used()
        self.assertEqual(tracker.available_options(0, BeneficiaryType.DISTRICT), [])

        option = BeneficiaryUsageTracker().candidates(BeneficiaryType.DISTRICT)[0]
        with self.assertRaises(BeneficiaryInUseException):
            FundRequestAssembler(self.editor).save_aid({}, [self.district_recipient(option)])

    def test_recipient_identity(self) -> None:
        """Test that the structured number wins for non-district recipients."""
        self.assertEqual(recipient_identity('Public', 'P001 - Lakshmi - ₹ 8,000', 'P001'), 'P001')
        self.assertEqual(recipient_identity('Public', 'P001-A - Lakshmi', 'P001-A'), 'P001-A')
        self.assertEqual(
            recipient_identity('District', 'D001 - Madurai - ₹ 24,000', 'D001'), 'D001 - Madurai - ₹ 24,000'
        )


class DraftTests(SimpleTestCase):
    """Tests for fund request drafts."""

    def setUp(self) -> None:
        """Start each test with an empty cache."""
        cache.clear()

    def test_draft_keys(self) -> None:
        """Test that new forms are keyed by type and existing ones by id."""
        self.assertEqual(draft_key('Aid'), 'fund-request-draft-new-aid')
        self.assertEqual(draft_key('Article', 12), 'fund-request-draft-12')

    def test_serialize_is_pure(self) -> None:
        """Test that serialising the same state twice is identical."""
        recipients = [{'fund_requested': Decimal('500.00')}]

        first = serialize_form_state('Aid', {'aid_type': 'Medical'}, recipients)
        second = serialize_form_state('Aid', {'aid_type': 'Medical'}, recipients)

        self.assertEqual(first, second)
        self.assertEqual(first['recipients'][0]['fund_requested'], '500.00')

    def test_save_and_restore(self) -> None:
        """Test a draft round trip for a new form."""
        store = FundRequestDraftStore('Article')
        state = serialize_form_state('Article', {}, articles=[{'article_id': '3'}], supplier=SUPPLIER)

        self.assertTrue(store.save(state))
        snapshot = store.restore()

        self.assertIsInstance(snapshot, DraftSnapshot)
        self.assertEqual(snapshot.state, state)
        self.assertEqual(snapshot.age_text, 'just now')

    def test_existing_fund_requests_have_no_drafts(self) -> None:
        """Test that drafts are disabled once a fund request has an id."""
        store = FundRequestDraftStore('Aid', 5)

        self.assertFalse(store.save({'form_data': {}}))
        self.assertIsNone(store.restore())

    def test_expired_draft_is_discarded(self) -> None:
        """Test that drafts past the maximum age are dropped."""
        store = FundRequestDraftStore('Aid', max_age=timedelta(days=7))
        cache.set(store.key, {
            'saved_at': (timezone.now() - timedelta(days=8)).isoformat(),
            'state': {'form_data': {}},
        })

        self.assertIsNone(store.restore())
        self.assertIsNone(cache.get(store.key))

    def test_age_text(self) -> None:
        """Test the human readable draft age."""
        now = timezone.now()

        self.assertEqual(DraftSnapshot({}, now, timedelta(minutes=1)).age_text, '1 minute ago')
        self.assertEqual(DraftSnapshot({}, now, timedelta(hours=3)).age_text, '3 hours ago')
        self.assertEqual(DraftSnapshot({}, now, timedelta(days=2)).age_text, '2 days ago')

    def test_scheduler_saves_latest_state(self) -> None:
        """Test that only the most recent scheduled state is saved."""
        store = FundRequestDraftStore('Aid')
        scheduler = DraftSaveScheduler(store, delay=60)

        scheduler.schedule({'form_data': {'aid_type': 'Med'}})
        scheduler.schedule({'form_data': {'aid_type': 'Medical'}})
        self.assertIsNone(store.restore())

        self.assertTrue(scheduler.flush())
        self.assertFalse(scheduler.has_pending)
        self.assertEqual(store.restore().state, {'form_data': {'aid_type': 'Medical'}})

    def test_scheduler_cancel_and_close(self) -> None:
        """Test that cancelled or closed schedulers save nothing."""
        store = FundRequestDraftStore('Aid')
        scheduler = DraftSaveScheduler(store, delay=60)

        scheduler.schedule({'form_data': {}})
        scheduler.cancel()
        self.assertFalse(scheduler.flush())

        scheduler.close()
        self.assertFalse(scheduler.schedule({'form_data': {}}))
        self.assertIsNone(store.restore())

    def test_scheduler_ignores_existing_fund_requests(self) -> None:
        """Test that nothing is scheduled for a saved fund request."""
        scheduler = DraftSaveScheduler(FundRequestDraftStore('Aid', 5), delay=60)

        self.assertFalse(scheduler.schedule({'form_data': {}}))
