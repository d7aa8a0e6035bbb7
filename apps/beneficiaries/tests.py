"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for beneficiary identity, application numbers,
             entry saves and dropdown candidates.
-------------------------------------------------------------------------
"""
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.test import SimpleTestCase, TestCase

from apps.beneficiaries.identity import (
    beneficiary_identity,
    extract_application_number,
    format_amount,
    format_beneficiary_types,
    format_display_text,
    is_valid_aadhar,
    normalize_article_name,
    normalize_identity,
)
from apps.beneficiaries.models import (
    BeneficiaryType,
    DistrictBeneficiaryEntry,
    InstitutionBeneficiaryEntry,
    InstitutionType,
    PublicBeneficiaryEntry,
)
from apps.beneficiaries.services import (
    ON_CONFLICT_UPDATE,
    delete_entries_by_application_number,
    save_district_entries,
    save_institution_entries,
    save_public_entry,
    validate_public_entry,
)
from apps.beneficiaries.services_aggregation import (
    custom_costs_for_district,
    fetch_district_records,
    group_entries_by_application_number,
)
from apps.beneficiaries.services_allocation import (
    AllocationSource,
    ApplicationNumberAllocator,
    beneficiary_type_from_application_number,
    find_public_by_aadhar,
    generate_application_number,
    is_valid_application_number,
    replace_entries,
)
from apps.beneficiaries.services_dropdown import candidates_for_type
from apps.core.exceptions import (
    ApplicationNumberException,
    DuplicateBeneficiaryException,
    EntryReplaceException,
    UnauthorizedRoleException,
    ValidationFailedException,
)
from apps.core.models import ActionType, AuditLog, District, EntityType
from apps.inventory.models import Article, ItemType
from apps.users.models import UserRole


User = get_user_model()


class IdentityTests(SimpleTestCase):
    """Tests for identity normalisation and display strings."""

    def test_normalize_identity_strips_non_digits(self) -> None:
        """Test that spaced and hyphenated Aadhaar numbers normalise alike."""
        self.assertEqual(normalize_identity('1234 5678 9012'), '123456789012')
        self.assertEqual(normalize_identity('1234-5678-9012'), '123456789012')
        self.assertEqual(normalize_identity(None), '')

    def test_is_valid_aadhar(self) -> None:
        """Test that only 12 digits are valid."""
        self.assertTrue(is_valid_aadhar('1234 5678 9012'))
        self.assertFalse(is_valid_aadhar('12345678901'))
        self.assertFalse(is_valid_aadhar(''))

    def test_extract_application_number(self) -> None:
        """Test that the text before the first hyphen is the number."""
        self.assertEqual(extract_application_number('P005 - Ravi Kumar - ₹ 1,000'), 'P005')
        self.assertEqual(extract_application_number(''), '')

    def test_district_identity_is_whole_display_string(self) -> None:
        """Test that district identities are the full display string."""
        text = 'D001 - Madurai - ₹ 8,000'

        self.assertEqual(beneficiary_identity(BeneficiaryType.DISTRICT, text), text)
        self.assertEqual(beneficiary_identity(BeneficiaryType.PUBLIC, 'P001 - Ravi - ₹ 500'), 'P001')
        self.assertIsNone(beneficiary_identity(BeneficiaryType.PUBLIC, '  '))

    def test_format_amount(self) -> None:
        """Test thousands separators and optional decimals."""
        self.assertEqual(format_amount(Decimal('100000.00')), '100,000')
        self.assertEqual(format_amount(Decimal('1234.50')), '1,234.5')
        self.assertEqual(format_display_text('I002', 'Govt School', 2500), 'I002 - Govt School - ₹ 2,500')

    def test_normalize_article_name(self) -> None:
        """Test that case and whitespace are ignored."""
        self.assertEqual(normalize_article_name(' Sewing  Machine'), normalize_article_name('sewing machine'))

    def test_format_beneficiary_types(self) -> None:
        """Test the type summary used by exports."""
        recipients = [
            {'beneficiary_type': 'District'},
            {'beneficiary_type': 'Public'},
            {'beneficiary_type': 'District'},
            {'beneficiary_type': 'Institutions'},
        ]

        self.assertEqual(format_beneficiary_types(recipients), 'District, Public & Institutions')
        self.assertEqual(format_beneficiary_types(recipients[:2]), 'District & Public')


class BeneficiaryTestMixin:
    """Shared fixtures for store-backed beneficiary tests."""

    def create_fixtures(self) -> None:
        self.admin = User.objects.create_user(
            email='admin@wdts.test', password='testpass123', first_name='Admin', role=UserRole.ADMIN
        )
        self.viewer = User.objects.create_user(
            email='viewer@wdts.test', password='testpass123', first_name='Viewer', role=UserRole.VIEWER
        )
        self.district = District.objects.create(
            district_name='Madurai',
            allotted_budget=Decimal('100000.00')
        )
        self.machine = Article.objects.create(
            article_name='Sewing Machine',
            cost_per_unit=Decimal('8000.00'),
            item_type=ItemType.AID,
            category='Livelihood'
        )
        self.laptop = Article.objects.create(
            article_name='Laptop',
            cost_per_unit=Decimal('30000.00'),
            item_type=ItemType.ARTICLE
        )


class ApplicationNumberTests(BeneficiaryTestMixin, TestCase):
    """Tests for application number issuance."""

    def setUp(self) -> None:
        """Set up test data."""
        self.create_fixtures()

    def test_first_number_per_type(self) -> None:
        """Test that each prefix starts at 001."""
        self.assertEqual(generate_application_number(BeneficiaryType.DISTRICT), 'D001')
        self.assertEqual(generate_application_number(BeneficiaryType.PUBLIC), 'P001')

    def test_legacy_spaced_numbers_count(self) -> None:
        """Test that 'D 007' style numbers advance the sequence."""
        DistrictBeneficiaryEntry.objects.create(
            application_number='D 007', district=self.district, article=self.machine,
            quantity=1, article_cost_per_unit=Decimal('8000.00')
        )

        self.assertEqual(generate_application_number(BeneficiaryType.DISTRICT), 'D008')

    def test_institutions_and_others_share_sequence(self) -> None:
        """Test that institutions and others both draw I numbers."""
        InstitutionBeneficiaryEntry.objects.create(
            application_number='I004', institution_name='Govt School', article=self.machine,
            institution_type=InstitutionType.INSTITUTIONS, quantity=1
        )

        self.assertEqual(generate_application_number(BeneficiaryType.OTHERS), 'I005')

    def test_unknown_type_is_rejected(self) -> None:
        """Test that an unknown beneficiary type raises."""
        with self.assertRaises(ApplicationNumberException):
            generate_application_number('Martians')

    def test_number_helpers(self) -> None:
        """Test parsing of the prefix."""
        self.assertTrue(is_valid_application_number('P012'))
        self.assertFalse(is_valid_application_number('X012'))
        self.assertEqual(beneficiary_type_from_application_number('I003'), BeneficiaryType.INSTITUTIONS)
        self.assertIsNone(beneficiary_type_from_application_number('FR-001'))

    def test_reuse_never_generates(self) -> None:
        """Test that reuse returns None when nothing was issued."""
        allocator = ApplicationNumberAllocator(BeneficiaryType.PUBLIC)

        self.assertIsNone(allocator.reuse(aadhar_number='1234 5678 9012'))

    def test_district_anchor_is_persisted(self) -> None:
        """Test that a generated district number is stored on the district."""
        allocation = ApplicationNumberAllocator(BeneficiaryType.DISTRICT).allocate(anchor=self.district)

        self.district.refresh_from_db()
        self.assertEqual(allocation.source, AllocationSource.GENERATED)
        self.assertEqual(self.district.application_number, 'D001')


class DistrictEntryTests(BeneficiaryTestMixin, TestCase):
    """Tests for district saves: reuse and replace."""

    def setUp(self) -> None:
        """Set up test data."""
        self.create_fixtures()

    def test_resubmission_replaces_rows_under_same_number(self) -> None:
        """Test that a second save reuses the number and replaces every row."""
        first = save_district_entries(self.district, [
            {'article_id': self.machine.pk, 'quantity': 2, 'cost_per_unit': '8000'},
            {'article_id': self.laptop.pk, 'quantity': 1, 'cost_per_unit': '30000'},
        ], user=self.admin)

        second = save_district_entries(self.district, [
            {'article_id': self.machine.pk, 'quantity': 3, 'cost_per_unit': '8000'},
        ], user=self.admin)

        self.assertEqual(first.application_number, 'D001')
        self.assertEqual(second.application_number, 'D001')
        self.assertEqual(second.allocation.source, AllocationSource.ANCHOR)
        self.assertEqual(len(second.deleted), 2)
        rows = DistrictBeneficiaryEntry.objects.filter(application_number='D001')
        self.assertEqual(rows.count(), 1)
        self.assertEqual(rows.get().total_amount, Decimal('24000.00'))
        self.assertTrue(AuditLog.objects.filter(
            action_type=ActionType.UPDATE, entity_type=EntityType.DISTRICT_BENEFICIARY, entity_id='D001'
        ).exists())

    def test_budget_overrun_is_a_warning(self) -> None:
        """Test that saving over budget succeeds with a warning."""
        outcome = save_district_entries(self.district, [
            {'article_id': self.laptop.pk, 'quantity': 4, 'cost_per_unit': '30000'},
        ], user=self.admin)

        self.assertTrue(outcome.budget.is_overrun)
        self.assertEqual(outcome.budget.remaining, Decimal('-20000.00'))
        self.assertIn('Budget exceeded by ₹ 20,000', outcome.warnings)

    def test_invalid_lines_are_collected(self) -> None:
        """Test that every line problem is reported."""
        with self.assertRaises(ValidationFailedException) as ctx:
            save_district_entries(self.district, [
                {'article_id': 9999, 'quantity': 1, 'cost_per_unit': '10'},
                {'article_id': self.machine.pk, 'quantity': 0, 'cost_per_unit': '0'},
            ], user=self.admin)

        self.assertEqual(
            set(ctx.exception.errors), {'article_0', 'quantity_1', 'cost_per_unit_1'}
        )

    def test_viewer_cannot_save(self) -> None:
        """Test that read-only users are rejected."""
        with self.assertRaises(UnauthorizedRoleException):
            save_district_entries(self.district, [
                {'article_id': self.machine.pk, 'quantity': 1, 'cost_per_unit': '8000'},
            ], user=self.viewer)

    def test_failed_insert_restores_previous_rows(self) -> None:
        """Test that an insert failure rolls back the delete."""
        save_district_entries(self.district, [
            {'article_id': self.machine.pk, 'quantity': 1, 'cost_per_unit': '8000'},
        ], user=self.admin)
        rows = [DistrictBeneficiaryEntry(district=self.district, article=self.laptop, quantity=1)]

        with mock.patch.object(DistrictBeneficiaryEntry, 'save', side_effect=IntegrityError('boom')):
            with self.assertRaises(EntryReplaceException) as ctx:
                replace_entries(DistrictBeneficiaryEntry, 'D001', rows)

        self.assertIn('kept', ctx.exception.message)
        self.assertEqual(ctx.exception.details['deleted_count'], 1)
        self.assertEqual(DistrictBeneficiaryEntry.objects.filter(application_number='D001').count(), 1)

    def test_replace_refuses_number_taken_by_another_save(self) -> None:
        """Test that a generated number already holding rows is not overwritten."""
        save_district_entries(self.district, [
            {'article_id': self.machine.pk, 'quantity': 1, 'cost_per_unit': '8000'},
        ], user=self.admin)
        rows = [DistrictBeneficiaryEntry(district=self.district, article=self.laptop, quantity=1)]

        with self.assertRaises(ApplicationNumberException) as ctx:
            replace_entries(DistrictBeneficiaryEntry, 'D001', rows, expect_empty=True)

        self.assertEqual(ctx.exception.details['existing_count'], 1)
        entry = DistrictBeneficiaryEntry.objects.get(application_number='D001')
        self.assertEqual(entry.article, self.machine)

    def test_grouped_records_preserve_totals(self) -> None:
        """Test that grouping keeps every row's amount."""
        save_district_entries(self.district, [
            {'article_id': self.machine.pk, 'quantity': 2, 'cost_per_unit': '8000'},
            {'article_id': self.laptop.pk, 'quantity': 1, 'cost_per_unit': '25000'},
        ], user=self.admin)

        records = fetch_district_records(self.district.pk)

        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].total_accrued, Decimal('41000.00'))
        self.assertEqual(len(records[0].line_items), 2)
        self.assertEqual(records[0].identity['district_name'], 'Madurai')
        self.assertEqual(custom_costs_for_district(self.district.pk)[self.laptop.pk], Decimal('25000.00'))

    def test_grouping_drops_rows_without_number(self) -> None:
        """Test that unnumbered rows are not grouped."""
        row = DistrictBeneficiaryEntry(district=self.district, article=self.machine, quantity=1)

        self.assertEqual(group_entries_by_application_number([row]), [])

    def test_delete_by_application_number(self) -> None:
        """Test that admins delete a record and the audit log keeps it."""
        save_district_entries(self.district, [
            {'article_id': self.machine.pk, 'quantity': 1, 'cost_per_unit': '8000'},
        ], user=self.admin)

        with self.assertRaises(UnauthorizedRoleException):
            delete_entries_by_application_number(BeneficiaryType.DISTRICT, 'D001', user=self.viewer)

        deleted = delete_entries_by_application_number(BeneficiaryType.DISTRICT, 'D001', user=self.admin)

        self.assertEqual(len(deleted), 1)
        self.assertFalse(DistrictBeneficiaryEntry.objects.exists())
        log = AuditLog.objects.get(action_type=ActionType.DELETE)
        self.assertEqual(log.details['deleted_values']['total_amount'], '8000.00')


class PublicEntryTests(BeneficiaryTestMixin, TestCase):
    """Tests for public saves and Aadhaar conflicts."""

    def setUp(self) -> None:
        """Set up test data."""
        self.create_fixtures()
        self.data = {
            'name': 'Lakshmi',
            'aadhar_number': '1234 5678 9012',
            'article_id': self.machine.pk,
            'quantity': 1,
            'cost_per_unit': '8000',
            'gender': 'Female',
            'female_status': 'Widow',
        }

    def test_new_entry_is_stored_normalised(self) -> None:
        """Test that the Aadhaar number is stored as digits."""
        outcome = save_public_entry(self.data, user=self.admin)

        entry = PublicBeneficiaryEntry.objects.get()
        self.assertEqual(outcome.application_number, 'P001')
        self.assertEqual(entry.aadhar_number, '123456789012')
        self.assertEqual(find_public_by_aadhar('1234-5678-9012'), entry)

    def test_concurrently_issued_number_does_not_overwrite(self) -> None:
        """Test that a second save issued the same generated number fails and keeps the first record."""
        save_public_entry(self.data, user=self.admin)
        other = {**self.data, 'name': 'Ravi', 'aadhar_number': '2222 3333 4444', 'gender': 'Male'}

        with mock.patch(
            'apps.beneficiaries.services_allocation.generate_application_number', return_value='P001'
        ):
            with self.assertRaises(ApplicationNumberException):
                save_public_entry(other, user=self.admin)

        entry = PublicBeneficiaryEntry.objects.get()
        self.assertEqual(entry.name, 'Lakshmi')
        self.assertEqual(entry.application_number, 'P001')

    def test_same_aadhar_conflicts(self) -> None:
        """Test that a second beneficiary with the same Aadhaar is a conflict."""
        save_public_entry(self.data, user=self.admin)

        with self.assertRaises(DuplicateBeneficiaryException) as ctx:
            save_public_entry({**self.data, 'name': 'Lakshmi R', 'aadhar_number': '1234-5678-9012'}, user=self.admin)

        self.assertEqual(ctx.exception.details['application_number'], 'P001')
        self.assertEqual(PublicBeneficiaryEntry.objects.count(), 1)

    def test_conflict_update_overwrites_existing(self) -> None:
        """Test that on_conflict='update' keeps the number and replaces the row."""
        save_public_entry(self.data, user=self.admin)

        outcome = save_public_entry(
            {**self.data, 'name': 'Lakshmi R', 'quantity': 2}, user=self.admin, on_conflict=ON_CONFLICT_UPDATE
        )

        entry = PublicBeneficiaryEntry.objects.get()
        self.assertEqual(outcome.application_number, 'P001')
        self.assertEqual(entry.name, 'Lakshmi R')
        self.assertEqual(entry.total_amount, Decimal('16000.00'))

    def test_editing_own_record_is_not_a_conflict(self) -> None:
        """Test that saving the same record under its own number succeeds."""
        save_public_entry(self.data, user=self.admin)

        outcome = save_public_entry({**self.data, 'mobile': '9876543210'}, user=self.admin, application_number='P001')

        self.assertEqual(outcome.allocation.source, AllocationSource.EDIT)
        self.assertEqual(PublicBeneficiaryEntry.objects.get().mobile, '9876543210')

    def test_validation(self) -> None:
        """Test the public form rules."""
        errors = validate_public_entry({
            'name': '', 'aadhar_number': '1234', 'gender': 'Male', 'female_status': 'Widow',
            'article_id': self.machine.pk, 'quantity': 1, 'cost_per_unit': '0',
        })

        self.assertEqual(set(errors), {'name', 'aadhar_number', 'female_status', 'cost_per_unit'})


class CandidateTests(BeneficiaryTestMixin, TestCase):
    """Tests for recipient dropdown candidates."""

    def setUp(self) -> None:
        """Set up test data."""
        self.create_fixtures()
        save_district_entries(self.district, [
            {'article_id': self.machine.pk, 'quantity': 1, 'cost_per_unit': '8000'},
            {'article_id': self.machine.pk, 'quantity': 2, 'cost_per_unit': '8000'},
            {'article_id': self.laptop.pk, 'quantity': 1, 'cost_per_unit': '30000'},
        ])
        save_institution_entries('Govt School', [
            {'article_id': self.machine.pk, 'quantity': 1, 'cost_per_unit': '7500'},
        ])

    def test_only_aid_articles_are_candidates(self) -> None:
        """Test that rows are grouped and Article items excluded."""
        options = candidates_for_type(BeneficiaryType.DISTRICT)

        self.assertEqual(len(options), 1)
        self.assertEqual(options[0].display_text, 'D001 - Madurai - ₹ 24,000')

    def test_district_filter_keeps_grouped_identity(self) -> None:
        """Test that a district filter returns the same grouped option."""
        unfiltered = candidates_for_type(BeneficiaryType.DISTRICT)
        filtered = candidates_for_type(BeneficiaryType.DISTRICT, district_id=self.district.pk)

        self.assertEqual(len(filtered), 1)
        self.assertEqual(filtered[0].display_text, 'D001 - Madurai - ₹ 24,000')
        self.assertEqual(filtered[0].identity, unfiltered[0].identity)

    def test_district_filter_excludes_other_districts(self) -> None:
        """Test that other districts' records are left out."""
        salem = District.objects.create(district_name='Salem', allotted_budget=Decimal('50000.00'))
        save_district_entries(salem, [
            {'article_id': self.machine.pk, 'quantity': 1, 'cost_per_unit': '8000'},
        ], user=self.admin)

        options = candidates_for_type(BeneficiaryType.DISTRICT, district_id=salem.pk)

        self.assertEqual([option.district_name for option in options], ['Salem'])

    def test_aid_type_filter(self) -> None:
        """Test that the aid type matches article name or category."""
        self.assertEqual(len(candidates_for_type(BeneficiaryType.INSTITUTIONS, aid_type='livelihood')), 1)
        self.assertEqual(candidates_for_type(BeneficiaryType.INSTITUTIONS, aid_type='education'), [])
        self.assertEqual(candidates_for_type(BeneficiaryType.OTHERS), [])

    def test_unknown_type(self) -> None:
        """Test that an unknown type is rejected."""
        with self.assertRaises(ValueError):
            candidates_for_type('Martians')
