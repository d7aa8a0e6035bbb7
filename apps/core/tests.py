"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for the core module - exceptions, audit log
             and store error handling.
-------------------------------------------------------------------------
"""
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import OperationalError
from django.test import TestCase

from apps.core.exceptions import (
    DuplicateBeneficiaryException,
    StoreUnavailableException,
    ValidationFailedException,
)
from apps.core.models import ActionType, AuditLog, District, EntityType
from apps.core.services import AuditLogService, log_action, snapshot, store_call, to_jsonable
from apps.users.models import UserRole


User = get_user_model()


class ExceptionTests(TestCase):
    """Tests for the WDTS exception hierarchy."""

    def test_default_message_and_code(self) -> None:
        """Test that exceptions fall back to their default message."""
        exc = StoreUnavailableException()

        self.assertEqual(exc.error_code, 'ERR_STORE_UNAVAILABLE')
        self.assertEqual(str(exc), exc.default_message)
        self.assertEqual(exc.to_dict()['details'], {})

    def test_validation_errors_property(self) -> None:
        """Test that the field map is exposed through errors."""
        exc = ValidationFailedException(details={'errors': {'gst_number': 'GST number is required'}})

        self.assertEqual(exc.errors, {'gst_number': 'GST number is required'})

    def test_duplicate_beneficiary_offers_choices(self) -> None:
        """Test that a duplicate carries the update and edit choices."""
        exc = DuplicateBeneficiaryException(details={'application_number': 'P001'})

        self.assertEqual(exc.details['application_number'], 'P001')
        self.assertIn(DuplicateBeneficiaryException.UPDATE_EXISTING, exc.details['choices'])
        self.assertIn(DuplicateBeneficiaryException.EDIT_EXISTING, exc.details['choices'])


class StoreCallTests(TestCase):
    """Tests for store_call."""

    def test_operational_error_becomes_store_unavailable(self) -> None:
        """Test that connection failures are reported as store unavailable."""
        with self.assertRaises(StoreUnavailableException) as ctx:
            with store_call('fetch_districts'):
                raise OperationalError('connection refused')

        self.assertEqual(ctx.exception.details['operation'], 'fetch_districts')

    def test_other_errors_pass_through(self) -> None:
        """Test that non-store errors are not translated."""
        with self.assertRaises(ValueError):
            with store_call('fetch_districts'):
                raise ValueError('bad input')


class AuditLogServiceTests(TestCase):
    """Tests for AuditLogService."""

    def setUp(self) -> None:
        """Set up test data."""
        self.user = User.objects.create_user(
            email='editor@wdts.test',
            password='testpass123',
            first_name='Test',
            role=UserRole.EDITOR
        )
        self.district = District.objects.create(
            district_name='Chennai',
            allotted_budget=Decimal('500000.00')
        )

    def test_create_log_keeps_new_values(self) -> None:
        """Test that a CREATE entry stores the new values as JSON."""
        entry = AuditLogService.log_action(
            self.user, ActionType.CREATE, EntityType.DISTRICT, self.district.pk,
            {'new_values': snapshot(self.district, ['district_name', 'allotted_budget'])}
        )

        self.assertIsNotNone(entry)
        self.assertEqual(entry.user, self.user)
        self.assertEqual(entry.entity_id, str(self.district.pk))
        self.assertEqual(entry.details['new_values']['district_name'], 'Chennai')
        self.assertEqual(entry.details['new_values']['allotted_budget'], '500000.00')

    def test_update_log_lists_changed_fields(self) -> None:
        """Test that UPDATE entries record which fields changed."""
        entry = log_action(
            self.user, ActionType.UPDATE, EntityType.DISTRICT, self.district.pk,
            {
                'old_values': {'district_name': 'Chennai', 'allotted_budget': '500000.00'},
                'new_values': {'district_name': 'Chennai', 'allotted_budget': '750000.00'},
            }
        )

        self.assertEqual(entry.details['updated_fields'], ['allotted_budget'])

    def test_status_change_log(self) -> None:
        """Test that status changes record both statuses."""
        entry = log_action(
            None, ActionType.STATUS_CHANGE, EntityType.ARTICLE, 7,
            {'previous_status': True, 'new_status': False}
        )

        self.assertIsNone(entry.user)
        self.assertTrue(entry.details['previous_status'])
        self.assertFalse(entry.details['new_status'])

    def test_logging_failure_never_raises(self) -> None:
        """Test that a failed audit write returns None instead of raising."""
        with mock.patch.object(AuditLog.objects, 'create', side_effect=OperationalError('down')):
            entry = log_action(self.user, ActionType.DELETE, EntityType.DISTRICT, self.district.pk)

        self.assertIsNone(entry)

    def test_fetch_logs_filters(self) -> None:
        """Test that fetch_logs filters by entity and returns newest first."""
        log_action(self.user, ActionType.CREATE, EntityType.DISTRICT, self.district.pk)
        log_action(self.user, ActionType.UPDATE, EntityType.DISTRICT, self.district.pk)
        log_action(self.user, ActionType.CREATE, EntityType.ARTICLE, 1)

        logs = AuditLogService.fetch_logs(entity_type=EntityType.DISTRICT, entity_id=self.district.pk)

        self.assertEqual(len(logs), 2)
        self.assertEqual(logs[0].action_type, ActionType.UPDATE)

    def test_to_jsonable_converts_decimals(self) -> None:
        """Test that Decimals become strings."""
        self.assertEqual(to_jsonable({'amount': Decimal('12.50')}), {'amount': '12.50'})
