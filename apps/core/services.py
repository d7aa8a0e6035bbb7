"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Core services for audit logging and store error handling
             shared by every module.
-------------------------------------------------------------------------
"""
import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from django.core.serializers.json import DjangoJSONEncoder
from django.db import DatabaseError, OperationalError, transaction
from django.forms.models import model_to_dict

from apps.core.exceptions import StoreUnavailableException
from apps.core.models import ActionType, AuditLog

logger = logging.getLogger(__name__)


def to_jsonable(value: Any) -> Any:
    """Convert Decimals, dates and UUIDs into JSON-safe primitives."""
    return json.loads(json.dumps(value, cls=DjangoJSONEncoder))


def snapshot(instance, fields: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Capture the field values of a model instance for the audit trail.

    Args:
        instance: Saved model instance.
        fields: Optional subset of field names.

    Returns:
        JSON-safe dictionary of field values including the primary key.
    """
    data = model_to_dict(instance, fields=fields)
    data['id'] = instance.pk
    return to_jsonable(data)


@contextmanager
def store_call(operation: str) -> Iterator[None]:
    """
    Translate database failures into StoreUnavailableException.

    Timeouts surface as OperationalError once the statement_timeout
    configured from STORE_TIMEOUT_SECONDS elapses.

    Args:
        operation: Short label used in the log line and error details.
    """
    try:
        yield
    except OperationalError as exc:
        logger.error("Store call '%s' failed: %s", operation, exc)
        raise StoreUnavailableException(details={'operation': operation}) from exc


class AuditLogService:
    """
    Service class for writing and reading the audit trail.

    Writes never break the calling operation: failures are logged and
    swallowed inside a savepoint.
    """

    @staticmethod
    def build_details(action_type: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Structure the details payload according to the action type.

        Args:
            action_type: One of ActionType values.
            details: Raw details supplied by the caller.

        Returns:
            Details dictionary with the keys expected for the action.
        """
        details = dict(details or {})
        structured = dict(details)

        if action_type == ActionType.CREATE and 'new_values' in details:
            structured['new_values'] = details['new_values']
        elif action_type == ActionType.UPDATE and ('old_values' in details or 'new_values' in details):
            old_values = details.get('old_values') or {}
            new_values = details.get('new_values') or {}
            structured['old_values'] = old_values
            structured['new_values'] = new_values
            structured['updated_fields'] = details.get('updated_fields') or sorted(
                key for key in new_values
                if key in old_values and old_values[key] != new_values[key]
            )
        elif action_type == ActionType.DELETE and 'deleted_values' in details:
            structured['deleted_values'] = details['deleted_values']
        elif action_type == ActionType.STATUS_CHANGE:
            structured['previous_status'] = details.get('previous_status')
            structured['new_status'] = details.get('new_status')

        return to_jsonable(structured)

    @staticmethod
    def log_action(
        user,
        action_type: str,
        entity_type: str,
        entity_id: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: str = ''
    ) -> Optional[AuditLog]:
        """
        Record a state-changing action.

        Args:
            user: Acting user, or None for system actions.
            action_type: One of ActionType values.
            entity_type: One of EntityType values.
            entity_id: Identifier of the affected record.
            details: Action payload (new_values, old_values, deleted_values...).
            ip_address: Client IP address if known.
            user_agent: Client user agent if known.

        Returns:
            The created AuditLog, or None when logging failed.
        """
        acting_user = user if getattr(user, 'pk', None) else None
        try:
            with transaction.atomic():
                return AuditLog.objects.create(
                    user=acting_user,
                    action_type=action_type,
                    entity_type=entity_type,
                    entity_id='' if entity_id is None else str(entity_id),
                    details=AuditLogService.build_details(action_type, details),
                    ip_address=ip_address,
                    user_agent=user_agent or '',
                )
        except (DatabaseError, TypeError, ValueError):
            logger.exception(
                "Failed to log %s on %s %s", action_type, entity_type, entity_id
            )
            return None

    @staticmethod
    def fetch_logs(
        user=None,
        action_type: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[Any] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[AuditLog]:
        """
        Fetch audit logs, newest first, with optional filters.

        Args:
            user: Only logs written by this user.
            action_type: Only logs of this action.
            entity_type: Only logs about this entity type.
            entity_id: Only logs about this entity.
            start_date: Lower bound on created_at (inclusive).
            end_date: Upper bound on created_at (inclusive).
            limit: Page size.
            offset: Page start.

        Returns:
            List of AuditLog instances.
        """
        queryset = AuditLog.objects.select_related('user')
        if user is not None:
            queryset = queryset.filter(user=user)
        if action_type:
            queryset = queryset.filter(action_type=action_type)
        if entity_type:
            queryset = queryset.filter(entity_type=entity_type)
        if entity_id is not None:
            queryset = queryset.filter(entity_id=str(entity_id))
        if start_date:
            queryset = queryset.filter(created_at__gte=start_date)
        if end_date:
            queryset = queryset.filter(created_at__lte=end_date)

        with store_call('fetch_audit_logs'):
            return list(queryset[offset:offset + limit])


def log_action(user, action_type: str, entity_type: str,
               entity_id: Optional[Any] = None,
               details: Optional[Dict[str, Any]] = None) -> Optional[AuditLog]:
    """
    Convenience function to record an audit log entry.

    See AuditLogService.log_action for full documentation.
    """
    return AuditLogService.log_action(user, action_type, entity_type, entity_id, details)
