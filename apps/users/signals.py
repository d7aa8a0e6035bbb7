"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Authentication signal handlers. Successful logins and
             logouts are written to the audit trail.
-------------------------------------------------------------------------
"""
import logging

from django.contrib.auth.signals import user_logged_in, user_logged_out, user_login_failed
from django.dispatch import receiver

from apps.core.models import ActionType, EntityType
from apps.core.services import AuditLogService

logger = logging.getLogger(__name__)


def _client_info(request):
    if request is None:
        return None, ''
    ip = request.META.get('HTTP_X_FORWARDED_FOR', '').split(',')[0].strip() or request.META.get('REMOTE_ADDR')
    return ip or None, request.META.get('HTTP_USER_AGENT', '')


@receiver(user_logged_in)
def log_login(sender, request, user, **kwargs):
    """Record a LOGIN entry for the user."""
    ip, agent = _client_info(request)
    AuditLogService.log_action(
        user, ActionType.LOGIN, EntityType.USER, user.pk,
        {'entity_name': user.email}, ip_address=ip, user_agent=agent
    )


@receiver(user_logged_out)
def log_logout(sender, request, user, **kwargs):
    """Record a LOGOUT entry for the user."""
    if user is None:
        return
    ip, agent = _client_info(request)
    AuditLogService.log_action(
        user, ActionType.LOGOUT, EntityType.USER, user.pk,
        {'entity_name': user.email}, ip_address=ip, user_agent=agent
    )


@receiver(user_login_failed)
def log_failed_login(sender, credentials, request=None, **kwargs):
    """Log failed login attempts."""
    ip, _agent = _client_info(request)
    logger.warning(
        "Failed login attempt - email=%s ip=%s",
        credentials.get('email') or credentials.get('username'),
        ip
    )
