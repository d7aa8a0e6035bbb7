"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Centralized logging for fund request operations.
-------------------------------------------------------------------------
"""
import logging
from typing import Any, Dict, Iterable

logger = logging.getLogger('apps.fund_requests')


def _user_label(user) -> str:
    return getattr(user, 'email', None) or 'system'


class FundRequestLogger:
    """Centralized logging for fund request operations"""

    @staticmethod
    def log_saved(fund_request, user, created: bool):
        """Log fund request create or update"""
        logger.info(
            f"Fund request {'created' if created else 'updated'}: {fund_request.fund_request_number} | "
            f"Type: {fund_request.fund_request_type} | "
            f"Amount: Rs {fund_request.total_amount} | "
            f"Saved by: {_user_label(user)}",
            extra={
                'fund_request_id': fund_request.pk,
                'fund_request_type': fund_request.fund_request_type,
                'amount': str(fund_request.total_amount),
                'user_id': getattr(user, 'pk', None),
            }
        )

    @staticmethod
    def log_deleted(fund_request_number: str, user):
        """Log fund request deletion"""
        logger.warning(
            f"Fund request deleted: {fund_request_number} | Deleted by: {_user_label(user)}",
            extra={'fund_request_number': fund_request_number, 'user_id': getattr(user, 'pk', None)}
        )

    @staticmethod
    def log_beneficiary_conflict(identities: Iterable[str], fund_request_id):
        """Log recipients rejected because another fund request uses them"""
        identities = sorted(identities)
        logger.warning(
            f"Beneficiaries already used elsewhere: {', '.join(identities)}",
            extra={'fund_request_id': fund_request_id, 'identities': identities}
        )

    @staticmethod
    def log_split_article_created(article, fund_request_number: str):
        """Log materialisation of a split article"""
        logger.info(
            f"Split article created: {article.article_name} (id {article.pk}) | "
            f"For: {fund_request_number or 'new fund request'}",
            extra={'article_id': article.pk, 'fund_request_number': fund_request_number}
        )

    @staticmethod
    def log_order_entries_skipped(fund_request, reason: str):
        """Log best-effort order entry creation that did not happen"""
        logger.warning(
            f"Order entries not created for {fund_request.fund_request_number}: {reason}",
            extra={'fund_request_id': fund_request.pk, 'reason': reason}
        )

    @staticmethod
    def log_error(operation: str, error: Exception, context: Dict[str, Any]):
        """Log errors with context"""
        logger.error(
            f"Fund request error in {operation}: {str(error)}",
            extra=context,
            exc_info=True
        )

    @staticmethod
    def log_validation_error(operation: str, errors: Dict[str, Any], context: Dict[str, Any]):
        """Log validation errors"""
        logger.warning(
            f"Validation error in {operation}: {errors}",
            extra={**context, 'validation_errors': errors}
        )
