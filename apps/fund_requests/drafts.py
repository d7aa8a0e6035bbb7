"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Local draft snapshots of new fund request forms. Drafts are
             kept in the Django cache, saved with a debounce and never
             written for fund requests that already have an id.
-------------------------------------------------------------------------
"""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.core.cache import cache as default_cache
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.core.services import to_jsonable

logger = logging.getLogger(__name__)


DRAFT_KEY_PREFIX = 'fund-request-draft'
DRAFT_VERSION = 1


def draft_key(fund_request_type: str, fund_request_id: Optional[Any] = None) -> str:
    """Cache key of a draft; new forms are keyed by fund request type."""
    if fund_request_id:
        return f"{DRAFT_KEY_PREFIX}-{fund_request_id}"
    return f"{DRAFT_KEY_PREFIX}-new-{(fund_request_type or '').lower()}"


def serialize_form_state(
    fund_request_type: str,
    form_data: Dict[str, Any],
    recipients: Optional[List[Dict[str, Any]]] = None,
    articles: Optional[List[Dict[str, Any]]] = None,
    supplier: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Snapshot of a fund request form as JSON-safe primitives.

    Pure: the same input always gives the same output.
    """
    return to_jsonable({
        'version': DRAFT_VERSION,
        'fund_request_type': fund_request_type,
        'form_data': dict(form_data or {}),
        'recipients': [dict(row) for row in recipients or []],
        'articles': [dict(row) for row in articles or []],
        'supplier': dict(supplier or {}),
    })


@dataclass(frozen=True)
class DraftSnapshot:
    """A restored draft and how old it is."""
    state: Dict[str, Any]
    saved_at: datetime
    age: timedelta

    @property
    def age_text(self) -> str:
        minutes = int(self.age.total_seconds() // 60)
        if minutes < 1:
            return 'just now'
        if minutes < 60:
            return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
        hours = minutes // 60
        if hours < 24:
            return f"{hours} hour{'s' if hours != 1 else ''} ago"
        days = hours // 24
        return f"{days} day{'s' if days != 1 else ''} ago"


class FundRequestDraftStore:
    """
    Draft storage for one fund request form.

    Only new forms (no fund request id) are snapshotted; for existing
    fund requests every operation is a no-op.
    """

    def __init__(self, fund_request_type: str, fund_request_id: Optional[Any] = None,
                 cache=None, max_age: Optional[timedelta] = None) -> None:
        self.fund_request_type = fund_request_type
        self.fund_request_id = fund_request_id
        self.cache = cache or default_cache
        self.max_age = max_age or timedelta(days=settings.FUND_REQUEST_DRAFT_MAX_AGE_DAYS)
        self.key = draft_key(fund_request_type, fund_request_id)

    @property
    def enabled(self) -> bool:
        return not self.fund_request_id

    def save(self, state: Dict[str, Any]) -> bool:
        if not self.enabled:
            return False
        payload = {'saved_at': timezone.now().isoformat(), 'state': state}
        self.cache.set(self.key, payload, int(self.max_age.total_seconds()))
        logger.debug("Saved fund request draft %s", self.key)
        return True

    def restore(self) -> Optional[DraftSnapshot]:
        """
        Load the draft, if any.

        Drafts older than the maximum age are discarded. The caller shows
        the age and lets the user keep or discard it.
        """
        if not self.enabled:
            return None
        payload = self.cache.get(self.key)
        if not payload:
            return None

        saved_at = parse_datetime(payload.get('saved_at') or '')
        if saved_at is None:
            logger.warning("Discarding unreadable fund request draft %s", self.key)
            self.clear()
            return None

        age = timezone.now() - saved_at
        if age > self.max_age:
            logger.info("Discarding expired fund request draft %s", self.key)
            self.clear()
            return None
        return DraftSnapshot(state=payload.get('state') or {}, saved_at=saved_at, age=age)

    def clear(self) -> None:
        self.cache.delete(self.key)


class DraftSaveScheduler:
    """
    Debounced draft saving.

    Each schedule() restarts the delay; only the latest state is saved.
    close() cancels any pending save for good.
    """

    def __init__(self, store: FundRequestDraftStore, delay: Optional[float] = None) -> None:
        self.store = store
        self.delay = settings.DRAFT_SAVE_DEBOUNCE_MS / 1000.0 if delay is None else delay
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Dict[str, Any]] = None
        self._closed = False

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def schedule(self, state: Dict[str, Any]) -> bool:
        """Queue a save after the debounce delay. Returns False when ignored."""
        if not self.store.enabled:
            return False
        with self._lock:
            if self._closed:
                return False
            self._cancel_timer()
            self._pending = state
            self._timer = threading.Timer(self.delay, self.flush)
            self._timer.daemon = True
            self._timer.start()
        return True

    def flush(self) -> bool:
        """Save the pending state now."""
        with self._lock:
            self._cancel_timer()
            state, self._pending = self._pending, None
        if state is None:
            return False
        return self.store.save(state)

    def cancel(self) -> None:
        with self._lock:
            self._cancel_timer()
            self._pending = None

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._cancel_timer()
            self._pending = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
