# cc_core/common/idempotency.py
from __future__ import annotations

import threading
from django.conf import settings
from django.db import IntegrityError, transaction

from cc_core.common.models import IdempotencyRecord

_LOCK = threading.Lock()
_STORE = {}  # in-process fallback store


def _use_db() -> bool:
    """
    Enable durable storage with:
        COMMON_IDEMPOTENCY_USE_DB = True
    """
    return bool(getattr(settings, "COMMON_IDEMPOTENCY_USE_DB", False))


def get_key(request):
    # DRF test client: "HTTP_IDEMPOTENCY_KEY" becomes request.META["HTTP_IDEMPOTENCY_KEY"]
    raw = request.META.get("HTTP_IDEMPOTENCY_KEY")
    if raw is None:
        return None
    raw = str(raw).strip()
    return raw or None


def _norm(actor_id, method, path, key):
    return (str(actor_id), method.upper(), path, str(key))


def load_response(actor_id, method, path, key):
    """
    Returns (status_code, response_data) for a previously stored response, or None.
    """
    if not key:
        return None

    if not _use_db():
        with _LOCK:
            return _STORE.get(_norm(actor_id, method, path, key))

    rec = (
        IdempotencyRecord.objects.filter(
            actor_id=str(actor_id),
            method=method.upper(),
            path=path,
            idempotency_key=str(key),
        )
        .order_by("-created_at")
        .first()
    )
    return None if rec is None else (rec.status_code, rec.response_data)


def save_response(actor_id, method, path, key, response_data, status_code: int = 200):
    if not key:
        return

    if not _use_db():
        with _LOCK:
            _STORE[_norm(actor_id, method, path, key)] = (int(status_code), response_data)
        return

    try:
        with transaction.atomic():
            IdempotencyRecord.objects.create(
                actor_id=str(actor_id),
                method=method.upper(),
                path=path,
                idempotency_key=str(key),
                status_code=int(status_code),
                response_data=response_data,
            )
    except IntegrityError:
        # already saved by a concurrent request
        return
