# cc_core/sequences/services.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from cc_core.clinic_settings.selectors import get_billing_settings
from cc_core.clinic_settings.types import COLLISION_FAIL, COLLISION_RETRY
from cc_core.common.api.exceptions import SequenceCollisionError
from cc_core.sequences.models import Sequence
from cc_core.sequences.numbering import NumberingRule, format_number, is_valid_key, scope_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllocatedNumber:
    number: str  # "INV-202508-0007"
    key: str  # "INV-202508"
    current: int  # 7


def _backoff_seconds() -> float:
    return float(getattr(settings, "CC_SEQUENCE_BACKOFF_SECONDS", 0.025))


def _ensure_sequence(*, key: str, stream: str) -> None:
    if Sequence.objects.filter(key=key).exists():
        return
    try:
        with transaction.atomic():
            Sequence.objects.create(key=key, stream=stream, current=0)
    except IntegrityError:
        # lost the create race; the winner's row is the one we increment
        logger.debug("sequence %s created concurrently", key)


def _read_current(key: str) -> int:
    return int(Sequence.objects.filter(key=key).values_list("current", flat=True).get())


def _compare_and_set(key: str, expected: int) -> bool:
    """UPDATE ... SET current=expected+1 WHERE key=? AND current=expected."""
    updated = Sequence.objects.filter(key=key, current=expected).update(
        current=expected + 1,
        updated_at=timezone.now(),
    )
    return updated == 1


class SequenceAllocator:
    """
    Gap-free, strictly increasing document numbers per scope key.

    Concurrency: optimistic. Each attempt is a conditional update against the
    value we last read; losing means someone else incremented first, so we
    back off (linear, CC_SEQUENCE_BACKOFF_SECONDS * attempt), re-read and try
    again. A lost attempt writes nothing, so it never burns a value.
    """

    MAX_ATTEMPTS = 5

    @staticmethod
    def next_number(
        *,
        stream: str,
        rule: NumberingRule,
        when: datetime | None = None,
        collision_policy: str = COLLISION_RETRY,
    ) -> AllocatedNumber:
        if when is None:
            when = timezone.localtime()
        elif timezone.is_aware(when):
            when = timezone.localtime(when)

        key = scope_key(rule.prefix, rule.reset_scope, when)
        if not is_valid_key(key):
            raise ValidationError(
                {
                    "prefix": (
                        f"Invalid sequence key '{key}'. Keep it <= 36 chars, start with a letter or digit "
                        "and use only letters, digits, '.', '_' or '-'."
                    )
                }
            )

        _ensure_sequence(key=key, stream=stream)

        attempts = 1 if collision_policy == COLLISION_FAIL else SequenceAllocator.MAX_ATTEMPTS
        current = _read_current(key)

        for attempt in range(1, attempts + 1):
            if _compare_and_set(key, current):
                value = current + 1
                return AllocatedNumber(
                    number=format_number(key, value, rule.pad),
                    key=key,
                    current=value,
                )

            logger.warning("sequence %s: lost increment at %s (attempt %s/%s)", key, current, attempt, attempts)
            if attempt < attempts:
                time.sleep(_backoff_seconds() * attempt)
            current = _read_current(key)

        logger.error("sequence %s: retries exhausted after %s attempts", key, attempts)
        raise SequenceCollisionError(f"Sequence collision on '{key}': retries exhausted.")

    @staticmethod
    @transaction.atomic
    def next_for_stream(*, stream: str, when: datetime | None = None) -> AllocatedNumber:
        """Allocates using the numbering rule configured for the stream."""
        settings_doc = get_billing_settings()
        try:
            rule = settings_doc.numbering_rule(stream)
        except KeyError:
            raise ValidationError({"stream": f"Unknown numbering stream '{stream}'."})

        return SequenceAllocator.next_number(
            stream=stream,
            rule=rule,
            when=when,
            collision_policy=settings_doc.collision_policy,
        )
