# cc_core/sequences/models.py
from __future__ import annotations

from django.db import models

from cc_core.common.models import TimeStampedModel


class Sequence(TimeStampedModel):
    """
    Named counter for one numbering scope (e.g. "INV-202508").

    Created lazily with current=0. `current` only ever moves forward, and only
    through SequenceAllocator's compare-and-set update.
    """
    key = models.CharField(max_length=64, unique=True)
    stream = models.CharField(max_length=32, db_index=True)
    current = models.PositiveBigIntegerField(default=0)

    class Meta:
        db_table = "sequences_sequence"

    def __str__(self) -> str:
        return f"{self.key}={self.current}"
