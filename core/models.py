"""
Base Models for MeshIt

TimestampedModel gives every persisted entity a UUID primary key plus
created_at / updated_at timestamps.
"""

import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _


class TimestampedModel(models.Model):
    """
    Abstract base model with UUID primary key and timestamps.

    Example:
        class Posting(TimestampedModel):
            title = models.CharField(max_length=200)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name=_('ID')
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        verbose_name=_('Created at')
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name=_('Updated at')
    )

    class Meta:
        abstract = True
