import uuid
from django.db import models
from .base_manager import BaseManager

class BaseModel(models.Model):
    """
    Abstract base model with UUID primary key, timestamps, and the shared manager.
    """
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        unique=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BaseManager()

    class Meta:
        abstract = True

    def __str__(self):
        for field in ["name", "code", "username"]:
            if hasattr(self, field):
                return str(getattr(self, field))
        return str(self.id)


class VersionedModel(BaseModel):
    """
    Base model for aggregates written under optimistic concurrency.

    Every write goes through `BaseManager.compare_and_swap`, which only updates
    the row while `version` still holds the value the writer read.
    """
    version = models.PositiveIntegerField(default=1, editable=False)

    class Meta:
        abstract = True
