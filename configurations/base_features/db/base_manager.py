import logging
from django.core.exceptions import FieldDoesNotExist, ValidationError
from django.db import models
from django.db.models import F
from django.utils import timezone
from ..exceptions.base_exceptions import LocalBaseException, ConcurrencyConflictException

logger = logging.getLogger(__name__)


class BaseManager(models.Manager):
    """
    Shared manager for all factory models.
    Includes FK-aware lookups, DRF-friendly exceptions, and versioned writes.
    """

    def model_field_exists(self, field: str) -> bool:
        try:
            self.model._meta.get_field(field)
            return True
        except FieldDoesNotExist:
            return False

    def model_field_type(self, field: str) -> str:
        return self.model._meta.get_field(field).get_internal_type()

    def get_object_or_404(self, raise_exception=False, *args, **kwargs):
        data = None
        errors = []
        exception_type = None
        exception_kwargs = {}
        exception_debug = None
        status_code = 200

        query_params = {}
        for field, value in kwargs.items():
            base_field = field.split("__")[0]
            if self.model_field_exists(base_field) and self.model_field_type(base_field) == "ForeignKey" and "__" not in field:
                query_params[f"{base_field}__id"] = value
            else:
                query_params[field] = value

        try:
            data = self.get(*args, **query_params)

        except self.model.MultipleObjectsReturned:
            exception_type = "multiple_objects_returned"
            status_code = 409
            errors = f"Multiple {self.model._meta.object_name} objects found."
            exception_kwargs = {
                "count": self.filter(*args, **query_params).count(),
                "model": self.model._meta.object_name
            }

        except (self.model.DoesNotExist, ValueError, ValidationError):
            exception_type = "not_found"
            status_code = 404
            errors = f"{self.model._meta.object_name} not found."
            exception_kwargs = {"model": self.model._meta.object_name}

        except Exception as e:
            logger.exception("Lookup on %s failed", self.model._meta.object_name)
            exception_type = "server_error"
            status_code = 500
            errors = "Unexpected error"
            exception_debug = str(e)

        if raise_exception:
            if exception_type:
                raise LocalBaseException(
                    exception_type=exception_type,
                    status_code=status_code,
                    kwargs=exception_kwargs,
                    debug_message=exception_debug,
                )
            return data
        else:
            return data, errors, status_code

    def active(self):
        """
        Return queryset for active objects (requires `is_active` field).
        """
        if self.model_field_exists("is_active"):
            return self.filter(is_active=True)
        return self.all()

    def get_or_none(self, *args, **kwargs):
        """
        Returns an object or None if not found.
        """
        try:
            return self.get(*args, **kwargs)
        except (self.model.DoesNotExist, ValueError, ValidationError):
            return None

    def compare_and_swap(self, instance, fields):
        """
        Persist `fields` of `instance` only if the stored version still matches
        the one the instance was loaded with. On success the instance carries
        the bumped version; on a lost race nothing is written.
        """
        expected = instance.version
        values = {name: getattr(instance, name) for name in fields}
        if self.model_field_exists("updated_at"):
            values["updated_at"] = timezone.now()
        updated = self.filter(pk=instance.pk, version=expected).update(
            version=F("version") + 1, **values
        )
        if updated != 1:
            logger.warning(
                "Version conflict on %s %s (expected version %s)",
                self.model._meta.object_name, instance.pk, expected,
            )
            raise ConcurrencyConflictException(
                model=self.model._meta.object_name,
                pk=instance.pk,
                expected_version=expected,
            )
        instance.version = expected + 1
        if "updated_at" in values:
            instance.updated_at = values["updated_at"]
        return instance

    def get_for_update_or_404(self, **kwargs):
        """
        Row-locked lookup for use inside transaction.atomic().
        Raises the same not_found exception as get_object_or_404.
        """
        try:
            return self.select_for_update().get(**kwargs)
        except (self.model.DoesNotExist, ValueError, ValidationError):
            raise LocalBaseException(
                exception_type="not_found",
                status_code=404,
                kwargs={"model": self.model._meta.object_name},
            )
