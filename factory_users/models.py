from django.contrib.auth.models import AbstractBaseUser
from django.db import models

from configurations.base_features.constants import ROLE_ADMIN, ROLE_MANAGER, ROLE_OPERATOR
from configurations.base_features.db.base_model import BaseModel
from factory_users.managers import FactoryUserManager


class FactoryUser(BaseModel, AbstractBaseUser):
    class Role(models.TextChoices):
        ADMIN = ROLE_ADMIN, "Admin"
        MANAGER = ROLE_MANAGER, "Manager"
        OPERATOR = ROLE_OPERATOR, "Operator"

    username = models.CharField(max_length=150, unique=True)
    name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.OPERATOR)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    USERNAME_FIELD = 'username'
    REQUIRED_FIELDS = ['name']

    objects = FactoryUserManager()

    class Meta:
        ordering = ['username']

    def __str__(self):
        return f"{self.username} ({self.role})"

    @property
    def is_superuser(self):
        return self.role == ROLE_ADMIN

    def has_perm(self, perm, obj=None):
        # admin site access follows the factory role, not per-model permissions
        return self.is_active and self.role == ROLE_ADMIN

    def has_module_perms(self, app_label):
        return self.is_active and self.role == ROLE_ADMIN
