from django.contrib.auth.base_user import BaseUserManager

from configurations.base_features.constants import ROLE_ADMIN, ROLE_OPERATOR
from configurations.base_features.db.base_manager import BaseManager


class FactoryUserManager(BaseUserManager, BaseManager):
    def create_user(self, username, name="", password=None, role=ROLE_OPERATOR, **extra_fields):
        if not username:
            raise ValueError("Users must have a username")
        user = self.model(username=username, name=name or username, role=role, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, username, name="", password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        return self.create_user(username, name=name, password=password, role=ROLE_ADMIN, **extra_fields)
