from rest_framework.serializers import ModelSerializer
from typing import OrderedDict

from configurations.base_features.helpers.text_helpers import performer_name


class BaseSerializer(ModelSerializer):
    """
    Base serializer for all factory models. Includes:
    - mod_ override points (mod_create, mod_update, mod_to_representation)
    - request/user helpers for audit columns
    """

    class Meta:
        model = None
        fields = "__all__"
        read_only_fields = ("id", "created_at", "updated_at")

    def create(self, validated_data):
        return self.mod_create(validated_data)

    def update(self, instance, validated_data):
        return self.mod_update(instance, validated_data)

    def to_representation(self, instance) -> OrderedDict:
        return self.mod_to_representation(instance)

    def mod_create(self, validated_data):
        return super().create(validated_data)

    def mod_update(self, instance, validated_data):
        return super().update(instance, validated_data)

    def mod_to_representation(self, instance):
        return super().to_representation(instance)

    def get_request(self):
        return self.context.get("request")

    def get_user(self):
        request = self.get_request()
        return getattr(request, "user", None)

    def get_performer_name(self):
        user = self.get_user()
        if user is None or not getattr(user, "is_authenticated", False):
            return performer_name(None)
        return performer_name(user)
