from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from configurations.base_features.serializers.base_serializer import BaseSerializer
from factory_users.models import FactoryUser


class FactoryUserBaseSerializer(BaseSerializer):
    password = serializers.CharField(write_only=True, min_length=8, required=False)

    class Meta:
        model = FactoryUser
        fields = ('id', 'username', 'name', 'role', 'is_active', 'password', 'created_at', 'updated_at')
        read_only_fields = ('id', 'created_at', 'updated_at')

    def mod_create(self, validated_data):
        password = validated_data.pop('password', None)
        if not password:
            raise serializers.ValidationError({"password": ["This field is required."]})
        return FactoryUser.objects.create_user(password=password, **validated_data)

    def mod_update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        instance = super().mod_update(instance, validated_data)
        if password:
            instance.set_password(password)
            instance.save(update_fields=['password'])
        return instance


class FactoryTokenObtainPairBaseSerializer(TokenObtainPairSerializer):
    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['name'] = user.name
        token['role'] = user.role
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data['username'] = self.user.username
        data['name'] = self.user.name
        data['role'] = self.user.role
        return data
