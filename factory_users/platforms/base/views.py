from rest_framework.permissions import AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView

from configurations.base_features.constants import ROLE_ADMIN, ROLE_MANAGER
from configurations.base_features.views.base_api_view import BaseAPIView
from factory_users.platforms.base.serializers import *


class FactoryLoginBaseView(TokenObtainPairView):
    serializer_class = FactoryTokenObtainPairBaseSerializer
    permission_classes = [AllowAny]
    authentication_classes = []


class FactoryUserBaseView(BaseAPIView):
    model_class = FactoryUser
    serializer_class = FactoryUserBaseSerializer
    allowed_roles = [ROLE_ADMIN, ROLE_MANAGER]

    def get_queryset(self, params=None, ordering=None):
        return super().get_queryset(params, ordering or "username")


class FactoryMeBaseView(BaseAPIView):
    """The signed-in user, including the role used for stage authorization."""
    model_class = FactoryUser
    serializer_class = FactoryUserBaseSerializer
    http_method_names = ['get']

    def get(self, request, *args, **kwargs):
        try:
            user = self.authorize_user(request)
            return self.format_response(data=self.get_serialized_objects(user), status_code=200)
        except Exception as e:
            return self.handle_exception(e)
