from factory_users.platforms.base.views import *
from factory_users.platforms.api.serializers import *


class FactoryLoginApiView(FactoryLoginBaseView):
    serializer_class = FactoryTokenObtainPairApiSerializer


class FactoryUserApiView(FactoryUserBaseView):
    serializer_class = FactoryUserApiSerializer


class FactoryMeApiView(FactoryMeBaseView):
    serializer_class = FactoryUserApiSerializer
