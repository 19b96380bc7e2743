from factory_users.platforms.base.serializers import *


class FactoryUserApiSerializer(FactoryUserBaseSerializer):
    pass


class FactoryTokenObtainPairApiSerializer(FactoryTokenObtainPairBaseSerializer):
    pass
