from factory_users.platforms.base.views import *


class FactoryUserDashboardView(FactoryUserBaseView):
    pass


class FactoryMeDashboardView(FactoryMeBaseView):
    pass
