from django.urls import path
from factory_users.platforms.dashboard.views import *


urlpatterns = [
path('me', FactoryMeDashboardView.as_view(), name='dashboard_factory_me'),
path('users', FactoryUserDashboardView.as_view(), name='dashboard_factory_users'),
path('users/<str:pk>', FactoryUserDashboardView.as_view(), name='dashboard_factory_user'),
]
