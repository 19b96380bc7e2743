from django.urls import path, include
from django.contrib import admin

from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView
)

from configurations.views import DashboardApiView, index


api_urls = [
    path('dashboard', DashboardApiView.as_view(), name='dashboard'),
    path('users/', include('factory_users.platforms.api.urls')),
    path('work-orders/', include('work_orders.platforms.api.urls')),
    path('stock/', include('stock.platforms.api.urls')),
]

dashboard_urls = [
    path('users/', include('factory_users.platforms.dashboard.urls')),
    path('work-orders/', include('work_orders.platforms.dashboard.urls')),
    path('stock/', include('stock.platforms.dashboard.urls')),
]

v1_urlpatterns = [
    path('api/', include(api_urls)),
    path('dashboard/', include(dashboard_urls)),
]

urlpatterns = [
    path('admin/', admin.site.urls),
    path('v1/api/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('v1/api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('v1/api/token/verify/', TokenVerifyView.as_view(), name='token_verify'),
    path('v1/', include(v1_urlpatterns)),
    path('', index),
]
