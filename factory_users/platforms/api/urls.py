from django.urls import path
from factory_users.platforms.api.views import *


urlpatterns = [
path('login', FactoryLoginApiView.as_view(), name='factory_login'),
path('me', FactoryMeApiView.as_view(), name='factory_me'),
path('users', FactoryUserApiView.as_view(), name='factory_users'),
path('users/<str:pk>', FactoryUserApiView.as_view(), name='factory_user'),
]
