from django.urls import path
from stock.platforms.api.views import *


urlpatterns = [
path('items', StockItemApiView.as_view(), name='StockItem'),
path('items/<str:pk>', StockItemApiView.as_view(), name='StockItemDetails'),
path('items/<str:pk>/issue', StockIssueApiView.as_view(), name='StockIssue'),
path('items/<str:pk>/add', StockAddApiView.as_view(), name='StockAdd'),
path('items/<str:pk>/adjust', StockAdjustApiView.as_view(), name='StockAdjust'),
path('items/<str:pk>/reconcile', StockReconcileApiView.as_view(), name='StockReconcile'),

path('movements', StockMovementApiView.as_view(), name='StockMovement'),
path('movements/<str:pk>', StockMovementApiView.as_view(), name='StockMovementDetails'),
path('movements/<str:pk>/reverse', StockMovementReverseApiView.as_view(), name='StockMovementReverse'),
]
