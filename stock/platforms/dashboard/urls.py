from django.urls import path
from stock.platforms.dashboard.views import *


urlpatterns = [
path('items', StockItemDashboardView.as_view(), name='DashboardStockItem'),
path('items/<str:pk>', StockItemDashboardView.as_view(), name='DashboardStockItemDetails'),
path('items/<str:pk>/issue', StockIssueDashboardView.as_view(), name='DashboardStockIssue'),
path('items/<str:pk>/add', StockAddDashboardView.as_view(), name='DashboardStockAdd'),
path('items/<str:pk>/adjust', StockAdjustDashboardView.as_view(), name='DashboardStockAdjust'),
path('items/<str:pk>/reconcile', StockReconcileDashboardView.as_view(), name='DashboardStockReconcile'),
path('movements', StockMovementDashboardView.as_view(), name='DashboardStockMovement'),
path('movements/<str:pk>/reverse', StockMovementReverseDashboardView.as_view(), name='DashboardStockMovementReverse'),
]
