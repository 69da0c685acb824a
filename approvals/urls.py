from django.urls import path
from . import views

urlpatterns = [
    path('cancellation-requests/', views.CancellationListView.as_view(), name='cancellation_list'),
    path('cancellation-requests/<int:request_id>/', views.CancellationDetailView.as_view(),
         name='cancellation_detail'),
    path('cancellation-requests/tab/<int:tab_id>/', views.TabCancellationsView.as_view(),
         name='tab_cancellations'),
    path('return-requests/', views.ReturnListView.as_view(), name='return_list'),
    path('return-requests/<int:request_id>/', views.ReturnDetailView.as_view(), name='return_detail'),
    path('return-requests/order/<int:order_id>/', views.OrderReturnsView.as_view(), name='order_returns'),
]
