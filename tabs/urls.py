from django.urls import path
from . import views

urlpatterns = [
    path('tabs/', views.TabListView.as_view(), name='tab_list'),
    path('tabs/<int:tab_id>/', views.TabDetailView.as_view(), name='tab_detail'),
    path('tabs/<int:tab_id>/close/', views.CloseTabView.as_view(), name='close_tab'),
    path('tabs/<int:tab_id>/calculate/', views.CalculateTabView.as_view(), name='calculate_tab'),
    path('tabs/<int:tab_id>/service-charge/', views.ServiceChargeView.as_view(), name='tab_service_charge'),
    path('tabs/<int:tab_id>/request-bill/', views.RequestBillView.as_view(), name='request_bill'),
    path('tabs/<int:tab_id>/items/', views.AddOrderView.as_view(), name='add_order'),
    path('tabs/table/<int:table_id>/', views.TableTabsView.as_view(), name='table_tabs'),
    path('orders/', views.OrderListView.as_view(), name='order_list'),
    path('orders/kitchen/', views.KitchenQueueView.as_view(), name='kitchen_queue'),
    path('orders/<int:order_id>/', views.OrderDetailView.as_view(), name='order_detail'),
    path('menu-items/', views.MenuItemListView.as_view(), name='menu_item_list'),
]
