from django.urls import path
from . import views

urlpatterns = [
    path('tables/', views.TableListView.as_view(), name='table_list'),
    path('tables/<int:table_id>/', views.TableDetailView.as_view(), name='table_detail'),
    path('tables/<int:table_id>/status/', views.TableStatusView.as_view(), name='table_status'),
    path('tables/<int:table_id>/release/', views.ReleaseTableView.as_view(), name='release_table'),
    path('tables/<int:table_id>/waiter/', views.AssignWaiterView.as_view(), name='assign_waiter'),
    path('tables/<int:table_id>/calculate/', views.CalculateTableView.as_view(), name='calculate_table'),
    path('waiters/', views.WaiterListView.as_view(), name='waiter_list'),
]
