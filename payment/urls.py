from django.urls import path
from . import views

urlpatterns = [
    path('tabs/<int:tab_id>/payments/', views.TabPaymentsView.as_view(), name='tab_payments'),
]
