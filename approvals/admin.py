from django.contrib import admin
from .models import CancellationRequest, ReturnRequest


@admin.register(CancellationRequest)
class CancellationRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'tab', 'category', 'status', 'requested_by', 'approved_by', 'created_at']
    list_filter = ['status', 'category']
    readonly_fields = ['created_at', 'resolved_at']


@admin.register(ReturnRequest)
class ReturnRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'order', 'category', 'subcategory', 'status', 'created_by', 'created_at']
    list_filter = ['status', 'category']
    search_fields = ['description', 'order__menu_item__name']
    readonly_fields = ['created_at', 'resolved_at']
