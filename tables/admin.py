from django.contrib import admin
from .models import Table, Waiter


@admin.register(Waiter)
class WaiterAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'active']
    list_filter = ['active']
    search_fields = ['name']


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ['id', 'number', 'capacity', 'location', 'waiter', 'status']
    list_filter = ['status', 'waiter']
    search_fields = ['number', 'location']
    readonly_fields = ['occupied_at', 'all_tabs_paid_at', 'released_at']
