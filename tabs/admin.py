from django.contrib import admin
from .models import MenuItem, Order, Party, Tab

# Register your models here.
@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'category', 'unit_price_p', 'available']
    search_fields = ['name']
    list_filter = ['category', 'available']


class OrderInline(admin.TabularInline):
    model = Order
    extra = 0
    readonly_fields = ['unit_price_p', 'line_total_p', 'created_at']


@admin.register(Tab)
class TabAdmin(admin.ModelAdmin):
    list_display = ['id', 'table', 'tab_type', 'status', 'created_at', 'total_p', 'final_total_p']
    list_filter = ['status', 'tab_type', 'created_at']
    search_fields = ['table__number', 'party__name']
    readonly_fields = ['created_at', 'closed_at', 'paid_at', 'total_p']
    inlines = [OrderInline]


@admin.register(Party)
class PartyAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'tab', 'created_at']
    search_fields = ['name']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['tab', 'menu_item', 'quantity', 'unit_price_p', 'line_total_p', 'status']
    list_filter = ['status', 'tab__status', 'menu_item']
    search_fields = ['tab__table__number', 'menu_item__name']
