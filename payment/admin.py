from django.contrib import admin
from .models import Payment

# Register your models here.
@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['id', 'tab', 'method', 'amount_p', 'paid_amount_p', 'change_amount_p', 'created_at']
    list_filter = ['method', 'created_at']
    search_fields = ['tab__table__number']
    readonly_fields = ['created_at']
