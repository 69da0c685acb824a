from django.conf import settings

from dinefloor.exceptions import NotFound
from tabs.models import Tab

from .models import Payment


def record(tab):
    """Write the settlement of a tab that has just been closed with payment"""
    return Payment.objects.create(
        tab=tab,
        method=tab.payment_method,
        amount_p=tab.final_total_p,
        paid_amount_p=tab.paid_amount_p,
        change_amount_p=tab.change_amount_p or 0,
        service_charge_p=tab.service_charge_p,
        currency=settings.CURRENCY,
    )


def payments_for_tab(tab_id):
    if not Tab.objects.filter(id=tab_id).exists():
        raise NotFound('Tab not found')
    return Payment.objects.filter(tab_id=tab_id).order_by('created_at', 'id')
