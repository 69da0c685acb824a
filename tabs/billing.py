from decimal import Decimal

from django.conf import settings

from dinefloor.exceptions import NotFound

from .models import Tab


def service_charge_rate():
    return Decimal(settings.SERVICE_CHARGE_RATE)


def service_charge_for(subtotal_p):
    """Service charge on a subtotal, truncated to whole pence"""
    return int(Decimal(subtotal_p) * service_charge_rate())


def final_total_for(subtotal_p, service_charge_included, service_charge_paid_separately):
    """
    Amount payable for a subtotal.

    The service charge is added only when it is included and not settled
    separately; a separately paid charge is still tracked on the tab.
    """
    if service_charge_included and not service_charge_paid_separately:
        return subtotal_p + service_charge_for(subtotal_p)
    return subtotal_p


def change_for(payment_method, paid_amount_p, final_total_p):
    if payment_method != Tab.CASH:
        return 0
    return max(0, paid_amount_p - final_total_p)


def summarize(tab, orders):
    """Billing projection of a tab over the given line items. Pure."""
    subtotal_p = sum(order.line_total_p for order in orders)
    party = getattr(tab, 'party', None)

    return {
        'tab_id': tab.id,
        'person_name': party.name if party else None,
        'status': tab.status,
        'items': orders,
        'subtotal_p': subtotal_p,
        'service_charge_p': service_charge_for(subtotal_p),
        'service_charge_included': tab.service_charge_included,
        'service_charge_paid_separately': tab.service_charge_paid_separately,
        'final_total_p': final_total_for(
            subtotal_p, tab.service_charge_included, tab.service_charge_paid_separately
        ),
    }


def calculate_tab(tab_id):
    try:
        tab = Tab.objects.select_related('party').get(id=tab_id)
    except Tab.DoesNotExist:
        raise NotFound('Tab not found')

    orders = list(tab.orders.select_related('menu_item'))
    return summarize(tab, orders)
