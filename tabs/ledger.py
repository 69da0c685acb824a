"""
Order ledger: line items of a tab and their kitchen progress.

Each mutation locks the owning tab and recomputes its running total in the
same transaction, so concurrent edits on one tab are applied one at a time
and the stored total always matches the line items.
"""
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from dinefloor.exceptions import DomainValidation, InvalidState, NotFound

from . import accounts
from .models import MenuItem, Order

logger = logging.getLogger(__name__)

STATUS_TIMESTAMPS = {
    Order.PREPARING: 'started_preparing_at',
    Order.READY: 'ready_at',
    Order.DELIVERED: 'delivered_at',
}


def _validate_quantity(quantity):
    if quantity is None or quantity <= 0:
        raise DomainValidation('Quantity must be a positive integer')


def _check_transition(order, status):
    if status not in dict(Order.STATUS_CHOICES):
        raise DomainValidation(f'Unknown order status {status}')

    allowed = settings.ORDER_STATUS_TRANSITIONS.get(order.status, set())
    if status not in allowed:
        raise InvalidState(f'Order cannot move from {order.status} to {status}')


def list_menu_items(available=None):
    items = MenuItem.objects.all().order_by('category', 'name')
    if available is not None:
        items = items.filter(available=available)
    return items


def list_orders(tab_id=None):
    orders = Order.objects.select_related('menu_item', 'tab__party', 'tab__table')
    if tab_id is not None:
        orders = orders.filter(tab_id=tab_id)
    return orders.order_by('-created_at', '-id')


def get_order(order_id):
    try:
        return Order.objects.select_related('menu_item', 'tab__party', 'tab__table').get(id=order_id)
    except Order.DoesNotExist:
        raise NotFound('Order not found')


def add_order(tab_id, menu_item_id, quantity, notes=''):
    _validate_quantity(quantity)

    with transaction.atomic():
        tab = accounts.lock_open_tab(tab_id, 'add orders to')

        try:
            menu_item = MenuItem.objects.get(id=menu_item_id)
        except MenuItem.DoesNotExist:
            raise NotFound('Menu item not found')

        if not menu_item.available:
            raise DomainValidation(f'{menu_item.name} is not available')

        order = Order.objects.create(
            tab=tab,
            menu_item=menu_item,
            quantity=quantity,
            unit_price_p=menu_item.unit_price_p,
            line_total_p=menu_item.unit_price_p * quantity,
            notes=notes or '',
            service_charge_included=tab.service_charge_included,
            sent_to_kitchen_at=timezone.now(),
        )
        accounts.recompute_total(tab)

    logger.info("Order %s: %s x %s on tab %s", order.id, quantity, menu_item.name, tab.id)
    return order


def update_order(order_id, quantity=None, status=None, notes=None):
    with transaction.atomic():
        row = Order.objects.filter(id=order_id).values('tab_id', 'quantity').first()
        if row is None:
            raise NotFound('Order not found')

        if quantity is not None:
            _validate_quantity(quantity)
            if quantity == row['quantity']:
                quantity = None
            else:
                tab = accounts.lock_open_tab(row['tab_id'], 'change orders of')

        order = Order.objects.select_for_update().get(id=order_id)

        if status is not None and status != order.status:
            _check_transition(order, status)
            order.status = status
            setattr(order, STATUS_TIMESTAMPS[status], timezone.now())

        if notes is not None:
            order.notes = notes

        if quantity is not None and quantity != order.quantity:
            # priced at the unit price captured when the order was placed
            order.quantity = quantity
            order.line_total_p = order.unit_price_p * quantity
            order.save()
            accounts.recompute_total(tab)
        else:
            order.save()

    logger.info("Order %s updated: status %s, quantity %s", order.id, order.status, order.quantity)
    return order


def delete_order(order_id):
    with transaction.atomic():
        tab_id = Order.objects.filter(id=order_id).values_list('tab_id', flat=True).first()
        if tab_id is None:
            raise NotFound('Order not found')

        tab = accounts.lock_open_tab(tab_id, 'remove orders from')
        Order.objects.filter(id=order_id).delete()
        accounts.recompute_total(tab)

    logger.info("Order %s removed from tab %s", order_id, tab_id)


def list_kitchen_queue():
    """Orders still in the kitchen, oldest first"""
    return (
        Order.objects.filter(status__in=Order.KITCHEN_STATUSES)
        .select_related('menu_item', 'tab__party', 'tab__table__waiter')
        .order_by('created_at', 'id')
    )
