"""
Tab accounts: opening, totals, settlement and cancellation of tabs.

Every write runs in one transaction. When a tab belongs to a table the
table row is locked before the tab row, so status changes driven by a tab
never race with a sibling tab being opened or closed.
"""
import logging

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from approvals import cancellation
from dinefloor.exceptions import InvalidState, NotFound
from payment import settlement
from tables import occupancy

from . import billing
from .models import Party, Tab

logger = logging.getLogger(__name__)


def list_tabs(status=None):
    tabs = Tab.objects.select_related('party', 'table').prefetch_related('orders__menu_item')
    if status:
        tabs = tabs.filter(status=status)
    return tabs.order_by('-created_at', '-id')


def get_tab(tab_id):
    try:
        return (
            Tab.objects.select_related('party', 'table')
            .prefetch_related('orders__menu_item')
            .get(id=tab_id)
        )
    except Tab.DoesNotExist:
        raise NotFound('Tab not found')


def open_tabs_for_table(table):
    return (
        Tab.objects.filter(table=table, status=Tab.OPEN)
        .select_related('party')
        .prefetch_related('orders__menu_item')
        .order_by('created_at', 'id')
    )


def count_open_tabs(table):
    return Tab.objects.filter(table=table, status=Tab.OPEN).count()


def episode_has_paid_tab(table):
    """True when a tab of the table's current occupancy was closed with payment"""
    if table.occupied_at is None:
        return False
    return Tab.objects.filter(
        table=table, status=Tab.CLOSED, paid_at__isnull=False, created_at__gte=table.occupied_at
    ).exists()


def _lock_tab(tab_id):
    try:
        return Tab.objects.select_for_update().get(id=tab_id)
    except Tab.DoesNotExist:
        raise NotFound('Tab not found')


def _lock_tab_with_table(tab_id):
    """Lock the owning table (if any) and then the tab itself."""
    row = Tab.objects.filter(id=tab_id).values('table_id').first()
    if row is None:
        raise NotFound('Tab not found')

    table = None
    if row['table_id'] is not None:
        table = occupancy.lock_table(row['table_id'])
    return _lock_tab(tab_id), table


def _require_open(tab, action):
    if tab.status != Tab.OPEN:
        raise InvalidState(f'Cannot {action} a {tab.status.lower()} tab')


def open_tab(table_id=None, person_name=None):
    """
    Open a tab for a seated party at a table, or a counter tab when no
    table is given.
    """
    with transaction.atomic():
        table = None
        if table_id is not None:
            table = occupancy.lock_table(table_id)
            occupancy.occupy(table)

        tab = Tab.objects.create(
            table=table,
            tab_type=Tab.TABLE if table else Tab.COUNTER,
            customer_seated_at=timezone.now() if table else None,
        )
        if person_name:
            Party.objects.create(tab=tab, name=person_name)

    logger.info("Opened %s tab %s%s", tab.tab_type.lower(), tab.id,
                f" at table {table.number}" if table else "")
    return tab


def recompute_total(tab):
    """Set the running total from the current line items. The tab row must be locked."""
    total_p = tab.orders.aggregate(total=Sum('line_total_p'))['total'] or 0
    tab.total_p = total_p
    tab.save(update_fields=['total_p'])
    return total_p


def lock_open_tab(tab_id, action):
    tab = _lock_tab(tab_id)
    _require_open(tab, action)
    return tab


def close_tab(tab_id, payment_method, paid_amount_p,
              service_charge_included=False, service_charge_paid_separately=False):
    with transaction.atomic():
        tab, table = _lock_tab_with_table(tab_id)
        _require_open(tab, 'close')

        subtotal_p = recompute_total(tab)
        final_total_p = billing.final_total_for(
            subtotal_p, service_charge_included, service_charge_paid_separately
        )
        now = timezone.now()

        tab.service_charge_included = service_charge_included
        tab.service_charge_paid_separately = service_charge_paid_separately
        tab.service_charge_p = billing.service_charge_for(subtotal_p)
        tab.final_total_p = final_total_p
        tab.payment_method = payment_method
        tab.paid_amount_p = paid_amount_p
        tab.change_amount_p = billing.change_for(payment_method, paid_amount_p, final_total_p)
        tab.paid_at = now
        tab.closed_at = now
        tab.status = Tab.CLOSED
        tab.save()

        settlement.record(tab)
        cancellation.reject_pending([tab.id])

        if table is not None:
            occupancy.reevaluate(table)

    logger.info("Closed tab %s: %s paid %s, total %s, change %s",
                tab.id, payment_method, paid_amount_p, final_total_p, tab.change_amount_p)
    return tab


def toggle_service_charge(tab_id, included):
    with transaction.atomic():
        tab = lock_open_tab(tab_id, 'change the service charge of')
        tab.service_charge_included = included
        tab.save(update_fields=['service_charge_included'])
    return tab


def request_bill(tab_id):
    with transaction.atomic():
        tab = lock_open_tab(tab_id, 'request the bill for')
        tab.bill_requested_at = timezone.now()
        tab.save(update_fields=['bill_requested_at'])

    logger.info("Bill requested for tab %s", tab.id)
    return tab


def cancel_tab(tab_id):
    """Void an open tab without payment. Used once a cancellation is approved."""
    with transaction.atomic():
        tab, table = _lock_tab_with_table(tab_id)
        _require_open(tab, 'cancel')

        tab.status = Tab.CANCELLED
        tab.closed_at = timezone.now()
        tab.save(update_fields=['status', 'closed_at'])

        if table is not None:
            occupancy.reevaluate(table)

    logger.info("Cancelled tab %s", tab.id)
    return tab


def delete_tab(tab_id):
    with transaction.atomic():
        tab, table = _lock_tab_with_table(tab_id)
        # tabs of earlier occupancies do not affect the table
        affects_table = table is not None and occupancy.in_current_episode(table, tab)

        tab.orders.all().delete()
        Party.objects.filter(tab=tab).delete()
        tab.delete()

        if affects_table:
            occupancy.reevaluate(table)

    logger.info("Deleted tab %s", tab_id)


def force_close_open_tabs(table):
    """
    Close every open tab of a table without payment. Compensating action
    for a table that is freed by hand; the table row must be locked.
    """
    tab_ids = list(
        Tab.objects.select_for_update()
        .filter(table=table, status=Tab.OPEN)
        .values_list('id', flat=True)
    )
    if not tab_ids:
        return []

    Tab.objects.filter(id__in=tab_ids).update(status=Tab.CLOSED, closed_at=timezone.now())
    cancellation.reject_pending(tab_ids)
    logger.warning("Force-closed tabs %s of table %s without payment", tab_ids, table.number)
    return tab_ids
