"""
Table occupancy: the seating state machine of a table.

AVAILABLE/RESERVED -> OCCUPIED when a tab is opened, OCCUPIED ->
PAID_PENDING_RELEASE once every tab of the occupancy is settled and at least
one was paid, and back to AVAILABLE only through release(). Open-tab counts
are asked of the tab accounts, always with the table row locked.
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from django.utils import timezone

from dinefloor.exceptions import Conflict, DomainValidation, InvalidState, NotFound
from tabs import accounts, billing

from .models import Table, Waiter

logger = logging.getLogger(__name__)


def list_tables():
    return Table.objects.select_related('waiter').order_by('number')


def get_table(table_id):
    try:
        return Table.objects.select_related('waiter').get(id=table_id)
    except Table.DoesNotExist:
        raise NotFound('Table not found')


def lock_table(table_id):
    try:
        return Table.objects.select_for_update().get(id=table_id)
    except Table.DoesNotExist:
        raise NotFound('Table not found')


def _get_waiter(waiter_id):
    try:
        return Waiter.objects.get(id=waiter_id)
    except Waiter.DoesNotExist:
        raise NotFound('Waiter not found')


def list_waiters(active=None):
    waiters = Waiter.objects.all().order_by('name')
    if active is not None:
        waiters = waiters.filter(active=active)
    return waiters


def create_waiter(name, active=True):
    return Waiter.objects.create(name=name, active=active)


def create_table(number, capacity=4, location='', waiter_id=None):
    if number is None or number <= 0:
        raise DomainValidation('Table number must be a positive integer')

    waiter = _get_waiter(waiter_id) if waiter_id is not None else None

    if Table.objects.filter(number=number).exists():
        raise Conflict(f'Table {number} already exists')

    try:
        with transaction.atomic():
            table = Table.objects.create(
                number=number, capacity=capacity, location=location or '', waiter=waiter
            )
    except IntegrityError:
        raise Conflict(f'Table {number} already exists')

    logger.info("Created table %s", number)
    return table


def update_table(table_id, number=None, capacity=None, location=None):
    if number is not None and number <= 0:
        raise DomainValidation('Table number must be a positive integer')
    if capacity is not None and capacity <= 0:
        raise DomainValidation('Capacity must be a positive integer')

    try:
        with transaction.atomic():
            table = lock_table(table_id)

            if number is not None and number != table.number:
                if Table.objects.filter(number=number).exclude(id=table.id).exists():
                    raise Conflict(f'Table {number} already exists')
                table.number = number
            if capacity is not None:
                table.capacity = capacity
            if location is not None:
                table.location = location
            table.save(update_fields=['number', 'capacity', 'location', 'updated_at'])
    except IntegrityError:
        raise Conflict(f'Table {number} already exists')

    logger.info("Updated table %s", table.number)
    return table


def delete_table(table_id):
    """Remove a table that no tab has ever referenced."""
    try:
        with transaction.atomic():
            table = lock_table(table_id)
            if table.tabs.exists():
                raise InvalidState('Cannot delete a table that has tabs')
            table.delete()
    except ProtectedError:
        raise InvalidState('Cannot delete a table that has tabs')

    logger.info("Deleted table %s", table.number)


def assign_waiter(table_id, waiter_id):
    with transaction.atomic():
        table = lock_table(table_id)
        table.waiter = _get_waiter(waiter_id) if waiter_id is not None else None
        table.save(update_fields=['waiter', 'updated_at'])
    return table


def _transition(table, status, **fields):
    previous = table.status
    table.status = status
    for name, value in fields.items():
        setattr(table, name, value)
    table.save(update_fields=['status', 'updated_at', *fields])

    if previous != status:
        logger.info("Table %s: %s -> %s", table.number, previous, status)


def occupy(table):
    """A tab is being opened at a locked table."""
    if table.status in (Table.AVAILABLE, Table.RESERVED) or table.occupied_at is None:
        _transition(table, Table.OCCUPIED, occupied_at=timezone.now(), all_tabs_paid_at=None)
    else:
        _transition(table, Table.OCCUPIED, all_tabs_paid_at=None)


def in_current_episode(table, tab):
    """True when the tab was opened during the table's current occupancy"""
    if table.status not in (Table.OCCUPIED, Table.PAID_PENDING_RELEASE) or table.occupied_at is None:
        return False
    return tab.created_at >= table.occupied_at


def reevaluate(table):
    """Derive the status of a locked table after one of its tabs was settled or removed."""
    if accounts.count_open_tabs(table) > 0:
        _transition(table, Table.OCCUPIED)
    elif accounts.episode_has_paid_tab(table):
        if table.status != Table.PAID_PENDING_RELEASE:
            _transition(table, Table.PAID_PENDING_RELEASE, all_tabs_paid_at=timezone.now())
    else:
        _free(table)


def _free(table):
    _transition(table, Table.AVAILABLE, occupied_at=None, all_tabs_paid_at=None)


def release(table_id):
    with transaction.atomic():
        table = lock_table(table_id)
        if accounts.count_open_tabs(table) > 0:
            raise InvalidState('The table still has open tabs')

        _transition(table, Table.AVAILABLE, occupied_at=None, all_tabs_paid_at=None,
                    released_at=timezone.now())
    return table


def set_status(table_id, status):
    """
    Manual status override.

    Setting AVAILABLE frees the table even with tabs still open: those tabs
    are closed first, without payment.
    """
    if status not in dict(Table.STATUS_CHOICES):
        raise DomainValidation(f'Unknown table status {status}')

    with transaction.atomic():
        table = lock_table(table_id)

        if status == Table.AVAILABLE:
            accounts.force_close_open_tabs(table)
            _transition(table, Table.AVAILABLE, occupied_at=None, all_tabs_paid_at=None,
                        released_at=timezone.now())
        elif status == Table.OCCUPIED:
            occupy(table)
        elif status == Table.RESERVED:
            if accounts.count_open_tabs(table) > 0:
                raise InvalidState('Cannot reserve a table with open tabs')
            _transition(table, Table.RESERVED, occupied_at=None, all_tabs_paid_at=None)
        else:
            raise InvalidState('A table becomes paid pending release only when its last tab is paid')
    return table


def calculate_table(table_id):
    """Combined bill of every open tab at a table. Read only."""
    table = get_table(table_id)

    breakdowns = [
        billing.summarize(tab, list(tab.orders.all()))
        for tab in accounts.open_tabs_for_table(table)
    ]
    applied_charges = [
        b['final_total_p'] - b['subtotal_p'] for b in breakdowns
    ]

    return {
        'table_id': table.id,
        'table_number': table.number,
        'tabs': breakdowns,
        'grand_total_p': sum(b['final_total_p'] for b in breakdowns),
        'total_service_charge_p': sum(applied_charges),
    }
