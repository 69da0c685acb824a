import threading

from django.contrib.auth.models import Group, User
from django.db import connection
from django.test import TestCase, TransactionTestCase, skipUnlessDBFeature
from django.urls import reverse
from rest_framework.test import APITestCase
from rest_framework import status

from dinefloor.exceptions import DomainValidation, InvalidState, NotFound
from dinefloor.permissions import ADMIN, KITCHEN, WAITER
from tables.models import Table
from . import accounts, billing, ledger
from .models import MenuItem, Order, Party, Tab


def staff_member(username, role=None, **kwargs):
    user = User.objects.create_user(username=username, **kwargs)
    if role:
        user.groups.add(Group.objects.get_or_create(name=role)[0])
    return user


class BillingTests(TestCase):
    """Test service charge and change arithmetic"""

    def test_service_charge_is_ten_percent(self):
        """£100.00 subtotal carries a £10.00 service charge"""
        self.assertEqual(billing.service_charge_for(10000), 1000)

    def test_service_charge_truncates_to_pence(self):
        # 10% of £10.55 = 105.5p
        self.assertEqual(billing.service_charge_for(1055), 105)

    def test_final_total_with_service_charge(self):
        self.assertEqual(billing.final_total_for(10000, True, False), 11000)

    def test_final_total_without_service_charge(self):
        self.assertEqual(billing.final_total_for(10000, False, False), 10000)

    def test_service_charge_paid_separately_is_not_added(self):
        """A charge settled separately is left out of the final total"""
        self.assertEqual(billing.final_total_for(10000, True, True), 10000)

    def test_cash_change(self):
        # £150.00 handed over on a £110.00 bill
        self.assertEqual(billing.change_for('CASH', 15000, 11000), 4000)

    def test_no_change_for_card_or_pix(self):
        self.assertEqual(billing.change_for('PIX', 15000, 11000), 0)
        self.assertEqual(billing.change_for('CREDIT_CARD', 15000, 11000), 0)

    def test_cash_underpayment_gives_no_change(self):
        self.assertEqual(billing.change_for('CASH', 5000, 11000), 0)


class OrderLedgerTests(TestCase):
    """Test line items keep the tab total in step"""

    def setUp(self):
        self.pizza = MenuItem.objects.create(name="Pizza", unit_price_p=1200)
        self.coffee = MenuItem.objects.create(name="Coffee", category='BEVERAGE', unit_price_p=350)
        self.tab = accounts.open_tab(person_name="Ana")

    def assertTotalMatchesOrders(self):
        self.tab.refresh_from_db()
        expected = sum(order.line_total_p for order in self.tab.orders.all())
        self.assertEqual(self.tab.total_p, expected)

    def test_add_order_freezes_price_and_updates_total(self):
        order = ledger.add_order(self.tab.id, self.pizza.id, 2)

        self.assertEqual(order.unit_price_p, 1200)
        self.assertEqual(order.line_total_p, 2400)
        self.assertEqual(order.status, Order.PENDING)
        self.assertIsNotNone(order.sent_to_kitchen_at)
        self.tab.refresh_from_db()
        self.assertEqual(self.tab.total_p, 2400)

    def test_total_follows_add_update_and_delete(self):
        pizza = ledger.add_order(self.tab.id, self.pizza.id, 1)
        coffee = ledger.add_order(self.tab.id, self.coffee.id, 2)
        self.assertTotalMatchesOrders()

        ledger.update_order(pizza.id, quantity=3)
        self.assertTotalMatchesOrders()
        self.assertEqual(self.tab.total_p, 3 * 1200 + 2 * 350)

        ledger.delete_order(coffee.id)
        self.assertTotalMatchesOrders()
        self.assertEqual(self.tab.total_p, 3600)

    def test_quantity_change_uses_captured_price(self):
        order = ledger.add_order(self.tab.id, self.pizza.id, 1)

        self.pizza.unit_price_p = 1500
        self.pizza.save()

        order = ledger.update_order(order.id, quantity=2)
        self.assertEqual(order.line_total_p, 2400)

    def test_invalid_quantity(self):
        with self.assertRaises(DomainValidation):
            ledger.add_order(self.tab.id, self.pizza.id, 0)
        self.assertEqual(Order.objects.count(), 0)

    def test_unavailable_menu_item(self):
        self.pizza.available = False
        self.pizza.save()

        with self.assertRaises(DomainValidation):
            ledger.add_order(self.tab.id, self.pizza.id, 1)

    def test_unknown_menu_item(self):
        with self.assertRaises(NotFound):
            ledger.add_order(self.tab.id, 9999, 1)

    def test_cannot_add_to_closed_tab(self):
        accounts.close_tab(self.tab.id, 'PIX', 0)

        with self.assertRaises(InvalidState):
            ledger.add_order(self.tab.id, self.pizza.id, 1)

    def test_unchanged_quantity_on_closed_tab_is_accepted(self):
        order = ledger.add_order(self.tab.id, self.pizza.id, 2)
        accounts.close_tab(self.tab.id, 'PIX', 0)

        order = ledger.update_order(order.id, quantity=2, notes='no basil')

        self.assertEqual(order.quantity, 2)
        self.assertEqual(order.notes, 'no basil')
        self.tab.refresh_from_db()
        self.assertEqual(self.tab.total_p, 2400)

    def test_quantity_change_on_closed_tab_refused(self):
        order = ledger.add_order(self.tab.id, self.pizza.id, 2)
        accounts.close_tab(self.tab.id, 'PIX', 0)

        with self.assertRaises(InvalidState):
            ledger.update_order(order.id, quantity=3)
        order.refresh_from_db()
        self.assertEqual(order.line_total_p, 2400)

    def test_status_progress_is_timestamped(self):
        order = ledger.add_order(self.tab.id, self.pizza.id, 1)

        order = ledger.update_order(order.id, status=Order.PREPARING)
        self.assertIsNotNone(order.started_preparing_at)

        order = ledger.update_order(order.id, status=Order.DELIVERED)
        self.assertIsNotNone(order.delivered_at)
        self.assertIsNone(order.ready_at)

    def test_status_cannot_move_backwards(self):
        order = ledger.add_order(self.tab.id, self.pizza.id, 1)
        ledger.update_order(order.id, status=Order.DELIVERED)

        with self.assertRaises(InvalidState):
            ledger.update_order(order.id, status=Order.PREPARING)

    def test_kitchen_queue_skips_delivered_orders(self):
        first = ledger.add_order(self.tab.id, self.pizza.id, 1)
        second = ledger.add_order(self.tab.id, self.coffee.id, 1)
        ledger.update_order(first.id, status=Order.DELIVERED)

        self.assertEqual([order.id for order in ledger.list_kitchen_queue()], [second.id])


class TabAccountTests(TestCase):
    """Test opening, calculating and closing tabs"""

    def setUp(self):
        self.table = Table.objects.create(number=5)
        self.steak = MenuItem.objects.create(name="Steak", unit_price_p=5000)

    def test_open_tab_at_table(self):
        tab = accounts.open_tab(table_id=self.table.id, person_name="Ana")

        self.assertEqual(tab.tab_type, Tab.TABLE)
        self.assertEqual(tab.status, Tab.OPEN)
        self.assertIsNotNone(tab.customer_seated_at)
        self.assertEqual(tab.party.name, "Ana")

    def test_counter_tab_has_no_table(self):
        tab = accounts.open_tab()

        self.assertEqual(tab.tab_type, Tab.COUNTER)
        self.assertIsNone(tab.table)
        self.assertFalse(Party.objects.filter(tab=tab).exists())

    def test_open_tab_at_unknown_table(self):
        with self.assertRaises(NotFound):
            accounts.open_tab(table_id=9999)
        self.assertEqual(Tab.objects.count(), 0)

    def test_calculate_does_not_change_the_tab(self):
        tab = accounts.open_tab(table_id=self.table.id)
        ledger.add_order(tab.id, self.steak.id, 2)
        accounts.toggle_service_charge(tab.id, True)

        first = billing.calculate_tab(tab.id)
        second = billing.calculate_tab(tab.id)

        self.assertEqual(first['subtotal_p'], 10000)
        self.assertEqual(first['service_charge_p'], 1000)
        self.assertEqual(first['final_total_p'], 11000)
        self.assertEqual(first['final_total_p'], second['final_total_p'])

        tab.refresh_from_db()
        self.assertEqual(tab.status, Tab.OPEN)
        self.assertIsNone(tab.final_total_p)

    def test_close_with_cash_and_service_charge(self):
        tab = accounts.open_tab(table_id=self.table.id)
        ledger.add_order(tab.id, self.steak.id, 2)

        tab = accounts.close_tab(tab.id, 'CASH', 15000, service_charge_included=True)

        self.assertEqual(tab.status, Tab.CLOSED)
        self.assertEqual(tab.service_charge_p, 1000)
        self.assertEqual(tab.final_total_p, 11000)
        self.assertEqual(tab.change_amount_p, 4000)
        self.assertIsNotNone(tab.paid_at)
        self.assertIsNotNone(tab.closed_at)

    def test_close_with_service_charge_paid_separately(self):
        tab = accounts.open_tab(table_id=self.table.id)
        ledger.add_order(tab.id, self.steak.id, 2)

        tab = accounts.close_tab(tab.id, 'PIX', 10000, service_charge_included=True,
                                 service_charge_paid_separately=True)

        self.assertEqual(tab.final_total_p, 10000)
        self.assertEqual(tab.service_charge_p, 1000)
        self.assertEqual(tab.change_amount_p, 0)

    def test_cannot_close_twice(self):
        tab = accounts.open_tab()
        accounts.close_tab(tab.id, 'CASH', 0)

        with self.assertRaises(InvalidState):
            accounts.close_tab(tab.id, 'CASH', 0)

    def test_request_bill(self):
        tab = accounts.open_tab()
        tab = accounts.request_bill(tab.id)
        self.assertIsNotNone(tab.bill_requested_at)

    def test_delete_tab_removes_orders_and_party(self):
        tab = accounts.open_tab(table_id=self.table.id, person_name="Ana")
        ledger.add_order(tab.id, self.steak.id, 1)

        accounts.delete_tab(tab.id)

        self.assertFalse(Tab.objects.filter(id=tab.id).exists())
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(Party.objects.count(), 0)
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.AVAILABLE)


class TabAPITests(APITestCase):
    """Test tab and order API endpoints"""

    def setUp(self):
        self.menu_item = MenuItem.objects.create(name="Test Item", unit_price_p=500)  # £5.00
        self.table = Table.objects.create(number=3)
        # Add API key to all requests
        self.client.defaults['HTTP_X_API_KEY'] = 'demo'

    def test_open_tab(self):
        url = reverse('tab_list')
        response = self.client.post(url, {'table_id': self.table.id, 'person_name': 'Ana'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'OPEN')
        self.assertEqual(response.data['table_number'], 3)
        self.assertEqual(response.data['party']['name'], 'Ana')

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.OCCUPIED)

    def test_add_order_to_tab(self):
        tab = accounts.open_tab(table_id=self.table.id)

        url = reverse('add_order', kwargs={'tab_id': tab.id})
        response = self.client.post(url, {'menu_item_id': self.menu_item.id, 'quantity': 2}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['unit_price_p'], 500)
        self.assertEqual(response.data['line_total_p'], 1000)
        self.assertEqual(response.data['tab_total_p'], 1000)

    def test_add_unavailable_item(self):
        self.menu_item.available = False
        self.menu_item.save()
        tab = accounts.open_tab()

        url = reverse('add_order', kwargs={'tab_id': tab.id})
        response = self.client.post(url, {'menu_item_id': self.menu_item.id}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'validation')

    def test_zero_quantity_rejected(self):
        tab = accounts.open_tab()

        url = reverse('add_order', kwargs={'tab_id': tab.id})
        response = self.client.post(url, {'menu_item_id': self.menu_item.id, 'quantity': 0}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Order.objects.count(), 0)

    def test_unknown_tab(self):
        response = self.client.get(reverse('tab_detail', kwargs={'tab_id': 9999}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'Tab not found', 'code': 'not_found'})

    def test_calculate_tab(self):
        tab = accounts.open_tab()
        ledger.add_order(tab.id, self.menu_item.id, 20)
        accounts.toggle_service_charge(tab.id, True)

        response = self.client.get(reverse('calculate_tab', kwargs={'tab_id': tab.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['subtotal_p'], 10000)
        self.assertEqual(response.data['service_charge_p'], 1000)
        self.assertEqual(response.data['final_total_p'], 11000)
        self.assertEqual(len(response.data['items']), 1)

    def test_close_tab_with_cash(self):
        tab = accounts.open_tab(table_id=self.table.id)
        ledger.add_order(tab.id, self.menu_item.id, 20)

        url = reverse('close_tab', kwargs={'tab_id': tab.id})
        data = {
            'payment_method': 'CASH',
            'paid_amount_p': 15000,
            'service_charge_included': True,
        }
        response = self.client.post(url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'CLOSED')
        self.assertEqual(response.data['final_total_p'], 11000)
        self.assertEqual(response.data['change_amount_p'], 4000)

        # The only tab of the table was paid
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.PAID_PENDING_RELEASE)

    def test_close_closed_tab_conflicts(self):
        tab = accounts.open_tab()
        accounts.close_tab(tab.id, 'PIX', 0)

        url = reverse('close_tab', kwargs={'tab_id': tab.id})
        response = self.client.post(url, {'payment_method': 'PIX', 'paid_amount_p': 0}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'invalid_state')

    def test_update_order_status(self):
        tab = accounts.open_tab()
        order = ledger.add_order(tab.id, self.menu_item.id, 1)

        url = reverse('order_detail', kwargs={'order_id': order.id})
        response = self.client.patch(url, {'status': 'READY'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'READY')
        self.assertIsNotNone(response.data['ready_at'])

        response = self.client.patch(url, {'status': 'PENDING'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_delete_order(self):
        tab = accounts.open_tab()
        order = ledger.add_order(tab.id, self.menu_item.id, 2)

        response = self.client.delete(reverse('order_detail', kwargs={'order_id': order.id}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        tab.refresh_from_db()
        self.assertEqual(tab.total_p, 0)

    def test_kitchen_queue_needs_a_kitchen_role(self):
        tab = accounts.open_tab(table_id=self.table.id, person_name='Ana')
        ledger.add_order(tab.id, self.menu_item.id, 1)
        url = reverse('kitchen_queue')

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        cook = staff_member('cook', KITCHEN)
        response = self.client.get(url, HTTP_X_STAFF_ID=str(cook.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['person_name'], 'Ana')
        self.assertEqual(response.data[0]['table_number'], 3)

    def test_only_admin_deletes_tabs(self):
        tab = accounts.open_tab(table_id=self.table.id)
        url = reverse('tab_detail', kwargs={'tab_id': tab.id})

        waiter = staff_member('waiter', WAITER)
        response = self.client.delete(url, HTTP_X_STAFF_ID=str(waiter.id))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        manager = staff_member('manager', ADMIN)
        response = self.client.delete(url, HTTP_X_STAFF_ID=str(manager.id))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(Tab.objects.count(), 0)

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.AVAILABLE)

    def test_service_charge_toggle_needs_floor_staff(self):
        tab = accounts.open_tab()
        url = reverse('tab_service_charge', kwargs={'tab_id': tab.id})

        cook = staff_member('cook', KITCHEN)
        response = self.client.patch(url, {'included': True}, format='json', HTTP_X_STAFF_ID=str(cook.id))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        boss = staff_member('boss', is_superuser=True)
        response = self.client.patch(url, {'included': True}, format='json', HTTP_X_STAFF_ID=str(boss.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['service_charge_included'])

    def test_menu_items(self):
        response = self.client.get(reverse('menu_item_list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['name'], 'Test Item')

    def test_list_orders_of_a_tab(self):
        tab = accounts.open_tab()
        ledger.add_order(tab.id, self.menu_item.id, 1)
        ledger.add_order(accounts.open_tab().id, self.menu_item.id, 1)

        response = self.client.get(reverse('order_list'), {'tab_id': tab.id})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_list_orders_with_malformed_tab_id(self):
        response = self.client.get(reverse('order_list'), {'tab_id': 'abc'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'validation')


class ConcurrentOrderTests(TransactionTestCase):
    """Test the running total survives orders committed one after another"""

    def setUp(self):
        self.pizza = MenuItem.objects.create(name="Pizza", unit_price_p=1200)
        self.coffee = MenuItem.objects.create(name="Coffee", category='BEVERAGE', unit_price_p=350)
        self.tab = accounts.open_tab(person_name="Ana")

    def assertTotalMatchesOrders(self, expected):
        self.tab.refresh_from_db()
        self.assertEqual(self.tab.total_p, sum(order.line_total_p for order in self.tab.orders.all()))
        self.assertEqual(self.tab.total_p, expected)

    def test_committed_orders_add_up(self):
        ledger.add_order(self.tab.id, self.pizza.id, 1)
        ledger.add_order(self.tab.id, self.coffee.id, 2)

        self.assertTotalMatchesOrders(1200 + 700)

    @skipUnlessDBFeature('has_select_for_update')
    def test_parallel_orders_add_up(self):
        errors = []

        def place(menu_item_id):
            try:
                ledger.add_order(self.tab.id, menu_item_id, 1)
            except Exception as exc:
                errors.append(exc)
            finally:
                connection.close()

        threads = [
            threading.Thread(target=place, args=(item.id,))
            for item in (self.pizza, self.coffee, self.pizza, self.coffee)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        self.assertTotalMatchesOrders(2 * 1200 + 2 * 350)
