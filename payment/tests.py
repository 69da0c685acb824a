from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APITestCase
from rest_framework import status

from dinefloor.exceptions import NotFound
from tables import occupancy
from tables.models import Table
from tabs import accounts, ledger
from tabs.models import MenuItem
from . import settlement
from .models import Payment


class SettlementTests(TestCase):
    """Test a payment is recorded for every paid tab"""

    def setUp(self):
        self.menu_item = MenuItem.objects.create(name="Roast", unit_price_p=2500)  # £25.00
        self.tab = accounts.open_tab()
        ledger.add_order(self.tab.id, self.menu_item.id, 4)

    def test_closing_records_the_payment(self):
        accounts.close_tab(self.tab.id, 'CASH', 15000, service_charge_included=True)

        payment = Payment.objects.get(tab=self.tab)
        self.assertEqual(payment.method, 'CASH')
        self.assertEqual(payment.amount_p, 11000)
        self.assertEqual(payment.paid_amount_p, 15000)
        self.assertEqual(payment.change_amount_p, 4000)
        self.assertEqual(payment.service_charge_p, 1000)
        self.assertEqual(payment.currency, 'gbp')

    def test_card_payment_has_no_change(self):
        accounts.close_tab(self.tab.id, 'DEBIT_CARD', 12000)

        payment = Payment.objects.get(tab=self.tab)
        self.assertEqual(payment.amount_p, 10000)
        self.assertEqual(payment.change_amount_p, 0)

    def test_cancelled_tab_has_no_payment(self):
        accounts.cancel_tab(self.tab.id)

        self.assertEqual(Payment.objects.count(), 0)

    def test_force_closed_tab_has_no_payment(self):
        table = Table.objects.create(number=2)
        tab = accounts.open_tab(table_id=table.id)
        occupancy.set_status(table.id, Table.AVAILABLE)

        self.assertFalse(Payment.objects.filter(tab=tab).exists())

    def test_payments_for_unknown_tab(self):
        with self.assertRaises(NotFound):
            settlement.payments_for_tab(9999)


class PaymentAPITests(APITestCase):
    """Test the payments endpoint"""

    def setUp(self):
        self.menu_item = MenuItem.objects.create(name="Roast", unit_price_p=2500)
        self.tab = accounts.open_tab()
        ledger.add_order(self.tab.id, self.menu_item.id, 2)
        # Add API key to all requests
        self.client.defaults['HTTP_X_API_KEY'] = 'demo'

    def test_list_payments(self):
        accounts.close_tab(self.tab.id, 'PIX', 5000)

        response = self.client.get(reverse('tab_payments', kwargs={'tab_id': self.tab.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['method'], 'PIX')
        self.assertEqual(response.data[0]['amount_p'], 5000)

    def test_open_tab_has_no_payments(self):
        response = self.client.get(reverse('tab_payments', kwargs={'tab_id': self.tab.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

    def test_unknown_tab(self):
        response = self.client.get(reverse('tab_payments', kwargs={'tab_id': 9999}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'not_found')


class EndToEndTests(APITestCase):
    """Test the full floor flow through the API"""

    def setUp(self):
        self.coffee = MenuItem.objects.create(name="Coffee", category='BEVERAGE', unit_price_p=350)
        self.meal = MenuItem.objects.create(name="Kids Meal", unit_price_p=800)
        self.table = Table.objects.create(number=6)
        # Add API key to all requests
        self.client.defaults['HTTP_X_API_KEY'] = 'demo'

    def test_complete_table_flow(self):
        response = self.client.post(reverse('tab_list'), {'table_id': self.table.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        tab_id = response.data['id']

        url = reverse('add_order', kwargs={'tab_id': tab_id})
        self.client.post(url, {'menu_item_id': self.coffee.id, 'quantity': 2}, format='json')
        response = self.client.post(url, {'menu_item_id': self.meal.id, 'quantity': 1}, format='json')
        # 2 x £3.50 + £8.00
        self.assertEqual(response.data['tab_total_p'], 1500)

        response = self.client.post(reverse('request_bill', kwargs={'tab_id': tab_id}))
        self.assertIsNotNone(response.data['bill_requested_at'])

        response = self.client.post(
            reverse('close_tab', kwargs={'tab_id': tab_id}),
            {'payment_method': 'CASH', 'paid_amount_p': 2000, 'service_charge_included': True},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        # £15.00 + £1.50 service charge
        self.assertEqual(response.data['final_total_p'], 1650)
        self.assertEqual(response.data['change_amount_p'], 350)

        response = self.client.get(reverse('table_detail', kwargs={'table_id': self.table.id}))
        self.assertEqual(response.data['status'], 'PAID_PENDING_RELEASE')

        response = self.client.get(reverse('tab_payments', kwargs={'tab_id': tab_id}))
        self.assertEqual(response.data[0]['amount_p'], 1650)
