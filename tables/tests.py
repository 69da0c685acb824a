from unittest import mock

from django.contrib.auth.models import Group, User
from django.db.models.query import QuerySet
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APITestCase
from rest_framework import status

from dinefloor.exceptions import Conflict, DomainValidation, InvalidState
from dinefloor.permissions import ADMIN, WAITER
from tabs import accounts, ledger
from tabs.models import MenuItem, Tab
from . import occupancy
from .models import Table, Waiter


class TableOccupancyTests(TestCase):
    """Test the table status follows its tabs"""

    def setUp(self):
        self.table = occupancy.create_table(7)
        self.soup = MenuItem.objects.create(name="Soup", unit_price_p=600)

    def assertStatus(self, expected):
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, expected)

    def test_new_table_is_available(self):
        self.assertStatus(Table.AVAILABLE)
        self.assertIsNone(self.table.occupied_at)

    def test_opening_a_tab_occupies_the_table(self):
        accounts.open_tab(table_id=self.table.id)

        self.assertStatus(Table.OCCUPIED)
        self.assertIsNotNone(self.table.occupied_at)

    def test_pending_release_only_after_every_tab_is_paid(self):
        first = accounts.open_tab(table_id=self.table.id, person_name="Ana")
        second = accounts.open_tab(table_id=self.table.id, person_name="Bo")

        accounts.close_tab(first.id, 'CASH', 0)
        self.assertStatus(Table.OCCUPIED)

        accounts.close_tab(second.id, 'CREDIT_CARD', 0)
        self.assertStatus(Table.PAID_PENDING_RELEASE)
        self.assertIsNotNone(self.table.all_tabs_paid_at)

    def test_second_tab_keeps_the_occupancy(self):
        accounts.open_tab(table_id=self.table.id)
        self.table.refresh_from_db()
        occupied_at = self.table.occupied_at

        accounts.open_tab(table_id=self.table.id)

        self.table.refresh_from_db()
        self.assertEqual(self.table.occupied_at, occupied_at)

    def test_cancelling_the_only_tab_frees_the_table(self):
        tab = accounts.open_tab(table_id=self.table.id)

        accounts.cancel_tab(tab.id)

        self.assertStatus(Table.AVAILABLE)

    def test_cancelling_after_a_paid_sibling(self):
        paid = accounts.open_tab(table_id=self.table.id)
        walked_out = accounts.open_tab(table_id=self.table.id)
        accounts.close_tab(paid.id, 'PIX', 0)

        accounts.cancel_tab(walked_out.id)

        self.assertStatus(Table.PAID_PENDING_RELEASE)

    def test_release_after_payment(self):
        tab = accounts.open_tab(table_id=self.table.id)
        accounts.close_tab(tab.id, 'CASH', 0)

        table = occupancy.release(self.table.id)

        self.assertEqual(table.status, Table.AVAILABLE)
        self.assertIsNotNone(table.released_at)
        self.assertIsNone(table.occupied_at)

    def test_release_refused_with_open_tabs(self):
        accounts.open_tab(table_id=self.table.id)

        with self.assertRaises(InvalidState):
            occupancy.release(self.table.id)
        self.assertStatus(Table.OCCUPIED)

    def test_new_party_after_release_starts_a_new_occupancy(self):
        tab = accounts.open_tab(table_id=self.table.id)
        accounts.close_tab(tab.id, 'CASH', 0)
        occupancy.release(self.table.id)

        tab = accounts.open_tab(table_id=self.table.id)
        accounts.cancel_tab(tab.id)

        # the payment of the previous party does not count
        self.assertStatus(Table.AVAILABLE)

    def test_manual_available_force_closes_open_tabs(self):
        tab = accounts.open_tab(table_id=self.table.id)
        ledger.add_order(tab.id, self.soup.id, 1)

        occupancy.set_status(self.table.id, Table.AVAILABLE)

        self.assertStatus(Table.AVAILABLE)
        tab.refresh_from_db()
        self.assertEqual(tab.status, Tab.CLOSED)
        self.assertIsNone(tab.paid_at)

    def test_reserve_refused_with_open_tabs(self):
        accounts.open_tab(table_id=self.table.id)

        with self.assertRaises(InvalidState):
            occupancy.set_status(self.table.id, Table.RESERVED)

    def test_reserved_table_is_occupied_by_a_tab(self):
        occupancy.set_status(self.table.id, Table.RESERVED)
        self.assertStatus(Table.RESERVED)

        accounts.open_tab(table_id=self.table.id)
        self.assertStatus(Table.OCCUPIED)

    def test_paid_pending_release_cannot_be_set_by_hand(self):
        with self.assertRaises(InvalidState):
            occupancy.set_status(self.table.id, Table.PAID_PENDING_RELEASE)

    def test_unknown_status(self):
        with self.assertRaises(DomainValidation):
            occupancy.set_status(self.table.id, 'DIRTY')

    def test_duplicate_table_number(self):
        with self.assertRaises(Conflict):
            occupancy.create_table(7)

    def test_table_number_must_be_positive(self):
        with self.assertRaises(DomainValidation):
            occupancy.create_table(0)

    def test_calculate_table(self):
        first = accounts.open_tab(table_id=self.table.id, person_name="Ana")
        second = accounts.open_tab(table_id=self.table.id, person_name="Bo")
        ledger.add_order(first.id, self.soup.id, 10)   # £60.00
        ledger.add_order(second.id, self.soup.id, 5)   # £30.00
        accounts.toggle_service_charge(first.id, True)

        result = occupancy.calculate_table(self.table.id)

        self.assertEqual(len(result['tabs']), 2)
        self.assertEqual([b['person_name'] for b in result['tabs']], ["Ana", "Bo"])
        self.assertEqual(result['total_service_charge_p'], 600)
        self.assertEqual(result['grand_total_p'], 6600 + 3000)

        # read only
        self.assertStatus(Table.OCCUPIED)
        first.refresh_from_db()
        self.assertIsNone(first.final_total_p)

    def test_deleting_a_tab_of_an_earlier_occupancy_keeps_the_table_occupied(self):
        earlier = accounts.open_tab(table_id=self.table.id)
        accounts.close_tab(earlier.id, 'CASH', 0)
        occupancy.release(self.table.id)
        accounts.open_tab(table_id=self.table.id)

        accounts.delete_tab(earlier.id)

        self.assertStatus(Table.OCCUPIED)

    def test_deleting_a_tab_of_an_earlier_occupancy_keeps_the_table_available(self):
        earlier = accounts.open_tab(table_id=self.table.id)
        accounts.close_tab(earlier.id, 'CASH', 0)
        occupancy.release(self.table.id)

        accounts.delete_tab(earlier.id)

        self.assertStatus(Table.AVAILABLE)
        self.assertIsNone(self.table.occupied_at)

    def test_deleting_an_old_tab_keeps_the_reservation(self):
        earlier = accounts.open_tab(table_id=self.table.id)
        accounts.close_tab(earlier.id, 'CASH', 0)
        occupancy.release(self.table.id)
        occupancy.set_status(self.table.id, Table.RESERVED)

        accounts.delete_tab(earlier.id)

        self.assertStatus(Table.RESERVED)

    def test_payment_of_a_released_party_does_not_count(self):
        walked_out = accounts.open_tab(table_id=self.table.id)
        paid = accounts.open_tab(table_id=self.table.id)
        accounts.close_tab(paid.id, 'CASH', 0)
        accounts.cancel_tab(walked_out.id)
        occupancy.release(self.table.id)
        accounts.open_tab(table_id=self.table.id)

        self.table.refresh_from_db()
        self.assertFalse(accounts.episode_has_paid_tab(self.table))

    def test_deleting_the_paid_tab_of_the_current_party(self):
        paid = accounts.open_tab(table_id=self.table.id)
        accounts.close_tab(paid.id, 'CASH', 0)
        self.assertStatus(Table.PAID_PENDING_RELEASE)

        accounts.delete_tab(paid.id)

        self.assertStatus(Table.AVAILABLE)

    def test_update_table(self):
        occupancy.update_table(self.table.id, number=8, capacity=6, location='Patio')

        self.table.refresh_from_db()
        self.assertEqual(self.table.number, 8)
        self.assertEqual(self.table.capacity, 6)
        self.assertEqual(self.table.location, 'Patio')

    def test_update_table_keeps_unset_fields(self):
        occupancy.update_table(self.table.id, capacity=2)

        self.table.refresh_from_db()
        self.assertEqual(self.table.number, 7)
        self.assertEqual(self.table.capacity, 2)

    def test_update_table_to_a_taken_number(self):
        occupancy.create_table(9)

        with self.assertRaises(Conflict):
            occupancy.update_table(self.table.id, number=9)

    def test_update_table_with_invalid_capacity(self):
        with self.assertRaises(DomainValidation):
            occupancy.update_table(self.table.id, capacity=0)

    def test_delete_table(self):
        occupancy.delete_table(self.table.id)
        self.assertFalse(Table.objects.filter(id=self.table.id).exists())

    def test_delete_table_with_tabs(self):
        tab = accounts.open_tab(table_id=self.table.id)
        accounts.close_tab(tab.id, 'CASH', 0)

        with self.assertRaises(InvalidState):
            occupancy.delete_table(self.table.id)
        self.assertTrue(Table.objects.filter(id=self.table.id).exists())

    def test_duplicate_number_caught_by_the_database(self):
        # another request created the same number after the lookup
        with mock.patch.object(QuerySet, 'exists', return_value=False):
            with self.assertRaises(Conflict):
                occupancy.create_table(7)
        self.assertEqual(Table.objects.filter(number=7).count(), 1)


class TableAPITests(APITestCase):
    """Test table and waiter API endpoints"""

    def setUp(self):
        self.manager = User.objects.create_user(username='manager')
        self.manager.groups.add(Group.objects.create(name=ADMIN))
        self.waiter = User.objects.create_user(username='waiter')
        self.waiter.groups.add(Group.objects.create(name=WAITER))
        self.table = Table.objects.create(number=1)
        # Add API key to all requests
        self.client.defaults['HTTP_X_API_KEY'] = 'demo'

    def as_staff(self, user):
        self.client.defaults['HTTP_X_STAFF_ID'] = str(user.id)

    def test_missing_api_key(self):
        del self.client.defaults['HTTP_X_API_KEY']
        response = self.client.get(reverse('table_list'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_invalid_api_key(self):
        self.client.defaults['HTTP_X_API_KEY'] = 'wrong'
        response = self.client.get(reverse('table_list'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_unknown_staff_member(self):
        self.client.defaults['HTTP_X_STAFF_ID'] = '9999'
        response = self.client.get(reverse('table_list'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_tables(self):
        response = self.client.get(reverse('table_list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['number'], 1)
        self.assertEqual(response.data[0]['status'], 'AVAILABLE')

    def test_create_table_as_admin(self):
        self.as_staff(self.manager)
        response = self.client.post(reverse('table_list'), {'number': 2, 'capacity': 6}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['capacity'], 6)
        self.assertEqual(Table.objects.count(), 2)

    def test_create_table_as_waiter_forbidden(self):
        self.as_staff(self.waiter)
        response = self.client.post(reverse('table_list'), {'number': 2}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_duplicate_table_number(self):
        self.as_staff(self.manager)
        response = self.client.post(reverse('table_list'), {'number': 1}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'conflict')

    def test_unknown_table(self):
        response = self.client.get(reverse('table_detail', kwargs={'table_id': 9999}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_release_with_open_tab(self):
        accounts.open_tab(table_id=self.table.id)
        self.as_staff(self.waiter)

        response = self.client.post(reverse('release_table', kwargs={'table_id': self.table.id}))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'invalid_state')

    def test_release_after_payment(self):
        tab = accounts.open_tab(table_id=self.table.id)
        accounts.close_tab(tab.id, 'CASH', 0)
        self.as_staff(self.waiter)

        response = self.client.post(reverse('release_table', kwargs={'table_id': self.table.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'AVAILABLE')

    def test_set_status(self):
        self.as_staff(self.waiter)
        url = reverse('table_status', kwargs={'table_id': self.table.id})

        response = self.client.patch(url, {'status': 'RESERVED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'RESERVED')

        response = self.client.patch(url, {'status': 'DIRTY'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assign_waiter(self):
        alex = Waiter.objects.create(name='Alex')
        self.as_staff(self.manager)

        url = reverse('assign_waiter', kwargs={'table_id': self.table.id})
        response = self.client.post(url, {'waiter_id': alex.id}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['waiter_name'], 'Alex')

    def test_calculate_table(self):
        soup = MenuItem.objects.create(name="Soup", unit_price_p=600)
        tab = accounts.open_tab(table_id=self.table.id)
        ledger.add_order(tab.id, soup.id, 2)

        response = self.client.get(reverse('calculate_table', kwargs={'table_id': self.table.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['table_number'], 1)
        self.assertEqual(response.data['grand_total_p'], 1200)
        self.assertEqual(response.data['total_service_charge_p'], 0)

    def test_waiters(self):
        self.as_staff(self.manager)
        response = self.client.post(reverse('waiter_list'), {'name': 'Sam'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get(reverse('waiter_list'))
        self.assertEqual([w['name'] for w in response.data], ['Sam'])

    def test_update_table_as_admin(self):
        self.as_staff(self.manager)
        url = reverse('table_detail', kwargs={'table_id': self.table.id})

        response = self.client.patch(url, {'capacity': 8, 'location': 'Terrace'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['capacity'], 8)
        self.assertEqual(response.data['location'], 'Terrace')

    def test_update_table_as_waiter_forbidden(self):
        self.as_staff(self.waiter)
        url = reverse('table_detail', kwargs={'table_id': self.table.id})

        response = self.client.patch(url, {'capacity': 8}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_table_to_a_taken_number(self):
        Table.objects.create(number=2)
        self.as_staff(self.manager)
        url = reverse('table_detail', kwargs={'table_id': self.table.id})

        response = self.client.patch(url, {'number': 2}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'conflict')

    def test_delete_table_as_admin(self):
        self.as_staff(self.manager)
        response = self.client.delete(reverse('table_detail', kwargs={'table_id': self.table.id}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Table.objects.exists())

    def test_delete_table_as_waiter_forbidden(self):
        self.as_staff(self.waiter)
        response = self.client.delete(reverse('table_detail', kwargs={'table_id': self.table.id}))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Table.objects.exists())

    def test_delete_table_with_tabs(self):
        accounts.open_tab(table_id=self.table.id)
        self.as_staff(self.manager)

        response = self.client.delete(reverse('table_detail', kwargs={'table_id': self.table.id}))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'invalid_state')
