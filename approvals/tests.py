from unittest import mock

from django.contrib.auth.models import Group, User
from django.db import IntegrityError, transaction
from django.db.models.query import QuerySet
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APITestCase
from rest_framework import status

from dinefloor.exceptions import DomainValidation, InvalidState
from dinefloor.permissions import ADMIN, WAITER
from tables import occupancy
from tables.models import Table
from tabs import accounts, ledger
from tabs.models import MenuItem, Tab
from . import cancellation, returns
from .models import APPROVED, PENDING, REJECTED, CancellationRequest, ReturnRequest


class CancellationWorkflowTests(TestCase):
    """Test the request and approval of tab cancellations"""

    def setUp(self):
        self.waiter = User.objects.create_user(username='waiter')
        self.manager = User.objects.create_user(username='manager')
        self.table = Table.objects.create(number=4)
        self.tab = accounts.open_tab(table_id=self.table.id, person_name="Ana")

    def test_request_leaves_the_tab_open(self):
        request = cancellation.create_request(self.tab.id, 'CUSTOMER_LEFT', 'Walked out', self.waiter)

        self.assertEqual(request.status, PENDING)
        self.tab.refresh_from_db()
        self.assertEqual(self.tab.status, Tab.OPEN)

    def test_one_pending_request_per_tab(self):
        cancellation.create_request(self.tab.id, 'CUSTOMER_LEFT', '', self.waiter)

        with self.assertRaises(InvalidState):
            cancellation.create_request(self.tab.id, 'DUPLICATE_TAB', '', self.waiter)
        self.assertEqual(CancellationRequest.objects.count(), 1)

    def test_new_request_after_rejection(self):
        request = cancellation.create_request(self.tab.id, 'CUSTOMER_LEFT', '', self.waiter)
        cancellation.resolve_request(request.id, REJECTED, self.manager)

        again = cancellation.create_request(self.tab.id, 'CUSTOMER_LEFT', 'Really gone', self.waiter)
        self.assertEqual(again.status, PENDING)

    def test_approval_cancels_the_tab_and_frees_the_table(self):
        request = cancellation.create_request(self.tab.id, 'OPENED_BY_MISTAKE', '', self.waiter)

        request = cancellation.resolve_request(request.id, APPROVED, self.manager)

        self.assertEqual(request.approved_by, self.manager)
        self.assertIsNotNone(request.resolved_at)
        self.tab.refresh_from_db()
        self.assertEqual(self.tab.status, Tab.CANCELLED)
        self.assertIsNotNone(self.tab.closed_at)
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.AVAILABLE)

    def test_rejection_keeps_the_tab(self):
        request = cancellation.create_request(self.tab.id, 'OTHER', '', self.waiter)

        cancellation.resolve_request(request.id, REJECTED, self.manager)

        self.tab.refresh_from_db()
        self.assertEqual(self.tab.status, Tab.OPEN)

    def test_resolved_request_is_final(self):
        request = cancellation.create_request(self.tab.id, 'OTHER', '', self.waiter)
        cancellation.resolve_request(request.id, REJECTED, self.manager)

        with self.assertRaises(InvalidState):
            cancellation.resolve_request(request.id, APPROVED, self.manager)

    def test_closed_tab_cannot_be_cancelled(self):
        accounts.close_tab(self.tab.id, 'CASH', 0)

        with self.assertRaises(InvalidState):
            cancellation.create_request(self.tab.id, 'CUSTOMER_LEFT', '', self.waiter)

    def test_closing_the_tab_rejects_the_pending_request(self):
        request = cancellation.create_request(self.tab.id, 'CUSTOMER_LEFT', '', self.waiter)

        accounts.close_tab(self.tab.id, 'CASH', 0)

        request.refresh_from_db()
        self.assertEqual(request.status, REJECTED)
        self.assertIsNotNone(request.resolved_at)
        self.assertIsNone(request.approved_by)
        with self.assertRaises(InvalidState):
            cancellation.resolve_request(request.id, APPROVED, self.manager)

    def test_freeing_the_table_rejects_the_pending_request(self):
        request = cancellation.create_request(self.tab.id, 'CUSTOMER_LEFT', '', self.waiter)

        occupancy.set_status(self.table.id, Table.AVAILABLE)

        request.refresh_from_db()
        self.assertEqual(request.status, REJECTED)

    def test_database_keeps_one_pending_request_per_tab(self):
        cancellation.create_request(self.tab.id, 'CUSTOMER_LEFT', '', self.waiter)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                CancellationRequest.objects.create(
                    tab=self.tab, category='OTHER', requested_by=self.waiter, status=PENDING
                )

    def test_duplicate_request_caught_by_the_database(self):
        cancellation.create_request(self.tab.id, 'CUSTOMER_LEFT', '', self.waiter)

        # a second request passed the lookup before the first one committed
        with mock.patch.object(QuerySet, 'exists', return_value=False):
            with self.assertRaises(InvalidState):
                cancellation.create_request(self.tab.id, 'DUPLICATE_TAB', '', self.waiter)
        self.assertEqual(CancellationRequest.objects.count(), 1)

    def test_unknown_category(self):
        with self.assertRaises(DomainValidation):
            cancellation.create_request(self.tab.id, 'BORED', '', self.waiter)


class ReturnWorkflowTests(TestCase):
    """Test return requests against orders"""

    def setUp(self):
        self.waiter = User.objects.create_user(username='waiter')
        self.manager = User.objects.create_user(username='manager')
        soup = MenuItem.objects.create(name="Soup", unit_price_p=600)
        self.tab = accounts.open_tab(person_name="Bo")
        self.order = ledger.add_order(self.tab.id, soup.id, 1)

    def test_create_return(self):
        request = returns.create_request(self.order.id, 'QUALITY', 'COLD', self.waiter,
                                         description='Soup arrived cold', source_type='TAB',
                                         source_id=self.tab.id)

        self.assertEqual(request.status, PENDING)
        self.assertEqual(request.source_id, str(self.tab.id))
        self.assertEqual(request.created_by, self.waiter)

    def test_subcategory_must_match_category(self):
        with self.assertRaises(DomainValidation):
            returns.create_request(self.order.id, 'QUALITY', 'LONG_WAIT', self.waiter)
        self.assertEqual(ReturnRequest.objects.count(), 0)

    def test_unknown_category(self):
        with self.assertRaises(DomainValidation):
            returns.create_request(self.order.id, 'TASTE', 'COLD', self.waiter)

    def test_unknown_source_type(self):
        with self.assertRaises(DomainValidation):
            returns.create_request(self.order.id, 'SERVICE', 'SPILLED', self.waiter, source_type='BAR')
        self.assertEqual(ReturnRequest.objects.count(), 0)

    def test_resolution_does_not_touch_the_order(self):
        request = returns.create_request(self.order.id, 'WRONG_ITEM', 'WRONG_DISH', self.waiter)

        returns.resolve_request(request.id, APPROVED, self.manager)

        self.order.refresh_from_db()
        self.tab.refresh_from_db()
        self.assertEqual(self.order.line_total_p, 600)
        self.assertEqual(self.tab.total_p, 600)
        self.assertEqual(self.tab.status, Tab.OPEN)

    def test_first_resolution_is_kept(self):
        request = returns.create_request(self.order.id, 'OTHER', 'CHANGED_MIND', self.waiter)
        first = returns.resolve_request(request.id, REJECTED, self.manager)
        resolved_at = first.resolved_at

        second = returns.resolve_request(request.id, APPROVED, self.waiter)

        self.assertEqual(second.status, APPROVED)
        self.assertEqual(second.resolved_at, resolved_at)
        self.assertEqual(second.resolved_by, self.manager)


class ApprovalsAPITests(APITestCase):
    """Test cancellation and return request endpoints"""

    def setUp(self):
        self.waiter = User.objects.create_user(username='waiter')
        self.waiter.groups.add(Group.objects.create(name=WAITER))
        self.manager = User.objects.create_user(username='manager')
        self.manager.groups.add(Group.objects.create(name=ADMIN))
        self.table = Table.objects.create(number=9)
        self.tab = accounts.open_tab(table_id=self.table.id)
        soup = MenuItem.objects.create(name="Soup", unit_price_p=600)
        self.order = ledger.add_order(self.tab.id, soup.id, 1)
        # Add API key to all requests
        self.client.defaults['HTTP_X_API_KEY'] = 'demo'

    def as_staff(self, user):
        self.client.defaults['HTTP_X_STAFF_ID'] = str(user.id)

    def test_request_needs_a_staff_member(self):
        response = self.client.post(reverse('cancellation_list'),
                                    {'tab_id': self.tab.id, 'category': 'CUSTOMER_LEFT'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cancellation_flow(self):
        self.as_staff(self.waiter)
        data = {'tab_id': self.tab.id, 'category': 'CUSTOMER_LEFT', 'reason': 'Left without ordering'}

        response = self.client.post(reverse('cancellation_list'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['requested_by_name'], 'waiter')
        request_id = response.data['id']

        # a second pending request for the same tab is refused
        response = self.client.post(reverse('cancellation_list'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'invalid_state')

        url = reverse('cancellation_detail', kwargs={'request_id': request_id})
        response = self.client.patch(url, {'status': 'APPROVED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.as_staff(self.manager)
        response = self.client.patch(url, {'status': 'APPROVED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'APPROVED')
        self.assertEqual(response.data['approved_by_name'], 'manager')

        self.tab.refresh_from_db()
        self.assertEqual(self.tab.status, Tab.CANCELLED)
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.AVAILABLE)

        response = self.client.patch(url, {'status': 'REJECTED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_resolve_with_pending_status_rejected(self):
        request = cancellation.create_request(self.tab.id, 'OTHER', '', self.waiter)
        self.as_staff(self.manager)

        url = reverse('cancellation_detail', kwargs={'request_id': request.id})
        response = self.client.patch(url, {'status': 'PENDING'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancellations_of_a_tab(self):
        cancellation.create_request(self.tab.id, 'OTHER', '', self.waiter)

        response = self.client.get(reverse('tab_cancellations', kwargs={'tab_id': self.tab.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_delete_cancellation_request(self):
        request = cancellation.create_request(self.tab.id, 'OTHER', '', self.waiter)
        self.as_staff(self.manager)

        response = self.client.delete(reverse('cancellation_detail', kwargs={'request_id': request.id}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(CancellationRequest.objects.count(), 0)

    def test_invalid_subcategory_creates_nothing(self):
        self.as_staff(self.waiter)
        data = {'order_id': self.order.id, 'category': 'SERVICE', 'subcategory': 'COLD'}

        response = self.client.post(reverse('return_list'), data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'validation')
        self.assertEqual(ReturnRequest.objects.count(), 0)

    def test_return_flow(self):
        self.as_staff(self.waiter)
        data = {
            'order_id': self.order.id,
            'category': 'QUALITY',
            'subcategory': 'COLD',
            'description': 'Soup arrived cold',
            'source_type': 'TABLE',
            'source_id': str(self.table.id),
        }

        response = self.client.post(reverse('return_list'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['menu_item_name'], 'Soup')
        self.assertEqual(response.data['tab'], self.tab.id)

        response = self.client.get(reverse('order_returns', kwargs={'order_id': self.order.id}))
        self.assertEqual(len(response.data), 1)
        request_id = response.data[0]['id']

        self.as_staff(self.manager)
        url = reverse('return_detail', kwargs={'request_id': request_id})
        response = self.client.patch(url, {'status': 'APPROVED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['resolved_by_name'], 'manager')

    def test_unknown_order(self):
        self.as_staff(self.waiter)
        data = {'order_id': 9999, 'category': 'QUALITY', 'subcategory': 'COLD'}

        response = self.client.post(reverse('return_list'), data, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
