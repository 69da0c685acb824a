from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiExample
from drf_spectacular.types import OpenApiTypes

from dinefloor.exceptions import DomainValidation
from dinefloor.permissions import ADMIN, KITCHEN, WAITER, StaffRolePermission
from tables import occupancy

from . import accounts, billing, ledger
from .serializers import (
    AddOrderSerializer, CloseTabSerializer, KitchenOrderSerializer, MenuItemSerializer,
    OpenTabSerializer, OrderSerializer, ServiceChargeSerializer, TabCalculationSerializer,
    TabSerializer, UpdateOrderSerializer,
)

TAB_ID_PARAMETER = OpenApiParameter(
    name='tab_id',
    type=OpenApiTypes.INT,
    location=OpenApiParameter.PATH,
    description='Tab ID'
)


class TabListView(APIView):
    @extend_schema(
        summary="List tabs",
        parameters=[
            OpenApiParameter(name='status', type=OpenApiTypes.STR, location=OpenApiParameter.QUERY,
                             description='OPEN, CLOSED or CANCELLED')
        ],
        responses={200: TabSerializer(many=True)},
    )
    def get(self, request):
        tabs = accounts.list_tabs(status=request.query_params.get('status'))
        return Response(TabSerializer(tabs, many=True).data)

    @extend_schema(
        summary="Open a tab",
        description="Seat a party at a table, or start a counter sale when no table is given",
        request=OpenTabSerializer,
        responses={201: TabSerializer},
        examples=[
            OpenApiExample(
                'Open Tab Example',
                summary='Seat Ana at table 5',
                value={'table_id': 5, 'person_name': 'Ana'}
            )
        ]
    )
    def post(self, request):
        serializer = OpenTabSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        tab = accounts.open_tab(
            table_id=serializer.validated_data.get('table_id'),
            person_name=serializer.validated_data.get('person_name'),
        )
        return Response(TabSerializer(accounts.get_tab(tab.id)).data, status=status.HTTP_201_CREATED)


class TabDetailView(APIView):
    permission_classes = [StaffRolePermission]
    allowed_roles = {'DELETE': (ADMIN,)}

    @extend_schema(
        summary="Get tab details",
        description="Retrieve a tab with its party, orders and settlement fields",
        parameters=[TAB_ID_PARAMETER],
        responses={200: TabSerializer},
    )
    def get(self, request, tab_id):
        return Response(TabSerializer(accounts.get_tab(tab_id)).data)

    @extend_schema(
        summary="Delete a tab",
        description="Admin only. Removes the tab together with its orders and party",
        parameters=[TAB_ID_PARAMETER],
        responses={204: None},
    )
    def delete(self, request, tab_id):
        accounts.delete_tab(tab_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TableTabsView(APIView):
    @extend_schema(summary="Open tabs of a table", responses={200: TabSerializer(many=True)})
    def get(self, request, table_id):
        table = occupancy.get_table(table_id)
        return Response(TabSerializer(accounts.open_tabs_for_table(table), many=True).data)


class CloseTabView(APIView):
    @extend_schema(
        summary="Close a tab",
        description="Settle a tab. Change is only given for cash payments.",
        parameters=[TAB_ID_PARAMETER],
        request=CloseTabSerializer,
        responses={200: TabSerializer},
        examples=[
            OpenApiExample(
                'Cash Payment',
                summary='Pay £150.00 cash on a £110.00 bill',
                value={
                    'payment_method': 'CASH',
                    'paid_amount_p': 15000,
                    'service_charge_included': True,
                    'service_charge_paid_separately': False
                }
            )
        ]
    )
    def post(self, request, tab_id):
        serializer = CloseTabSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        tab = accounts.close_tab(tab_id, **serializer.validated_data)
        return Response(TabSerializer(accounts.get_tab(tab.id)).data)


class CalculateTabView(APIView):
    @extend_schema(
        summary="Calculate a tab",
        description="Subtotal, service charge and final total of a tab. Does not change the tab.",
        parameters=[TAB_ID_PARAMETER],
        responses={200: TabCalculationSerializer},
    )
    def get(self, request, tab_id):
        return Response(TabCalculationSerializer(billing.calculate_tab(tab_id)).data)


class ServiceChargeView(APIView):
    permission_classes = [StaffRolePermission]
    allowed_roles = (ADMIN, WAITER)

    @extend_schema(
        summary="Include or exclude the service charge",
        parameters=[TAB_ID_PARAMETER],
        request=ServiceChargeSerializer,
        responses={200: TabSerializer},
    )
    def patch(self, request, tab_id):
        serializer = ServiceChargeSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        accounts.toggle_service_charge(tab_id, serializer.validated_data['included'])
        return Response(TabSerializer(accounts.get_tab(tab_id)).data)


class RequestBillView(APIView):
    @extend_schema(summary="Ask for the bill", parameters=[TAB_ID_PARAMETER], request=None,
                   responses={200: TabSerializer})
    def post(self, request, tab_id):
        accounts.request_bill(tab_id)
        return Response(TabSerializer(accounts.get_tab(tab_id)).data)


class AddOrderView(APIView):
    @extend_schema(
        summary="Order a menu item on a tab",
        description="Add a menu item with quantity to an open tab and send it to the kitchen",
        parameters=[TAB_ID_PARAMETER],
        request=AddOrderSerializer,
        responses={201: OrderSerializer},
        examples=[
            OpenApiExample(
                'Add Item Example',
                summary='Add 2 coffees to tab',
                description='Add 2 units of coffee (menu item ID 1) to the tab',
                value={'menu_item_id': 1, 'quantity': 2, 'notes': 'oat milk'}
            )
        ]
    )
    def post(self, request, tab_id):
        serializer = AddOrderSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        order = ledger.add_order(tab_id, **serializer.validated_data)

        response_data = OrderSerializer(order).data
        response_data['tab_total_p'] = accounts.get_tab(tab_id).total_p
        return Response(response_data, status=status.HTTP_201_CREATED)


class OrderListView(APIView):
    @extend_schema(
        summary="List orders",
        parameters=[
            OpenApiParameter(name='tab_id', type=OpenApiTypes.INT, location=OpenApiParameter.QUERY)
        ],
        responses={200: OrderSerializer(many=True)},
    )
    def get(self, request):
        tab_id = request.query_params.get('tab_id')
        if tab_id is not None:
            try:
                tab_id = int(tab_id)
            except ValueError:
                raise DomainValidation('tab_id must be an integer')

        orders = ledger.list_orders(tab_id=tab_id)
        return Response(OrderSerializer(orders, many=True).data)


class KitchenQueueView(APIView):
    permission_classes = [StaffRolePermission]
    allowed_roles = (ADMIN, WAITER, KITCHEN)

    @extend_schema(
        summary="Kitchen queue",
        description="Orders not yet delivered, oldest first",
        responses={200: KitchenOrderSerializer(many=True)},
    )
    def get(self, request):
        return Response(KitchenOrderSerializer(ledger.list_kitchen_queue(), many=True).data)


class OrderDetailView(APIView):
    @extend_schema(summary="Get an order", responses={200: OrderSerializer})
    def get(self, request, order_id):
        return Response(OrderSerializer(ledger.get_order(order_id)).data)

    @extend_schema(
        summary="Update an order",
        description="Change quantity, notes or kitchen status. Status changes are timestamped.",
        request=UpdateOrderSerializer,
        responses={200: OrderSerializer},
        examples=[
            OpenApiExample('Start Preparing', value={'status': 'PREPARING'}),
            OpenApiExample('Change Quantity', value={'quantity': 3}),
        ]
    )
    def patch(self, request, order_id):
        serializer = UpdateOrderSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        order = ledger.update_order(order_id, **serializer.validated_data)
        return Response(OrderSerializer(order).data)

    @extend_schema(summary="Remove an order", responses={204: None})
    def delete(self, request, order_id):
        ledger.delete_order(order_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MenuItemListView(APIView):
    @extend_schema(summary="List menu items", responses={200: MenuItemSerializer(many=True)})
    def get(self, request):
        return Response(MenuItemSerializer(ledger.list_menu_items(), many=True).data)
