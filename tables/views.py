from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiExample
from drf_spectacular.types import OpenApiTypes

from dinefloor.permissions import ADMIN, WAITER, StaffRolePermission

from . import occupancy
from .serializers import (
    AssignWaiterSerializer, CreateTableSerializer, TableCalculationSerializer,
    TableSerializer, TableStatusSerializer, UpdateTableSerializer, WaiterSerializer,
)

TABLE_ID_PARAMETER = OpenApiParameter(
    name='table_id',
    type=OpenApiTypes.INT,
    location=OpenApiParameter.PATH,
    description='Table ID'
)


class TableListView(APIView):
    permission_classes = [StaffRolePermission]
    allowed_roles = {'POST': (ADMIN,)}

    @extend_schema(summary="List tables", responses={200: TableSerializer(many=True)})
    def get(self, request):
        return Response(TableSerializer(occupancy.list_tables(), many=True).data)

    @extend_schema(
        summary="Create a table",
        request=CreateTableSerializer,
        responses={201: TableSerializer},
        examples=[
            OpenApiExample(
                'Create Table Example',
                summary='Table 12 by the window',
                value={'number': 12, 'capacity': 4, 'location': 'Window'}
            )
        ]
    )
    def post(self, request):
        serializer = CreateTableSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        table = occupancy.create_table(**serializer.validated_data)
        return Response(TableSerializer(table).data, status=status.HTTP_201_CREATED)


class TableDetailView(APIView):
    permission_classes = [StaffRolePermission]
    allowed_roles = {'PATCH': (ADMIN,), 'DELETE': (ADMIN,)}

    @extend_schema(summary="Get a table", parameters=[TABLE_ID_PARAMETER],
                   responses={200: TableSerializer})
    def get(self, request, table_id):
        return Response(TableSerializer(occupancy.get_table(table_id)).data)

    @extend_schema(summary="Update a table", parameters=[TABLE_ID_PARAMETER],
                   request=UpdateTableSerializer, responses={200: TableSerializer})
    def patch(self, request, table_id):
        serializer = UpdateTableSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        occupancy.update_table(table_id, **serializer.validated_data)
        return Response(TableSerializer(occupancy.get_table(table_id)).data)

    @extend_schema(
        summary="Delete a table",
        description="Only tables that never had a tab can be deleted",
        parameters=[TABLE_ID_PARAMETER],
        responses={204: None},
    )
    def delete(self, request, table_id):
        occupancy.delete_table(table_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TableStatusView(APIView):
    permission_classes = [StaffRolePermission]
    allowed_roles = (ADMIN, WAITER)

    @extend_schema(
        summary="Override table status",
        description="Setting AVAILABLE closes any tab still open at the table, without payment.",
        parameters=[TABLE_ID_PARAMETER],
        request=TableStatusSerializer,
        responses={200: TableSerializer},
    )
    def patch(self, request, table_id):
        serializer = TableStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        table = occupancy.set_status(table_id, serializer.validated_data['status'])
        return Response(TableSerializer(table).data)


class ReleaseTableView(APIView):
    permission_classes = [StaffRolePermission]
    allowed_roles = (ADMIN, WAITER)

    @extend_schema(
        summary="Release a table",
        description="Confirm the party has left. Fails while any tab is still open.",
        parameters=[TABLE_ID_PARAMETER],
        request=None,
        responses={200: TableSerializer},
    )
    def post(self, request, table_id):
        table = occupancy.release(table_id)
        return Response(TableSerializer(table).data)


class AssignWaiterView(APIView):
    permission_classes = [StaffRolePermission]
    allowed_roles = (ADMIN,)

    @extend_schema(summary="Assign a waiter", parameters=[TABLE_ID_PARAMETER],
                   request=AssignWaiterSerializer, responses={200: TableSerializer})
    def post(self, request, table_id):
        serializer = AssignWaiterSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        table = occupancy.assign_waiter(table_id, serializer.validated_data['waiter_id'])
        return Response(TableSerializer(occupancy.get_table(table.id)).data)


class CalculateTableView(APIView):
    @extend_schema(
        summary="Calculate a table",
        description="Per-tab breakdown and combined total of every open tab at the table",
        parameters=[TABLE_ID_PARAMETER],
        responses={200: TableCalculationSerializer},
    )
    def get(self, request, table_id):
        return Response(TableCalculationSerializer(occupancy.calculate_table(table_id)).data)


class WaiterListView(APIView):
    permission_classes = [StaffRolePermission]
    allowed_roles = {'POST': (ADMIN,)}

    @extend_schema(summary="List waiters", responses={200: WaiterSerializer(many=True)})
    def get(self, request):
        return Response(WaiterSerializer(occupancy.list_waiters(), many=True).data)

    @extend_schema(summary="Add a waiter", request=WaiterSerializer, responses={201: WaiterSerializer})
    def post(self, request):
        serializer = WaiterSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        waiter = occupancy.create_waiter(**serializer.validated_data)
        return Response(WaiterSerializer(waiter).data, status=status.HTTP_201_CREATED)
