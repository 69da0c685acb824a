from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiExample
from drf_spectacular.types import OpenApiTypes

from dinefloor.permissions import ADMIN, ROLES, StaffRolePermission

from . import cancellation, returns
from .serializers import (
    CancellationRequestSerializer, CreateCancellationSerializer, CreateReturnSerializer,
    ResolveRequestSerializer, ReturnRequestSerializer,
)

REQUEST_ID_PARAMETER = OpenApiParameter(
    name='request_id',
    type=OpenApiTypes.INT,
    location=OpenApiParameter.PATH,
    description='Request ID'
)

STATUS_FILTER = OpenApiParameter(
    name='status',
    type=OpenApiTypes.STR,
    location=OpenApiParameter.QUERY,
    description='PENDING, APPROVED or REJECTED'
)

# Requests are attributed to the staff member, so creating one needs an X-Staff-Id
REQUEST_ROLES = {'POST': ROLES, 'PATCH': (ADMIN,), 'DELETE': (ADMIN,)}


class CancellationListView(APIView):
    permission_classes = [StaffRolePermission]
    allowed_roles = REQUEST_ROLES

    @extend_schema(summary="List cancellation requests", parameters=[STATUS_FILTER],
                   responses={200: CancellationRequestSerializer(many=True)})
    def get(self, request):
        requests = cancellation.list_requests(status=request.query_params.get('status'))
        return Response(CancellationRequestSerializer(requests, many=True).data)

    @extend_schema(
        summary="Ask to cancel a tab",
        description="The tab stays open until an admin approves the request",
        request=CreateCancellationSerializer,
        responses={201: CancellationRequestSerializer},
        examples=[
            OpenApiExample(
                'Customer Left',
                value={'tab_id': 7, 'category': 'CUSTOMER_LEFT', 'reason': 'Walked out before ordering'}
            )
        ]
    )
    def post(self, request):
        serializer = CreateCancellationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        cancellation_request = cancellation.create_request(
            requester=request.user, **serializer.validated_data
        )
        return Response(CancellationRequestSerializer(cancellation_request).data,
                        status=status.HTTP_201_CREATED)


class CancellationDetailView(APIView):
    permission_classes = [StaffRolePermission]
    allowed_roles = REQUEST_ROLES

    @extend_schema(summary="Get a cancellation request", parameters=[REQUEST_ID_PARAMETER],
                   responses={200: CancellationRequestSerializer})
    def get(self, request, request_id):
        return Response(CancellationRequestSerializer(cancellation.get_request(request_id)).data)

    @extend_schema(
        summary="Approve or reject a cancellation request",
        description="Approving cancels the tab. A resolved request cannot be resolved again.",
        parameters=[REQUEST_ID_PARAMETER],
        request=ResolveRequestSerializer,
        responses={200: CancellationRequestSerializer},
    )
    def patch(self, request, request_id):
        serializer = ResolveRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        cancellation.resolve_request(request_id, serializer.validated_data['status'], request.user)
        return Response(CancellationRequestSerializer(cancellation.get_request(request_id)).data)

    @extend_schema(summary="Delete a cancellation request", parameters=[REQUEST_ID_PARAMETER],
                   responses={204: None})
    def delete(self, request, request_id):
        cancellation.delete_request(request_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TabCancellationsView(APIView):
    @extend_schema(summary="Cancellation requests of a tab",
                   responses={200: CancellationRequestSerializer(many=True)})
    def get(self, request, tab_id):
        return Response(CancellationRequestSerializer(cancellation.requests_for_tab(tab_id), many=True).data)


class ReturnListView(APIView):
    permission_classes = [StaffRolePermission]
    allowed_roles = REQUEST_ROLES

    @extend_schema(summary="List return requests", parameters=[STATUS_FILTER],
                   responses={200: ReturnRequestSerializer(many=True)})
    def get(self, request):
        requests = returns.list_requests(status=request.query_params.get('status'))
        return Response(ReturnRequestSerializer(requests, many=True).data)

    @extend_schema(
        summary="Report a problem with an order",
        request=CreateReturnSerializer,
        responses={201: ReturnRequestSerializer},
        examples=[
            OpenApiExample(
                'Cold Dish',
                value={'order_id': 12, 'category': 'QUALITY', 'subcategory': 'COLD',
                       'description': 'Soup arrived cold', 'source_type': 'TABLE', 'source_id': '5'}
            )
        ]
    )
    def post(self, request):
        serializer = CreateReturnSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        return_request = returns.create_request(requester=request.user, **serializer.validated_data)
        return Response(ReturnRequestSerializer(returns.get_request(return_request.id)).data,
                        status=status.HTTP_201_CREATED)


class ReturnDetailView(APIView):
    permission_classes = [StaffRolePermission]
    allowed_roles = REQUEST_ROLES

    @extend_schema(summary="Get a return request", parameters=[REQUEST_ID_PARAMETER],
                   responses={200: ReturnRequestSerializer})
    def get(self, request, request_id):
        return Response(ReturnRequestSerializer(returns.get_request(request_id)).data)

    @extend_schema(
        summary="Approve or reject a return request",
        parameters=[REQUEST_ID_PARAMETER],
        request=ResolveRequestSerializer,
        responses={200: ReturnRequestSerializer},
    )
    def patch(self, request, request_id):
        serializer = ResolveRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        returns.resolve_request(request_id, serializer.validated_data['status'], request.user)
        return Response(ReturnRequestSerializer(returns.get_request(request_id)).data)

    @extend_schema(summary="Delete a return request", parameters=[REQUEST_ID_PARAMETER],
                   responses={204: None})
    def delete(self, request, request_id):
        returns.delete_request(request_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class OrderReturnsView(APIView):
    @extend_schema(summary="Return requests of an order", responses={200: ReturnRequestSerializer(many=True)})
    def get(self, request, order_id):
        return Response(ReturnRequestSerializer(returns.requests_for_order(order_id), many=True).data)
