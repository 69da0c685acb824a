from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .serializers import PaymentSerializer
from . import settlement


class TabPaymentsView(APIView):
    """Settlements recorded for a tab"""

    @extend_schema(
        summary="List payments of a tab",
        parameters=[
            OpenApiParameter(
                name='tab_id',
                type=OpenApiTypes.INT,
                location=OpenApiParameter.PATH,
                description='Tab ID'
            )
        ],
        responses={200: PaymentSerializer(many=True)},
    )
    def get(self, request, tab_id):
        payments = settlement.payments_for_tab(tab_id)
        return Response(PaymentSerializer(payments, many=True).data)
