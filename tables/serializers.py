from rest_framework import serializers

from tabs.serializers import TabCalculationSerializer
from .models import Table, Waiter


class WaiterSerializer(serializers.ModelSerializer):
    class Meta:
        model = Waiter
        fields = ['id', 'name', 'active', 'created_at']
        read_only_fields = ['id', 'created_at']


class TableSerializer(serializers.ModelSerializer):
    waiter_name = serializers.CharField(source='waiter.name', read_only=True, default=None)

    class Meta:
        model = Table
        fields = ['id', 'number', 'capacity', 'location', 'waiter', 'waiter_name', 'status',
                  'occupied_at', 'all_tabs_paid_at', 'released_at', 'created_at', 'updated_at']
        read_only_fields = fields


class CreateTableSerializer(serializers.Serializer):
    number = serializers.IntegerField(min_value=1, help_text="Table number (positive integer)")
    capacity = serializers.IntegerField(min_value=1, default=4)
    location = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    waiter_id = serializers.IntegerField(required=False, allow_null=True)


class TableStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Table.STATUS_CHOICES)


class AssignWaiterSerializer(serializers.Serializer):
    waiter_id = serializers.IntegerField(allow_null=True)


class TableCalculationSerializer(serializers.Serializer):
    table_id = serializers.IntegerField()
    table_number = serializers.IntegerField()
    tabs = TabCalculationSerializer(many=True)
    grand_total_p = serializers.IntegerField(help_text="Sum of the open tabs' final totals in pence")
    total_service_charge_p = serializers.IntegerField(help_text="Service charge added to the grand total in pence")


class UpdateTableSerializer(serializers.Serializer):
    number = serializers.IntegerField(min_value=1, required=False)
    capacity = serializers.IntegerField(min_value=1, required=False)
    location = serializers.CharField(max_length=100, required=False, allow_blank=True)
