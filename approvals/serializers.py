from rest_framework import serializers

from .models import RESOLVED_STATUSES, CancellationRequest, ReturnRequest


class CancellationRequestSerializer(serializers.ModelSerializer):
    requested_by_name = serializers.CharField(source='requested_by.username', read_only=True)
    approved_by_name = serializers.CharField(source='approved_by.username', read_only=True, default=None)
    person_name = serializers.CharField(source='tab.party.name', read_only=True, default=None)
    table_number = serializers.IntegerField(source='tab.table.number', read_only=True, default=None)

    class Meta:
        model = CancellationRequest
        fields = ['id', 'tab', 'person_name', 'table_number', 'category', 'reason', 'status',
                  'requested_by', 'requested_by_name', 'approved_by', 'approved_by_name',
                  'resolved_at', 'created_at']
        read_only_fields = fields


class CreateCancellationSerializer(serializers.Serializer):
    tab_id = serializers.IntegerField()
    category = serializers.ChoiceField(choices=CancellationRequest.CATEGORY_CHOICES)
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class ReturnRequestSerializer(serializers.ModelSerializer):
    menu_item_name = serializers.CharField(source='order.menu_item.name', read_only=True)
    tab = serializers.IntegerField(source='order.tab_id', read_only=True)
    created_by_name = serializers.CharField(source='created_by.username', read_only=True)
    resolved_by_name = serializers.CharField(source='resolved_by.username', read_only=True, default=None)

    class Meta:
        model = ReturnRequest
        fields = ['id', 'order', 'tab', 'menu_item_name', 'category', 'subcategory', 'description',
                  'source_type', 'source_id', 'image_url', 'status', 'created_by', 'created_by_name',
                  'resolved_by', 'resolved_by_name', 'resolved_at', 'created_at']
        read_only_fields = fields


class CreateReturnSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    # subcategory is checked against the category by the returns workflow
    category = serializers.CharField(max_length=20)
    subcategory = serializers.CharField(max_length=30)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    source_type = serializers.CharField(required=False, allow_null=True, default=None)
    source_id = serializers.CharField(required=False, allow_null=True, default=None)
    image_url = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


class ResolveRequestSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RESOLVED_STATUSES)
