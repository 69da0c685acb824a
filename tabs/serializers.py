from rest_framework import serializers

from .models import MenuItem, Order, Party, Tab


class MenuItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = MenuItem
        fields = ['id', 'name', 'category', 'unit_price_p', 'available']
        extra_kwargs = {
            'unit_price_p': {'help_text': 'Price in pence (e.g., 350 = £3.50)'},
        }


class PartySerializer(serializers.ModelSerializer):
    class Meta:
        model = Party
        fields = ['id', 'name', 'created_at']


class OrderSerializer(serializers.ModelSerializer):
    menu_item_name = serializers.CharField(source='menu_item.name', read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'tab', 'menu_item', 'menu_item_name', 'quantity', 'unit_price_p',
                  'line_total_p', 'status', 'notes', 'service_charge_included', 'created_at',
                  'sent_to_kitchen_at', 'started_preparing_at', 'ready_at', 'delivered_at']
        read_only_fields = fields
        extra_kwargs = {
            'unit_price_p': {'help_text': 'Menu price in pence captured when the order was placed'},
            'line_total_p': {'help_text': 'unit_price_p x quantity'},
        }


class KitchenOrderSerializer(OrderSerializer):
    person_name = serializers.CharField(source='tab.party.name', read_only=True, default=None)
    table_number = serializers.IntegerField(source='tab.table.number', read_only=True, default=None)
    waiter_name = serializers.CharField(source='tab.table.waiter.name', read_only=True, default=None)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ['person_name', 'table_number', 'waiter_name']
        read_only_fields = fields


class TabSerializer(serializers.ModelSerializer):
    orders = OrderSerializer(many=True, read_only=True)
    party = PartySerializer(read_only=True)
    table_number = serializers.IntegerField(source='table.number', read_only=True, default=None)

    class Meta:
        model = Tab
        fields = ['id', 'table', 'table_number', 'tab_type', 'status', 'party', 'total_p',
                  'service_charge_included', 'service_charge_paid_separately', 'service_charge_p',
                  'final_total_p', 'payment_method', 'paid_amount_p', 'change_amount_p',
                  'created_at', 'customer_seated_at', 'bill_requested_at', 'paid_at', 'closed_at',
                  'orders']
        read_only_fields = fields
        extra_kwargs = {
            'total_p': {'help_text': 'Running total in pence (sum of line totals)'},
            'service_charge_p': {'help_text': 'Service charge in pence computed at closing'},
            'final_total_p': {'help_text': 'Amount charged at closing in pence'},
        }


class OpenTabSerializer(serializers.Serializer):
    table_id = serializers.IntegerField(required=False, allow_null=True,
                                        help_text="Table to seat the party at; omit for a counter sale")
    person_name = serializers.CharField(max_length=100, required=False, allow_blank=True)


class AddOrderSerializer(serializers.Serializer):
    menu_item_id = serializers.IntegerField(help_text="ID of the menu item to order")
    quantity = serializers.IntegerField(min_value=1, default=1, help_text="Quantity to add (minimum 1)")
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class UpdateOrderSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, required=False)
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class CloseTabSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=Tab.PAYMENT_METHOD_CHOICES)
    paid_amount_p = serializers.IntegerField(min_value=0, help_text="Amount handed over in pence")
    service_charge_included = serializers.BooleanField(default=False)
    service_charge_paid_separately = serializers.BooleanField(default=False)


class ServiceChargeSerializer(serializers.Serializer):
    included = serializers.BooleanField()


class TabCalculationSerializer(serializers.Serializer):
    tab_id = serializers.IntegerField()
    person_name = serializers.CharField(allow_null=True)
    status = serializers.CharField()
    items = OrderSerializer(many=True)
    subtotal_p = serializers.IntegerField(help_text="Sum of line totals in pence")
    service_charge_p = serializers.IntegerField(help_text="Service charge on the subtotal in pence")
    service_charge_included = serializers.BooleanField()
    service_charge_paid_separately = serializers.BooleanField()
    final_total_p = serializers.IntegerField(help_text="Amount payable in pence")
