from rest_framework import serializers
from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ['id', 'tab', 'method', 'amount_p', 'paid_amount_p', 'change_amount_p',
                  'service_charge_p', 'currency', 'created_at']
        read_only_fields = fields
        extra_kwargs = {
            'amount_p': {'help_text': 'Final total charged in pence'},
            'paid_amount_p': {'help_text': 'Amount handed over in pence'},
            'change_amount_p': {'help_text': 'Change returned in pence (cash only)'},
        }
