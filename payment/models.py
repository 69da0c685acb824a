from django.db import models

from tabs.models import Tab


class Payment(models.Model):
	tab = models.ForeignKey(Tab, on_delete=models.CASCADE, related_name='payments')
	method = models.CharField(max_length=20, choices=Tab.PAYMENT_METHOD_CHOICES)
	amount_p = models.PositiveIntegerField()
	paid_amount_p = models.PositiveIntegerField()
	change_amount_p = models.PositiveIntegerField(default=0)
	service_charge_p = models.PositiveIntegerField(default=0)
	currency = models.CharField(max_length=3, default='gbp')
	created_at = models.DateTimeField(auto_now_add=True)

	def __str__(self):
		return f"Payment {self.id} for Tab {self.tab_id} - {self.method}"
