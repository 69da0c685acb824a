from django.conf import settings
from django.db import models

from tabs.models import Order, Tab


PENDING = 'PENDING'
APPROVED = 'APPROVED'
REJECTED = 'REJECTED'

STATUS_CHOICES = [
	(PENDING, 'Pending'),
	(APPROVED, 'Approved'),
	(REJECTED, 'Rejected'),
]

RESOLVED_STATUSES = [APPROVED, REJECTED]

# Allowed subcategories per return category
RETURN_SUBCATEGORIES = {
	'QUALITY': ['COLD', 'UNDERCOOKED', 'OVERCOOKED', 'SPOILED', 'FOREIGN_OBJECT'],
	'WRONG_ITEM': ['WRONG_DISH', 'WRONG_SIZE', 'MISSING_MODIFICATION', 'ALLERGEN_IGNORED'],
	'SERVICE': ['LONG_WAIT', 'WRONG_TABLE', 'SPILLED'],
	'OTHER': ['CHANGED_MIND', 'OTHER'],
}


class CancellationRequest(models.Model):
	CATEGORY_CHOICES = [
		('CUSTOMER_LEFT', 'Customer left'),
		('OPENED_BY_MISTAKE', 'Opened by mistake'),
		('DUPLICATE_TAB', 'Duplicate tab'),
		('CUSTOMER_COMPLAINT', 'Customer complaint'),
		('OTHER', 'Other'),
	]
	tab = models.ForeignKey(Tab, on_delete=models.CASCADE, related_name='cancellation_requests')
	category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='OTHER')
	reason = models.TextField(blank=True, default='')
	requested_by = models.ForeignKey(
		settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='cancellation_requests'
	)
	status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)
	approved_by = models.ForeignKey(
		settings.AUTH_USER_MODEL, on_delete=models.PROTECT, null=True, blank=True,
		related_name='resolved_cancellation_requests'
	)
	resolved_at = models.DateTimeField(null=True, blank=True)
	created_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		ordering = ['-created_at', '-id']
		constraints = [
			models.UniqueConstraint(
				fields=['tab'],
				condition=models.Q(status=PENDING),
				name='one_pending_cancellation_per_tab',
			),
		]

	def __str__(self):
		return f"Cancellation {self.id} for Tab {self.tab_id} - {self.status}"


class ReturnRequest(models.Model):
	CATEGORY_CHOICES = [
		('QUALITY', 'Quality'),
		('WRONG_ITEM', 'Wrong item'),
		('SERVICE', 'Service'),
		('OTHER', 'Other'),
	]
	SOURCE_TYPE_CHOICES = [
		('TAB', 'Tab'),
		('TABLE', 'Table'),
	]
	order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='return_requests')
	category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
	subcategory = models.CharField(max_length=30)
	description = models.TextField(blank=True, default='')
	source_type = models.CharField(max_length=10, choices=SOURCE_TYPE_CHOICES, null=True, blank=True)
	source_id = models.CharField(max_length=50, null=True, blank=True)
	image_url = models.CharField(max_length=500, blank=True, default='')
	status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)
	created_by = models.ForeignKey(
		settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='return_requests'
	)
	resolved_by = models.ForeignKey(
		settings.AUTH_USER_MODEL, on_delete=models.PROTECT, null=True, blank=True,
		related_name='resolved_return_requests'
	)
	resolved_at = models.DateTimeField(null=True, blank=True)
	created_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		ordering = ['-created_at', '-id']

	def __str__(self):
		return f"Return {self.id} for Order {self.order_id} - {self.status}"
