from django.db import models

from tables.models import Table


class MenuItem(models.Model):
	CATEGORY_CHOICES = [
		('APPETIZER', 'Appetizer'),
		('MAIN_COURSE', 'Main course'),
		('SIDE_DISH', 'Side dish'),
		('DESSERT', 'Dessert'),
		('BEVERAGE', 'Beverage'),
		('ALCOHOLIC_BEVERAGE', 'Alcoholic beverage'),
	]
	name = models.CharField(max_length=100)
	category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='MAIN_COURSE')
	unit_price_p = models.PositiveIntegerField()
	available = models.BooleanField(default=True)

	def __str__(self):
		return self.name


class Tab(models.Model):
	OPEN = 'OPEN'
	CLOSED = 'CLOSED'
	CANCELLED = 'CANCELLED'
	STATUS_CHOICES = [
		(OPEN, 'Open'),
		(CLOSED, 'Closed'),
		(CANCELLED, 'Cancelled'),
	]
	TABLE = 'TABLE'
	COUNTER = 'COUNTER'
	TYPE_CHOICES = [
		(TABLE, 'Table'),
		(COUNTER, 'Counter'),
	]
	CASH = 'CASH'
	PAYMENT_METHOD_CHOICES = [
		(CASH, 'Cash'),
		('CREDIT_CARD', 'Credit card'),
		('DEBIT_CARD', 'Debit card'),
		('PIX', 'PIX'),
	]
	table = models.ForeignKey(Table, on_delete=models.PROTECT, null=True, blank=True, related_name='tabs')
	tab_type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=TABLE)
	status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=OPEN)
	total_p = models.PositiveIntegerField(default=0)
	service_charge_included = models.BooleanField(default=False)
	service_charge_paid_separately = models.BooleanField(default=False)
	service_charge_p = models.PositiveIntegerField(default=0)
	final_total_p = models.PositiveIntegerField(null=True, blank=True)
	payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, null=True, blank=True)
	paid_amount_p = models.PositiveIntegerField(null=True, blank=True)
	change_amount_p = models.PositiveIntegerField(null=True, blank=True)
	created_at = models.DateTimeField(auto_now_add=True)
	customer_seated_at = models.DateTimeField(null=True, blank=True)
	bill_requested_at = models.DateTimeField(null=True, blank=True)
	paid_at = models.DateTimeField(null=True, blank=True)
	closed_at = models.DateTimeField(null=True, blank=True)

	def __str__(self):
		if self.table_id:
			return f"Tab {self.id} (Table {self.table.number})"
		return f"Tab {self.id} (Counter)"


class Party(models.Model):
	tab = models.OneToOneField(Tab, on_delete=models.CASCADE, related_name='party')
	name = models.CharField(max_length=100)
	created_at = models.DateTimeField(auto_now_add=True)

	def __str__(self):
		return self.name


class Order(models.Model):
	PENDING = 'PENDING'
	PREPARING = 'PREPARING'
	READY = 'READY'
	DELIVERED = 'DELIVERED'
	STATUS_CHOICES = [
		(PENDING, 'Pending'),
		(PREPARING, 'Preparing'),
		(READY, 'Ready'),
		(DELIVERED, 'Delivered'),
	]
	KITCHEN_STATUSES = [PENDING, PREPARING, READY]

	tab = models.ForeignKey(Tab, on_delete=models.CASCADE, related_name='orders')
	menu_item = models.ForeignKey(MenuItem, on_delete=models.PROTECT, related_name='orders')
	quantity = models.PositiveIntegerField()
	unit_price_p = models.PositiveIntegerField()
	line_total_p = models.PositiveIntegerField()
	status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)
	notes = models.TextField(blank=True, default='')
	service_charge_included = models.BooleanField(default=False)
	created_at = models.DateTimeField(auto_now_add=True)
	sent_to_kitchen_at = models.DateTimeField(null=True, blank=True)
	started_preparing_at = models.DateTimeField(null=True, blank=True)
	ready_at = models.DateTimeField(null=True, blank=True)
	delivered_at = models.DateTimeField(null=True, blank=True)

	class Meta:
		ordering = ['created_at', 'id']

	def __str__(self):
		return f"{self.quantity} x {self.menu_item.name} for Tab {self.tab_id}"
