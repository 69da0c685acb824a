from django.db import models


class Waiter(models.Model):
	name = models.CharField(max_length=100)
	active = models.BooleanField(default=True)
	created_at = models.DateTimeField(auto_now_add=True)

	def __str__(self):
		return self.name


class Table(models.Model):
	AVAILABLE = 'AVAILABLE'
	OCCUPIED = 'OCCUPIED'
	RESERVED = 'RESERVED'
	PAID_PENDING_RELEASE = 'PAID_PENDING_RELEASE'
	STATUS_CHOICES = [
		(AVAILABLE, 'Available'),
		(OCCUPIED, 'Occupied'),
		(RESERVED, 'Reserved'),
		(PAID_PENDING_RELEASE, 'Paid, pending release'),
	]
	number = models.PositiveIntegerField(unique=True)
	capacity = models.PositiveIntegerField(default=4)
	location = models.CharField(max_length=100, blank=True, default='')
	waiter = models.ForeignKey(Waiter, on_delete=models.SET_NULL, null=True, blank=True, related_name='tables')
	status = models.CharField(max_length=25, choices=STATUS_CHOICES, default=AVAILABLE)
	# start of the current occupancy episode
	occupied_at = models.DateTimeField(null=True, blank=True)
	all_tabs_paid_at = models.DateTimeField(null=True, blank=True)
	released_at = models.DateTimeField(null=True, blank=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['number']

	def __str__(self):
		return f"Table {self.number}"
