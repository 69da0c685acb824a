"""
Return requests flag a problem with a single order for review. Resolving
one is a record for the floor manager only; orders and tabs are untouched.
"""
import logging

from django.db import transaction
from django.utils import timezone

from dinefloor.exceptions import DomainValidation, NotFound
from tabs.models import Order

from .models import PENDING, RESOLVED_STATUSES, RETURN_SUBCATEGORIES, ReturnRequest

logger = logging.getLogger(__name__)


def validate_subcategory(category, subcategory):
    if category not in RETURN_SUBCATEGORIES:
        raise DomainValidation(f'Unknown return category {category}')
    if subcategory not in RETURN_SUBCATEGORIES[category]:
        raise DomainValidation(f'{subcategory} is not a valid subcategory for {category}')


def list_requests(status=None):
    requests = ReturnRequest.objects.select_related('order__menu_item', 'order__tab__table')
    if status:
        requests = requests.filter(status=status)
    return requests


def get_request(request_id):
    try:
        return ReturnRequest.objects.select_related('order__menu_item', 'order__tab__table').get(id=request_id)
    except ReturnRequest.DoesNotExist:
        raise NotFound('Return request not found')


def requests_for_order(order_id):
    return list_requests().filter(order_id=order_id)


def create_request(order_id, category, subcategory, requester,
                   description='', source_type=None, source_id=None, image_url=''):
    validate_subcategory(category, subcategory)

    if source_type is not None and source_type not in dict(ReturnRequest.SOURCE_TYPE_CHOICES):
        raise DomainValidation(f'Unknown source type {source_type}')

    try:
        order = Order.objects.get(id=order_id)
    except Order.DoesNotExist:
        raise NotFound('Order not found')

    request = ReturnRequest.objects.create(
        order=order,
        category=category,
        subcategory=subcategory,
        description=description or '',
        source_type=source_type,
        source_id=str(source_id) if source_id is not None else None,
        image_url=image_url or '',
        created_by=requester,
    )

    logger.info("Return request %s for order %s: %s/%s", request.id, order.id, category, subcategory)
    return request


def resolve_request(request_id, status, resolver):
    if status not in RESOLVED_STATUSES:
        raise DomainValidation('A return request can only be approved or rejected')

    with transaction.atomic():
        try:
            request = ReturnRequest.objects.select_for_update().get(id=request_id)
        except ReturnRequest.DoesNotExist:
            raise NotFound('Return request not found')

        # only the first resolution is stamped
        if request.status == PENDING and request.resolved_at is None:
            request.resolved_at = timezone.now()
            request.resolved_by = resolver

        request.status = status
        request.save(update_fields=['status', 'resolved_at', 'resolved_by'])

    logger.info("Return request %s %s by %s", request.id, status.lower(), resolver)
    return request


def delete_request(request_id):
    deleted, _ = ReturnRequest.objects.filter(id=request_id).delete()
    if not deleted:
        raise NotFound('Return request not found')
