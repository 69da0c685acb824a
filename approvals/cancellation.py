"""
Two-step cancellation of a tab: a staff member asks, an approver decides.
The tab is only voided when the request is approved.
"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from dinefloor.exceptions import DomainValidation, InvalidState, NotFound
from tabs import accounts
from tabs.models import Tab

from .models import PENDING, APPROVED, REJECTED, RESOLVED_STATUSES, CancellationRequest

logger = logging.getLogger(__name__)


def list_requests(status=None):
    requests = CancellationRequest.objects.select_related('tab__party', 'tab__table')
    if status:
        requests = requests.filter(status=status)
    return requests


def get_request(request_id):
    try:
        return CancellationRequest.objects.select_related('tab__party', 'tab__table').get(id=request_id)
    except CancellationRequest.DoesNotExist:
        raise NotFound('Cancellation request not found')


def requests_for_tab(tab_id):
    return list_requests().filter(tab_id=tab_id)


def create_request(tab_id, category, reason, requester):
    if category not in dict(CancellationRequest.CATEGORY_CHOICES):
        raise DomainValidation(f'Unknown cancellation category {category}')

    try:
        with transaction.atomic():
            try:
                tab = Tab.objects.select_for_update().get(id=tab_id)
            except Tab.DoesNotExist:
                raise NotFound('Tab not found')

            if tab.status == Tab.CLOSED:
                raise InvalidState('Cannot cancel a tab that is already closed')
            if tab.status == Tab.CANCELLED:
                raise InvalidState('The tab is already cancelled')

            if CancellationRequest.objects.filter(tab=tab, status=PENDING).exists():
                raise InvalidState('A cancellation request is already pending for this tab')

            request = CancellationRequest.objects.create(
                tab=tab,
                category=category,
                reason=reason or '',
                requested_by=requester,
            )
    except IntegrityError:
        raise InvalidState('A cancellation request is already pending for this tab')

    logger.info("Cancellation of tab %s requested by %s (%s)", tab_id, requester, category)
    return request


def resolve_request(request_id, status, approver):
    if status not in RESOLVED_STATUSES:
        raise DomainValidation('A cancellation request can only be approved or rejected')

    with transaction.atomic():
        try:
            request = CancellationRequest.objects.select_for_update().get(id=request_id)
        except CancellationRequest.DoesNotExist:
            raise NotFound('Cancellation request not found')

        if request.status != PENDING:
            raise InvalidState(f'Cancellation request was already {request.status.lower()}')

        request.status = status
        request.approved_by = approver
        request.resolved_at = timezone.now()
        request.save(update_fields=['status', 'approved_by', 'resolved_at'])

        if status == APPROVED:
            accounts.cancel_tab(request.tab_id)

    logger.info("Cancellation request %s %s by %s", request.id, status.lower(), approver)
    return request


def reject_pending(tab_ids):
    """Reject pending requests of tabs that were closed before anyone decided on them."""
    rejected = CancellationRequest.objects.filter(tab_id__in=tab_ids, status=PENDING).update(
        status=REJECTED, resolved_at=timezone.now()
    )
    if rejected:
        logger.info("Pending cancellations of closed tabs %s rejected", list(tab_ids))
    return rejected


def delete_request(request_id):
    deleted, _ = CancellationRequest.objects.filter(id=request_id).delete()
    if not deleted:
        raise NotFound('Cancellation request not found')
