"""
Notification hook.

Rental and payment services announce state changes here. Events are queued
on the current transaction and dispatched only after it commits, through a
Django signal sent with ``send_robust``: a slow or broken subscriber can
never roll back or fail the operation that produced the event.

Subscribers (admin dashboards, station displays) connect to ``swap_event``::

    from django.dispatch import receiver
    from apps.notifications.events import swap_event

    @receiver(swap_event)
    def push_to_station_display(sender, event, payload, rooms, **kwargs):
        ...
"""

import logging
from functools import partial

from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger(__name__)

ADMIN_ROOM = 'admin-room'

RENTAL_CREATED = 'rental-created'
BATTERY_RENTED = 'battery-rented'
RENTAL_COMPLETED = 'rental-completed'
BATTERY_RETURNED = 'battery-returned'
RENTAL_CANCELLED = 'rental-cancelled'
PAYMENT_CREATED = 'payment-created'
PAYMENT_STATUS_UPDATED = 'payment-status-updated'
PAYMENT_REFUNDED = 'payment-refunded'
PAYMENTS_BULK_UPDATED = 'payments-bulk-updated'

# Receivers get: event (str), payload (dict), rooms (tuple of str)
swap_event = Signal()


def station_room(station_id):
    return f'station-{station_id}'


def emit(event, payload, rooms=(ADMIN_ROOM,)):
    """
    Queue ``event`` for dispatch once the current transaction commits.

    Outside a transaction the event is dispatched immediately. If the
    transaction rolls back the event is dropped.
    """
    transaction.on_commit(partial(_dispatch, event, payload, tuple(rooms)))


def _dispatch(event, payload, rooms):
    responses = swap_event.send_robust(
        sender=emit,
        event=event,
        payload=payload,
        rooms=rooms,
    )
    for receiver, response in responses:
        if isinstance(response, Exception):
            logger.error(
                "Subscriber %r failed on %s",
                receiver, event,
                exc_info=(type(response), response, response.__traceback__),
            )
