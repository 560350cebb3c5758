import logging

from django.dispatch import receiver

from .events import swap_event

logger = logging.getLogger(__name__)


@receiver(swap_event)
def log_event(sender, event, payload, rooms, **kwargs):
    """Audit trail of every emitted event; transports subscribe separately."""
    logger.info("event=%s rooms=%s payload=%s", event, ','.join(rooms), payload)
