"""Signal handlers for the booking domain."""

from __future__ import annotations

import logging

from django.db.models.signals import post_delete  # type: ignore
from django.dispatch import receiver  # type: ignore

from .models import Booking, Customer

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=Booking)
def delete_orphaned_customer(sender, instance: Booking, **kwargs) -> None:  # type: ignore
    """Customers exist only through their bookings; drop one left without any."""
    customer_id = instance.customer_id
    if Booking.objects.filter(customer_id=customer_id).exists():
        return
    deleted, _ = Customer.objects.filter(pk=customer_id).delete()
    if deleted:
        logger.info(f"Deleted customer {customer_id} after its last booking was removed")
