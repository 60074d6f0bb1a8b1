"""
Fire-and-forget delivery of order status notifications.

Runs after the transition has committed. Nothing here may raise into the
caller: failures are logged and the transition stands.
"""
import logging

from django.conf import settings
from django.core.mail import send_mail

from .flow import status_label
from .models import Notification, Order

logger = logging.getLogger(__name__)


def notify_status_change(order_id, status, comment=None):
    try:
        order = Order.objects.select_related('dealer').get(pk=order_id)
    except Exception as e:
        logger.warning(f"Status notification skipped for order {order_id}: {str(e)}")
        return None

    label = status_label(status)
    notification = None
    try:
        notification = Notification.objects.create(
            dealer=order.dealer,
            order=order,
            title='Order status updated',
            message=f"Order {order.pk} is now {label}",
        )
    except Exception as e:
        logger.warning(f"Notification create skipped for order {order.pk}: {str(e)}")

    if settings.ORDER_NOTIFICATIONS_EMAIL and order.dealer.email:
        body = f"Order {order.pk} status is now {label}."
        if comment:
            body += f"\n\nNote: {comment}"
        try:
            send_mail(
                subject=f"Order {order.pk} status: {label}",
                message=body,
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[order.dealer.email],
            )
        except Exception as e:
            logger.warning(f"Status e-mail to {order.dealer.email} failed for order {order.pk}: {str(e)}")

    return notification
