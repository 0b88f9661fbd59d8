"""Template registry — maps NotificationType to template classes.

Each template knows how to render a push title and body from event context
data.
"""

from notifications.notification.notification import NotificationType
from notifications.templates.driver_assigned import DriverAssignedTemplate
from notifications.templates.order_cancelled import OrderCancelledTemplate
from notifications.templates.order_delivered import OrderDeliveredTemplate
from notifications.templates.order_preparing import OrderPreparingTemplate
from notifications.templates.order_request import OrderRequestTemplate
from notifications.templates.out_for_delivery import OutForDeliveryTemplate
from notifications.templates.payment_receipt import PaymentReceiptTemplate
from notifications.templates.payment_received import PaymentReceivedTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.ORDER_REQUEST.value: OrderRequestTemplate,
    NotificationType.PAYMENT_RECEIVED.value: PaymentReceivedTemplate,
    NotificationType.PAYMENT_RECEIPT.value: PaymentReceiptTemplate,
    NotificationType.ORDER_PREPARING.value: OrderPreparingTemplate,
    NotificationType.OUT_FOR_DELIVERY.value: OutForDeliveryTemplate,
    NotificationType.ORDER_DELIVERED.value: OrderDeliveredTemplate,
    NotificationType.ORDER_CANCELLED.value: OrderCancelledTemplate,
    NotificationType.DRIVER_ASSIGNED.value: DriverAssignedTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
