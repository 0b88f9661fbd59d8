"""Delivered template — closes the order for the buyer and invites a review."""

from notifications.notification.notification import NotificationType


class OrderDeliveredTemplate:
    notification_type = NotificationType.ORDER_DELIVERED.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "Pedido entregado",
            "body": "¡Tu pedido ha sido entregado! Disfrútalo y cuéntanos cómo te fue.",
        }
