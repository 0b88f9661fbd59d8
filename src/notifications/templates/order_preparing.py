"""Preparing template — the store started working on the order."""

from notifications.notification.notification import NotificationType


class OrderPreparingTemplate:
    notification_type = NotificationType.ORDER_PREPARING.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return {
            "title": "Pedido en preparación",
            "body": f"La tienda está preparando tu pedido #{order_id[:7]}.",
        }
