"""Payment received template — sent to the store once the buyer has paid."""

from notifications.notification.notification import NotificationType


class PaymentReceivedTemplate:
    notification_type = NotificationType.PAYMENT_RECEIVED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        total = context.get("total", "N/A")
        return {
            "title": "¡Pago Confirmado! 💰",
            "body": f"Orden #{order_id[:6]} pagada por ${total}. A cocinar.",
        }
