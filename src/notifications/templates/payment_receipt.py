"""Payment receipt template — sent to the buyer after payment is confirmed."""

from notifications.notification.notification import NotificationType


class PaymentReceiptTemplate:
    notification_type = NotificationType.PAYMENT_RECEIPT.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "Pago Recibido ✅",
            "body": "Tu pago se acreditó y la tienda ya está preparando tu pedido.",
        }
