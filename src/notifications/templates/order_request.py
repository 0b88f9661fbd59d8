"""New order template — tells the store a buyer is waiting on it."""

from notifications.notification.notification import NotificationType


class OrderRequestTemplate:
    notification_type = NotificationType.ORDER_REQUEST.value

    @staticmethod
    def render(context: dict) -> dict:
        buyer_name = context.get("buyer_name") or "un cliente"
        total = context.get("total", "N/A")
        return {
            "title": "🔔 Nueva Solicitud",
            "body": f"Tienes un pedido nuevo de {buyer_name} (${total}). Revisa el stock.",
        }
