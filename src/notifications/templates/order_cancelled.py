"""Cancellation template — sent to whichever party did not cancel."""

from notifications.notification.notification import NotificationType


class OrderCancelledTemplate:
    notification_type = NotificationType.ORDER_CANCELLED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        reason = context.get("reason")
        body = f"El pedido #{order_id[:7]} fue cancelado."
        if reason:
            body += f" Motivo: {reason}"
        return {"title": "Pedido cancelado", "body": body}
