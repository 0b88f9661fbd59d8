"""Driver assigned template — an admin handed an order to this driver."""

from notifications.notification.notification import NotificationType


class DriverAssignedTemplate:
    notification_type = NotificationType.DRIVER_ASSIGNED.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "¡Pedido Asignado!",
            "body": "Dirígete a la tienda a retirar el pedido.",
        }
