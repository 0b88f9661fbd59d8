"""Out for delivery template — a driver picked the order up."""

from notifications.notification.notification import NotificationType


class OutForDeliveryTemplate:
    notification_type = NotificationType.OUT_FOR_DELIVERY.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "¡Pedido en camino!",
            "body": "Un repartidor ha recogido tu pedido y está en camino. Puedes seguirlo en el mapa.",
        }
