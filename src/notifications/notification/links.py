"""Deep links carried by push notifications.

The device's background handler opens the link without the app router, so
every link is absolute.
"""

from shared.config import get_settings


def absolute_link(path: str, settings=None) -> str:
    if path.startswith(("http://", "https://")):
        return path
    settings = settings or get_settings()
    return f"{settings.public_base_url.rstrip('/')}/{path.lstrip('/')}"


def order_link(order_id: str, settings=None) -> str:
    return absolute_link(f"/orders/{order_id}", settings)


def orders_link(settings=None) -> str:
    return absolute_link("/orders", settings)
