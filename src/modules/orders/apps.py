from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.orders"
    label = "orders"

    def ready(self) -> None:
        from modules.orders.events import OrderApproved, OrderPlaced, OrderRejected
        from modules.orders.handlers import (
            order_approved_handler,
            order_placed_handler,
            order_rejected_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(OrderPlaced, order_placed_handler)
        event_bus.subscribe(OrderApproved, order_approved_handler)
        event_bus.subscribe(OrderRejected, order_rejected_handler)
