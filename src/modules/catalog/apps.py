from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.catalog"
    label = "catalog"

    def ready(self) -> None:
        from modules.catalog.events import BookStockDepleted
        from modules.catalog.handlers import book_stock_depleted_handler
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(BookStockDepleted, book_stock_depleted_handler)
