from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.carts.dtos import AddCartLineDTO, CheckoutDTO
from modules.carts.exceptions import EmptyCart
from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.services import CartService
from modules.catalog.exceptions import BookNotFound, InsufficientStock
from modules.catalog.models import Book
from modules.catalog.repositories.django_repository import BookDjangoRepository
from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService

CATALOG = [
    ("Dune", "Frank Herbert", "Science Fiction", Decimal("18.90"), 1965),
    ("Neuromancer", "William Gibson", "Science Fiction", Decimal("15.50"), 1984),
    ("The Left Hand of Darkness", "Ursula K. Le Guin", "Science Fiction", Decimal("14.00"), 1969),
    ("Foundation", "Isaac Asimov", "Science Fiction", Decimal("12.99"), 1951),
    ("The Hobbit", "J. R. R. Tolkien", "Fantasy", Decimal("11.25"), 1937),
    ("A Wizard of Earthsea", "Ursula K. Le Guin", "Fantasy", Decimal("10.75"), 1968),
    ("The Name of the Wind", "Patrick Rothfuss", "Fantasy", Decimal("16.40"), 2007),
    ("Pride and Prejudice", "Jane Austen", "Classics", Decimal("8.99"), 1813),
    ("Moby-Dick", "Herman Melville", "Classics", Decimal("9.50"), 1851),
    ("Middlemarch", "George Eliot", "Classics", Decimal("13.20"), 1871),
    ("The Pragmatic Programmer", "Andrew Hunt", "Technology", Decimal("39.90"), 1999),
    ("Clean Code", "Robert C. Martin", "Technology", Decimal("34.00"), 2008),
    ("Designing Data-Intensive Applications", "Martin Kleppmann", "Technology", Decimal("45.00"), 2017),
    ("Sapiens", "Yuval Noah Harari", "History", Decimal("17.80"), 2011),
    ("The Guns of August", "Barbara Tuchman", "History", Decimal("16.00"), 1962),
]

CUSTOMERS = ["alice", "bruno", "carla", "daniel", "elena"]

SEED_ORDER_COUNT = 20


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        books = self._seed_books()
        orders_created = self._seed_orders(books)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"books={len(books)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        for username in CUSTOMERS:
            if not User.objects.filter(username=username).exists():
                User.objects.create_user(
                    username,
                    email=f"{username}@example.com",
                    password=f"{username}123",
                )
                created += 1
        return created

    def _seed_books(self) -> list[Book]:
        self.stdout.write("Creating books...")
        books: list[Book] = []
        for title, author, category, price, year in CATALOG:
            book, created = Book.objects.get_or_create(
                title=title,
                author=author,
                deleted_at=None,
                defaults={
                    "category": category,
                    "price": price,
                    "publish_year": year,
                    "stock": random.randint(5, 60),
                },
            )
            if created:
                book.refresh_active()
                book.save(update_fields=["is_active"])
            books.append(book)
        self.stdout.write(self.style.SUCCESS("Creating books... Done!"))
        return books

    def _seed_orders(self, books: list[Book]) -> int:
        self.stdout.write("Creating orders...")
        customers = list(get_user_model().objects.filter(username__in=CUSTOMERS))
        if not customers or not books:
            self.stdout.write(self.style.WARNING("Skipping orders (no customers/books)."))
            return 0

        book_repository = BookDjangoRepository()
        order_service = OrderService(
            order_repository=OrderDjangoRepository(),
            book_repository=book_repository,
        )
        cart_service = CartService(
            cart_repository=CartDjangoRepository(),
            book_repository=book_repository,
            order_service=order_service,
        )
        admin = get_user_model().objects.filter(username="admin").first()

        decisions = [OrderStatus.DELIVERED, OrderStatus.REJECTED, OrderStatus.PENDING]
        weights = [0.5, 0.2, 0.3]
        orders_created = 0

        for i in range(SEED_ORDER_COUNT):
            key = f"seed-order-{i + 1}"
            if Order.objects.filter(idempotency_key=key).exists():
                continue
            customer = random.choice(customers)
            cart_service.clear(customer.pk)
            for book in random.sample(books, k=random.randint(1, 3)):
                try:
                    cart_service.add_line(
                        customer.pk,
                        AddCartLineDTO(book_id=book.id, quantity=random.randint(1, 2)),
                    )
                except (BookNotFound, InsufficientStock):
                    continue
            try:
                order = cart_service.checkout(
                    customer.pk,
                    CheckoutDTO(
                        shipping_address=f"{i + 1} Library Lane, Booktown",
                        idempotency_key=key,
                    ),
                )
            except (EmptyCart, BookNotFound, InsufficientStock):
                continue

            outcome = random.choices(decisions, weights=weights, k=1)[0]
            if outcome == OrderStatus.DELIVERED:
                try:
                    order_service.approve_order(order.id, actor=admin)
                except InsufficientStock:
                    order_service.reject_order(order.id, actor=admin, notes="Out of stock")
            elif outcome == OrderStatus.REJECTED:
                order_service.reject_order(order.id, actor=admin, notes="Seed rejection")
            orders_created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created
