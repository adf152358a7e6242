from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from modules.fulfillment.repositories.django_repository import TaskDjangoRepository
from modules.offers.constants import DiscountType
from modules.offers.models import Offer
from modules.offers.repositories.django_repository import OfferDjangoRepository
from modules.orders.constants import PaymentMethod
from modules.orders.dtos import CreateOrderDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.staff.actor import Actor
from modules.staff.constants import StaffRole
from modules.staff.models import StaffMember
from modules.staff.repositories.django_repository import StaffDjangoRepository

STAFF = [
    ("owner", "Store Owner", StaffRole.SUPERADMIN, "owner123"),
    ("manager", "Ops Manager", StaffRole.ADMIN, "manager123"),
    ("ravi", "Ravi Kumar", StaffRole.WORKER, "worker123"),
    ("meera", "Meera Iyer", StaffRole.WORKER, "worker123"),
]

CATALOG = [
    ("TEA-001", "Assam Tea 250g", Decimal("240.00")),
    ("TEA-002", "Darjeeling First Flush 100g", Decimal("520.00")),
    ("SPC-001", "Kashmiri Chilli 100g", Decimal("180.00")),
    ("SPC-002", "Cardamom 50g", Decimal("310.00")),
    ("HNY-001", "Forest Honey 500g", Decimal("450.00")),
    ("CER-001", "Brass Tea Strainer", Decimal("899.00")),
]

CUSTOMERS = [
    ("Ananya Rao", "ananya@example.com", "9876500001"),
    ("Kabir Shah", "kabir@example.com", "9876500002"),
    ("Priya Nair", "priya@example.com", "9876500003"),
    ("Arjun Mehta", "arjun@example.com", "9876500004"),
]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=20)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        staff_created = self._seed_staff()
        offers = self._seed_offers()
        orders_created = self._seed_orders(options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"staff={staff_created}, "
                f"offers={len(offers)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_staff(self) -> int:
        self.stdout.write("Creating staff...")
        User = get_user_model()
        created = 0
        for username, name, role, password in STAFF:
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(username, password=password, is_staff=True)
            _, was_created = StaffMember.objects.get_or_create(
                username=username,
                defaults={"name": name, "role": role, "user": user},
            )
            created += int(was_created)
        self.stdout.write(self.style.SUCCESS("Creating staff... Done!"))
        return created

    def _seed_offers(self) -> list[Offer]:
        self.stdout.write("Creating offers...")
        now = timezone.now()
        definitions = [
            {
                "code": "SAVE10",
                "title": "10% off your order",
                "discount_type": DiscountType.PERCENTAGE,
                "discount_value": Decimal("10"),
                "max_discount": Decimal("300"),
            },
            {
                "code": "FLAT100",
                "title": "Flat 100 off above 999",
                "discount_type": DiscountType.FIXED,
                "discount_value": Decimal("100"),
                "min_order_amount": Decimal("999"),
            },
            {
                "code": "WELCOME",
                "title": "Welcome offer",
                "discount_type": DiscountType.PERCENTAGE,
                "discount_value": Decimal("15"),
                "one_time_per_user": True,
            },
        ]
        offers: list[Offer] = []
        for definition in definitions:
            offer, _ = Offer.objects.get_or_create(
                code=definition.pop("code"),
                defaults={
                    **definition,
                    "valid_from": now - timedelta(days=1),
                    "valid_until": now + timedelta(days=90),
                    "created_by": "owner",
                },
            )
            offers.append(offer)
        self.stdout.write(self.style.SUCCESS("Creating offers... Done!"))
        return offers

    def _seed_orders(self, count: int) -> int:
        self.stdout.write("Creating orders...")
        if Order.objects.filter(notes__startswith="Seed order").exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        service = OrderService(
            order_repository=OrderDjangoRepository(),
            offer_repository=OfferDjangoRepository(),
            staff_repository=StaffDjangoRepository(),
            task_repository=TaskDjangoRepository(),
        )
        admin = Actor(id="manager", role=StaffRole.ADMIN)
        workers = [username for username, _, role, _ in STAFF if role == StaffRole.WORKER]

        for i in range(count):
            name, email, phone = random.choice(CUSTOMERS)
            method = random.choice(list(PaymentMethod))
            items = [
                {"product_id": sku, "sku": sku, "title": title, "price": price,
                 "quantity": random.randint(1, 3)}
                for sku, title, price in random.sample(CATALOG, k=random.randint(1, 3))
            ]
            subtotal = sum(item["price"] * item["quantity"] for item in items)
            codes = [None, None, "SAVE10"] + (["FLAT100"] if subtotal >= 999 else [])
            order = service.create_order(
                CreateOrderDTO(
                    items=items,
                    shipping=Decimal("49.00"),
                    customer={"name": name, "email": email, "phone": phone},
                    shipping_address={
                        "name": name,
                        "address_line1": f"{random.randint(1, 200)} MG Road",
                        "city": "Bengaluru",
                        "state": "Karnataka",
                        "pincode": "560001",
                    },
                    payment_method=method,
                    payment_confirmed=method != PaymentMethod.COD,
                    offer_code=random.choice(codes),
                    notes=f"Seed order {i + 1}",
                )
            )
            if random.random() < 0.6:
                service.assign(str(order.id), random.choice(workers), admin)

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return count
