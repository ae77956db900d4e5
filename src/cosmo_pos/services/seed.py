"""
Static seed data used when the remote store is unreachable or empty.

Every accessor builds fresh model instances so the cache can mutate them
without touching the seed definitions.
"""

from __future__ import annotations

from cosmo_pos.constants import (
    DEFAULT_STATUS_COLOR,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_PENDING,
    STATUS_PREPARING,
    STATUS_READY,
    STATUS_COLOR_FALLBACKS,
)
from cosmo_pos.schemas import (
    CategoryItem,
    Customer,
    KitchenScreen,
    Order,
    OrderStatus,
    Product,
    User,
)

_IMG = "https://images.unsplash.com/photo-{}?auto=format&fit=crop&q=80&w=200&h=200"

SEED_PRODUCTS = [
    {
        "id": "1",
        "name": "Prawn & Chive Dumplings",
        "price": "85",
        "category": "Dumplings",
        "description": "Steamed prawn dumplings with fresh chives.",
        "stock": 45,
        "image": _IMG.format("1541696490865-9810f788fb3c"),
        "options": ["Steamed", "Fried", "Chilli Oil (+R5)"],
    },
    {
        "id": "2",
        "name": "Spicy Beef Dumplings",
        "price": "75",
        "category": "Dumplings",
        "description": "Juicy beef with szechuan pepper kick.",
        "stock": 8,
        "image": _IMG.format("1496116218417-7a17478ee173"),
        "options": ["Steamed", "Fried"],
    },
    {
        "id": "3",
        "name": "Chicken & Corn Potstickers",
        "price": "70",
        "category": "Dumplings",
        "description": "Pan-fried dumplings with golden crust.",
        "stock": 120,
        "image": _IMG.format("1625220194771-7ebdea0b70b9"),
        "options": ["Standard", "Extra Crispy"],
    },
    {
        "id": "4",
        "name": "Vegetable Bun",
        "price": "45",
        "category": "Sides",
        "description": "Fluffy steamed bun with mixed veg filling.",
        "stock": 30,
        "image": _IMG.format("1563245372-f21724e3856d"),
        "options": ["1 Piece", "2 Pieces"],
    },
    {
        "id": "5",
        "name": "Cosmo Special Noodles",
        "price": "95",
        "category": "Sides",
        "description": "Hand-pulled noodles with secret sauce.",
        "stock": 50,
        "image": _IMG.format("1552611052-33e04de081de"),
        "options": ["Chicken", "Beef", "Vegetable", "Prawn (+R15)"],
    },
    {
        "id": "6",
        "name": "Jasmine Tea",
        "price": "25",
        "category": "Drinks",
        "description": "Fragrant hot tea.",
        "stock": 200,
        "image": _IMG.format("1576092768241-dec231879fc3"),
        "options": ["Hot", "Iced", "No Sugar"],
    },
    {
        "id": "7",
        "name": "Tsingtao Beer",
        "price": "40",
        "category": "Drinks",
        "description": "Imported Chinese lager.",
        "stock": 4,
        "image": _IMG.format("1598155523122-38423bb4d6c1"),
    },
    {
        "id": "8",
        "name": "Mango Mochi",
        "price": "55",
        "category": "Dessert",
        "description": "Soft rice cake with fresh mango filling.",
        "stock": 25,
        "image": _IMG.format("1623592534882-62b8a7f45758"),
        "options": ["Strawberry", "Mango", "Matcha"],
    },
]

SEED_CUSTOMERS = [
    {
        "id": "c1",
        "name": "John Doe",
        "phone": "082 555 1234",
        "address": "12 Cosmo Street, Cape Town",
        "totalOrders": 15,
        "lastOrderDate": "2023-10-25",
    },
    {
        "id": "c2",
        "name": "Jane Smith",
        "phone": "071 999 8888",
        "address": "45 Dumpling Lane, Johannesburg",
        "totalOrders": 3,
        "lastOrderDate": "2023-10-20",
    },
]

# Demo credentials; the seed PINs are legacy plaintext rows.
SEED_USERS = [
    {"id": "u1", "name": "Manager Mike", "role": "Admin", "pin": "1234"},
    {"id": "u2", "name": "Server Sarah", "role": "Staff", "pin": "0000"},
]

SEED_CATEGORIES = ["Dumplings", "Sides", "Drinks", "Dessert"]

SEED_KITCHEN_SCREENS = [
    {"id": 1, "name": "Main Kitchen", "ip": "192.168.1.201"},
]

SEED_ORDER_STATUSES = [
    {"id": 1, "label": STATUS_PENDING, "isKitchen": True, "isFinal": False},
    {"id": 2, "label": STATUS_PREPARING, "isKitchen": True, "isFinal": False},
    {"id": 3, "label": STATUS_READY, "isKitchen": False, "isFinal": False},
    {"id": 4, "label": STATUS_COMPLETED, "isKitchen": False, "isFinal": True},
    {"id": 5, "label": STATUS_CANCELLED, "isKitchen": False, "isFinal": True},
]


def _product(index: int) -> dict:
    return dict(SEED_PRODUCTS[index])


def _seed_orders() -> list[dict]:
    return [
        {
            "id": "ORD-001",
            "items": [
                {"product": _product(0), "quantity": 2, "selectedOption": "Steamed"},
                {"product": _product(5), "quantity": 1, "selectedOption": "Hot"},
            ],
            "total": "195",
            "paymentMethod": "Card",
            "type": "Dine-In",
            "tableNumber": 5,
            "date": "2023-10-26 14:30",
            "status": STATUS_COMPLETED,
            "orderBy": "Server Sarah",
        },
        {
            "id": "ORD-002",
            "items": [{"product": _product(1), "quantity": 1, "selectedOption": "Fried"}],
            "total": "75",
            "paymentMethod": "Cash",
            "type": "Takeaway",
            "date": "2023-10-26 15:15",
            "status": STATUS_PREPARING,
            "orderBy": "Manager Mike",
        },
        {
            "id": "ORD-003",
            "items": [
                {"product": _product(2), "quantity": 1, "selectedOption": "Standard"},
                {"product": _product(6), "quantity": 2},
            ],
            "total": "150",
            "paymentMethod": "Card",
            "type": "Dine-In",
            "tableNumber": 2,
            "date": "2023-10-26 16:00",
            "status": STATUS_PENDING,
            "orderBy": "Server Sarah",
        },
    ]


def seed_products() -> list[Product]:
    return [Product.model_validate(row) for row in SEED_PRODUCTS]


def seed_customers() -> list[Customer]:
    return [Customer.model_validate(row) for row in SEED_CUSTOMERS]


def seed_users() -> list[User]:
    return [User.model_validate(row) for row in SEED_USERS]


def seed_orders() -> list[Order]:
    return [Order.model_validate(row) for row in _seed_orders()]


def seed_categories() -> list[CategoryItem]:
    return [CategoryItem(id=i + 1, name=name) for i, name in enumerate(SEED_CATEGORIES)]


def seed_order_statuses() -> list[OrderStatus]:
    return [
        OrderStatus.model_validate(
            {**row, "color": STATUS_COLOR_FALLBACKS.get(row["label"], DEFAULT_STATUS_COLOR)}
        )
        for row in SEED_ORDER_STATUSES
    ]


def seed_kitchen_screens() -> list[KitchenScreen]:
    return [KitchenScreen.model_validate(row) for row in SEED_KITCHEN_SCREENS]


def default_status_rows() -> list[dict]:
    """Rows returned by the remote adapter when the statuses table is missing."""
    return [status.to_row() for status in seed_order_statuses()]


def default_category_rows() -> list[dict]:
    return [category.to_row() for category in seed_categories()]
