"""
Application constants and enums.
"""

from enum import Enum


class PaymentMethod(str, Enum):
    CASH = "Cash"
    CARD = "Card"


class OrderType(str, Enum):
    DINE_IN = "Dine-In"
    TAKEAWAY = "Takeaway"
    DELIVERY = "Delivery"


class Roles(str, Enum):
    ADMIN = "Admin"
    STAFF = "Staff"

    @classmethod
    def is_admin(cls, role: str) -> bool:
        return role == cls.ADMIN

    @classmethod
    def all_values(cls) -> set:
        return {member.value for member in cls}


class ChangeOperation(str, Enum):
    """Operations carried by the realtime change feed."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class NoticeType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Table(str, Enum):
    """Remote collections exposed by the hosted database."""

    PRODUCTS = "products"
    USERS = "users"
    CUSTOMERS = "customers"
    ORDERS = "orders"
    KITCHEN_SCREENS = "kitchen_screens"
    ORDER_STATUSES = "order_statuses"
    CATEGORIES = "categories"


# Collections with a realtime channel. Users and customers are load-only.
REALTIME_TABLES = (
    Table.ORDERS,
    Table.PRODUCTS,
    Table.KITCHEN_SCREENS,
    Table.ORDER_STATUSES,
    Table.CATEGORIES,
)

# Postgres / PostgREST error codes the remote adapter reacts to.
PG_UNDEFINED_TABLE = "42P01"
PG_UNDEFINED_COLUMN = "42703"
PGRST_UNKNOWN_COLUMN = "PGRST204"
PGRST_SCHEMA_CACHE = "PGRST205"

# Status labels with fixed meaning in the order workflow.
STATUS_PENDING = "Pending"
STATUS_PREPARING = "Preparing"
STATUS_READY = "Ready"
STATUS_COMPLETED = "Completed"
STATUS_CANCELLED = "Cancelled"

# Statuses that bootstrap the workflow and cannot be removed from the catalog.
PROTECTED_STATUS_LABELS = frozenset({STATUS_PENDING, STATUS_COMPLETED})

# Used when the status catalog is empty.
DEFAULT_KITCHEN_STATUS_LABELS = (STATUS_PENDING, STATUS_PREPARING)

STATUS_COLOR_FALLBACKS = {
    STATUS_PENDING: "bg-blue-100 text-blue-700",
    STATUS_PREPARING: "bg-yellow-100 text-yellow-700",
    STATUS_READY: "bg-green-100 text-green-700",
    STATUS_COMPLETED: "bg-gray-100 text-gray-700",
    STATUS_CANCELLED: "bg-red-100 text-red-700",
}
DEFAULT_STATUS_COLOR = "bg-gray-100 text-gray-700"

ORDER_ID_PREFIX = "ORD-"
DEFAULT_STAFF_NAME = "Staff"

MAX_SELECTED_OPTIONS = 3
OPTION_SEPARATOR = ", "
PIN_LENGTH = 4

LOCAL_SETTING_PRINTER = "printer_settings"
LOCAL_SETTING_STORE = "store_settings"

# Receipt delivery edge functions.
EMAIL_RECEIPT_FUNCTION = "send-receipt-email"
SMS_RECEIPT_FUNCTION = "send-receipt-sms"

MAX_RECORDED_ERRORS = 200
MAX_NOTICES = 50

# Default forward progression for the "next" action. The Ready step is
# resolved against the configured catalog at runtime.
ORDER_PROGRESSION = {
    STATUS_PENDING: STATUS_PREPARING,
    STATUS_PREPARING: STATUS_READY,
    STATUS_READY: STATUS_COMPLETED,
}
