"""
Pydantic schemas for cached records and request validation.

Remote rows use the camelCase column names of the hosted tables; every
record accepts both the alias and the Python field name.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    PlainSerializer,
    field_validator,
)

from cosmo_pos.constants import (
    DEFAULT_STAFF_NAME,
    DEFAULT_STATUS_COLOR,
    OrderType,
    PaymentMethod,
    Roles,
)
from cosmo_pos.validation import validate_pin, validate_role


def _to_decimal(value: Any) -> Any:
    # Floats from JSON go through str() so 0.15 stays 0.15.
    if isinstance(value, float):
        return Decimal(str(value))
    return value


Money = Annotated[
    Decimal,
    BeforeValidator(_to_decimal),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class RecordModel(BaseModel):
    """Base for rows mirrored from the remote store."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_row(self, exclude: set[str] | None = None) -> dict[str, Any]:
        """Serialize with remote column names, dropping unset optionals."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True, exclude=exclude)


class Product(RecordModel):
    id: str
    name: str
    price: Money
    category: str = ""
    description: str = ""
    stock: int = Field(default=0, ge=0)
    image: str = ""
    expiry_date: str | None = Field(default=None, alias="expiryDate")
    options: list[str] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v

    @field_validator("expiry_date", mode="before")
    @classmethod
    def blank_expiry_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Customer(RecordModel):
    id: str
    name: str
    phone: str = ""
    address: str = ""
    total_orders: int = Field(default=0, alias="totalOrders")
    last_order_date: str = Field(default="", alias="lastOrderDate")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v


class CartItem(RecordModel):
    product: Product
    quantity: int = Field(default=1, ge=1)
    notes: str = ""
    selected_option: str = Field(default="", alias="selectedOption")

    @field_validator("notes", "selected_option", mode="before")
    @classmethod
    def none_is_blank(cls, v):
        return "" if v is None else v


class Order(RecordModel):
    id: str
    items: list[CartItem]
    total: Money
    payment_method: PaymentMethod = Field(alias="paymentMethod")
    type: OrderType
    customer: Customer | None = None
    table_number: int | None = Field(default=None, alias="tableNumber")
    date: str
    status: str
    order_by: str = Field(default=DEFAULT_STAFF_NAME, alias="orderBy")
    open_drawer: bool = Field(default=False, alias="openDrawer")
    tendered: Money | None = None
    change: Money | None = None

    @field_validator("open_drawer", mode="before")
    @classmethod
    def null_drawer_is_closed(cls, v):
        return bool(v)

    def to_row(self, exclude: set[str] | None = None) -> dict[str, Any]:
        # The orders table has no customer column.
        return super().to_row(exclude=(exclude or set()) | {"customer"})


class OrderStatus(RecordModel):
    id: int
    label: str
    color: str = DEFAULT_STATUS_COLOR
    is_kitchen: bool = Field(default=False, alias="isKitchen")
    is_final: bool = Field(default=False, alias="isFinal")


class CategoryItem(RecordModel):
    id: int
    name: str


class User(RecordModel):
    id: str
    name: str
    role: Roles = Roles.STAFF
    # Either "sha256$<hex>" or a legacy plaintext PIN.
    pin: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v

    def public_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude={"pin"})


class KitchenScreen(RecordModel):
    id: int
    name: str
    ip: str


class PrinterSettings(RecordModel):
    printer_name: str = Field(default="Epson TM-T20III", alias="printerName")
    ip_address: str = Field(default="192.168.1.200", alias="ipAddress")
    paper_size: Literal["58mm", "80mm"] = Field(default="80mm", alias="paperSize")
    auto_cut: bool = Field(default=True, alias="autoCut")


class StoreSettings(RecordModel):
    name: str = "Cosmo Dumplings"
    address: str = "123 Flavor Street, Cape Town"
    contact: str = "021 555 0199"
    email: str = "hello@cosmodumplings.co.za"
    footer_message: str = Field(default="Thank you for dining with us!", alias="footerMessage")
    tax_rate: float = Field(default=0.15, ge=0, le=1, alias="taxRate")


# --- Requests -----------------------------------------------------------


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AddToCartRequest(RequestModel):
    product_id: str = Field(..., alias="productId")
    quantity: int = Field(default=1, ge=1)
    notes: str = ""
    selected_options: list[str] = Field(default_factory=list, alias="selectedOptions")


class UpdateCartQuantityRequest(RequestModel):
    delta: int


class UpdateCartNoteRequest(RequestModel):
    note: str = ""


class CheckoutRequest(RequestModel):
    payment_method: PaymentMethod = Field(..., alias="paymentMethod")
    order_type: OrderType = Field(..., alias="orderType")
    table_number: int | None = Field(default=None, ge=1, alias="tableNumber")
    tendered: Money | None = Field(default=None, ge=0)


class StatusUpdateRequest(RequestModel):
    status: str | None = Field(default=None, min_length=1)


class LoginRequest(RequestModel):
    pin: str

    @field_validator("pin")
    @classmethod
    def validate_pin_format(cls, v):
        validate_pin(v)
        return v


class ProductRequest(RequestModel):
    id: str | None = None
    name: str = Field(..., min_length=1, max_length=120)
    price: Money = Field(..., ge=0)
    category: str = ""
    description: str = ""
    stock: int = Field(default=0, ge=0)
    image: str = ""
    expiry_date: str | None = Field(default=None, alias="expiryDate")
    options: list[str] | None = None


class CreateUserRequest(RequestModel):
    name: str = Field(..., min_length=1, max_length=120)
    role: str = Field(default=Roles.STAFF.value)
    pin: str

    @field_validator("pin")
    @classmethod
    def validate_pin_format(cls, v):
        validate_pin(v)
        return v

    @field_validator("role")
    @classmethod
    def validate_role_value(cls, v):
        validate_role(v)
        return v


class CreateKitchenScreenRequest(RequestModel):
    name: str = Field(..., min_length=1)
    ip: str = Field(..., min_length=1)


class CreateOrderStatusRequest(RequestModel):
    label: str = Field(..., min_length=1, max_length=40)
    color: str = DEFAULT_STATUS_COLOR
    is_kitchen: bool = Field(default=False, alias="isKitchen")
    is_final: bool = Field(default=False, alias="isFinal")


class CreateCategoryRequest(RequestModel):
    name: str = Field(..., min_length=1, max_length=60)


class ReceiptEmailRequest(RequestModel):
    email: EmailStr


class ReceiptSmsRequest(RequestModel):
    phone: str = Field(..., min_length=9)
    message: str | None = None
