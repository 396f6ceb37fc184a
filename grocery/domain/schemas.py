# grocery/domain/schemas.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from grocery.domain.enums import Language, OrderStatus, PaymentMethod


# auth
class SignUpIn(BaseModel):
    """Schema for account creation."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    full_name: str | None = Field(None, max_length=200)
    phone: str | None = Field(None, max_length=32)
    language: Language = Language.EN
    data_collection_consent: bool = False

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return value

    def metadata(self) -> dict:
        return self.model_dump(exclude={"email", "password"}, mode="json")


class SignInIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class PasswordResetIn(BaseModel):
    email: EmailStr


class PasswordResetConfirmIn(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=72)


class IdentityOut(BaseModel):
    id: uuid.UUID
    email: str


class SessionOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: IdentityOut


# profile
class ProfileOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    full_name: str | None = None
    phone: str | None = None
    language: Language
    data_collection_consent: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdateIn(BaseModel):
    """Partial update; omitted fields are left untouched."""

    full_name: str | None = Field(None, max_length=200)
    phone: str | None = Field(None, max_length=32)
    language: Language | None = None
    data_collection_consent: bool | None = None


# catalog
class CategoryOut(BaseModel):
    id: uuid.UUID
    name: str
    name_hi: str | None = None
    display_name: str
    icon_url: str | None = None
    sort_order: int


class ProductOut(BaseModel):
    id: uuid.UUID
    name: str
    name_hi: str | None = None
    display_name: str
    description: str | None = None
    display_description: str | None = None
    price: Decimal
    original_price: Decimal | None = None
    discount_percentage: int
    image_url: str | None = None
    category_id: uuid.UUID | None = None
    brand: str | None = None
    unit: str
    stock_quantity: int


# cart
class QuantityIn(BaseModel):
    # zero (or less) removes the line
    quantity: int = Field(..., le=10_000)


class CartProductOut(BaseModel):
    id: uuid.UUID
    name: str
    name_hi: str | None = None
    price: Decimal
    image_url: str | None = None
    unit: str
    stock_quantity: int


class CartLineOut(BaseModel):
    id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    product: CartProductOut | None = None
    line_total: Decimal | None = None


class CartOut(BaseModel):
    lines: List[CartLineOut]
    item_count: int
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal


class CartWriteOut(BaseModel):
    affected: int
    line: CartLineOut | None = None


# orders
class CheckoutIn(BaseModel):
    delivery_address: str = Field(..., min_length=1, max_length=500)
    phone: str = Field(..., min_length=5, max_length=32)
    payment_method: PaymentMethod = PaymentMethod.COD

    @field_validator("delivery_address", "phone")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class OrderProductOut(BaseModel):
    name: str
    image_url: str | None = None


class OrderItemOut(BaseModel):
    id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    product: OrderProductOut | None = None


class OrderOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    status: OrderStatus
    payment_method: PaymentMethod
    total_amount: Decimal
    delivery_fee: Decimal
    discount_amount: Decimal
    delivery_address: str
    phone: str
    created_at: datetime
    items: List[OrderItemOut]
