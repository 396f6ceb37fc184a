from enum import Enum


class Language(str, Enum):
    EN = "en"
    HI = "hi"


class OrderStatus(str, Enum):
    PENDING = "pending"          # placed at checkout
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"      # final
    CANCELLED = "cancelled"      # final


class PaymentMethod(str, Enum):
    COD = "cod"
    ONLINE = "online"


class Role(str, Enum):
    ANON = "anon"
    AUTHENTICATED = "authenticated"
    SERVICE = "service_role"
