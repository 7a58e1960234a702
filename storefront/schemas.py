from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from storefront.db.models import DiscountType, OrderStatus, PaymentStatus

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

# catalog
class CategoryBase(CamelModel):
    name: str = Field(min_length=1, max_length=120)
    slug: Optional[str] = None
    is_active: bool = True
class CategoryCreate(CategoryBase): pass
class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    slug: Optional[str] = None
    is_active: Optional[bool] = None
class CategoryRead(CategoryBase):
    id: int
    slug: str

class ProductBase(CamelModel):
    title: str = Field(min_length=1, max_length=240)
    description: str = ''
    price: int = Field(ge=0)
    currency: str = 'INR'
    stock: int = Field(default=0, ge=0)
    images: List[str] = []
    category_id: Optional[int] = None
    is_active: bool = True
class ProductCreate(ProductBase): pass
class ProductUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[int] = Field(default=None, ge=0)
    currency: Optional[str] = None
    stock: Optional[int] = Field(default=None, ge=0)
    images: Optional[List[str]] = None
    category_id: Optional[int] = None
    is_active: Optional[bool] = None
class ProductRead(ProductBase):
    id: int

# cart
class CartItemAdd(CamelModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)
class CartItemUpdate(CamelModel):
    quantity: int = Field(ge=0)
class CartItemRead(CamelModel):
    product_id: int
    quantity: int
    unit_price: int
    title: str
class CartRead(CamelModel):
    items: List[CartItemRead] = []

# checkout / orders
class ShippingAddress(CamelModel):
    full_name: Optional[str] = ""
    address_line1: str = Field(min_length=1)
    address_line2: Optional[str] = ""
    city: str = Field(min_length=1)
    state: Optional[str] = ""
    postcode: str = Field(min_length=1)
    country: str = Field(min_length=2, max_length=2)  # "IN", "IE", etc
    phone: Optional[str] = ""
class CheckoutRequest(CamelModel):
    shipping_address: ShippingAddress
    payment_method: str = Field(min_length=1, max_length=32)
    coupon_code: Optional[str] = None
class OrderItemRead(CamelModel):
    product_id: int
    title: str
    unit_price: int
    quantity: int
    image_url: str
class OrderRead(CamelModel):
    id: int
    user_email: str
    items: List[OrderItemRead]
    shipping_address: ShippingAddress
    payment_method: str
    payment_status: PaymentStatus
    order_status: OrderStatus
    total_amount: int
    coupon_code: Optional[str] = None
    discount_amount: int
    amount_due: int
    currency: str
    payment_intent_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_order(cls, order) -> "OrderRead":
        return cls(
            id=order.id,
            user_email=order.user_email,
            items=[OrderItemRead.model_validate(it) for it in order.items],
            shipping_address=ShippingAddress.model_validate(order),
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            order_status=order.order_status,
            total_amount=order.total_amount,
            coupon_code=order.coupon_code,
            discount_amount=order.discount_amount,
            amount_due=order.amount_due,
            currency=order.currency,
            payment_intent_id=order.payment_intent_id,
            paid_at=order.paid_at,
            delivered_at=order.delivered_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
class OrderStatusUpdate(CamelModel):
    order_status: OrderStatus
class PaymentStatusUpdate(CamelModel):
    payment_status: PaymentStatus

# coupons
class CouponBase(CamelModel):
    code: str = Field(min_length=1, max_length=64)
    discount_type: DiscountType
    discount_value: int = Field(gt=0)
    min_order_amount: int = Field(default=0, ge=0)
    max_discount_amount: Optional[int] = Field(default=None, gt=0)
    expiry_date: datetime
    usage_limit: Optional[int] = Field(default=None, ge=1)
class CouponCreate(CouponBase): pass
class CouponUpdate(CamelModel):
    code: Optional[str] = Field(default=None, min_length=1, max_length=64)
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[int] = Field(default=None, gt=0)
    min_order_amount: Optional[int] = Field(default=None, ge=0)
    max_discount_amount: Optional[int] = Field(default=None, gt=0)
    expiry_date: Optional[datetime] = None
    usage_limit: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None
class CouponRead(CouponBase):
    id: int
    used_count: int
    is_active: bool
    created_by: str
    created_at: datetime
class CouponApply(CamelModel):
    coupon_code: Optional[str] = None
    cart_total: Optional[int] = None
class CouponApplyResult(CamelModel):
    coupon_code: str
    discount_amount: int
    final_amount: int
    message: str = "Coupon applied successfully"

# payments
class PaymentEvent(CamelModel):
    type: str
    order_id: int
    payment_intent_id: Optional[str] = None

class Message(CamelModel):
    message: str
