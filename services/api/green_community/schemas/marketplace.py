"""Schemas for the marketplace: shops, products, cart, checkout, orders."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from green_community.models.order import OrderStatus, PaymentMethod


# ============================================================
# Shops & products
# ============================================================


class ShopOut(BaseModel):
    id: str
    owner_id: str | None = None
    name: str
    description: str | None = None
    location: str | None = None
    category: str | None = None
    rating: float = 0
    image_url: str | None = None

    model_config = {"from_attributes": True}


class ShopCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    location: str | None = Field(default=None, max_length=200)
    category: str | None = Field(default=None, max_length=50)
    image_url: str | None = None


class ShopSummary(BaseModel):
    """Shop fields embedded in product/cart/order payloads."""

    name: str
    location: str | None = None
    rating: float | None = None


class ProductOut(BaseModel):
    id: str
    shop_id: str
    name: str
    description: str = ""
    category: str
    price_in_points: int
    price: float = 0
    image_url: str | None = None
    created_at: datetime | None = None
    shop: ShopSummary | None = None

    model_config = {"from_attributes": True}


class ProductIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    category: str = Field(min_length=1, max_length=50)
    price_in_points: int = Field(ge=1, description="Price in Green Points")
    price: float = Field(default=0, ge=0)
    image_url: str | None = None


class BuyCheck(BaseModel):
    product_id: str
    affordable: bool
    required: int
    balance: int


# ============================================================
# Cart
# ============================================================


class CartItemOut(BaseModel):
    id: str
    product_id: str
    quantity: int = Field(ge=1)
    product: ProductOut


class CartOut(BaseModel):
    items: list[CartItemOut]
    total_points: int = Field(ge=0)
    total_items: int = Field(ge=0)
    total_amount: float = Field(ge=0)
    source: str = Field(description="'table' or 'fallback'")


class CartItemAdd(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1, le=99)


class CartItemUpdate(BaseModel):
    quantity: int = Field(le=99, description="Quantity <= 0 removes the item")


# ============================================================
# Checkout
# ============================================================


class ShippingAddress(BaseModel):
    full_name: str
    phone: str
    email: str
    address: str
    city: str
    state: str
    pincode: str

    @field_validator("full_name", "phone", "email", "address", "city", "state", "pincode")
    @classmethod
    def _required(cls, v: str) -> str:
        value = v.strip()
        if not value:
            raise ValueError("is required")
        return value


class CheckoutRequest(BaseModel):
    shipping_address: ShippingAddress
    payment_method: PaymentMethod = PaymentMethod.GREEN_POINTS
    notes: str | None = Field(default=None, max_length=2000)


class CheckoutResult(BaseModel):
    order_id: str
    status: OrderStatus
    payment_method: PaymentMethod
    transaction_id: str
    total_points: int
    total_amount: float
    remaining_points: int


# ============================================================
# Orders
# ============================================================


class OrderItemOut(BaseModel):
    id: str
    product_id: str | None = None
    quantity: int
    price_per_item: float
    points_per_item: int
    product_name: str | None = None
    product_category: str | None = None
    product_image_url: str | None = None
    shop: ShopSummary | None = None


class PaymentOut(BaseModel):
    id: str
    payment_method: str
    amount: float
    points_used: int
    status: str
    transaction_id: str | None = None

    model_config = {"from_attributes": True}


class OrderOut(BaseModel):
    id: str
    user_id: str
    status: str
    total_amount: float
    total_points_used: int
    shipping_address: ShippingAddress | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderItemOut] = Field(default_factory=list)
    payments: list[PaymentOut] = Field(default_factory=list)


class TrackingStep(BaseModel):
    status: str
    label: str
    completed: bool
    current: bool


class OrderTracking(BaseModel):
    order_id: str
    status: str
    cancelled: bool = False
    steps: list[TrackingStep]


class OrderStatusUpdate(BaseModel):
    status: str = Field(min_length=1, max_length=20)


# ============================================================
# Shop analytics
# ============================================================


class OrderSummary(BaseModel):
    id: str
    status: str
    total_points_used: int
    total_amount: float
    created_at: datetime | None = None
    product_names: list[str] = Field(default_factory=list)


class ShopAnalytics(BaseModel):
    shop_id: str
    window_days: int
    total_orders: int = Field(ge=0)
    total_revenue: float = Field(ge=0)
    total_points_earned: int = Field(ge=0)
    pending_orders: int = Field(ge=0)
    completed_orders: int = Field(ge=0)
    top_products: list[ProductOut] = Field(default_factory=list)
    recent_orders: list[OrderSummary] = Field(default_factory=list)
