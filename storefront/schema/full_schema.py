import enum
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, Text
from sqlmodel import Column, SQLModel, Field, Relationship, String
from uuid6 import uuid7
from storefront.common.utils import now


def new_public_id() -> str:
    return str(uuid7())


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class SenderRole(str, enum.Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"


class MovementType(str, enum.Enum):
    IN = "in"
    OUT = "out"


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: str = Field(default_factory=new_public_id, sa_column=Column(String(64), primary_key=True))
    name: str = Field(sa_column=Column(String(255), nullable=False))
    sale_price: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))   # yen
    unit_cost: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))    # raw material cost per unit
    photos: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    active: bool = Field(default=True, sa_column=Column(Boolean, nullable=False, default=True, index=True))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, index=True))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, onupdate=now))


class Orders(SQLModel, table=True):
    __tablename__ = "orders"

    id: str = Field(default_factory=new_public_id, sa_column=Column(String(128), primary_key=True))
    status: OrderStatus = Field(default=OrderStatus.PENDING, index=True)

    # customer snapshot (immutable for this order)
    customer_name: str = Field(sa_column=Column(String(128), nullable=False))
    customer_phone: str = Field(sa_column=Column(String(32), nullable=False))
    customer_phone_norm: str = Field(sa_column=Column(String(15), nullable=False, index=True))
    customer_phone_hash: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    federated_uid: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True, index=True))
    federated_email: Optional[str] = Field(default=None, sa_column=Column(String(320), nullable=True))

    # access secret: one-way hash of the 4 digit PIN
    pin_hash: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))

    # totals are snapshots computed at checkout, never recomputed
    revenue: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    cost: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    profit: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))

    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, index=True))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now))
    paid_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    delivered_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    cancelled_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))

    items: List["OrderItem"] = Relationship(back_populates="order",
                                            sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "OrderItem.id"})
    messages: List["ChatMessage"] = Relationship(back_populates="order")


class OrderItem(SQLModel, table=True):
    """FK kept for traceability, name/price/cost snapshotted because products change over time."""
    __tablename__ = "order_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: str = Field(sa_column=Column(ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False))
    product_id: str = Field(sa_column=Column(String(64), nullable=False))

    name_snapshot: str = Field(sa_column=Column(String(255), nullable=False))
    qty: int = Field(default=1, sa_column=Column(Integer, nullable=False, default=1))
    unit_price_snapshot: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    unit_cost_snapshot: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    custom_text: str = Field(default="", sa_column=Column(Text(), nullable=False, default=""))
    # raw customization fields as sent by older clients
    attributes: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))

    order: "Orders" = Relationship(back_populates="items")


class ChatMessage(SQLModel, table=True):
    """Immutable once written. `id` doubles as the insertion-order tie breaker."""
    __tablename__ = "chat_messages"

    id: Optional[int] = Field(default=None, primary_key=True)
    public_id: str = Field(default_factory=new_public_id, sa_column=Column(String(64), unique=True, nullable=False))
    order_id: str = Field(sa_column=Column(ForeignKey("orders.id", ondelete="CASCADE"), nullable=False))
    sender_role: SenderRole = Field(nullable=False)
    sender_id: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))
    text: str = Field(default="", sa_column=Column(Text(), nullable=False, default=""))
    image_url: Optional[str] = Field(default=None, sa_column=Column(String(1024), nullable=True))
    image_path: Optional[str] = Field(default=None, sa_column=Column(String(512), nullable=True))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now))

    order: "Orders" = Relationship(back_populates="messages")

    __table_args__ = (Index("ix_chat_messages_order_created", "order_id", "created_at", "id"),)


class CashMovement(SQLModel, table=True):
    """Sale entries are keyed `order_<order id>` so each order yields at most one."""
    __tablename__ = "cash_movements"

    id: str = Field(default_factory=new_public_id, sa_column=Column(String(160), primary_key=True))
    type: MovementType = Field(nullable=False)
    category: str = Field(sa_column=Column(String(32), nullable=False))
    amount: int = Field(sa_column=Column(Integer, nullable=False))
    note: str = Field(default="", sa_column=Column(Text(), nullable=False, default=""))
    items_summary: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))
    order_id: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True, index=True))
    occurred_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, index=True))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now))


def sale_movement_key(order_id: str) -> str:
    return f"order_{order_id}"
