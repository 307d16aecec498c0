"""
SQLAlchemy ORM models for the RichHabits Orders API.

Tables:
    users          — staff accounts with a single role
    organizations  — customer organizations (searched by name)
    orders         — custom apparel orders moving through the pipeline
    order_activity — per-order audit trail (changes, reassignments, notes)
"""
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, Date, DateTime, Text, JSON, ForeignKey, Index,
)
from sqlalchemy.orm import relationship

from database import Base


class User(Base):
    """Staff user; `role` drives stage and section visibility."""
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    email = Column(String(200), unique=True, nullable=True, index=True)
    name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False, default="sales")  # admin | sales | designer | ops | manufacturer | finance
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    orders = relationship("Order", back_populates="salesperson", lazy="select")


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    orders = relationship("Order", back_populates="organization", lazy="select")


class Order(Base):
    """
    A custom apparel order.

    `status` is the coarse workflow state; the milestone flags
    (design_approved, sizes_validated, deposit_received) are tracked
    independently of it. Pipeline stage is derived, never stored.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_code = Column(String(20), unique=True, nullable=False, index=True)  # O-00001
    org_id = Column(Integer, ForeignKey("organizations.id"), nullable=True, index=True)
    lead_id = Column(Integer, nullable=True)
    salesperson_id = Column(String(64), ForeignKey("users.id"), nullable=True, index=True)
    order_name = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default="new")
    design_approved = Column(Boolean, nullable=False, default=False)
    sizes_validated = Column(Boolean, nullable=False, default=False)
    deposit_received = Column(Boolean, nullable=False, default=False)
    invoice_url = Column(Text, nullable=True)
    order_folder = Column(Text, nullable=True)
    size_form_link = Column(Text, nullable=True)
    est_delivery = Column(Date, nullable=True)
    tracking_number = Column(String(100), nullable=True)
    priority = Column(String(10), nullable=False, default="normal")  # low | normal | high
    shipping_address = Column(Text, nullable=True)
    bill_to_address = Column(Text, nullable=True)
    contact_name = Column(String(200), nullable=True)
    contact_email = Column(String(200), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow)

    salesperson = relationship("User", back_populates="orders")
    organization = relationship("Organization", back_populates="orders")

    __table_args__ = (
        # Hub page / list filters
        Index("ix_orders_status_priority", "status", "priority"),
        Index("ix_orders_salesperson_created", "salesperson_id", "created_at"),
    )


class OrderActivity(Base):
    """
    One entry in an order's activity log.

    `details` holds the action payload: changed fields for "updated",
    old/new salesperson for "reassigned", the text for "note_added".
    """
    __tablename__ = "order_activity"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=True)
    action = Column(String(40), nullable=False)  # created | updated | reassigned | note_added
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_order_activity_order_created", "order_id", "created_at"),
    )
