from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint
from sqlalchemy.sql import func

from app.database import Base

# Shared by the column definition and the request schemas
NAME_MAX_LENGTH = 255
# Largest value an INTEGER column (and bound parameter) can hold
MAX_INTEGER = 2**63 - 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """
    Product model representing an inventory item.

    Attributes:
        id: Unique identifier, never reused
        name: Product name
        price: Unit price (must be non-negative)
        stock: Available quantity (must be non-negative)
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(NAME_MAX_LENGTH), nullable=False, index=True)
    price = Column(Float, nullable=False)
    stock = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # Database-level constraints to ensure data integrity
    __table_args__ = (
        CheckConstraint('price >= 0', name='check_price_non_negative'),
        CheckConstraint('stock >= 0', name='check_stock_non_negative'),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock})>"
