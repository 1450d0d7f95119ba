# storefront/models/product_models.py
from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, CheckConstraint, Index
)
from storefront.core.db import Base, UTCDateTime
from storefront.utils.time_utils import utcnow

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), index=True, nullable=False)
    category = Column(String(100), nullable=True)
    price = Column(Numeric(10, 2), default=0, nullable=False)
    in_stock = Column(Boolean, default=True, nullable=False)
    featured = Column(Boolean, default=False, nullable=False)

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(price >= 0, name="check_product_price_non_negative"),
        Index("ix_product_category_in_stock", "category", "in_stock"),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}')>"
