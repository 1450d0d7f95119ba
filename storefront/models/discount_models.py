# storefront/models/discount_models.py
from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, CheckConstraint, Index, ForeignKey, and_, or_
)
from sqlalchemy.orm import relationship
from storefront.core.db import Base, UTCDateTime
from storefront.utils.time_utils import utcnow

DISCOUNT_TYPES = ("flat", "percentage")


class Discount(Base):
    __tablename__ = "discounts"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    discount_type = Column(String(20), nullable=False)  # 'percentage' or 'flat'
    discount_value = Column(Numeric(12, 4), nullable=False)
    start_date = Column(UTCDateTime, nullable=False)
    end_date = Column(UTCDateTime, nullable=True)  # NULL = open-ended
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    product = relationship("Product", lazy="selectin")

    __table_args__ = (
        CheckConstraint("discount_type IN ('percentage', 'flat')", name="ck_discount_type"),
        CheckConstraint("discount_value > 0", name="ck_discount_value_positive"),
        # One active discount per product, enforced by the database
        Index(
            "uq_discount_active_product",
            "product_id",
            unique=True,
            sqlite_where=(is_active == True),
            postgresql_where=(is_active == True),
        ),
        Index("ix_discount_product_active_dates", "product_id", "is_active", "start_date", "end_date"),
        Index("ix_discount_active_created", "is_active", "created_at"),
    )

    @classmethod
    def effectively_active(cls, now):
        """SQL form of the eligibility predicate."""
        return and_(
            cls.is_active == True,
            cls.start_date <= now,
            or_(cls.end_date == None, cls.end_date >= now),
        )

    def __repr__(self):
        return f"<Discount id={self.id} product_id={self.product_id} type={self.discount_type} value={self.discount_value}>"
