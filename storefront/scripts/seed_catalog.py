# storefront/scripts/seed_catalog.py
import asyncio
import logging
from datetime import timedelta
from decimal import Decimal

from storefront.core.db import AsyncSessionLocal, init_models
from storefront.schemas.discount_schemas import DiscountCreate
from storefront.schemas.product_schemas import ProductCreate
from storefront.services.discount_service import create_discount
from storefront.services.product_service import create_product
from storefront.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS = [
    ("Linen Overshirt", "shirts", Decimal("120.00"), True),
    ("Pleated Wool Trousers", "trousers", Decimal("185.00"), True),
    ("Cotton Crew Tee", "shirts", Decimal("35.00"), False),
    ("Leather Chelsea Boots", "shoes", Decimal("240.00"), False),
]


async def seed_catalog():
    await init_models()
    async with AsyncSessionLocal() as session:
        products = []
        for name, category, price, featured in SAMPLE_PRODUCTS:
            products.append(await create_product(
                session, ProductCreate(name=name, category=category, price=price, featured=featured)
            ))

        now = utcnow()
        await create_discount(session, DiscountCreate(
            product_id=products[0].id, discount_type="percentage", discount_value=Decimal("30"), start_date=now,
        ))
        await create_discount(session, DiscountCreate(
            product_id=products[3].id,
            discount_type="flat",
            discount_value=Decimal("40"),
            start_date=now,
            end_date=now + timedelta(days=14),
        ))
        print(f"Seeded {len(products)} products and 2 discounts")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_catalog())
