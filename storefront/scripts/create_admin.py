# storefront/scripts/create_admin.py
import asyncio
import os

from storefront.core.db import AsyncSessionLocal, init_models
from storefront.services.auth_service import create_user


async def create_admin():
    await init_models()
    async with AsyncSessionLocal() as session:
        await create_user(
            session,
            username=os.getenv("ADMIN_USERNAME", "admin"),
            password=os.getenv("ADMIN_PASSWORD", "admin123"),
            role="admin",
        )
        print("Admin user created!")


if __name__ == "__main__":
    asyncio.run(create_admin())
