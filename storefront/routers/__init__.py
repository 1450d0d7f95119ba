from fastapi import APIRouter

from .auth_router import router as auth_router
from .products_router import router as products_router
from .discount_router import router as discount_router
from .pricing_router import router as pricing_router

router = APIRouter()

router.include_router(auth_router)
router.include_router(products_router)
router.include_router(discount_router)
router.include_router(pricing_router)
