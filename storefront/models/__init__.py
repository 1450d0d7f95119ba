# storefront/models/__init__.py
from storefront.models.user_models import User
from storefront.models.product_models import Product
from storefront.models.discount_models import Discount
