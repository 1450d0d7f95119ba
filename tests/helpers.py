from datetime import timedelta
from decimal import Decimal

from storefront.core.security import create_access_token
from storefront.models.discount_models import Discount
from storefront.utils.time_utils import utcnow


def make_discount(discount_type="percentage", value="25", is_active=True, start_date=None, end_date=None, **kwargs):
    """Unsaved discount for pure pricing tests."""
    return Discount(
        discount_type=discount_type,
        discount_value=Decimal(str(value)),
        is_active=is_active,
        start_date=start_date or utcnow() - timedelta(hours=1),
        end_date=end_date,
        **kwargs,
    )


def auth_headers(user):
    token = create_access_token({"sub": user.username, "role": user.role}, token_version=user.token_version)
    return {"Authorization": f"Bearer {token}"}
