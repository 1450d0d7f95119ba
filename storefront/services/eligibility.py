# storefront/services/eligibility.py
from datetime import datetime
from typing import Optional

from storefront.utils.time_utils import ensure_utc, utcnow


def is_effectively_active(discount, now: Optional[datetime] = None) -> bool:
    """
    A discount applies at `now` iff it is switched on, has started, and has
    not ended. A missing end date never expires. Works on ORM rows and on
    output schemas alike.
    """
    if discount is None or not getattr(discount, "is_active", False):
        return False

    start_date = getattr(discount, "start_date", None)
    if start_date is None:
        return False

    now = ensure_utc(now) if now else utcnow()
    if ensure_utc(start_date) > now:
        return False

    end_date = getattr(discount, "end_date", None)
    return end_date is None or ensure_utc(end_date) >= now
