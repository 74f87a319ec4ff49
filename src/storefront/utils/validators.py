import math
import re
from typing import Any, Optional
from decimal import Decimal, InvalidOperation


class ValidationUtils:
    """
    Input validation for cart and checkout data

    Features:
    - Price and quantity sanity checks
    - Coupon code normalization
    - Indian postal code (PIN) validation
    """

    PATTERNS = {
        'pincode': re.compile(r'^[1-9][0-9]{5}$'),  # 6 digits, no leading zero
    }

    MAX_COUPON_CODE_LENGTH = 64

    @classmethod
    def to_price(cls, value: Any) -> Optional[Decimal]:
        """
        Coerce a catalog price to Decimal

        Only real numbers are accepted. Strings, booleans, None, NaN and
        infinities give None so callers can skip the line.
        """
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            return None
        if isinstance(value, float) and not math.isfinite(value):
            return None

        try:
            price = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return None

        if not price.is_finite():
            return None
        return price

    @classmethod
    def validate_quantity(cls, quantity: Any) -> bool:
        """Quantities are integers of at least one"""
        return isinstance(quantity, int) and not isinstance(quantity, bool) and quantity >= 1

    @classmethod
    def normalize_coupon_code(cls, code: Optional[str]) -> str:
        """Trim surrounding whitespace; an empty result means no code was entered"""
        if code is None:
            return ""
        return str(code).strip()

    @classmethod
    def validate_coupon_code_length(cls, code: str) -> bool:
        return len(code) <= cls.MAX_COUPON_CODE_LENGTH

    @classmethod
    def validate_pincode(cls, pincode: str) -> bool:
        """Validate a 6-digit Indian PIN code"""
        return cls.PATTERNS['pincode'].match(pincode.strip()) is not None
