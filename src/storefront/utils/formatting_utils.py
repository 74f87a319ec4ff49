from typing import Optional, Dict, Any, Union
from decimal import Decimal, ROUND_HALF_UP


class FormattingUtils:
    """
    Display formatting for prices and discounts

    Features:
    - Money formatting with currency support (Indian digit grouping for INR)
    - Coupon discount labels for the offers panel and order summary
    """

    # Currency symbols and formatting rules
    CURRENCY_FORMATS = {
        'INR': {'symbol': '₹', 'decimal_places': 2, 'symbol_position': 'before', 'grouping': 'indian'},
        'USD': {'symbol': '$', 'decimal_places': 2, 'symbol_position': 'before', 'grouping': 'western'},
        'EUR': {'symbol': '€', 'decimal_places': 2, 'symbol_position': 'after', 'grouping': 'western'},
        'GBP': {'symbol': '£', 'decimal_places': 2, 'symbol_position': 'before', 'grouping': 'western'},
    }

    @classmethod
    def format_money(
        cls,
        amount: Union[Decimal, int, float],
        currency: str = 'INR',
        include_symbol: bool = True,
        include_currency_code: bool = False
    ) -> str:
        """
        Format money amount for display

        Args:
            amount: Amount in whole currency units (rupees, dollars)
            currency: Currency code (INR, USD, etc.)
            include_symbol: Whether to include currency symbol
            include_currency_code: Whether to include currency code

        Examples:
            format_money(Decimal('1299')) -> "₹1,299.00"
            format_money(Decimal('150000')) -> "₹1,50,000.00"
            format_money(Decimal('12.99'), 'USD') -> "$12.99"
        """
        currency_config = cls.CURRENCY_FORMATS.get(currency, cls.CURRENCY_FORMATS['INR'])

        decimal_places = currency_config['decimal_places']
        quantum = Decimal(1).scaleb(-decimal_places)
        value = Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP)

        sign = '-' if value < 0 else ''
        integer_part, _, fraction = f"{abs(value):.{decimal_places}f}".partition('.')

        if currency_config['grouping'] == 'indian':
            grouped = cls._group_indian(integer_part)
        else:
            grouped = f"{int(integer_part):,}"

        formatted_amount = f"{grouped}.{fraction}" if fraction else grouped

        result = formatted_amount
        if include_symbol:
            symbol = currency_config['symbol']
            if currency_config['symbol_position'] == 'before':
                result = f"{symbol}{formatted_amount}"
            else:
                result = f"{formatted_amount}{symbol}"

        result = f"{sign}{result}"

        if include_currency_code:
            result = f"{result} {currency}"

        return result

    @classmethod
    def format_percentage(cls, value: Union[Decimal, int, float]) -> str:
        """
        Format a whole-number percentage

        Examples:
            format_percentage(10) -> "10%"
            format_percentage(Decimal('12.5')) -> "12.5%"
        """
        normalized = Decimal(str(value)).normalize()
        if normalized == normalized.to_integral_value():
            normalized = normalized.quantize(Decimal(1))
        return f"{normalized}%"

    @classmethod
    def format_discount_label(
        cls,
        discount_type: str,
        discount_value: Union[Decimal, int, float],
        currency: str = 'INR'
    ) -> str:
        """
        Describe a coupon's headline discount

        Examples:
            format_discount_label('flat', 200) -> "Flat ₹200 off"
            format_discount_label('percentage', 10) -> "10% off"
        """
        if discount_type == 'flat':
            symbol = cls.CURRENCY_FORMATS.get(currency, cls.CURRENCY_FORMATS['INR'])['symbol']
            amount = Decimal(str(discount_value)).normalize()
            if amount == amount.to_integral_value():
                amount = amount.quantize(Decimal(1))
            return f"Flat {symbol}{amount} off"
        return f"{cls.format_percentage(discount_value)} off"

    @classmethod
    def format_savings(cls, applied: Dict[str, Any], currency: str = 'INR') -> str:
        """
        Summarise an applied coupon for display

        Example:
            "Flat ₹200 off - ₹150.00 saved (For: Asha)"
        """
        label = cls.format_discount_label(applied['discount_type'], applied['discount_value'], currency)
        text = f"{label} - {cls.format_money(applied['discount_amount'], currency)} saved"

        recipient: Optional[str] = applied.get('recipient_name')
        if applied.get('scope') == 'personal' and recipient:
            text = f"{text} (For: {recipient})"

        return text

    @staticmethod
    def _group_indian(digits: str) -> str:
        """Group digits as 12,34,567 (last three, then pairs)"""
        if len(digits) <= 3:
            return digits

        head, tail = digits[:-3], digits[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        if head:
            pairs.insert(0, head)
        return ','.join(pairs + [tail])
