from pydantic import BaseModel, ConfigDict, Field, field_validator
from decimal import Decimal

from storefront.utils.formatting_utils import FormattingUtils


class MoneyField(BaseModel):
    """Standardized money representation"""
    amount: Decimal = Field(description="Amount in whole currency units")
    currency: str = Field(default="INR", description="Currency code")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "amount": "1299.00",
                "currency": "INR"
            }
        }
    )

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v < 0:
            raise ValueError('Amount cannot be negative')
        return v

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, v):
        if len(v) != 3:
            raise ValueError('Currency must be 3-character code')
        return v.upper()

    @property
    def display(self) -> str:
        return FormattingUtils.format_money(self.amount, self.currency)

    def to_dict(self) -> dict:
        return {
            "amount": str(self.amount),
            "currency": self.currency,
            "display": self.display,
        }
