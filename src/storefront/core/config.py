import os
from dataclasses import dataclass
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

# Observed shipping fees. The cart/checkout pages charged 100, the payment page
# charged 40; which one is authoritative is a product decision.
CART_FLOW_SHIPPING_FEE = Decimal("100")
PAYMENT_FLOW_SHIPPING_FEE = Decimal("40")

DEFAULT_MEMBERSHIP_DISCOUNT = Decimal("249")
DEFAULT_COD_FEE = Decimal("50")


@dataclass
class DatabaseConfig:
    """Database configuration for cart snapshot storage"""
    url: str
    echo: bool = False  # Log SQL queries


@dataclass
class BackendConfig:
    """Storefront backend (products, coupons, orders, profile)"""
    base_url: str
    timeout_seconds: float = 10.0


@dataclass
class PricingConfig:
    """Pricing constants shared by every checkout flow"""
    currency: str = "INR"
    membership_discount: Decimal = DEFAULT_MEMBERSHIP_DISCOUNT
    shipping_fee: Decimal = PAYMENT_FLOW_SHIPPING_FEE
    cod_fee: Decimal = DEFAULT_COD_FEE


@dataclass
class AppConfig:
    """Application configuration"""
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000
    environment: str = "development"  # development, staging, production
    log_level: str = "INFO"
    session_cache_size: int = 1000  # sessions kept in memory; carts reload from snapshots


class Config:
    def __init__(self):
        self.environment = os.getenv("ENVIRONMENT", "development")

        self.database = DatabaseConfig(
            url=os.getenv("DATABASE_URL", "sqlite:///storefront.db"),
            echo=os.getenv("DB_ECHO", "false").lower() == "true"
        )

        self.backend = BackendConfig(
            base_url=os.getenv("BACKEND_API_URL", "http://localhost:8000/api").rstrip("/"),
            timeout_seconds=float(os.getenv("BACKEND_TIMEOUT_SECONDS", "10"))
        )

        self.pricing = PricingConfig(
            currency=os.getenv("CURRENCY", "INR").upper(),
            membership_discount=Decimal(os.getenv("MEMBERSHIP_DISCOUNT", str(DEFAULT_MEMBERSHIP_DISCOUNT))),
            shipping_fee=Decimal(os.getenv("SHIPPING_FEE", str(PAYMENT_FLOW_SHIPPING_FEE))),
            cod_fee=Decimal(os.getenv("COD_FEE", str(DEFAULT_COD_FEE)))
        )

        self.app = AppConfig(
            debug=os.getenv("DEBUG", "false").lower() == "true",
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            environment=self.environment,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            session_cache_size=int(os.getenv("SESSION_CACHE_SIZE", "1000"))
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> None:
        """Validate critical configuration"""
        for name in ("membership_discount", "shipping_fee", "cod_fee"):
            if getattr(self.pricing, name) < 0:
                raise ValueError(f"{name.upper()} cannot be negative")

        if self.is_production and not self.backend.base_url:
            raise ValueError("BACKEND_API_URL is required")

        if not self.database.url:
            raise ValueError("DATABASE_URL is required")

        if self.app.session_cache_size < 1:
            raise ValueError("SESSION_CACHE_SIZE must be at least 1")


config = Config()
