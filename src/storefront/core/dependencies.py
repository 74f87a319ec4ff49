from typing import TypeVar, Type, Dict, Any, Callable, Optional

from sqlalchemy.engine import Engine

from storefront.core.config import config, Config

T = TypeVar('T')


class DependencyContainer:
    """Simple dependency injection container"""

    def __init__(self):
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Callable] = {}

    def register_singleton(self, service_class: Type[T], instance: T) -> None:
        """Register a singleton instance"""
        key = self._get_service_key(service_class)
        self._services[key] = instance

    def register_factory(self, service_class: Type[T], factory: Callable[[], T]) -> None:
        """Register a factory function for creating instances"""
        key = self._get_service_key(service_class)
        self._factories[key] = factory

    def get(self, service_class: Type[T]) -> T:
        """Get service instance"""
        key = self._get_service_key(service_class)

        if key in self._services:
            return self._services[key]

        if key in self._factories:
            instance = self._factories[key]()
            # Cache as singleton
            self._services[key] = instance
            return instance

        raise ValueError(f"Service {service_class.__name__} not registered")

    def _get_service_key(self, service_class: Type[T]) -> str:
        """Get unique key for service class"""
        return f"{service_class.__module__}.{service_class.__qualname__}"


def build_container(
    settings: Optional[Config] = None,
    engine: Optional[Engine] = None,
) -> DependencyContainer:
    """
    Wire the default services

    Anything registered afterwards with register_singleton replaces the
    default, which is how tests swap in fakes.
    """
    from storefront.clients.backend_client import BackendClient
    from storefront.db import build_engine
    from storefront.repositories.cart_repository import CartSnapshotRepository
    from storefront.services.coupon_service import CouponApplier
    from storefront.services.cart_service import CartService
    from storefront.services.membership_service import MembershipService
    from storefront.services.order_service import OrderService
    from storefront.services.pricing_service import PricingService
    from storefront.services.session import SessionRegistry, StorefrontSession
    from storefront.services.shipping_service import ShippingCalculator

    settings = settings or config
    container = DependencyContainer()

    container.register_factory(
        Engine,
        lambda: engine or build_engine(settings.database.url, settings.database.echo)
    )
    container.register_factory(
        BackendClient,
        lambda: BackendClient(settings.backend.base_url, settings.backend.timeout_seconds)
    )
    container.register_factory(
        CartSnapshotRepository,
        lambda: CartSnapshotRepository(container.get(Engine))
    )
    container.register_factory(
        MembershipService,
        lambda: MembershipService(settings.pricing.membership_discount)
    )
    container.register_factory(
        PricingService,
        lambda: PricingService(
            container.get(MembershipService),
            ShippingCalculator(settings.pricing.shipping_fee),
            settings.pricing.cod_fee,
        )
    )
    container.register_factory(
        OrderService,
        lambda: OrderService(container.get(BackendClient), container.get(PricingService))
    )
    container.register_factory(
        SessionRegistry,
        lambda: SessionRegistry(
            lambda session_key: StorefrontSession(
                session_key=session_key,
                cart=CartService(container.get(CartSnapshotRepository), session_key),
                coupons=CouponApplier(container.get(BackendClient), settings.pricing.currency),
            ),
            max_sessions=settings.app.session_cache_size,
        )
    )

    return container
