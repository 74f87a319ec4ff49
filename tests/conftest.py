import pytest

from storefront.app import create_app
from storefront.clients.backend_client import BackendClient
from storefront.core.dependencies import build_container
from storefront.db import build_engine, init_db
from storefront.models.coupon import CouponScope, DiscountType
from storefront.repositories.cart_repository import CartSnapshotRepository
from storefront.services.cart_service import CartService
from storefront.services.coupon_service import CouponApplier
from storefront.services.session import StorefrontSession

from factories import FakeBackend, make_coupon, make_user


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine):
    return CartSnapshotRepository(engine)


@pytest.fixture
def backend():
    return FakeBackend(
        coupons=[
            make_coupon("SAVE10", DiscountType.PERCENTAGE, 10),
            make_coupon("FLAT200", DiscountType.FLAT, 200, min_purchase=500),
            make_coupon("ASHA150", DiscountType.FLAT, 150, scope=CouponScope.PERSONAL, recipient="Asha"),
        ],
        profiles={
            "member-token": make_user(subscription_days=30),
            "premium-token": make_user(premium_days=30, user_id="u2"),
        },
    )


@pytest.fixture
def session_factory(repository, backend):
    def factory(session_key="s1", user=None):
        session = StorefrontSession(
            session_key=session_key,
            cart=CartService(repository, session_key),
            coupons=CouponApplier(backend),
        )
        if user is not None:
            session.user = user
        return session
    return factory


@pytest.fixture
def container(engine, backend):
    container = build_container(engine=engine)
    container.register_singleton(BackendClient, backend)
    return container


@pytest.fixture
def app(container):
    app = create_app(container)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
