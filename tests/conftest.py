from datetime import timedelta
from decimal import Decimal
from unittest import mock

import pytest

from django.contrib.auth import get_user_model
from django.utils import timezone

from rest_framework.test import APIClient

from modules.carts.models import CartItem
from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.core.access import GuestActor, UserActor, owner_fields
from modules.core.activity import ActivityLogService
from modules.guests.models import GuestSession
from modules.guests.services import GuestSessionService
from modules.notifications.notifiers import OrderNotifier
from modules.orders.dtos import CreateOrderDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.payments.repositories.django_repository import PaymentDjangoRepository
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Identities
# ---------------------------------------------------------------------------


@pytest.fixture()
def user():
    return User.objects.create_user(
        username="buyer", email="buyer@example.com", password="testpass123"
    )


@pytest.fixture()
def other_user():
    return User.objects.create_user(
        username="stranger", email="stranger@example.com", password="testpass123"
    )


@pytest.fixture()
def staff_user():
    return User.objects.create_user(
        username="manager",
        email="manager@example.com",
        password="testpass123",
        is_staff=True,
    )


@pytest.fixture()
def user_actor(user):
    return UserActor(id=user.pk, email=user.email)


@pytest.fixture()
def staff_actor(staff_user):
    return UserActor(id=staff_user.pk, is_admin=True, email=staff_user.email)


@pytest.fixture()
def guest_session():
    return GuestSession.objects.create(
        guest_id=GuestSessionService.generate_guest_id(),
        expires_at=timezone.now() + timedelta(days=30),
    )


@pytest.fixture()
def expired_guest_session():
    return GuestSession.objects.create(
        guest_id=GuestSessionService.generate_guest_id(),
        expires_at=timezone.now() - timedelta(minutes=1),
    )


@pytest.fixture()
def guest_actor(guest_session):
    return GuestActor(guest_id=guest_session.guest_id)


@pytest.fixture()
def user_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def staff_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


@pytest.fixture()
def guest_client(guest_session):
    client = APIClient()
    client.credentials(HTTP_X_GUEST_ID=guest_session.guest_id)
    return client


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


@pytest.fixture()
def product():
    return Product.objects.create(
        name="Kishmish Radiant",
        variety="table",
        color="pink",
        cutting_price=Decimal("150.00"),
        seedling_price=Decimal("450.00"),
    )


@pytest.fixture()
def cutting_only_product():
    return Product.objects.create(
        name="Arcadia",
        cutting_price=Decimal("99.90"),
        seedling_price=None,
    )


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


@pytest.fixture()
def fill_cart():
    """Put a line straight into an actor's cart."""

    def _fill(actor, product, variant="cutting", quantity=1):
        return CartItem.objects.create(
            **owner_fields(actor), product=product, variant=variant, quantity=quantity
        )

    return _fill


@pytest.fixture()
def notifier():
    return mock.Mock(spec=OrderNotifier)


@pytest.fixture()
def order_service(notifier):
    return OrderService(
        order_repository=OrderDjangoRepository(),
        cart_repository=CartDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        notifier=notifier,
        activity_log=ActivityLogService(),
        payment_repository=PaymentDjangoRepository(),
    )


@pytest.fixture()
def place_order(order_service, fill_cart, product):
    """Check out a one-line cart (2 cuttings at 150.00) for *actor*."""

    def _place(actor, quantity=2, contact_email=None):
        if contact_email is None and actor.is_guest:
            contact_email = "guest@example.com"
        fill_cart(actor, product, quantity=quantity)
        return order_service.create_order(
            actor, CreateOrderDTO(contact_email=contact_email)
        )

    return _place
