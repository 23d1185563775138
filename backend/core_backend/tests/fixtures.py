"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like users per role, addresses, products and orders.
"""
import pytest
from decimal import Decimal

from customers.models import Address
from orders.services import OrderService
from products.models import Category, Product
from users.models import User


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def admin_user(db):
    """Create an admin user"""
    return User.objects.create_user(
        email='admin@pizza.com',
        username='admin',
        password='password123',
        first_name='Ada',
        last_name='Admin',
        role=User.Role.ADMIN,
        is_staff=True,
    )


@pytest.fixture
def chef_user(db):
    """Create a chef"""
    return User.objects.create_user(
        email='chef@pizza.com',
        username='chef',
        password='password123',
        first_name='Carla',
        last_name='Chef',
        role=User.Role.CHEF,
    )


@pytest.fixture
def kitchen_user(db):
    return User.objects.create_user(
        email='kitchen@pizza.com',
        username='kitchen',
        password='password123',
        role=User.Role.KITCHEN,
    )


@pytest.fixture
def delivery_user(db):
    """Create an active delivery person"""
    return User.objects.create_user(
        email='driver@pizza.com',
        username='driver',
        password='password123',
        first_name='Dan',
        last_name='Driver',
        role=User.Role.DELIVERY,
        vehicle_number='AB-123',
    )


@pytest.fixture
def other_delivery_user(db):
    return User.objects.create_user(
        email='driver2@pizza.com',
        username='driver2',
        password='password123',
        first_name='Dora',
        last_name='Driver',
        role=User.Role.DELIVERY,
    )


@pytest.fixture
def customer_user(db):
    """Create a customer"""
    return User.objects.create_user(
        email='jane@example.com',
        username='jane',
        password='password123',
        first_name='Jane',
        last_name='Doe',
        phone_number='555-0100',
        role=User.Role.CUSTOMER,
    )


@pytest.fixture
def other_customer(db):
    return User.objects.create_user(
        email='john@example.com',
        username='john',
        password='password123',
        first_name='John',
        last_name='Roe',
        role=User.Role.CUSTOMER,
    )


# ============================================================================
# ADDRESS FIXTURES
# ============================================================================

@pytest.fixture
def customer_address(customer_user):
    """Home address of customer_user"""
    return Address.objects.create(
        customer=customer_user,
        address_type=Address.AddressType.HOME,
        address_line1='12 Main Street',
        address_line2='Apt 4',
        city='Springfield',
    )


@pytest.fixture
def other_customer_address(other_customer):
    return Address.objects.create(
        customer=other_customer,
        address_line1='99 Side Road',
        city='Springfield',
    )


# ============================================================================
# PRODUCT FIXTURES
# ============================================================================

@pytest.fixture
def category(db):
    return Category.objects.create(name='Pizza', order=1)


@pytest.fixture
def pizza(category):
    """Available product priced at $12.50"""
    return Product.objects.create(
        name='Margherita',
        price=Decimal('12.50'),
        category=category,
        preparation_time=15,
    )


@pytest.fixture
def soda(db):
    """Available uncategorized product priced at $2.00"""
    return Product.objects.create(name='Soda', price=Decimal('2.00'))


@pytest.fixture
def unavailable_product(category):
    return Product.objects.create(
        name='Seasonal Special',
        price=Decimal('20.00'),
        category=category,
        is_available=False,
    )


# ============================================================================
# ORDER FIXTURES
# ============================================================================

@pytest.fixture
def order(customer_user, customer_address, pizza, soda):
    """
    A New order: 2 x pizza + 1 x soda, delivery fee 5.00, tax 2.70.
    Subtotal 27.00, total 34.70.
    """
    return OrderService.create_order(
        customer_id=customer_user.pk,
        address_id=customer_address.pk,
        items=[
            {'product_id': pizza.pk, 'quantity': 2},
            {'product_id': soda.pk, 'quantity': 1},
        ],
        delivery_fee=Decimal('5.00'),
        tax=Decimal('2.70'),
        notes='Ring the bell',
    )


@pytest.fixture
def confirmed_order(order, chef_user):
    return OrderService.confirm_order(order.pk, confirmed_by=chef_user)


@pytest.fixture
def ready_order(confirmed_order):
    OrderService.start_preparation(confirmed_order.pk)
    return OrderService.mark_as_prepared(confirmed_order.pk)


@pytest.fixture
def dispatched_order(ready_order, delivery_user):
    return OrderService.assign_delivery_person(ready_order.pk, delivery_user.pk)


@pytest.fixture
def delivered_order(dispatched_order):
    return OrderService.mark_as_delivered(dispatched_order.pk)


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/orders/')
            assert response.status_code == 401
    """
    from rest_framework.test import APIClient
    return APIClient()


def _client_for(user):
    from rest_framework.test import APIClient

    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def chef_client(chef_user):
    return _client_for(chef_user)


@pytest.fixture
def kitchen_client(kitchen_user):
    return _client_for(kitchen_user)


@pytest.fixture
def delivery_client(delivery_user):
    return _client_for(delivery_user)


@pytest.fixture
def customer_client(customer_user):
    return _client_for(customer_user)


@pytest.fixture
def other_customer_client(other_customer):
    return _client_for(other_customer)
