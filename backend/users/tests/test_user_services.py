"""
User service and permission tests.
"""
import pytest
from types import SimpleNamespace

from users.exceptions import DeliveryPersonNotFoundError
from users.models import User
from users.permissions import IsAdmin, IsAdminOrChef, IsDispatchStaff, IsKitchenStaff
from users.services import UserService


@pytest.mark.django_db
class TestUserModel:

    def test_create_user_normalizes_email(self):
        user = User.objects.create_user(email='Someone@EXAMPLE.com', password='pw')
        assert user.email == 'Someone@example.com'
        assert user.role == User.Role.CUSTOMER
        assert user.check_password('pw')

    def test_create_user_requires_email(self):
        with pytest.raises(ValueError):
            User.objects.create_user(email='', password='pw')

    def test_superuser_is_admin(self):
        user = User.objects.create_superuser(email='root@example.com', password='pw')
        assert user.role == User.Role.ADMIN
        assert user.is_staff and user.is_superuser

    def test_display_name_fallbacks(self, customer_user):
        assert customer_user.display_name == 'Jane Doe'
        customer_user.first_name = customer_user.last_name = ''
        assert customer_user.display_name == 'jane'
        customer_user.username = None
        assert customer_user.display_name == 'jane@example.com'

    def test_role_flags(self, customer_user, chef_user):
        assert customer_user.is_customer and not customer_user.is_restaurant_staff
        assert chef_user.is_restaurant_staff and not chef_user.is_customer


@pytest.mark.django_db
class TestUserService:

    def test_get_user_by_id(self, chef_user):
        assert UserService.get_user_by_id(chef_user.pk) == chef_user
        assert UserService.get_user_by_id(999999) is None

    def test_get_delivery_person(self, delivery_user):
        assert UserService.get_delivery_person_by_id(delivery_user.pk) == delivery_user

    def test_delivery_person_must_have_role(self, chef_user):
        with pytest.raises(DeliveryPersonNotFoundError):
            UserService.get_delivery_person_by_id(chef_user.pk)

    def test_delivery_staff_excludes_inactive(self, delivery_user, other_delivery_user):
        other_delivery_user.is_active = False
        other_delivery_user.save()
        assert list(User.objects.delivery_staff()) == [delivery_user]


@pytest.mark.parametrize(
    'permission,role,expected',
    [
        (IsAdmin, User.Role.ADMIN, True),
        (IsAdmin, User.Role.CHEF, False),
        (IsAdminOrChef, User.Role.CHEF, True),
        (IsAdminOrChef, User.Role.KITCHEN, False),
        (IsKitchenStaff, User.Role.KITCHEN, True),
        (IsKitchenStaff, User.Role.DELIVERY, False),
        (IsDispatchStaff, User.Role.DELIVERY, True),
        (IsDispatchStaff, User.Role.CUSTOMER, False),
    ],
)
def test_role_permissions(permission, role, expected):
    request = SimpleNamespace(user=SimpleNamespace(is_authenticated=True, role=role))
    assert permission().has_permission(request, None) is expected


def test_role_permissions_reject_anonymous():
    request = SimpleNamespace(user=SimpleNamespace(is_authenticated=False, role=None))
    assert IsAdmin().has_permission(request, None) is False
