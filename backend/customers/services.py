import logging

from users.models import User
from .exceptions import AddressNotFoundError, CustomerNotFoundError
from .models import Address

logger = logging.getLogger(__name__)


class CustomerService:
    """Read-side access to customers for other apps."""

    @staticmethod
    def get_customer_by_id(customer_id) -> User:
        customer = User.objects.filter(
            pk=customer_id, role=User.Role.CUSTOMER, is_active=True
        ).first()
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        return customer


class AddressService:
    @staticmethod
    def get_address_by_id(address_id, customer=None) -> Address:
        """
        Resolve an address, optionally scoped to its owner.

        An address that exists but belongs to someone else is reported as
        not found so ids of other customers' addresses are not disclosed.
        """
        queryset = Address.objects.select_related("customer")
        if customer is not None:
            queryset = queryset.filter(customer=customer)

        address = queryset.filter(pk=address_id).first()
        if address is None:
            logger.debug(f"Address {address_id} not found for customer {getattr(customer, 'pk', None)}")
            raise AddressNotFoundError(address_id)
        return address
