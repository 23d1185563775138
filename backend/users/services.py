import logging

from .exceptions import DeliveryPersonNotFoundError
from .models import User

logger = logging.getLogger(__name__)


class UserService:
    @staticmethod
    def get_user_by_id(user_id) -> User | None:
        return User.objects.filter(pk=user_id).first()

    @staticmethod
    def get_delivery_person_by_id(user_id) -> User:
        """
        Resolve an active user with the DELIVERY role.

        Raises:
            DeliveryPersonNotFoundError: unknown id, inactive user, or another role
        """
        user = User.objects.delivery_staff().filter(pk=user_id).first()
        if user is None:
            logger.warning(f"Delivery person lookup failed for user {user_id}")
            raise DeliveryPersonNotFoundError(user_id)
        return user
