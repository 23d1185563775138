from core_backend.exceptions import NotFoundError


class DeliveryPersonNotFoundError(NotFoundError):
    """Raised when a delivery-person id does not resolve to an active DELIVERY user."""

    code = "delivery_person_not_found"

    def __init__(self, user_id):
        self.user_id = user_id
        super().__init__(f"Delivery person with ID {user_id} not found.")
