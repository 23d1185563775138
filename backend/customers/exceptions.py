"""
Customer lookup errors.
"""
from core_backend.exceptions import NotFoundError


class CustomerNotFoundError(NotFoundError):
    code = "customer_not_found"

    def __init__(self, customer_id):
        self.customer_id = customer_id
        super().__init__(f"Customer with ID {customer_id} not found.")


class AddressNotFoundError(NotFoundError):
    code = "address_not_found"

    def __init__(self, address_id):
        self.address_id = address_id
        super().__init__(f"Address with ID {address_id} not found.")
