from core_backend.exceptions import NotFoundError


class ProductNotFoundError(NotFoundError):
    code = "product_not_found"

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found.")
