import logging

from .exceptions import ProductNotFoundError
from .models import Product

logger = logging.getLogger(__name__)


class ProductService:
    @staticmethod
    def get_product_by_id(product_id) -> Product:
        product = Product.objects.select_related("category").filter(pk=product_id).first()
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    @staticmethod
    def get_products_by_ids(product_ids) -> dict:
        """
        Bulk lookup keyed by id.

        Raises ProductNotFoundError for the first id that does not resolve.
        """
        product_ids = list(product_ids)
        products = Product.objects.select_related("category").in_bulk(product_ids)
        for product_id in product_ids:
            if product_id not in products:
                raise ProductNotFoundError(product_id)
        return products
