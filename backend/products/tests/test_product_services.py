"""
Product lookup tests.
"""
import pytest

from products.exceptions import ProductNotFoundError
from products.services import ProductService


@pytest.mark.django_db
class TestProductService:

    def test_get_product(self, pizza):
        product = ProductService.get_product_by_id(pizza.pk)
        assert product == pizza
        assert product.category_display_name == 'Pizza'

    def test_uncategorized_display_name(self, soda):
        assert soda.category_display_name == 'Uncategorized'

    def test_missing_product(self, db):
        with pytest.raises(ProductNotFoundError):
            ProductService.get_product_by_id(999999)

    def test_bulk_lookup(self, pizza, soda):
        products = ProductService.get_products_by_ids([pizza.pk, soda.pk])
        assert products == {pizza.pk: pizza, soda.pk: soda}

    def test_bulk_lookup_reports_first_missing(self, pizza):
        with pytest.raises(ProductNotFoundError) as exc_info:
            ProductService.get_products_by_ids([pizza.pk, 999998, 999999])
        assert exc_info.value.product_id == 999998
