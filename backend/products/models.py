from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Category(models.Model):
    name = models.CharField(
        max_length=100, unique=True, help_text=_("Name of the product category.")
    )
    description = models.TextField(
        blank=True, help_text=_("Description of the category.")
    )
    order = models.IntegerField(
        default=0,
        help_text=_("Display order for this category. Lower numbers appear first."),
    )
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        verbose_name = _("Category")
        verbose_name_plural = _("Categories")
        ordering = ["order", "name"]

    def __str__(self):
        return self.name


class Product(models.Model):
    name = models.CharField(max_length=200, help_text=_("Name of the product."))
    description = models.TextField(
        blank=True, help_text=_("Detailed description of the product.")
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text=_("The current menu price. Orders capture it at the time of sale."),
    )
    category = models.ForeignKey(
        Category,
        related_name="products",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text=_("Product category. Leave blank for uncategorized products."),
    )
    preparation_time = models.PositiveIntegerField(
        default=0, help_text=_("Typical preparation time in minutes.")
    )
    calories = models.PositiveIntegerField(null=True, blank=True)
    is_available = models.BooleanField(
        default=True,
        db_index=True,
        help_text=_("Unavailable products cannot be added to new orders."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Product")
        verbose_name_plural = _("Products")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["category", "is_available"], name="product_cat_available_idx"),
            models.Index(fields=["name"], name="product_name_idx"),
        ]

    def __str__(self):
        return self.name

    @property
    def category_display_name(self):
        """Return category name or 'Uncategorized' if category is None."""
        return self.category.name if self.category else "Uncategorized"
