from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Address(models.Model):
    """A delivery address in a customer's address book."""

    class AddressType(models.TextChoices):
        HOME = "Home", _("Home")
        WORK = "Work", _("Work")
        OTHER = "Other", _("Other")

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="addresses",
    )
    address_type = models.CharField(
        max_length=10,
        choices=AddressType.choices,
        default=AddressType.HOME,
    )

    address_line1 = models.CharField(max_length=255)
    address_line2 = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Address")
        verbose_name_plural = _("Addresses")
        indexes = [
            models.Index(fields=["customer"], name="address_customer_idx"),
        ]

    def __str__(self):
        return f"{self.get_address_type_display()}: {self.formatted}"

    @property
    def formatted(self):
        """Single-line rendering used on order projections."""
        parts = [self.address_line1, self.address_line2, self.city]
        return ", ".join(part for part in parts if part)
