import datetime
import random
import string
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxLengthValidator, MaxValueValidator, MinValueValidator
from django.db import IntegrityError, models, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from products.models import Product
from .exceptions import OrderConflictError
from .managers import OrderQuerySet

NOTES_MAX_LENGTH = 1000
INSTRUCTIONS_MAX_LENGTH = 500
REVIEW_COMMENT_MAX_LENGTH = 1000
REVIEWER_NAME_MAX_LENGTH = 50

money_validators = [MinValueValidator(Decimal("0.00"))]
rating_validators = [MinValueValidator(1), MaxValueValidator(5)]


class Order(models.Model):
    # --- Status Fields ---
    class OrderStatus(models.TextChoices):
        NEW = "New", _("New")  # Placed, items still editable
        CONFIRMED = "Confirmed", _("Confirmed")
        PREPARING = "Preparing", _("Preparing")
        READY = "Ready", _("Ready")
        OUT_FOR_DELIVERY = "OutForDelivery", _("Out for Delivery")
        DELIVERED = "Delivered", _("Delivered")
        CANCELED = "Canceled", _("Canceled")

    class PaymentMethod(models.TextChoices):
        STRIPE = "Stripe", _("Stripe")
        CASH = "Cash", _("Cash")

    class PaymentStatus(models.TextChoices):
        PENDING = "Pending", _("Pending")
        COMPLETED = "Completed", _("Completed")
        FAILED = "Failed", _("Failed")

    class OrderSource(models.TextChoices):
        WEBSITE = "Website", _("Website")
        PHONE = "Phone", _("Phone")
        THIRD_PARTY = "ThirdParty", _("Third Party")

    TERMINAL_STATUSES = (OrderStatus.DELIVERED, OrderStatus.CANCELED)

    order_number = models.CharField(max_length=20, unique=True, editable=False)
    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.NEW
    )
    source = models.CharField(
        max_length=20, choices=OrderSource.choices, default=OrderSource.WEBSITE
    )

    # --- Relationships ---
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    delivery_address = models.ForeignKey(
        "customers.Address",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    delivery_person = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_orders",
    )
    confirmed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="confirmed_orders",
        help_text=_("Staff member who confirmed the order."),
    )

    # --- Lifecycle timestamps ---
    order_date = models.DateTimeField(default=timezone.now, db_index=True)
    required_time = models.DateTimeField(null=True, blank=True)
    confirmation_time = models.DateTimeField(null=True, blank=True)
    preparation_start_time = models.DateTimeField(null=True, blank=True)
    ready_time = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("When the kitchen marked the order as ready."),
    )
    delivery_start_time = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("When the order was handed to a delivery person."),
    )
    delivery_end_time = models.DateTimeField(null=True, blank=True)
    cancellation_time = models.DateTimeField(null=True, blank=True)

    # --- Financial Fields ---
    subtotal = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00"), validators=money_validators
    )
    delivery_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00"), validators=money_validators
    )
    tax = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00"), validators=money_validators
    )
    discount = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00"), validators=money_validators
    )
    total = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00"), validators=money_validators
    )
    estimated_delivery_minutes = models.PositiveIntegerField(null=True, blank=True)

    # --- Payment ---
    payment_method = models.CharField(
        max_length=20, choices=PaymentMethod.choices, null=True, blank=True
    )
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )
    transaction_id = models.CharField(max_length=100, null=True, blank=True)

    notes = models.TextField(
        blank=True,
        default="",
        validators=[MaxLengthValidator(NOTES_MAX_LENGTH)],
    )

    # Incremented by every persisted mutation; compared on write to detect lost updates.
    version = models.PositiveIntegerField(default=1)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        ordering = ["-order_date", "order_number"]
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        indexes = [
            models.Index(fields=["status", "required_time"], name="order_status_required_idx"),
            models.Index(fields=["customer", "status"], name="order_cust_status_idx"),
            models.Index(fields=["delivery_person", "status"], name="order_driver_status_idx"),
            models.Index(fields=["payment_status", "status"], name="order_pay_status_idx"),
        ]

    def __str__(self):
        return f"Order {self.order_number or self.pk} - {self.status}"

    # --- State helpers ---

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    @property
    def is_editable(self):
        """Line items may only change while the order is New."""
        return self.status == self.OrderStatus.NEW

    @property
    def status_display(self):
        return self.get_status_display()

    def append_note(self, text):
        """
        Append text on a new line, keeping earlier notes intact.

        Notes are capped at NOTES_MAX_LENGTH; the appended text is shortened
        to whatever room the existing notes leave.
        """
        text = (text or "").strip()
        if not text:
            return self.notes
        prefix = f"{self.notes}\n" if self.notes else ""
        room = NOTES_MAX_LENGTH - len(prefix)
        if room <= 0:
            return self.notes
        self.notes = prefix + text[:room]
        return self.notes

    def apply_totals(self, totals):
        """Copy the monetary fields of an OrderCalculator result onto the order."""
        for field in ("subtotal", "delivery_fee", "tax", "discount", "total"):
            setattr(self, field, totals[field])

    def save_versioned(self, update_fields):
        """
        Persist update_fields with a compare-and-swap on version.

        The row is only written if its version still matches the one this
        instance was loaded with; the version is bumped in the same UPDATE.

        Raises:
            OrderConflictError: the row changed since it was loaded
        """
        now = timezone.now()
        values = {field: getattr(self, field) for field in set(update_fields) - {"version", "updated_at"}}
        values["updated_at"] = now

        updated = Order.objects.filter(pk=self.pk, version=self.version).update(
            version=F("version") + 1, **values
        )
        if not updated:
            current = Order.objects.filter(pk=self.pk).values_list("version", flat=True).first()
            raise OrderConflictError(self.pk, self.version, current)

        self.version += 1
        self.updated_at = now

    # --- Projection helpers ---

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items.all())

    @property
    def customer_name(self):
        return self.customer.display_name if self.customer_id else None

    @property
    def delivery_address_display(self):
        return self.delivery_address.formatted if self.delivery_address_id else None

    @property
    def delivery_person_name(self):
        return self.delivery_person.display_name if self.delivery_person_id else None

    # --- Order number ---

    def save(self, *args, **kwargs):
        # Generate order_number only if it's not already set
        if self.order_number:
            return super().save(*args, **kwargs)

        max_retries = 5
        for _attempt in range(max_retries):
            self.order_number = self.generate_order_number(self.order_date)
            try:
                with transaction.atomic():
                    super().save(*args, **kwargs)
                return
            except IntegrityError:
                if Order.objects.filter(order_number=self.order_number).exists():
                    # Another order took the number, retry
                    continue
                raise
        self.order_number = ""
        raise IntegrityError("Failed to generate a unique order number after multiple retries.")

    @staticmethod
    def generate_order_number(when=None):
        """ORD-<YYYYMMDD>-<4 uppercase alphanumerics>, dated in UTC."""
        when = when or timezone.now()
        if timezone.is_aware(when):
            when = when.astimezone(datetime.timezone.utc)
        suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
        return f"ORD-{when:%Y%m%d}-{suffix}"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="order_items"
    )
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])

    # Price snapshot
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text=_("Price of the product at the time the line was added."),
    )
    subtotal = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("quantity x unit_price, maintained by the item service."),
    )
    special_instructions = models.CharField(
        max_length=INSTRUCTIONS_MAX_LENGTH,
        blank=True,
        help_text=_("Customer notes, e.g., 'no onions'"),
    )

    class Meta:
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")
        ordering = ["id"]
        indexes = [
            models.Index(fields=["order", "product"], name="item_order_product_idx"),
        ]

    def __str__(self):
        return f"{self.quantity} of {self.product.name} in Order {self.order.order_number}"

    @property
    def total_price(self):
        return self.quantity * self.unit_price


class Delivery(models.Model):
    """Hand-off record for an order that has been dispatched."""

    class DeliveryStatus(models.TextChoices):
        ON_THE_WAY = "OnTheWay", _("On the Way")
        DELIVERED = "Delivered", _("Delivered")
        CANCELED = "Canceled", _("Canceled")

    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name="delivery")
    delivery_person = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="deliveries",
    )
    status = models.CharField(
        max_length=20, choices=DeliveryStatus.choices, default=DeliveryStatus.ON_THE_WAY
    )
    status_change_time = models.DateTimeField(default=timezone.now)
    delivery_start_time = models.DateTimeField(null=True, blank=True)
    delivery_end_time = models.DateTimeField(null=True, blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    notes = models.CharField(max_length=500, blank=True)

    class Meta:
        verbose_name = _("Delivery")
        verbose_name_plural = _("Deliveries")

    def __str__(self):
        return f"Delivery of {self.order.order_number} - {self.status}"


class Review(models.Model):
    """Customer feedback on a delivered order; at most one per order."""

    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name="review")
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviews",
        help_text=_("Optional dish from the order the review is about."),
    )
    reviewer_name = models.CharField(max_length=REVIEWER_NAME_MAX_LENGTH, blank=True)
    rating = models.PositiveSmallIntegerField(validators=rating_validators)
    delivery_rating = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=rating_validators
    )
    food_rating = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=rating_validators
    )
    comment = models.CharField(max_length=REVIEW_COMMENT_MAX_LENGTH, blank=True)
    review_date = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Review")
        verbose_name_plural = _("Reviews")
        ordering = ["-review_date", "-id"]
        indexes = [
            models.Index(fields=["product", "review_date"], name="review_product_date_idx"),
            models.Index(fields=["customer", "review_date"], name="review_customer_date_idx"),
        ]

    def __str__(self):
        return f"Review of {self.order.order_number} ({self.rating}/5)"

    @property
    def average_rating(self):
        """Mean of the delivery and food ratings, 0 when neither was given."""
        ratings = [r for r in (self.delivery_rating, self.food_rating) if r is not None]
        return sum(ratings) / len(ratings) if ratings else 0
