import django_filters
from django import forms
from django.db import models
from django.utils import timezone
from django.utils.dateparse import parse_datetime, parse_date
from datetime import datetime, time
import logging

logger = logging.getLogger(__name__)


def normalize_datetime_value(value, *, is_end=False):
    """
    Normalize a date or datetime string to a timezone-aware datetime.

    Args:
        value: Can be a string (date or datetime), date object, or datetime object
        is_end: If True and value is date-only, returns end of day (23:59:59.999999)
                If False, returns start of day (00:00:00)

    Examples:
        normalize_datetime_value("2025-11-11", is_end=False)  # 2025-11-11 00:00:00
        normalize_datetime_value("2025-11-11", is_end=True)   # 2025-11-11 23:59:59.999999
        normalize_datetime_value("2025-11-11T10:30:00Z")      # unchanged
    """
    if not value:
        return value

    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return timezone.make_aware(value)
        return value

    if isinstance(value, str):
        try:
            dt = parse_datetime(value)
            if dt:
                return timezone.make_aware(dt) if timezone.is_naive(dt) else dt
            value = parse_date(value)
        except ValueError:
            # Well formed but not a real date, e.g. 2025-02-30
            return None
        if value is None:
            return None

    # Date-only input
    dt = datetime.combine(value, time.max if is_end else time.min)
    return timezone.make_aware(dt)


class FlexibleDateTimeFilter(django_filters.DateTimeFilter):
    """
    A DateTimeFilter that treats date-only inputs as whole days.

    "2025-11-11" with a 'gte' lookup means 00:00:00 of that day, with a
    'lte' lookup it means 23:59:59.999999.
    """

    field_class = forms.CharField

    def filter(self, qs, value):
        if value in (None, ""):
            return qs
        is_end = self.lookup_expr in ("lte", "lt")
        normalized = normalize_datetime_value(value, is_end=is_end)
        if normalized is None:
            logger.debug(f"Ignoring unparseable date filter value {value!r}")
            return qs
        return super().filter(qs, normalized)


class BaseFilterSet(django_filters.FilterSet):
    """
    Base filter set that swaps every auto-generated DateTimeField filter
    for FlexibleDateTimeFilter.
    """

    @classmethod
    def filter_for_field(cls, field, field_name, lookup_expr="exact"):
        if isinstance(field, models.DateTimeField):
            return FlexibleDateTimeFilter(field_name=field_name, lookup_expr=lookup_expr)
        return super().filter_for_field(field, field_name, lookup_expr)
