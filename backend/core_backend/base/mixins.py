from rest_framework.viewsets import ViewSetMixin
from django.db.models import Prefetch


class OptimizedQuerysetMixin(ViewSetMixin):
    """
    A ViewSet mixin that optimizes the queryset using the
    `select_related_fields` and `prefetch_related_fields` attributes declared
    on the active serializer's Meta.
    """

    def _get_optimizations(self, serializer_class):
        meta = getattr(serializer_class, "Meta", None)
        if meta is None:
            return [], []

        select_related = list(getattr(meta, "select_related_fields", []))
        prefetch_related = [
            field if isinstance(field, Prefetch) else str(field)
            for field in getattr(meta, "prefetch_related_fields", [])
        ]
        return select_related, prefetch_related

    def get_queryset(self):
        queryset = super().get_queryset()

        try:
            serializer_class = self.get_serializer_class()
        except (AttributeError, AssertionError):
            return queryset

        select_related, prefetch_related = self._get_optimizations(serializer_class)

        if select_related:
            queryset = queryset.select_related(*select_related)
        if prefetch_related:
            queryset = queryset.prefetch_related(*prefetch_related)

        return queryset


class ExpectedVersionMixin:
    """
    Reads the optimistic-concurrency token a client sends in the If-Match
    header (or an `expected_version` body field) and exposes it as an int.
    """

    version_header = "HTTP_IF_MATCH"

    def get_expected_version(self):
        raw = self.request.META.get(self.version_header)
        if raw is None and hasattr(self.request, "data"):
            raw = self.request.data.get("expected_version") if hasattr(self.request.data, "get") else None
        if raw in (None, ""):
            return None

        raw = str(raw).strip().strip('"')
        if raw.startswith("W/"):
            raw = raw[2:].strip('"')
        try:
            return int(raw)
        except ValueError:
            from core_backend.exceptions import ServiceValidationError

            raise ServiceValidationError(f"Invalid version token '{raw}'.")
