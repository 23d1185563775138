from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend
from .mixins import OptimizedQuerysetMixin
from ..pagination import StandardPagination


class BaseViewSet(OptimizedQuerysetMixin, viewsets.ModelViewSet):
    """
    Base ViewSet that provides standard configuration for all ModelViewSets.

    Features:
    - Automatic query optimization via OptimizedQuerysetMixin
    - Standard pagination, filtering and ordering

    Usage:
        class OrderViewSet(BaseViewSet):
            serializer_class = OrderSerializer
            # optimization is handled automatically via serializer Meta
    """

    pagination_class = StandardPagination
    filter_backends = [
        DjangoFilterBackend,
        filters.OrderingFilter,
    ]
    ordering = ["-id"]
