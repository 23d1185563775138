"""
Core backend base components.

Foundational classes shared by every app's API layer.
"""

from .viewsets import BaseViewSet
from .serializers import BaseModelSerializer, MoneyField
from .mixins import OptimizedQuerysetMixin, ExpectedVersionMixin
from .filters import BaseFilterSet, FlexibleDateTimeFilter

__all__ = [
    # ViewSets
    'BaseViewSet',

    # Serializers
    'BaseModelSerializer',
    'MoneyField',

    # Mixins
    'OptimizedQuerysetMixin',
    'ExpectedVersionMixin',

    # Filters
    'BaseFilterSet',
    'FlexibleDateTimeFilter',
]
