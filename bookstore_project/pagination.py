import math

from django.core.paginator import EmptyPage, Paginator
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class LenientPaginator(Paginator):
    """Pages past the last one are empty rather than an error."""

    def validate_number(self, number):
        try:
            return super().validate_number(number)
        except EmptyPage:
            if int(number) < 1:
                raise
            return int(number)

    def page(self, number):
        number = self.validate_number(number)
        if number > self.num_pages:
            return self._get_page([], number, self)
        return super().page(number)


class EnvelopePagination(PageNumberPagination):
    """
    Page-number pagination rendered as ``{<results_key>: [...], pagination: {...}}``.

    Views choose the collection key with a ``results_key`` attribute
    (``orders``, ``shipments``...). Page size comes from ``?limit=``. A page
    number beyond the last page yields an empty list and echoes the requested
    page back.
    """

    django_paginator_class = LenientPaginator
    page_size_query_param = 'limit'
    max_page_size = 100
    results_key = 'results'

    def paginate_queryset(self, queryset, request, view=None):
        self.results_key = getattr(view, 'results_key', self.results_key)
        return super().paginate_queryset(queryset, request, view=view)

    def get_paginated_response(self, data):
        paginator = self.page.paginator
        return Response({
            self.results_key: data,
            'pagination': {
                'page': self.page.number,
                'limit': paginator.per_page,
                'total': paginator.count,
                'pages': math.ceil(paginator.count / paginator.per_page),
            },
        })
