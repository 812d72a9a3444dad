from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """Page-number pagination accepting ``?page=`` and ``?limit=``."""

    page_size = 10
    page_size_query_param = "limit"
    max_page_size = 100
