from .search_index_client import SearchIndexClient, is_retryable_http_error

__all__ = ["SearchIndexClient", "is_retryable_http_error"]
