from .pagination import PaginationState, Paginator

__all__ = ["PaginationState", "Paginator"]
