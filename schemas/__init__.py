from .base import DataResponse, ListResponse, MessageResponse

__all__ = ['DataResponse', 'ListResponse', 'MessageResponse']
