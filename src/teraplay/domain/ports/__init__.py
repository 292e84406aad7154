from .share_api import ShareApiPort
from .share_resolver import ShareResolverPort

__all__ = [
    "ShareApiPort",
    "ShareResolverPort",
]
