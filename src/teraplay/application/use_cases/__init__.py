from .fallback_resolve import FallbackResolveUseCase
from .resolve_share import ResolveShareUseCase

__all__ = [
    "FallbackResolveUseCase",
    "ResolveShareUseCase",
]
