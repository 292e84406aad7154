from .converters import format_size, pick_thumbnail

__all__ = ["format_size", "pick_thumbnail"]
