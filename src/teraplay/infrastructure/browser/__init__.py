from .share_page_resolver import SharePageResolver

__all__ = ["SharePageResolver"]
