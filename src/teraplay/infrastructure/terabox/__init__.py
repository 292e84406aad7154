from .api_client import TeraboxApiClient
from .tokens import generate_js_token
from .url_parser import is_terabox_url, parse_share_url
from .video_locator import find_first_video

__all__ = [
    "TeraboxApiClient",
    "find_first_video",
    "generate_js_token",
    "is_terabox_url",
    "parse_share_url",
]
