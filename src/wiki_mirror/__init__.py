"""
Wiki Mirror - A library to mirror a wiki page hierarchy and its attachments to disk
"""

__version__ = "0.1.0"

from .errors import ConfigurationError, MalformedResponseError, WikiMirrorError
from .models import PageData, WikiFile, WikiPage
from .scraper import WikiMirror

__all__ = [
    "WikiMirror",
    "WikiPage",
    "WikiFile",
    "PageData",
    "WikiMirrorError",
    "ConfigurationError",
    "MalformedResponseError",
]
