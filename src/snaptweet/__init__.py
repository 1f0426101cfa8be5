"""SnapTweet - food photos in, tweet drafts and shareable preview links out."""

__version__ = "0.1.0"

from snaptweet.core.config import SnaptweetConfig, config

__all__ = [
    "SnaptweetConfig",
    "config",
]
