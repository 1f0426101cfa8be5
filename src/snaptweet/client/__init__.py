"""Client-side orchestration for SnapTweet front ends.

Modules
-------
session
    :class:`SnaptweetSession`, the generate / regenerate / share / load flow.
cache
    :class:`ResultCache`, the short-lived per-session result store.
notices
    Localized notices and the :class:`ErrorKind` switch.
"""

from snaptweet.client.cache import CachedResult, ResultCache
from snaptweet.client.notices import Notice, notice_for
from snaptweet.client.session import Outcome, ShareLink, SnaptweetSession

__all__ = [
    "CachedResult",
    "Notice",
    "Outcome",
    "ResultCache",
    "ShareLink",
    "SnaptweetSession",
    "notice_for",
]
