"""Core functionality for SnapTweet.

This package holds everything that does not depend on the web framework:

- **SnaptweetConfig** / **config**: settings loaded from ``SNAPTWEET_*``
  environment variables
- **models**: Pydantic domain models (requests, variations, share records)
- **errors**: the closed error taxonomy and :class:`ErrorKind`
- **image_reducer**: adaptive photo size reduction with Pillow
- **validation**: generation request validation
- **prompt_builder** / **generation_client**: the OpenAI chat call
- **share_store**: SQLite persistence of share records
- **preview**: social preview HTML for shared links

Architecture Overview
---------------------
Data flows one way per user action::

    photos -> image_reducer -> validation -> generation_client
           -> (client cache) -> share_store -> preview
"""

from snaptweet.core.config import SnaptweetConfig, config

__all__ = [
    "SnaptweetConfig",
    "config",
]
