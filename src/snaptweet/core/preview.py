"""Social preview pages for shared tweets.

Link-unfurling crawlers do not run JavaScript, so ``/shared/{id}`` answers
with a small static HTML document whose Open Graph and Twitter-card meta
tags describe the share.  Human visitors are sent on to the main
application after a short delay.

Truncation rules (observable by every platform that unfurls a link):

- the menu text is the first two menu entries joined by ``", "``, followed
  by `` 외 N개`` when more exist;
- the description quotes the first 80 characters of the first variation.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from html import escape

from snaptweet.core.models import SharedTweetRecord

SITE_NAME = "SnapTweet"
DEFAULT_PLACE = "맛집"
PREVIEW_MENU_COUNT = 2
PREVIEW_CONTENT_CHARS = 80
PREVIEW_IMAGE_WIDTH = 1200
PREVIEW_IMAGE_HEIGHT = 630
REDIRECT_DELAY_MS = 100


def menu_summary(menus: list[str]) -> str:
    """Return e.g. ``"김치찌개, 된장찌개 외 1개"`` for three menus."""
    text = ", ".join(menus[:PREVIEW_MENU_COUNT])
    extra = len(menus) - PREVIEW_MENU_COUNT
    if extra > 0:
        text += f" 외 {extra}개"
    return text


@dataclass(frozen=True)
class SharePreview:
    """Derived, unescaped preview strings for one share record."""

    title: str
    description: str
    place: str
    menu_text: str


def build_preview(record: SharedTweetRecord) -> SharePreview:
    """Derive the preview title and description from *record*."""
    place = record.restaurant_name or DEFAULT_PLACE
    menu_text = menu_summary(record.menus)
    title = f"🍽️ {place}에서 {menu_text} 먹고 AI가 써준 트윗"

    summary = f"{record.satisfaction.value} 만족도로 {len(record.variations)}가지 톤의 트윗을 생성했어요!"
    if record.variations:
        quote = record.variations[0].content[:PREVIEW_CONTENT_CHARS]
        description = f'"{quote}..." - {summary}'
    else:
        description = summary

    return SharePreview(title=title, description=description, place=place, menu_text=menu_text)


def _app_link(app_url: str, share_id: str) -> str:
    separator = "&" if "?" in app_url else "?"
    return f"{app_url}{separator}share={share_id}"


def render_shared_page(record: SharedTweetRecord, base_url: str, app_url: str = "/") -> str:
    """Render the crawler-facing HTML page for *record*.

    Args:
        record: The fetched share record.
        base_url: Public origin of this service, without a trailing slash.
        app_url: Main application URL the page redirects to.

    Returns:
        A complete HTML document.
    """
    preview = build_preview(record)
    base_url = base_url.rstrip("/")
    page_url = f"{base_url}/shared/{record.id}"
    image_url = f"{page_url}/image" if record.images else ""
    app_link = _app_link(app_url, record.id)

    title = escape(preview.title)
    description = escape(preview.description)

    image_tags = ""
    if image_url:
        image_tags = (
            f'    <meta property="og:image" content="{escape(image_url)}">\n'
            f'    <meta property="twitter:image" content="{escape(image_url)}">\n'
        )

    structured = json.dumps(
        {
            "@context": "https://schema.org",
            "@type": "Article",
            "headline": preview.title,
            "description": preview.description,
            "author": {"@type": "Organization", "name": SITE_NAME},
            "datePublished": record.created_at.isoformat(),
            "url": page_url,
            "image": image_url,
        },
        ensure_ascii=False,
        indent=2,
    )
    # Keep user text from closing or opening tags inside the script block.
    structured = structured.replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")

    return f"""<!DOCTYPE html>
<html lang="ko">
  <head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <meta name="description" content="{description}">
    <meta property="og:type" content="article">
    <meta property="og:url" content="{escape(page_url)}">
    <meta property="og:title" content="{title}">
    <meta property="og:description" content="{description}">
    <meta property="og:image:width" content="{PREVIEW_IMAGE_WIDTH}">
    <meta property="og:image:height" content="{PREVIEW_IMAGE_HEIGHT}">
    <meta property="og:site_name" content="{SITE_NAME}">
    <meta property="twitter:card" content="summary_large_image">
    <meta property="twitter:url" content="{escape(page_url)}">
    <meta property="twitter:title" content="{title}">
    <meta property="twitter:description" content="{description}">
{image_tags}    <meta name="robots" content="index, follow">
    <meta name="author" content="{SITE_NAME}">
    <script type="application/ld+json">
{structured}
    </script>
    <script>
      setTimeout(function() {{
        window.location.href = {json.dumps(app_link)};
      }}, {REDIRECT_DELAY_MS});
    </script>
  </head>
  <body>
    <div style="text-align: center; padding: 50px; font-family: system-ui;">
      <h2>🍽️ {escape(preview.place)}</h2>
      <p>{escape(preview.menu_text)}</p>
      <p>AI가 생성한 트윗을 확인하고 있습니다...</p>
      <a href="{escape(app_link)}">여기를 클릭하면 바로 확인할 수 있습니다</a>
    </div>
  </body>
</html>
"""


def _simple_page(title: str, description: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="ko">
  <head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)}</title>
    <meta name="description" content="{escape(description)}">
    <meta property="og:title" content="{escape(title)}">
    <meta property="og:description" content="{escape(description)}">
    <meta property="og:type" content="website">
    <meta name="twitter:card" content="summary">
  </head>
  <body>
    <div style="text-align: center; padding: 50px; font-family: system-ui;">
      <h2>{escape(title)}</h2>
      <p>{escape(description)}</p>
    </div>
  </body>
</html>
"""


def render_not_found_page() -> str:
    """HTML shown for an unknown share id."""
    return _simple_page(f"공유 링크를 찾을 수 없습니다 - {SITE_NAME}", "요청하신 공유 링크를 찾을 수 없습니다.")


def render_error_page() -> str:
    """HTML shown when a share page cannot be built."""
    return _simple_page(f"오류 발생 - {SITE_NAME}", "페이지를 불러오는 중 오류가 발생했습니다.")
