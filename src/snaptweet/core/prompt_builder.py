"""Chat prompt construction for tweet generation.

Every generation sends exactly two messages:

- a **system** message fixing the persona (a heavy Twitter user who must not
  sound like an advertisement), the three required tones, and the exact JSON
  shape of the answer;
- a **user** message carrying the restaurant name (or ``알 수 없음``), the
  comma-joined menu list, the satisfaction level, and every photo attached
  as an inline ``image_url`` part.

Message Structure::

    [system] persona + tones + JSON shape
    [user]   가게: ...
             메뉴: a, b, c
             만족도: ...
             사진: ...
             <image 1> ... <image N>
"""

from __future__ import annotations

import base64

from snaptweet.core.models import GenerationRequest

# ---------------------------------------------------------------------------
# Fixed system prompt.
# The tone names must match snaptweet.core.models.Tone exactly, otherwise the
# returned variations are dropped during parsing.
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """당신은 트위터 헤비유저처럼 말해야 하고, 광고처럼 보이면 안 됩니다.
문장은 1~2줄, 가볍고 툭 던지는 말투로 작성해주세요.
메뉴, 사진, 만족도 정보를 반영해서 TL에 올릴 법한 트윗을 만들어주세요.

다음 3가지 톤으로 트윗을 작성해주세요:
1. 솔직톤: 직설적이고 가벼운 톤
2. 드립톤: 트위터 밈과 자조적 개그가 섞인 톤
3. 극단톤: 극찬 또는 혹평, TL에서 던지는 킹받는 멘트

JSON 형식으로 응답해주세요:
{
  "variations": [
    {"content": "트윗 내용", "tone": "솔직톤"},
    {"content": "트윗 내용", "tone": "드립톤"},
    {"content": "트윗 내용", "tone": "극단톤"}
  ]
}"""

UNKNOWN_RESTAURANT = "알 수 없음"


def guess_image_mime(data: bytes) -> str:
    """Guess an image MIME type from its magic bytes, defaulting to JPEG."""
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    return "image/jpeg"


def image_data_url(data: bytes) -> str:
    """Encode image bytes as an inline ``data:`` URL."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{guess_image_mime(data)};base64,{encoded}"


def build_user_prompt(request: GenerationRequest) -> str:
    """Render the text part of the user message."""
    return (
        f"가게: {request.restaurant_name or UNKNOWN_RESTAURANT}\n"
        f"메뉴: {', '.join(request.menus)}\n"
        f"만족도: {request.satisfaction.value}\n"
        "사진: 첨부된 음식 사진들을 분석해서 트윗에 반영해주세요."
    )


def build_messages(request: GenerationRequest) -> list[dict]:
    """Build the chat messages for one generation request.

    Args:
        request: A validated generation request.

    Returns:
        ``[system_message, user_message]`` in the chat-completions format,
        with one ``image_url`` content part per photo, in upload order.
    """
    user_content: list[dict] = [{"type": "text", "text": build_user_prompt(request)}]
    user_content.extend(
        {"type": "image_url", "image_url": {"url": image_data_url(image)}}
        for image in request.images
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_content},
    ]
