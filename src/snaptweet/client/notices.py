"""Localized user-facing notices.

Every failed or empty client action resolves to a :class:`Notice`.  Model
failures are mapped by :class:`~snaptweet.core.errors.ErrorKind` through an
explicit, closed switch; the remaining notices cover outcomes that do not
come from the model.
"""

from __future__ import annotations

from dataclasses import dataclass

from snaptweet.core.errors import ErrorKind


@dataclass(frozen=True)
class Notice:
    """A toast-style message shown to the user."""

    title: str
    description: str


API_KEY_NOTICE = Notice("API 키 오류", "OpenAI API 키를 확인해주세요.")
NETWORK_NOTICE = Notice("네트워크 오류", "인터넷 연결을 확인하고 다시 시도해주세요.")
RATE_LIMIT_NOTICE = Notice("요청 한도 초과", "잠시 후 다시 시도해주세요.")
IMAGE_NOTICE = Notice("이미지 처리 오류", "이미지 파일을 확인하고 다시 업로드해주세요.")
GENERIC_NOTICE = Notice("트윗 생성 실패", "다시 시도해주세요.")

EMPTY_RESULT_NOTICE = Notice(
    "트윗 생성 실패",
    "AI가 트윗을 생성하지 못했습니다. 다른 이미지나 메뉴로 다시 시도해주세요.",
)
STORAGE_NOTICE = Notice("저장소 오류", "결과를 임시 저장할 수 없습니다. 이미지 크기를 줄여주세요.")
NO_IMAGES_NOTICE = Notice("이미지가 필요합니다", "음식 사진을 하나 이상 업로드해주세요.")
NO_MENUS_NOTICE = Notice("메뉴가 필요합니다", "메뉴를 하나 이상 입력해주세요.")
TOO_MANY_IMAGES_NOTICE = Notice("이미지가 너무 많습니다", "사진은 최대 4장까지 업로드할 수 있습니다.")
DECODE_NOTICE = Notice("이미지 처리 오류", "이미지를 읽을 수 없습니다. 다른 파일로 다시 시도해주세요.")
NO_RESULT_NOTICE = Notice("결과가 없습니다", "먼저 트윗을 생성해주세요.")
SHARE_FAILED_NOTICE = Notice("공유 실패", "공유 링크 생성 중 오류가 발생했습니다.")
SHARE_NOT_FOUND_NOTICE = Notice("공유 링크 오류", "공유 링크를 찾을 수 없습니다.")
SHARE_LOAD_FAILED_NOTICE = Notice("공유 링크 오류", "공유 트윗을 가져오는 중 오류가 발생했습니다.")


def notice_for(kind: ErrorKind) -> Notice:
    """Return the notice for a model failure of the given *kind*."""
    if kind is ErrorKind.API_KEY:
        return API_KEY_NOTICE
    if kind is ErrorKind.NETWORK:
        return NETWORK_NOTICE
    if kind is ErrorKind.RATE_LIMIT:
        return RATE_LIMIT_NOTICE
    if kind is ErrorKind.IMAGE:
        return IMAGE_NOTICE
    return GENERIC_NOTICE
