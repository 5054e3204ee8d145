"""User-facing reply texts, one set per reply locale."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

TEXT_REPLY_TEMPLATE = 'received: "{text}"'
IMAGE_FAILURE_MESSAGE = "Image processing failed"
NO_CONTENT_MESSAGE = "No numbers found in the image"
NUMBERS_PREFIX = "Numbers read: "
TEXT_PREFIX = "Text in image: "
ELLIPSIS = "..."


class ReplyLocale(str, Enum):
    ENGLISH = "en"
    THAI = "th"


@dataclass(frozen=True)
class ReplyMessages:
    """Texts sent back to the chat.

    ``text_ack_template`` is formatted with ``text=``; the prefixes are
    followed by the reading or the text preview.
    """

    text_ack_template: str
    image_failure: str
    no_content: str
    numbers_prefix: str
    text_prefix: str


ENGLISH_MESSAGES = ReplyMessages(
    text_ack_template=TEXT_REPLY_TEMPLATE,
    image_failure=IMAGE_FAILURE_MESSAGE,
    no_content=NO_CONTENT_MESSAGE,
    numbers_prefix=NUMBERS_PREFIX,
    text_prefix=TEXT_PREFIX,
)

THAI_MESSAGES = ReplyMessages(
    text_ack_template='ได้รับข้อความ: "{text}"',
    image_failure="เกิดข้อผิดพลาดในการประมวลผลภาพ",
    no_content="ไม่พบตัวเลขในภาพ",
    numbers_prefix="อ่านได้ตัวเลข: ",
    text_prefix="ข้อความในภาพ: ",
)

_BY_LOCALE = {
    ReplyLocale.ENGLISH: ENGLISH_MESSAGES,
    ReplyLocale.THAI: THAI_MESSAGES,
}


def messages_for(locale: ReplyLocale) -> ReplyMessages:
    return _BY_LOCALE[locale]
