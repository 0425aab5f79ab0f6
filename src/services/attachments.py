"""
Turns an uploaded blob into the attachment part of a model prompt.

Three kinds are supported, each with its own variant:

- ``text``  -> TextAttachment (decoded text, no MIME type)
- ``image`` -> ImageAttachment (bytes, image/jpeg)
- ``file``  -> FileAttachment (bytes, application/pdf)
"""

import base64
from dataclasses import dataclass
from typing import Literal, Union, assert_never

AttachmentKind = Literal["text", "image", "file"]


@dataclass(frozen=True)
class TextAttachment:
    text: str
    kind: Literal["text"] = "text"

    def to_content_part(self) -> dict:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True)
class ImageAttachment:
    data: bytes
    mime_type: str = "image/jpeg"
    kind: Literal["image"] = "image"

    def to_content_part(self) -> dict:
        return {"type": "image_url", "image_url": {"url": _data_url(self.mime_type, self.data)}}


@dataclass(frozen=True)
class FileAttachment:
    data: bytes
    mime_type: str = "application/pdf"
    filename: str = "document.pdf"
    kind: Literal["file"] = "file"

    def to_content_part(self) -> dict:
        return {
            "type": "file",
            "file": {"filename": self.filename, "file_data": _data_url(self.mime_type, self.data)},
        }


Attachment = Union[TextAttachment, ImageAttachment, FileAttachment]


def _data_url(mime_type: str, data: bytes) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def build_attachment(kind: AttachmentKind, data: bytes, filename: str | None = None) -> Attachment:
    if kind == "text":
        return TextAttachment(text=data.decode("utf-8", errors="replace"))
    elif kind == "image":
        return ImageAttachment(data=data)
    elif kind == "file":
        return FileAttachment(data=data, filename=filename or "document.pdf")
    else:
        assert_never(kind)


def kind_for_content_type(content_type: str | None) -> AttachmentKind:
    """Map an upload's MIME type to the attachment kind sent to the model"""
    content_type = (content_type or "").lower()
    if content_type.startswith("image/"):
        return "image"
    if content_type == "text/plain":
        return "text"
    return "file"
