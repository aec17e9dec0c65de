from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

HEADER_TEXT = "text"
HEADER_IMAGE = "image"
HEADER_KINDS = (HEADER_TEXT, HEADER_IMAGE)


@dataclass(frozen=True)
class MessageForm:
    """
    What the user typed into the send dialog.

    :param header: header kind, "text" or "image"
    :param text1: first body text (required)
    :param header_text: header text when header == "text"
    :param image: image as a data URL ("data:<mime>;base64,...") when header == "image"
    :param text2: optional second body text
    :param text3: optional third body text
    """
    header: str
    text1: str
    header_text: Optional[str] = None
    image: Optional[str] = None
    text2: Optional[str] = None
    text3: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MessageForm:
        def opt(key: str) -> Optional[str]:
            value = data.get(key)
            return str(value) if value else None

        return cls(
            header=str(data.get("header") or ""),
            text1=str(data.get("text1") or ""),
            header_text=opt("header_text"),
            image=opt("image"),
            text2=opt("text2"),
            text3=opt("text3"),
        )


# -----------------------------------------------------------------------------
# Header variants
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class TextHeader:
    text: str
    kind: ClassVar[str] = HEADER_TEXT

    def parameters(self) -> List[Dict[str, Any]]:
        return [{"type": "text", "text": self.text}]


@dataclass(frozen=True)
class ImageHeader:
    media_id: str
    kind: ClassVar[str] = HEADER_IMAGE

    def parameters(self) -> List[Dict[str, Any]]:
        return [{"type": "image", "image": {"id": self.media_id}}]


Header = Union[TextHeader, ImageHeader]


# -----------------------------------------------------------------------------
# Body variants
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class BodyVariant:
    """
    Body parameters plus the template name suffix they correspond to.

    texts holds every body text that was filled in, in field order.
    """
    texts: Tuple[str, ...]
    suffix: ClassVar[str] = ""

    def template_name(self, header_kind: str) -> str:
        return f"{header_kind}_text1{self.suffix}"

    def parameters(self) -> List[Dict[str, Any]]:
        return [{"type": "text", "text": t} for t in self.texts]


class TextOnly(BodyVariant):
    suffix = ""


class TextPlusOne(BodyVariant):
    suffix = "_text2"


class TextPlusTwo(BodyVariant):
    suffix = "_text2_text3"


def body_variant(text1: str, text2: Optional[str] = None, text3: Optional[str] = None) -> BodyVariant:
    """
    Pick the body variant from which optional texts are present.

    text3 without text2 still lands in the parameters of a TextOnly body; the
    messaging API rejects that combination, not this layer.
    """
    texts = tuple(t for t in (text1, text2, text3) if t)
    if text2 and text3:
        return TextPlusTwo(texts)
    if text2:
        return TextPlusOne(texts)
    return TextOnly(texts)


@dataclass(frozen=True)
class TemplateMessage:
    header: Header
    body: BodyVariant
    language_code: str = "en"
    messaging_product: str = "whatsapp"

    @property
    def template_name(self) -> str:
        return self.body.template_name(self.header.kind)

    def to_payload(self, to: str) -> Dict[str, Any]:
        return {
            "messaging_product": self.messaging_product,
            "to": to,
            "type": "template",
            "template": {
                "name": self.template_name,
                "language": {"code": self.language_code},
                "components": [
                    {"type": "header", "parameters": self.header.parameters()},
                    {"type": "body", "parameters": self.body.parameters()},
                ],
            },
        }


def build_message(
    form: MessageForm,
    *,
    media_id: Optional[str] = None,
    language_code: str = "en",
    messaging_product: str = "whatsapp",
) -> TemplateMessage:
    """
    Build the template message for a form. Image headers need the media id of an
    already-completed upload.
    """
    if form.header == HEADER_IMAGE:
        if not media_id:
            raise ValueError("Image headers need an uploaded media id")
        header: Header = ImageHeader(media_id=media_id)
    elif form.header == HEADER_TEXT:
        header = TextHeader(text=form.header_text or "")
    else:
        raise ValueError(f"Unknown header kind '{form.header}'")

    return TemplateMessage(
        header=header,
        body=body_variant(form.text1, form.text2, form.text3),
        language_code=language_code,
        messaging_product=messaging_product,
    )
