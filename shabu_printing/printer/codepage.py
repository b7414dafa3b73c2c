"""Thai codepage transcoding for printer text."""
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Codepage(Enum):
    """Thai code pages, valued by their Python codec name."""
    TIS620 = "tis_620"  # Thai national standard, Epson firmware
    CP874 = "cp874"     # Windows Thai, XPrinter firmware

    @property
    def codec(self) -> str:
        return self.value


def unmappable(text: str, codepage: Codepage) -> list:
    """Return the characters of ``text`` the codepage cannot represent."""
    missing = []
    for char in text:
        try:
            char.encode(codepage.codec)
        except UnicodeEncodeError:
            missing.append(char)
    return missing


def encode(text: str, codepage: Codepage) -> bytes:
    """Encode text for the printer; unmappable characters become ``?``."""
    try:
        return text.encode(codepage.codec)
    except UnicodeEncodeError:
        logger.warning(
            "Replaced characters %r not in %s",
            "".join(unmappable(text, codepage)), codepage.name
        )
        return text.encode(codepage.codec, errors="replace")


def decode(data: bytes, codepage: Codepage) -> str:
    """Decode printer text back to a string."""
    return data.decode(codepage.codec, errors="replace")
