"""PIX key classification.

A PIX key is one of: CPF (11 digits), CNPJ (14 digits), e-mail, phone
(+55 and 10-11 digits) or a random EVP key (UUID). Punctuation in CPF/CNPJ
(000.000.000-00, 00.000.000/0000-00) is accepted.
"""

import re
from enum import Enum


class PixKeyType(str, Enum):
    CPF = "CPF"
    CNPJ = "CNPJ"
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    EVP = "EVP"


_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_RE = re.compile(r"^\+55\d{10,11}$")
_EVP_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
_DOCUMENT_RE = re.compile(r"^[\d.\-/]+$")


def classify_pix_key(key: str) -> PixKeyType | None:
    """Return the key type, or None when the key matches no PIX format."""
    candidate = key.strip()
    if not candidate:
        return None
    if "@" in candidate:
        return PixKeyType.EMAIL if _EMAIL_RE.match(candidate) else None
    if _EVP_RE.match(candidate):
        return PixKeyType.EVP
    if candidate.startswith("+"):
        phone = re.sub(r"[\s()\-]", "", candidate)
        return PixKeyType.PHONE if _PHONE_RE.match(phone) else None
    if _DOCUMENT_RE.match(candidate):
        digits = re.sub(r"\D", "", candidate)
        if len(digits) == 11:
            return PixKeyType.CPF
        if len(digits) == 14:
            return PixKeyType.CNPJ
    return None
