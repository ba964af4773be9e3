from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.constants import QR_HASH_LENGTH
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class QRPayload:
    index_number: str
    name: str
    student_id: Optional[int] = None
    secure_hash: Optional[str] = None


def parse_qr_payload(raw: str | Mapping[str, Any] | None) -> QRPayload:
    """Decode the JSON carried by a student's QR code."""

    if not raw:
        raise ValidationError("QR code didn't scan correctly.")

    data = raw
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except ValueError:
            raise ValidationError("Invalid QR code data format.") from None
    if not isinstance(data, Mapping):
        raise ValidationError("Invalid QR code data format.")

    index_number = str(data.get("indexNumber") or "").strip().upper()
    name = str(data.get("name") or "").strip()
    if not index_number or not name:
        raise ValidationError("Student information (indexNumber and name) are required.")

    student_id = None
    if data.get("id") not in (None, ""):
        try:
            student_id = int(data["id"])
        except (TypeError, ValueError):
            raise ValidationError("Invalid student id in QR code.") from None

    return QRPayload(
        index_number=index_number,
        name=name,
        student_id=student_id,
        secure_hash=data.get("secureHash") or None,
    )


def secure_hash(student_id: int, index_number: str, secret: str) -> str:
    digest = hashlib.sha256(f"{student_id}{index_number}{secret}".encode("utf-8")).hexdigest()
    return digest[:QR_HASH_LENGTH]
