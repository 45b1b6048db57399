from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class NormalizedIdentity:
    student_id: str
    full_name: str


def normalize_id(raw: str) -> str:
    """Lower-case a student ID and drop one leading 's' ("S123" -> "123")."""
    s = (raw or "").lower()
    return s[1:] if s.startswith("s") else s


def normalize_name(raw: str) -> str:
    return (raw or "").lower()


def normalize_identity(full_name: str, student_id: str) -> NormalizedIdentity:
    return NormalizedIdentity(student_id=normalize_id(student_id), full_name=normalize_name(full_name))
