"""Masking – catalogue of common PII patterns.

Non-exhaustive; extend it with patterns for your own data.  Every entry
passes :class:`~gdpr_masking.application.masking.patterns.PatternValidator`.
"""
from __future__ import annotations

from gdpr_masking.kernel import masks as mask

_DEFAULT_PATTERNS: dict[str, str] = {
    # Finnish personal identity code (HETU)
    r"\b\d{6}[-+A]?\d{3}[A-Z]\b": mask.MASK_HETU,
    # US social security number, whole value
    r"^\d{3}-\d{2}-\d{4}$": mask.MASK_USSSN,
    # Finnish IBAN, grouped or compact
    r"^FI\d{2}(?: ?\d{4}){3} ?\d{2}$": mask.MASK_IBAN,
    r"^FI\d{16}$": mask.MASK_IBAN,
    # E.164 phone numbers
    r"^\+\d{1,3}[\s-]?\d{1,4}[\s-]?\d{1,4}[\s-]?\d{1,9}$": mask.MASK_PHONE,
    r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$": mask.MASK_EMAIL,
    # Dates of birth, ISO and DD/MM/YYYY
    r"^(19|20)\d{2}-[01]\d-[0-3]\d$": mask.MASK_DOB,
    r"^[0-3]\d/[01]\d/(19|20)\d{2}$": mask.MASK_DOB,
    r"^A\d{6}$": mask.MASK_PASSPORT,
    r"^(4111 1111 1111 1111|5500-0000-0000-0004|340000000000009|6011000000000004)$": mask.MASK_CC,
    r"\b[0-9]{16}\b": mask.MASK_CC,
    r"^Bearer [A-Za-z0-9\-._~+/]{10,}$": mask.MASK_TOKEN,
    r"^(sk_(live|test)_[A-Za-z0-9]{16,}|[A-Za-z0-9\-_]{20,})$": mask.MASK_APIKEY,
    r"^([0-9A-Fa-f]{2}[:-]){5}([0-9A-Fa-f]{2})$": mask.MASK_MAC,
    r"\b(?:(?:25[0-5]|2[0-4]\d|[01]?\d\d?)\.){3}(?:25[0-5]|2[0-4]\d|[01]?\d\d?)\b": mask.MASK_IPV4,
    # Vehicle registration plates (ABC-1234 and 123-ABC)
    r"\b[A-Z]{2,3}[-\s]?\d{3,4}\b": mask.MASK_VEHICLE,
    r"\b\d{3,4}[-\s]?[A-Z]{2,3}\b": mask.MASK_VEHICLE,
    r"\b[A-Z]{2}\d{6}[A-Z]\b": mask.MASK_UKNI,
    r"\b\d{3}[-\s]\d{3}[-\s]\d{3}\b": mask.MASK_CASIN,
    r"\b\d{6}[-\s]\d{8}\b": mask.MASK_UKBANK,
    r"\b\d{5}[-\s]\d{7,12}\b": mask.MASK_CABANK,
    r"\b\d{3}[-\s]\d{2}[-\s]\d{4}\b": mask.MASK_MEDICARE,
    r"\b\d{2}[-\s]\d{4}[-\s]\d{4}[-\s]\d{4}[-\s]\d{1,4}\b": mask.MASK_EHIC,
    r"\b[0-9a-fA-F]{1,4}:[0-9a-fA-F:]{7,35}\b": mask.MASK_IPV6,
}


def default_patterns() -> dict[str, str]:
    """Return a fresh copy of the default ``pattern -> replacement`` map."""
    return dict(_DEFAULT_PATTERNS)


__all__ = ["default_patterns"]
