"""Kernel – standard mask replacement literals."""
from __future__ import annotations

from typing import Final

# Data type masks
MASK_INT: Final = "***INT***"
MASK_FLOAT: Final = "***FLOAT***"
MASK_STRING: Final = "***STRING***"
MASK_BOOL: Final = "***BOOL***"
MASK_NULL: Final = "***NULL***"
MASK_ARRAY: Final = "***ARRAY***"
MASK_OBJECT: Final = "***OBJECT***"

# Generic
MASK_GENERIC: Final = "***"
MASK_MASKED: Final = "***MASKED***"
MASK_REDACTED: Final = "***REDACTED***"
MASK_FILTERED: Final = "***FILTERED***"
MASK_BRACKETS: Final = "[MASKED]"
MASK_CIRCULAR: Final = "***CIRCULAR***"

# Personal identifiers
MASK_HETU: Final = "***HETU***"
MASK_SSN: Final = "***SSN***"
MASK_USSSN: Final = "***USSSN***"
MASK_UKNI: Final = "***UKNI***"
MASK_CASIN: Final = "***CASIN***"
MASK_PASSPORT: Final = "***PASSPORT***"

# Financial
MASK_IBAN: Final = "***IBAN***"
MASK_CC: Final = "***CC***"
MASK_UKBANK: Final = "***UKBANK***"
MASK_CABANK: Final = "***CABANK***"

# Contact
MASK_EMAIL: Final = "***EMAIL***"
MASK_PHONE: Final = "***PHONE***"
MASK_IP: Final = "***IP***"
MASK_IPV4: Final = "***IPv4***"
MASK_IPV6: Final = "***IPv6***"

# Credentials
MASK_TOKEN: Final = "***TOKEN***"
MASK_APIKEY: Final = "***APIKEY***"
MASK_SECRET: Final = "***SECRET***"

# Other personal data
MASK_DOB: Final = "***DOB***"
MASK_MAC: Final = "***MAC***"
MASK_VEHICLE: Final = "***VEHICLE***"
MASK_MEDICARE: Final = "***MEDICARE***"
MASK_EHIC: Final = "***EHIC***"

# Format-preserving
MASK_SSN_PATTERN: Final = "***-**-****"
MASK_EMAIL_PATTERN: Final = "***@***.***"

__all__ = [name for name in list(globals()) if name.startswith("MASK_")]
