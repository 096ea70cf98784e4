"""conftest.py for benchmarks.

Session-scoped fixtures: one orchestrator built from the default pattern
catalogue plus field rules, and payloads of increasing size.  Building the
orchestrator compiles and validates every pattern, so it is shared across
the session to keep construction cost out of the measurements.
"""

from __future__ import annotations

from typing import Any

import pytest

from gdpr_masking.application.masking import MaskingConfig, MaskingOrchestrator, MaskRule, default_patterns


@pytest.fixture(scope="session")
def orchestrator() -> MaskingOrchestrator:
    """Default patterns, two field rules, no audit sink."""
    config = MaskingConfig(
        patterns=default_patterns(),
        field_rules={"user.password": MaskRule.remove(), "user.email": "[email]"},
    )
    return MaskingOrchestrator(config)


@pytest.fixture(scope="session")
def nested_context() -> dict[str, Any]:
    return {
        "user": {
            "id": "user-1",
            "email": "alice@example.com",
            "password": "s3cr3t",
            "ssn": "123-45-6789",
        },
        "request": {
            "path": "/api/orders",
            "authorization": "Bearer abcdefghijklmnop",
            "body": {"card": "4111111111111111", "items": [{"sku": "A1", "qty": 2}]},
        },
        "status": 200,
    }


@pytest.fixture(scope="session")
def wide_context() -> dict[str, Any]:
    """A list long enough to take the chunked path."""
    return {"rows": [{"id": i, "email": f"user{i}@example.com"} for i in range(5_000)]}
