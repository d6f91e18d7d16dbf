"""
Human-readable reference ids (PREFIX-XXXXXX).

The tail is the low six digits of the epoch time in milliseconds, which
repeats every ~11.5 days. `allocate_custom_id` checks candidates against
the target table and falls back to random tails on collision; the
`custom_id` columns are UNIQUE as well.
"""
import secrets
import time
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from purifier.api.middleware.error_handler import ConflictException
from purifier.lib.logging import get_logger
from purifier.lib.settings import settings


logger = get_logger(__name__)

CUSTOMER_PREFIX = "CUST"
PRODUCT_PREFIX = "PROD"
ORDER_PREFIX = "ORD"
SERVICE_PREFIX = "SRV"
INVOICE_PREFIX = "INV"

_TAIL_MODULUS = 1_000_000


def generate_custom_id(prefix: str, now_ms: Optional[int] = None) -> str:
    """
    Build a PREFIX-XXXXXX reference from the current timestamp.

    Args:
        prefix: Collection prefix, e.g. "INV"
        now_ms: Epoch milliseconds (defaults to the current time)

    Returns:
        Reference string matching ^{prefix}-\\d{6}$
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"{prefix}-{now_ms % _TAIL_MODULUS:06d}"


def random_custom_id(prefix: str) -> str:
    """PREFIX-XXXXXX with a random tail."""
    return f"{prefix}-{secrets.randbelow(_TAIL_MODULUS):06d}"


def allocate_custom_id(
    session: Session,
    model,
    prefix: str,
    max_attempts: Optional[int] = None,
) -> str:
    """
    Return a reference id not yet used by `model`.

    The first candidate is timestamp based; later candidates are random.

    Raises:
        ConflictException: If every attempt collided
    """
    attempts = max_attempts or settings.custom_id_max_attempts
    candidate = generate_custom_id(prefix)

    for attempt in range(attempts):
        exists = session.execute(
            select(model.id).where(model.custom_id == candidate)
        ).first()
        if exists is None:
            return candidate

        logger.warning(
            "Custom id collision",
            extra={"prefix": prefix, "candidate": candidate, "attempt": attempt + 1},
        )
        candidate = random_custom_id(prefix)

    raise ConflictException(
        f"Could not allocate a unique {prefix} reference",
        details={"prefix": prefix, "attempts": attempts},
    )
