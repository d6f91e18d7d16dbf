"""
Invoice share links.

An invoice is shared as a WhatsApp click-to-chat URL
(https://wa.me/?text=...) carrying a short summary. When an app base URL
is configured the summary also links to the public invoice page; that
link carries a signed, time-limited token bound to the invoice id so the
page cannot be enumerated by id alone.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union
from urllib.parse import quote

import jwt

from purifier.lib.settings import settings
from purifier.lib.logging import get_logger


logger = get_logger(__name__)

WHATSAPP_SHARE_URL = "https://wa.me/?text="
TOKEN_TYPE = "invoice_view"

CURRENCY_SYMBOLS = {"INR": "₹"}


def _group_indian(digits: str) -> str:
    # 1234567 -> 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(
    amount: Union[Decimal, float, int],
    currency: Optional[str] = None,
    decimals: int = 2,
) -> str:
    """
    Format an amount the way en-IN locales print currency.

    Example:
        >>> format_currency(123456.5)
        '₹1,23,456.50'
        >>> format_currency(123456.5, decimals=0)
        '₹1,23,457'
    """
    currency = currency or settings.currency_code
    exponent = Decimal(1).scaleb(-decimals)
    value = Decimal(str(amount)).quantize(exponent, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.{decimals}f}".partition(".")
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    formatted = f"{sign}{symbol}{_group_indian(whole)}"
    return f"{formatted}.{fraction}" if fraction else formatted


class InvoiceShareLinkGenerator:
    """
    Build share URLs and public view tokens for invoices.

    Tokens are HS256 JWTs of type "invoice_view" scoped to one invoice id.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        ttl_days: Optional[int] = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.share_link_secret
        if not self.secret_key:
            raise ValueError("Secret key is required for JWT signing")

        self.algorithm = "HS256"
        base = settings.app_base_url if base_url is None else base_url
        self.base_url = base[:-1] if base.endswith("/") else base
        self.ttl_days = ttl_days or settings.share_link_ttl_days

    def generate_view_token(self, invoice_id: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "type": TOKEN_TYPE,
            "invoice_id": str(invoice_id),
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(days=self.ttl_days)).timestamp()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_view_token(self, token: str, invoice_id: str) -> bool:
        """True when `token` is a valid, unexpired view token for `invoice_id`."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.warning("Invoice view token expired", extra={"invoice_id": str(invoice_id)})
            return False
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid invoice view token: {e}")
            return False

        if payload.get("type") != TOKEN_TYPE:
            logger.warning("Invalid token type", extra={"type": payload.get("type")})
            return False
        return payload.get("invoice_id") == str(invoice_id)

    def build_view_url(self, invoice_id: str) -> Optional[str]:
        if not self.base_url:
            return None
        token = self.generate_view_token(invoice_id)
        return f"{self.base_url}/invoice/{invoice_id}?token={token}"

    def build_message(
        self,
        invoice_id: str,
        number: str,
        customer_name: str,
        product_name: str,
        total_amount: Union[Decimal, float, int],
    ) -> str:
        lines = [
            f"Water Purifier Service Invoice {number}",
            f"Customer: {customer_name}",
            f"Product: {product_name}",
            f"Amount: {format_currency(total_amount)}",
        ]

        view_url = self.build_view_url(invoice_id)
        if view_url:
            lines.append(f"View invoice: {view_url}")

        lines.append("Thank you for choosing our service.")
        return "\n".join(lines)

    def build_share_url(
        self,
        invoice_id: str,
        number: str,
        customer_name: str,
        product_name: str,
        total_amount: Union[Decimal, float, int],
    ) -> str:
        """wa.me URL with the invoice summary as the prefilled message."""
        message = self.build_message(invoice_id, number, customer_name, product_name, total_amount)
        url = WHATSAPP_SHARE_URL + quote(message, safe="!~*'()")

        logger.info(
            "Generated invoice share link",
            extra={"invoice_id": str(invoice_id), "number": number, "url_length": len(url)},
        )
        return url


def get_share_link_generator() -> InvoiceShareLinkGenerator:
    """InvoiceShareLinkGenerator configured from app settings."""
    return InvoiceShareLinkGenerator()
