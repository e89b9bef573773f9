from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple
from urllib.parse import urlsplit

from adapters.google.mutation.mutation_config import CONFIG

_DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class NormalizedUrl:
    final_url: str
    path1: Optional[str] = None
    path2: Optional[str] = None


def resource_name(customer_id: str, collection: str, resource_id: int) -> str:
    return f"customers/{customer_id}/{collection}/{resource_id}"


def truncate(text: Optional[str], max_length: int) -> str:
    return (text or "")[:max_length]


def amount_to_micros(amount: float) -> int:
    """Decimal amount to integer micros, rounded half-up to the nearest micro."""
    micros = Decimal(str(amount)) * CONFIG.MICROS_PER_UNIT
    return int(micros.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def normalize_final_url(url: str) -> NormalizedUrl:
    """Reduce a landing page URL to its origin, keeping the path as display paths.

    ``https://example.com/a/b?x=1`` becomes ``https://example.com`` with
    display paths ``a`` and ``b``. URLs without a scheme and host are
    returned verbatim with no display paths.
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return NormalizedUrl(final_url=url)

    if not parts.scheme or not parts.hostname:
        return NormalizedUrl(final_url=url)

    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    origin = f"{parts.scheme}://{host}"
    if port is not None and port != _DEFAULT_PORTS.get(parts.scheme):
        origin = f"{origin}:{port}"

    segments = [segment for segment in parts.path.split("/") if segment]
    path1, path2 = _first_two(segments)
    return NormalizedUrl(final_url=origin, path1=path1, path2=path2)


def _first_two(segments: list) -> Tuple[Optional[str], Optional[str]]:
    first = segments[0] if len(segments) > 0 else None
    second = segments[1] if len(segments) > 1 else None
    return first, second
