"""HTTP-date parsing and formatting (RFC 9110 section 5.6.7).

Timestamps are whole seconds since the epoch: HTTP dates carry no finer
resolution, so freshness comparisons are done on ints.
"""

from datetime import UTC, datetime
from email.utils import formatdate

# The three forms a recipient must accept, tried in order of likelihood
_HTTP_DATE_FORMATS = (
    "%a, %d %b %Y %H:%M:%S GMT",  # IMF-fixdate
    "%A, %d-%b-%y %H:%M:%S GMT",  # obsolete RFC 850
    "%a %b %d %H:%M:%S %Y",  # asctime
)


def parse_http_date(value: str) -> int:
    """Parse an HTTP-date into epoch seconds.

    Only IMF-fixdate (``Sun, 06 Nov 1994 08:49:37 GMT``), RFC 850 and
    asctime are accepted, with nothing before or after them apart from
    whitespace. Raises ``ValueError`` for anything else.
    """
    text = value.strip()
    for fmt in _HTTP_DATE_FORMATS:
        try:
            when = datetime.strptime(text, fmt)
        except ValueError:
            continue
        try:
            return int(when.replace(tzinfo=UTC).timestamp())
        except (OverflowError, OSError) as exc:
            msg = f"HTTP date out of range: {value!r}"
            raise ValueError(msg) from exc

    msg = f"Invalid HTTP date: {value!r}"
    raise ValueError(msg)


def format_http_date(timestamp: float) -> str:
    """Format epoch seconds as an IMF-fixdate string."""
    return formatdate(int(timestamp), usegmt=True)
