"""Accept-Encoding negotiation for precompressed variants."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AcceptEncoding:
    """Which precompressed encodings the client accepts."""

    brotli: bool = False
    gzip: bool = False


def parse_accept_encoding(header_value: str | None) -> AcceptEncoding:
    """Parse an ``Accept-Encoding`` header.

    Quality values are ignored: brotli is always preferred over gzip
    when both are accepted, whatever weights the client declares.

    Examples::

        parse_accept_encoding("gzip, deflate, br")  -> AcceptEncoding(brotli=True, gzip=True)
        parse_accept_encoding("gzip;q=0.8")         -> AcceptEncoding(brotli=False, gzip=True)
    """
    brotli = gzip = False
    for part in (header_value or "").split(","):
        encoding = part.split(";", 1)[0].strip()
        if encoding == "br":
            brotli = True
        elif encoding == "gzip":
            gzip = True
    return AcceptEncoding(brotli=brotli, gzip=gzip)
