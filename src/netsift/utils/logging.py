"""Secure logging configuration for netsift.

Provides logging setup with credential header masking. Captured traffic
routinely carries session cookies and bearer tokens; their values are
masked in all log output.
"""

import logging
import re
import sys

MASKED_HEADERS = (
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
)


class HeaderMaskingFilter(logging.Filter):
    """Logging filter that masks credential header values.

    Values of the headers in MASKED_HEADERS are replaced with [MASKED].
    """

    HEADER_PATTERNS = [
        # "Authorization: Bearer abc" style lines
        re.compile(
            r"(?im)^(\s*(?:" + "|".join(re.escape(h) for h in MASKED_HEADERS) + r")\s*:\s*)(.+)$",
        ),
        # {"authorization": "value"} dict reprs
        re.compile(
            r"""(?i)(["'](?:""" + "|".join(re.escape(h) for h in MASKED_HEADERS) + r""")["']\s*:\s*["'])([^"']*)(["'])""",
        ),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter and mask header values in log records.

        Args:
            record: Log record to process

        Returns:
            Always True (record is always passed through, just modified)
        """
        if record.msg:
            record.msg = self._mask_headers(str(record.msg))
        if record.args and isinstance(record.args, tuple):
            new_args: list[object] = []
            for arg in record.args:
                if isinstance(arg, str):
                    new_args.append(self._mask_headers(arg))
                else:
                    new_args.append(arg)
            record.args = tuple(new_args)
        return True

    def _mask_headers(self, text: str) -> str:
        """Mask all credential header values in text.

        Args:
            text: Text potentially containing header values

        Returns:
            Text with header values replaced by [MASKED]
        """
        result = text
        for pattern in self.HEADER_PATTERNS:

            def mask_match(m: re.Match[str]) -> str:
                suffix = m.group(3) if len(m.groups()) > 2 else ""
                return m.group(1) + "[MASKED]" + suffix

            result = pattern.sub(mask_match, result)
        return result


def setup_logging(level: int = logging.INFO, name: str | None = None) -> logging.Logger:
    """Set up logging with header masking.

    Logs go to stderr so they never mix with an MCP stdio transport.

    Args:
        level: Logging level (default: INFO)
        name: Logger name (default: "netsift")

    Returns:
        Configured logger instance
    """
    logger_name = name or "netsift"
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    handler.addFilter(HeaderMaskingFilter())

    logger.addHandler(handler)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger under the netsift namespace.

    Args:
        name: Logger name suffix (e.g., "capture" for "netsift.capture")

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"netsift.{name}")
    return logging.getLogger("netsift")
