"""
Custom logging filters for gqlbind.
"""

import logging
import re
from typing import List, Pattern


class SensitiveDataFilter(logging.Filter):
    """Filter to mask credentials in log messages."""

    def __init__(self) -> None:
        """Initialize sensitive data filter."""
        super().__init__()

        self.patterns: List[Pattern[str]] = [
            re.compile(r"(bearer\s+)([a-zA-Z0-9+/=._-]{8,})", re.IGNORECASE),
            re.compile(
                r'(authorization["\s]*[:=]["\s]*["\']?)((?!bearer\s)[a-zA-Z0-9+/=._-]{8,})',
                re.IGNORECASE,
            ),
            re.compile(
                r'((?:api[_-]?key|token|secret)["\']?\s*[:=]\s*["\']?)([a-zA-Z0-9+/=._-]{8,})',
                re.IGNORECASE,
            ),
            re.compile(r"(https?://[^:/\s]+):([^@\s]+)@", re.IGNORECASE),
        ]

        self.replacements = [
            r"\1***MASKED***",  # Bearer tokens
            r"\1***MASKED***",  # Authorization values
            r"\1***MASKED***",  # API keys and tokens
            r"\1:***MASKED***@",  # URL credentials
        ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Mask sensitive data; records are never dropped."""
        message = record.getMessage()
        masked = message
        for pattern, replacement in zip(self.patterns, self.replacements):
            masked = pattern.sub(replacement, masked)

        if masked != message:
            record.msg = masked
            record.args = ()

        return True

