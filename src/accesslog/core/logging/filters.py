# src/accesslog/core/logging/filters.py
"""
Redaction for captured request/response bodies and for diagnostic log records.

`redact(text)` is a textual transform, not a JSON parser:
  - every newline (and the spaces/tabs following it) is removed, so a
    pretty-printed body collapses onto the single access-log line;
  - every `"password...": value` fragment (quoted key starting with the
    case-sensitive prefix `password`, quoted or bare value) is removed together
    with an optional trailing comma.

The password pattern does not need a trailing comma to match, so the last
field of an object is removed too:

    {"user":"bob","password":"hunter2"}   ->   {"user":"bob",}

The leftover comma is accepted; the line is a log entry, not a payload.
"""

import logging
import re
from logging import LogRecord

NEWLINE_PATTERN = re.compile(r"\r?\n[ \t]*")

PASSWORD_PATTERN = re.compile(
    r'"password[^"]*"\s*:\s*'           # quoted key with the password prefix
    r'(?:"(?:[^"\\]|\\.)*"|[^,}\]\s]*)'  # quoted value (escapes allowed) or bare value
    r"\s*,?"
)

REDACTED = "***REDACTED***"


def redact(text: str) -> str:
    """
    Strip newline noise and password fields from `text`.

    Args:
        text: decoded body or response text.

    Returns:
        str: the filtered text. Empty input returns empty output.
    """
    if not text:
        return text
    text = NEWLINE_PATTERN.sub("", text)
    return PASSWORD_PATTERN.sub("", text)


class RedactFilter(logging.Filter):
    """
    Logging filter for the library's own diagnostics.

    - Attributes attached via `extra={...}` whose name is sensitive are replaced
      with a sentinel.
    - The rendered message goes through `redact()` so a body that ends up in a
      diagnostic message obeys the same policy as the access line.
    """

    SENSITIVE = {"password", "secret", "token", "access_token", "refresh_token", "authorization", "cookie"}

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = REDACTED
        if isinstance(record.msg, str) and not record.args:
            record.msg = redact(record.msg)
        return True
