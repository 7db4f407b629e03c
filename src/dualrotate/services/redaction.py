"""Credential scrubbing for command output, commands and log records."""

import logging
import re
from typing import List, Sequence

SENSITIVE_PATTERN = re.compile(":.*@")
SENSITIVE_REPLACEMENT = ":*****@"
MASK = "*****"

_IDENTIFIED_BY_PATTERN = re.compile(r"(IDENTIFIED BY ')((?:\\.|[^'\\])*)(')", re.IGNORECASE)


def redact(text: str) -> str:
    """Replace the credentials segment of connection strings echoed in ``text``."""
    if not text:
        return text or ""
    return SENSITIVE_PATTERN.sub(SENSITIVE_REPLACEMENT, text)


def mask_statement(statement: str) -> str:
    return _IDENTIFIED_BY_PATTERN.sub(rf"\g<1>{MASK}\g<3>", statement)


def mask_argv(argv: Sequence[str]) -> List[str]:
    """Return a copy of ``argv`` that is safe to print.

    Inline password flags (``-pSECRET``, ``--password=SECRET``) and password
    literals of ``IDENTIFIED BY`` clauses are replaced with a fixed mask.
    """
    masked: List[str] = []
    for arg in argv:
        if arg.startswith("--password="):
            masked.append(f"--password={MASK}")
        elif arg.startswith("-p") and len(arg) > 2 and not arg.startswith("--"):
            masked.append(f"-p{MASK}")
        else:
            masked.append(mask_statement(arg))
    return masked


def describe_command(argv: Sequence[str]) -> str:
    return redact(" ".join(mask_argv(argv)))


class RedactingFilter(logging.Filter):
    """Scrub connection-string credentials from every record passing a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact(mask_statement(message))
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True
