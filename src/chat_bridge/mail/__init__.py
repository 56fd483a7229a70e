"""Email sending tool."""

from .patterns import EmailPattern, EmailValidator, parse_email_patterns
from .sender import EmailSettings, EmailTool, SendEmailArgs

__all__ = [
    "EmailPattern",
    "EmailValidator",
    "parse_email_patterns",
    "EmailSettings",
    "EmailTool",
    "SendEmailArgs",
]
