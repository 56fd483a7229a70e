"""``send_email`` tool: argument schema, message assembly and SMTP delivery."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import re
import smtplib
import ssl
from email.message import EmailMessage
from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator

from chat_bridge.config import Settings
from chat_bridge.errors import ConfigurationError, ParseError
from chat_bridge.mail.patterns import EmailPattern, EmailValidator, parse_email_patterns
from chat_bridge.types import ToolResult

GENERATED_CONTENT_PLACEHOLDER = "Generated content placeholder"

# Well-known services resolve to their SMTP endpoint; EMAIL_HOST overrides.
SMTP_SERVICES: dict[str, tuple[str, int]] = {
    "gmail": ("smtp.gmail.com", 465),
    "outlook": ("smtp-mail.outlook.com", 587),
    "hotmail": ("smtp-mail.outlook.com", 587),
    "yahoo": ("smtp.mail.yahoo.com", 465),
    "icloud": ("smtp.mail.me.com", 587),
}

_TAG_RE = re.compile(r"<[^>]*>?")
_LINE_BREAK_RE = re.compile(r"[\r\n]")

_logger = logging.getLogger(__name__)


def _reject_line_breaks(value: str | None) -> str | None:
    # these values end up in MIME headers
    if value is not None and _LINE_BREAK_RE.search(value):
        raise ValueError("must not contain line breaks")
    return value


class GenerateContentParameters(BaseModel):
    format: Literal["markdown", "text", "json"] | None = None
    style: str | None = None
    custom_prompt: str | None = None


class GenerateContent(BaseModel):
    type: Literal["conversation_summary", "custom"]
    parameters: GenerateContentParameters | None = None


class Attachment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    filename: str
    content: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")
    generate_content: GenerateContent | None = Field(default=None, alias="generateContent")

    @field_validator("filename", "content_type")
    @classmethod
    def _single_line(cls, value: str | None) -> str | None:
        return _reject_line_breaks(value)


class SendEmailArgs(BaseModel):
    to: EmailStr
    subject: str
    message_content: str
    attachments: list[Attachment] | None = None

    @field_validator("subject")
    @classmethod
    def _single_line(cls, value: str) -> str:
        return _reject_line_breaks(value)


class EmailSettings(BaseModel):
    """Resolved mail configuration."""

    host: str
    port: int
    from_address: EmailStr
    username: str
    password: str
    allow_list: list[EmailPattern] | None = None
    block_list: list[EmailPattern] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> EmailSettings:
        required = {
            "EMAIL_FROM": settings.email_from,
            "EMAIL_USERNAME": settings.email_username,
            "EMAIL_PASSWORD": settings.email_password,
        }
        missing = [name for name, value in required.items() if not value]
        if not settings.email_service and not settings.email_host:
            missing.insert(0, "EMAIL_SERVICE")
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables. Please set {', '.join(missing)}"
            )

        host, port = settings.email_host, settings.email_port
        if host is None:
            try:
                host, default_port = SMTP_SERVICES[settings.email_service.lower()]
            except KeyError:
                raise ConfigurationError(
                    f"Unknown email service '{settings.email_service}'; set EMAIL_HOST instead"
                ) from None
            port = port or default_port

        try:
            return cls(
                host=host,
                port=port or 587,
                from_address=settings.email_from,
                username=settings.email_username,
                password=settings.email_password,
                allow_list=parse_email_patterns(settings.email_allow_list),
                block_list=parse_email_patterns(settings.email_block_list),
            )
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid email configuration: {exc}") from exc


class Mailer(Protocol):
    def send(self, message: EmailMessage) -> None: ...


class SMTPMailer:
    """Blocking SMTP delivery; implicit TLS on port 465, STARTTLS otherwise."""

    def __init__(self, settings: EmailSettings, timeout_s: float = 60.0) -> None:
        self._settings = settings
        self._timeout_s = timeout_s

    def send(self, message: EmailMessage) -> None:
        s = self._settings
        context = ssl.create_default_context()
        if s.port == 465:
            with smtplib.SMTP_SSL(s.host, s.port, timeout=self._timeout_s, context=context) as smtp:
                smtp.login(s.username, s.password)
                smtp.send_message(message)
        else:
            with smtplib.SMTP(s.host, s.port, timeout=self._timeout_s) as smtp:
                smtp.starttls(context=context)
                smtp.login(s.username, s.password)
                smtp.send_message(message)


def strip_html(content: str) -> str:
    return _TAG_RE.sub("", content)


def _add_attachment(message: EmailMessage, filename: str, content: str, content_type: str | None) -> None:
    content_type = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
    maintype, _, subtype = content_type.partition("/")
    message.add_attachment(
        content.encode("utf-8"),
        maintype=maintype,
        subtype=subtype or "octet-stream",
        filename=filename,
    )


def build_message(sender: str, args: SendEmailArgs) -> EmailMessage:
    """Assemble the MIME message: plaintext body, HTML alternative, attachments."""
    message = EmailMessage()
    message["From"] = sender
    message["To"] = str(args.to)
    message["Subject"] = args.subject
    message.set_content(strip_html(args.message_content))
    message.add_alternative(args.message_content, subtype="html")

    for attachment in args.attachments or []:
        if attachment.generate_content is not None:
            # TODO: generate conversation summaries once a chat provider is wired into the mail tool
            _add_attachment(
                message,
                attachment.filename,
                GENERATED_CONTENT_PLACEHOLDER,
                attachment.content_type or "text/plain",
            )
        elif attachment.content:
            _add_attachment(message, attachment.filename, attachment.content, attachment.content_type)
    return message


SEND_EMAIL_INPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "to": {
            "type": "string",
            "format": "email",
            "description": "Recipient email address",
        },
        "subject": {
            "type": "string",
            "description": "Email subject line",
        },
        "message_content": {
            "type": "string",
            "description": "Email content (can be text or HTML)",
        },
        "attachments": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "filename": {"type": "string"},
                    "content": {"type": "string"},
                    "contentType": {"type": "string"},
                    "generateContent": {
                        "type": "object",
                        "properties": {
                            "type": {
                                "type": "string",
                                "enum": ["conversation_summary", "custom"],
                            },
                            "parameters": {
                                "type": "object",
                                "properties": {
                                    "format": {
                                        "type": "string",
                                        "enum": ["markdown", "text", "json"],
                                    },
                                    "style": {"type": "string"},
                                    "custom_prompt": {"type": "string"},
                                },
                            },
                        },
                    },
                },
                "required": ["filename"],
            },
        },
    },
    "required": ["to", "subject", "message_content"],
}


class EmailTool:
    """Tool adapter sending mail to recipients permitted by the pattern lists."""

    name = "send_email"
    description = "Send an email with optional attachments and generated content"
    input_schema = SEND_EMAIL_INPUT_SCHEMA

    def __init__(self, settings: EmailSettings, mailer: Mailer | None = None) -> None:
        self._settings = settings
        self._validator = EmailValidator(settings.allow_list, settings.block_list)
        self._mailer = mailer or SMTPMailer(settings)

    async def call(self, arguments: Any) -> ToolResult:
        try:
            args = SendEmailArgs.model_validate(arguments)
        except ValidationError as exc:
            raise ParseError(f"Invalid send_email arguments: {exc}") from exc

        if not self._validator.is_email_allowed(str(args.to)):
            return ToolResult.text(
                f"Email to {args.to} is not allowed by current configuration",
                is_error=True,
            )

        message = build_message(str(self._settings.from_address), args)
        try:
            await asyncio.to_thread(self._mailer.send, message)
        except (smtplib.SMTPException, OSError) as exc:
            _logger.warning("sending mail to %s failed: %s", args.to, exc)
            return ToolResult.text(f"Failed to send email: {exc}", is_error=True)

        _logger.info("sent mail to %s", args.to)
        return ToolResult.text(f"Email sent successfully to {args.to}")
