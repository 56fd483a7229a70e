import asyncio
import smtplib
import unittest
from email.message import EmailMessage

from chat_bridge.config import Settings
from chat_bridge.errors import ConfigurationError, ParseError
from chat_bridge.mail import EmailPattern, EmailSettings, EmailTool, EmailValidator, parse_email_patterns
from chat_bridge.mail.sender import GENERATED_CONTENT_PLACEHOLDER
from chat_bridge.tools import ToolRegistry


class FakeMailer:
    def __init__(self, error: Exception | None = None) -> None:
        self.sent: list[EmailMessage] = []
        self.error = error

    def send(self, message: EmailMessage) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(message)


def wildcard(pattern: str) -> EmailPattern:
    return EmailPattern(pattern=pattern, type="wildcard")


class EmailPatternTests(unittest.TestCase):
    def test_parse_email_pattern(self) -> None:
        self.assertEqual(EmailValidator.parse_email_pattern("test@example.com"), EmailPattern(pattern="test@example.com", type="exact"))
        self.assertEqual(EmailValidator.parse_email_pattern("@example.com"), EmailPattern(pattern="example.com", type="domain"))
        self.assertEqual(EmailValidator.parse_email_pattern("example.com"), wildcard("example.com"))

    def test_no_lists_allows_everything(self) -> None:
        self.assertTrue(EmailValidator().is_email_allowed("test@example.com"))

    def test_allow_list(self) -> None:
        validator = EmailValidator(allow_list=[wildcard("example.com")])
        self.assertTrue(validator.is_email_allowed("test@example.com"))
        self.assertTrue(validator.is_email_allowed("test@sub.example.com"))
        self.assertFalse(validator.is_email_allowed("test@other.com"))

    def test_block_list(self) -> None:
        validator = EmailValidator(block_list=[wildcard("spam.com")])
        self.assertFalse(validator.is_email_allowed("test@spam.com"))
        self.assertFalse(validator.is_email_allowed("test@sub.spam.com"))
        self.assertTrue(validator.is_email_allowed("test@example.com"))

    def test_exact_and_domain(self) -> None:
        exact = EmailValidator(allow_list=[EmailPattern(pattern="test@example.com", type="exact")])
        self.assertTrue(exact.is_email_allowed("test@example.com"))
        self.assertFalse(exact.is_email_allowed("other@example.com"))

        domain = EmailValidator(allow_list=[EmailPattern(pattern="example.com", type="domain")])
        self.assertTrue(domain.is_email_allowed("test@example.com"))
        self.assertFalse(domain.is_email_allowed("test@sub.example.com"))
        self.assertFalse(domain.is_email_allowed("test@other.com"))

    def test_patterns_are_literal(self) -> None:
        validator = EmailValidator(allow_list=[EmailPattern(pattern="example.com", type="domain")])
        self.assertFalse(validator.is_email_allowed("test@exampleXcom"))

    def test_both_lists_rejected(self) -> None:
        with self.assertRaises(ConfigurationError) as ctx:
            EmailValidator([wildcard("example.com")], [wildcard("spam.com")])
        self.assertIn("Cannot specify both allow_list and block_list", str(ctx.exception))

    def test_parse_email_patterns(self) -> None:
        self.assertIsNone(parse_email_patterns(None))
        self.assertIsNone(parse_email_patterns("  "))
        self.assertEqual(
            parse_email_patterns("example.com, @trusted.com,specific@example.com"),
            [
                wildcard("example.com"),
                EmailPattern(pattern="trusted.com", type="domain"),
                EmailPattern(pattern="specific@example.com", type="exact"),
            ],
        )
        self.assertEqual(
            parse_email_patterns('["@trusted.com", {"pattern": "spam.com", "type": "wildcard"}]'),
            [EmailPattern(pattern="trusted.com", type="domain"), wildcard("spam.com")],
        )
        with self.assertRaises(ConfigurationError):
            parse_email_patterns("[not json")
        with self.assertRaises(ConfigurationError):
            parse_email_patterns('[{"pattern": "x", "type": "regex"}]')


class EmailSettingsTests(unittest.TestCase):
    def test_service_resolves_smtp_endpoint(self) -> None:
        config = Settings(
            _env_file=None,
            email_service="gmail",
            email_from="bot@example.com",
            email_username="bot@example.com",
            email_password="secret",
            email_allow_list="example.com",
            email_block_list=None,
        )
        email_settings = EmailSettings.from_settings(config)
        self.assertEqual((email_settings.host, email_settings.port), ("smtp.gmail.com", 465))
        self.assertEqual(email_settings.allow_list, [wildcard("example.com")])
        self.assertIsNone(email_settings.block_list)

    def test_missing_values(self) -> None:
        config = Settings(
            _env_file=None,
            email_service=None,
            email_host=None,
            email_from=None,
            email_username="bot",
            email_password="secret",
        )
        with self.assertRaises(ConfigurationError) as ctx:
            EmailSettings.from_settings(config)
        self.assertIn("EMAIL_SERVICE, EMAIL_FROM", str(ctx.exception))


class EmailToolTests(unittest.TestCase):
    def make_tool(self, mailer: FakeMailer, **lists) -> EmailTool:
        settings = EmailSettings(
            host="smtp.example.com",
            port=587,
            from_address="bot@example.com",
            username="bot",
            password="secret",
            **lists,
        )
        return EmailTool(settings, mailer=mailer)

    def test_sends_html_with_plaintext_alternative(self) -> None:
        mailer = FakeMailer()
        tool = self.make_tool(mailer)
        result = asyncio.run(
            tool.call(
                {
                    "to": "recipient@example.com",
                    "subject": "Report",
                    "message_content": "<p>Hello <b>there</b></p>",
                    "attachments": [
                        {"filename": "notes.txt", "content": "some notes"},
                        {"filename": "summary.md", "generateContent": {"type": "conversation_summary"}},
                        {"filename": "empty.bin"},
                    ],
                }
            )
        )

        self.assertFalse(result.is_error)
        self.assertEqual(result.content[0].text, "Email sent successfully to recipient@example.com")

        message = mailer.sent[0]
        self.assertEqual(message["To"], "recipient@example.com")
        self.assertEqual(message["From"], "bot@example.com")
        self.assertEqual(message["Subject"], "Report")
        self.assertEqual(message.get_body(preferencelist=("plain",)).get_content().strip(), "Hello there")
        self.assertIn("<b>there</b>", message.get_body(preferencelist=("html",)).get_content())

        attachments = list(message.iter_attachments())
        self.assertEqual([a.get_filename() for a in attachments], ["notes.txt", "summary.md"])
        self.assertEqual(attachments[1].get_content_type(), "text/plain")
        self.assertIn(GENERATED_CONTENT_PLACEHOLDER, attachments[1].get_content())

    def test_recipient_not_allowed(self) -> None:
        mailer = FakeMailer()
        tool = self.make_tool(mailer, allow_list=[wildcard("example.com")])
        result = asyncio.run(tool.call({"to": "someone@other.com", "subject": "s", "message_content": "m"}))
        self.assertTrue(result.is_error)
        self.assertEqual(result.content[0].text, "Email to someone@other.com is not allowed by current configuration")
        self.assertEqual(mailer.sent, [])

    def test_delivery_failure(self) -> None:
        tool = self.make_tool(FakeMailer(error=smtplib.SMTPAuthenticationError(535, b"bad credentials")))
        result = asyncio.run(tool.call({"to": "recipient@example.com", "subject": "s", "message_content": "m"}))
        self.assertTrue(result.is_error)
        self.assertTrue(result.content[0].text.startswith("Failed to send email:"))

    def test_registered_as_tool(self) -> None:
        mailer = FakeMailer()
        registry = ToolRegistry([self.make_tool(mailer)])
        self.assertEqual(registry.list_tools()[0]["inputSchema"]["required"], ["to", "subject", "message_content"])
        result = asyncio.run(
            registry.handle_tool_call("send_email", {"to": "a@example.com", "subject": "s", "message_content": "m"})
        )
        self.assertFalse(result.is_error)
        self.assertEqual(len(mailer.sent), 1)

    def test_invalid_arguments(self) -> None:
        tool = self.make_tool(FakeMailer())
        with self.assertRaises(ParseError):
            asyncio.run(tool.call({"to": "not-an-address", "subject": "s", "message_content": "m"}))
        with self.assertRaises(ParseError):
            asyncio.run(tool.call({"to": "recipient@example.com"}))

    def test_line_breaks_in_headers_rejected(self) -> None:
        mailer = FakeMailer()
        tool = self.make_tool(mailer)
        with self.assertRaises(ParseError):
            asyncio.run(
                tool.call({"to": "recipient@example.com", "subject": "Q3 report\nDraft", "message_content": "m"})
            )
        with self.assertRaises(ParseError):
            asyncio.run(
                tool.call(
                    {
                        "to": "recipient@example.com",
                        "subject": "Q3 report",
                        "message_content": "m",
                        "attachments": [{"filename": "notes.txt\r\nBcc: x@example.com", "content": "n"}],
                    }
                )
            )
        self.assertEqual(mailer.sent, [])


if __name__ == "__main__":
    unittest.main()
