"""Recipient allow/block list matching."""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from chat_bridge.errors import ConfigurationError

PatternType = Literal["exact", "domain", "wildcard"]


class EmailPattern(BaseModel):
    """One recipient pattern.

    ``exact`` matches a whole address, ``domain`` matches addresses at exactly
    that domain and ``wildcard`` matches any domain ending with the pattern.
    """

    model_config = ConfigDict(frozen=True)

    pattern: str
    type: PatternType

    def to_regex(self) -> re.Pattern[str]:
        escaped = re.escape(self.pattern)
        if self.type == "exact":
            return re.compile(f"^{escaped}$")
        if self.type == "domain":
            return re.compile(f"@{escaped}$")
        return re.compile(f"@[^@]*{escaped}$")


class EmailValidator:
    """Decide whether a recipient may be mailed.

    With neither list every address is allowed. An allow list admits only
    matching addresses; a block list rejects matching ones. Both at once is a
    configuration error.
    """

    def __init__(
        self,
        allow_list: Sequence[EmailPattern] | None = None,
        block_list: Sequence[EmailPattern] | None = None,
    ) -> None:
        if allow_list is not None and block_list is not None:
            raise ConfigurationError("Cannot specify both allow_list and block_list")
        self._allow = [p.to_regex() for p in allow_list] if allow_list is not None else None
        self._block = [p.to_regex() for p in block_list] if block_list is not None else None

    def is_email_allowed(self, email: str) -> bool:
        if self._allow is not None:
            return any(regex.search(email) for regex in self._allow)
        if self._block is not None:
            return not any(regex.search(email) for regex in self._block)
        return True

    @staticmethod
    def parse_email_pattern(text: str) -> EmailPattern:
        """``user@host`` is exact, ``@host`` is a domain, anything else a wildcard."""
        if "@" in text:
            if not text.startswith("@"):
                return EmailPattern(pattern=text, type="exact")
            return EmailPattern(pattern=text[1:], type="domain")
        return EmailPattern(pattern=text, type="wildcard")


def parse_email_patterns(raw: str | None) -> list[EmailPattern] | None:
    """Parse a pattern list from its environment form.

    Accepts a JSON array of pattern strings or ``{"pattern", "type"}``
    objects, or a comma separated list of pattern strings.
    """
    if raw is None or not raw.strip():
        return None

    text = raw.strip()
    if not text.startswith("["):
        return [EmailValidator.parse_email_pattern(p.strip()) for p in text.split(",") if p.strip()]

    try:
        items = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Failed to parse email patterns: {exc}") from exc

    patterns = []
    try:
        for item in items:
            if isinstance(item, str):
                patterns.append(EmailValidator.parse_email_pattern(item))
            else:
                patterns.append(EmailPattern.model_validate(item))
    except ValidationError as exc:
        raise ConfigurationError(f"Failed to parse email patterns: {exc}") from exc
    return patterns
