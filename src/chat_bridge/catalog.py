"""Fixed model catalogs mapping friendly names to provider wire identifiers."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from chat_bridge.errors import ProviderError


class ModelCatalog(Mapping[str, str]):
    """Closed, read-only table of the models a provider exposes."""

    def __init__(self, provider: str, models: Mapping[str, str], default: str) -> None:
        if default not in models:
            raise ValueError(f"default model '{default}' is not in the {provider} catalog")
        self.provider = provider
        self.default = default
        self._models = MappingProxyType(dict(models))

    def __getitem__(self, name: str) -> str:
        return self._models[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def names(self) -> list[str]:
        return list(self._models)

    def wire_ids(self) -> set[str]:
        return set(self._models.values())

    def resolve(self, name: str) -> str:
        """Return the wire identifier for ``name`` or fail with ``invalid_model``."""
        try:
            return self._models[name]
        except KeyError:
            raise ProviderError(
                self.provider,
                f"Unsupported model: {name}",
                code="invalid_model",
                status=400,
            ) from None


OPENAI_MODELS = ModelCatalog(
    "openai",
    {
        "gpt-4o": "gpt-4-turbo-preview",
        "gpt-4o-mini": "gpt-3.5-turbo",
        "o1": "gpt-4-turbo-preview",
        "o1-mini": "gpt-3.5-turbo",
        "o3-mini": "gpt-3.5-turbo",
    },
    default="gpt-4o",
)

ANTHROPIC_MODELS = ModelCatalog(
    "anthropic",
    {
        "claude-3o": "claude-3-opus-20240229",
        "claude-3.5s": "claude-3-sonnet-20241022",
        "claude-3.5h": "claude-3-haiku-20240307",
    },
    default="claude-3o",
)

GEMINI_MODELS = ModelCatalog(
    "gemini",
    {
        "gemini-1.5-flash": "gemini-1.5-pro",
        "gemini-2.0-flash-exp": "gemini-2.0-pro",
    },
    default="gemini-1.5-flash",
)
