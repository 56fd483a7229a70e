import unittest

from chat_bridge.catalog import ANTHROPIC_MODELS, GEMINI_MODELS, OPENAI_MODELS, ModelCatalog
from chat_bridge.errors import ProviderError
from chat_bridge.prompts import TASK_PROMPTS, build_system_prompt, is_reasoning_model

CATALOGS = (OPENAI_MODELS, ANTHROPIC_MODELS, GEMINI_MODELS)


class ModelCatalogTests(unittest.TestCase):
    def test_resolved_ids_belong_to_catalog(self) -> None:
        for catalog in CATALOGS:
            for name in catalog.names():
                wire_id = catalog.resolve(name)
                self.assertIn(wire_id, catalog.wire_ids())
                self.assertEqual(catalog.resolve(name), wire_id)

    def test_unknown_name_fails(self) -> None:
        for catalog in CATALOGS:
            with self.assertRaises(ProviderError) as ctx:
                catalog.resolve("unknown-model")
            self.assertEqual(ctx.exception.code, "invalid_model")
            self.assertEqual(ctx.exception.status, 400)
            self.assertEqual(ctx.exception.provider, catalog.provider)

    def test_wire_id_is_not_a_name(self) -> None:
        with self.assertRaises(ProviderError):
            ANTHROPIC_MODELS.resolve("claude-3-opus-20240229")

    def test_defaults(self) -> None:
        self.assertEqual(OPENAI_MODELS.resolve(OPENAI_MODELS.default), "gpt-4-turbo-preview")
        self.assertEqual(ANTHROPIC_MODELS.resolve(ANTHROPIC_MODELS.default), "claude-3-opus-20240229")
        self.assertEqual(GEMINI_MODELS.resolve(GEMINI_MODELS.default), "gemini-1.5-pro")

    def test_catalog_is_read_only(self) -> None:
        with self.assertRaises(TypeError):
            OPENAI_MODELS["gpt-5"] = "gpt-5"  # type: ignore[index]

    def test_default_must_be_listed(self) -> None:
        with self.assertRaises(ValueError):
            ModelCatalog("acme", {"a": "a-1"}, default="b")


class SystemPromptTests(unittest.TestCase):
    def test_template_and_custom_text(self) -> None:
        self.assertEqual(
            build_system_prompt("analysis", "Focus on cost"),
            TASK_PROMPTS["analysis"] + "\n\nAdditional Instructions:\nFocus on cost",
        )

    def test_custom_text_only(self) -> None:
        self.assertEqual(build_system_prompt(None, "Focus on cost"), "Focus on cost")

    def test_template_only(self) -> None:
        self.assertEqual(build_system_prompt("writing", None), TASK_PROMPTS["writing"])

    def test_neither(self) -> None:
        self.assertIsNone(build_system_prompt(None, None))
        self.assertIsNone(build_system_prompt(None, ""))

    def test_reasoning_models(self) -> None:
        self.assertTrue(is_reasoning_model("o1"))
        self.assertTrue(is_reasoning_model("o3-mini"))
        self.assertFalse(is_reasoning_model("gpt-4o"))


if __name__ == "__main__":
    unittest.main()
