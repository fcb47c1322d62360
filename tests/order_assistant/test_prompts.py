"""Tests for system prompt selection and rendering."""

from order_assistant.config import Settings
from order_assistant.prompts import (
    FALLBACK_SYSTEM_PROMPT,
    get_system_prompt_template,
    render_system_prompt,
)


def make_settings(**overrides) -> Settings:
    """Settings built from keyword values only, ignoring any local .env."""
    values = {
        "mistral_api_key": "test-key",
        "supabase_url": "http://localhost:54321",
        "supabase_key": "anon",
        "id_establishment": "est-1",
        "langfuse_public_key": "",
        "langfuse_secret_key": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestTemplate:
    """The system prompt template should come from Langfuse or the built-in fallback."""

    def test_fallback_without_langfuse_keys(self):
        """Without Langfuse keys the built-in prompt is used."""
        assert get_system_prompt_template(make_settings()) == FALLBACK_SYSTEM_PROMPT

    def test_render_replaces_placeholders(self):
        """Every {{var}} placeholder is filled with session ids."""
        rendered = render_system_prompt(FALLBACK_SYSTEM_PROMPT, "chat-9", "est-9")
        assert 'id_chat = "chat-9"' in rendered
        assert 'id_establishment = "est-9"' in rendered
        assert "{{" not in rendered


class TestSettings:
    """Settings should supply defaults for everything but credentials."""

    def test_defaults(self):
        """Optional settings fall back to their defaults."""
        settings = make_settings()
        assert settings.debounce_delay == 2.0
        assert settings.mistral_model == "mistral-small-latest"
        assert settings.id_chat.startswith("chat-")
        assert settings.langfuse_enabled is False

    def test_langfuse_enabled_with_both_keys(self):
        """Tracing turns on only when both keys are present."""
        settings = make_settings(langfuse_public_key="pk", langfuse_secret_key="sk")
        assert settings.langfuse_enabled is True
