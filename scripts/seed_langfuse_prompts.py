"""One-time script to create the assistant's system prompt in Langfuse.

Run from project root:
    python scripts/seed_langfuse_prompts.py

This creates the prompt with the 'production' label.
If the prompt already exists, Langfuse will create a new version.
"""

from langfuse import Langfuse

from order_assistant.config import get_settings
from order_assistant.prompts import FALLBACK_SYSTEM_PROMPT, PROMPT_NAME


def main() -> None:
    settings = get_settings()
    if not settings.langfuse_enabled:
        raise SystemExit("Langfuse credentials not configured in .env")

    langfuse = Langfuse(
        public_key=settings.langfuse_public_key,
        secret_key=settings.langfuse_secret_key,
        host=settings.langfuse_base_url,
    )
    langfuse.create_prompt(
        name=PROMPT_NAME,
        type="chat",
        prompt=[{"role": "system", "content": FALLBACK_SYSTEM_PROMPT}],
        config={"model": settings.mistral_model, "temperature": settings.mistral_temperature},
        labels=["production"],
    )
    langfuse.flush()
    print(f"Created prompt: {PROMPT_NAME} ('production' label)")


if __name__ == "__main__":
    main()
