"""System prompt for the ordering assistant.

The template is fetched from Langfuse prompt management and compiled with
runtime variables. The built-in template below is used when Langfuse is not
configured or unreachable, and is what scripts/seed_langfuse_prompts.py
uploads.
"""

from langfuse import Langfuse
from loguru import logger

from .config import Settings

PROMPT_NAME = "order-assistant/system"

FALLBACK_SYSTEM_PROMPT = """\
You are the ordering assistant of a small food establishment.

FIXED CONTEXT:
- id_chat = "{{id_chat}}"
- id_establishment = "{{id_establishment}}"

Before offering products or prices:
1. Call get_establishment_snapshot with id_establishment = "{{id_establishment}}".
2. Use ONLY the ids, compositions and prices from the snapshot.

ORDERING A MENU (very important):
- Every menu has a "composition" (e.g. {"main": 1, "side": 1, "drink": 1})
  and "options_by_category".
- ASK for every required category until all of them are complete.
- When asking, LIST the options of that category from
  options_by_category[<category>] with their names.
- Do NOT confirm a menu before collecting every choice.
- Keep the chosen ids for "selected_products", respecting the composition.
- For menus NEVER use the name as id_menu (nor "MENU_<name>"). ALWAYS use the
  menu "id" field from the snapshot.

FLOW:
A) Snapshot.
B) Collect and confirm the order.
C) add_order with the fixed id_chat and id_establishment.
D) add_details_order with the exact ids.

RULES:
- Do not invent items or prices.
- If is_pickup is false, ask for the delivery address.
- Confirm EVERYTHING before processing.
- If a tool returns "success": false, explain the problem to the customer in
  plain words and ask for what is missing.

PRIVACY:
- NEVER show internal ids (products, menus, orders, id_chat) to the customer.
- Use readable names and confirm the order without any internal identifier.\
"""

OPENING_MESSAGE = "Please check the current state of the establishment before we start."


def get_system_prompt_template(settings: Settings) -> str:
    """Fetch the system prompt template from Langfuse.

    Falls back to FALLBACK_SYSTEM_PROMPT if Langfuse is unavailable
    (no API keys, network error, prompt not seeded yet).
    """
    if not settings.langfuse_enabled:
        logger.info("Langfuse keys not configured, using fallback system prompt")
        return FALLBACK_SYSTEM_PROMPT

    try:
        langfuse = Langfuse(
            public_key=settings.langfuse_public_key,
            secret_key=settings.langfuse_secret_key,
            host=settings.langfuse_base_url,
        )
        prompt = langfuse.get_prompt(PROMPT_NAME, label="production")
        logger.info("Fetched system prompt from Langfuse: {}", PROMPT_NAME)
        if isinstance(prompt.prompt, list):
            for msg in prompt.prompt:
                if msg.get("role") == "system":
                    return msg["content"]
        return prompt.prompt
    except Exception:
        logger.opt(exception=True).warning("Failed to fetch prompt from Langfuse, using fallback")
        return FALLBACK_SYSTEM_PROMPT


def render_system_prompt(template: str, chat_id: str, establishment_id: str) -> str:
    """Replace the {{var}} placeholders of a prompt template."""
    return template.replace("{{id_chat}}", chat_id).replace(
        "{{id_establishment}}", establishment_id
    )
