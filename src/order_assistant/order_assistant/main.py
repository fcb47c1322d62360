"""CLI entry point for the ordering assistant.

Usage:
    order-assistant
    python -m order_assistant.main
"""

import sys

from loguru import logger
from pydantic import ValidationError

from .config import get_settings
from .conversation import Conversation
from .graph import get_chat_model
from .logging import setup_logging
from .prompts import get_system_prompt_template
from .session import OrderSession
from .store import SupabaseStore

EXIT_COMMANDS = ("salir", "exit", "quit")


def _create_langfuse_handler(settings):
    """Create a Langfuse callback handler if credentials are configured.

    Returns None if Langfuse is not configured.
    """
    if not settings.langfuse_enabled:
        return None

    from langfuse import Langfuse
    from langfuse.langchain import CallbackHandler

    # Initialize the Langfuse singleton client with credentials
    Langfuse(
        public_key=settings.langfuse_public_key,
        secret_key=settings.langfuse_secret_key,
        host=settings.langfuse_base_url,
    )

    return CallbackHandler()


def _print_reply(text: str) -> None:
    print(f"Assistant: {text}")
    print()


def main() -> None:
    """Run the ordering assistant CLI."""
    try:
        settings = get_settings()
    except ValidationError as exc:
        setup_logging()
        missing = ", ".join(".".join(str(p) for p in e["loc"]) for e in exc.errors())
        logger.error("Missing or invalid configuration: {}", missing)
        print("Configuration error: set MISTRAL_API_KEY, SUPABASE_URL, SUPABASE_KEY "
              "and ID_ESTABLISHMENT in the environment or .env")
        sys.exit(1)

    setup_logging(level=settings.log_level, chat_id=settings.id_chat)
    logger.info("Starting ordering assistant CLI")

    session = OrderSession(
        chat_id=settings.id_chat,
        establishment_id=settings.id_establishment,
    )

    config: dict = {}
    langfuse_handler = _create_langfuse_handler(settings)
    if langfuse_handler:
        config["callbacks"] = [langfuse_handler]
        config["metadata"] = {"langfuse_session_id": session.chat_id}
        logger.info("Langfuse tracing enabled (session_id={})", session.chat_id)
    else:
        logger.info("Langfuse tracing disabled (no credentials)")

    conversation = Conversation(
        session=session,
        store=SupabaseStore.from_settings(settings),
        llm=get_chat_model(),
        prompt_template=get_system_prompt_template(settings),
        on_reply=_print_reply,
        debounce_delay=settings.debounce_delay,
        config=config,
    )
    logger.info("Session started (chat_id={})", session.chat_id)

    print("-" * 50)
    print("Welcome to the ordering assistant!")
    print(f'Type "{EXIT_COMMANDS[0]}" to finish.')
    print("-" * 50)
    print()

    conversation.start()

    while not conversation.is_closed:
        try:
            user_input = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not user_input:
            continue
        if user_input.lower() in EXIT_COMMANDS:
            break

        conversation.submit(user_input)
        print(f"Waiting {settings.debounce_delay:g}s for more messages...")
        print()

    conversation.close()
    print("Goodbye! Come back soon!")

    if langfuse_handler:
        from langfuse import get_client

        get_client().flush()

    logger.info("Chat session ended (chat_id={})", session.chat_id)


if __name__ == "__main__":
    main()
