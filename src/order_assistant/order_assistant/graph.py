"""LangGraph model-turn graph.

2-node loop: assistant -> tools -> assistant, ending when the model answers
without tool calls. One graph is built per conversation so the tools node
dispatches against that conversation's session.
"""

import json
from functools import lru_cache

from langchain_core.language_models import LanguageModelInput
from langchain_core.messages import AIMessage, BaseMessage, SystemMessage, ToolMessage
from langchain_core.runnables import Runnable
from langchain_mistralai import ChatMistralAI
from langgraph.graph import END, START, MessagesState, StateGraph
from langgraph.graph.state import CompiledStateGraph
from loguru import logger

from .config import get_settings
from .dispatch import ToolDispatcher
from .tools import TOOL_SCHEMAS

ChatModel = Runnable[LanguageModelInput, BaseMessage]


@lru_cache(maxsize=1)
def get_chat_model() -> ChatModel:
    """Create and return the Mistral chat model with the order tools bound.

    Lazy-initialized so importing this module does not require
    MISTRAL_API_KEY (important for tests).
    """
    settings = get_settings()
    logger.info(
        "Initializing LLM: model={}, temperature={}",
        settings.mistral_model,
        settings.mistral_temperature,
    )
    llm = ChatMistralAI(
        model=settings.mistral_model,
        temperature=settings.mistral_temperature,
        api_key=settings.mistral_api_key,
    )
    return llm.bind_tools(TOOL_SCHEMAS)


def should_continue(state: MessagesState) -> str:
    """Route to "tools" while the model keeps requesting tool calls."""
    last_message = state["messages"][-1]
    if isinstance(last_message, AIMessage) and last_message.tool_calls:
        logger.debug("should_continue -> tools ({} calls)", len(last_message.tool_calls))
        return "tools"
    logger.debug("should_continue -> respond")
    return "respond"


def build_graph(llm: ChatModel, dispatcher: ToolDispatcher, system_prompt: str) -> CompiledStateGraph:
    """Compile the turn graph for one conversation.

    Args:
        llm: Chat model with the order tools already bound.
        dispatcher: Executes tool calls against the conversation session.
        system_prompt: Rendered system prompt prepended on every model call.
    """

    def assistant(state: MessagesState) -> dict:
        messages = [SystemMessage(content=system_prompt)] + list(state["messages"])
        logger.debug("Invoking assistant LLM with {} messages", len(messages))
        response = llm.invoke(messages)
        if getattr(response, "tool_calls", None):
            logger.info(
                "Assistant requesting tools: {}",
                ", ".join(tc["name"] for tc in response.tool_calls),
            )
        else:
            logger.info("Assistant responding directly (no tool calls)")
        return {"messages": [response]}

    def tools(state: MessagesState) -> dict:
        # Calls run in order: add_details_order may rely on an order opened
        # by an earlier add_order in the same batch.
        last_message = state["messages"][-1]
        results = []
        for tool_call in last_message.tool_calls:
            payload = dispatcher.dispatch(tool_call["name"], tool_call["args"])
            results.append(
                ToolMessage(
                    content=json.dumps(payload, default=str),
                    name=tool_call["name"],
                    tool_call_id=tool_call["id"],
                )
            )
        return {"messages": results}

    builder = StateGraph(MessagesState)
    builder.add_node("assistant", assistant)
    builder.add_node("tools", tools)

    builder.add_edge(START, "assistant")
    builder.add_conditional_edges(
        "assistant",
        should_continue,
        {
            "tools": "tools",
            "respond": END,
        },
    )
    builder.add_edge("tools", "assistant")
    return builder.compile()
