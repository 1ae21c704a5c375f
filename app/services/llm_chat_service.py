import logging
from typing import List, Optional

from openai import AsyncOpenAI, OpenAIError, AuthenticationError, RateLimitError

from app.config import settings
from app.core.errors import AppError, InternalError, ResourceExhaustedError, UnavailableError
from app.schemas.llm_chat import ChatTurn, Sender

# Configure logger for this module
logger = logging.getLogger(__name__)

_client: Optional[AsyncOpenAI] = None

def get_llm_client() -> AsyncOpenAI:
    """Shared AsyncOpenAI client, created on first use."""
    global _client
    if _client is None:
        _client = AsyncOpenAI(api_key=settings.openai_api_key.get_secret_value())
    return _client

def _map_openai_error(e: OpenAIError) -> AppError:
    if isinstance(e, AuthenticationError):
        logger.error("Failed to authenticate with LLM service, check the API key")
        return InternalError("AI service is misconfigured")
    if isinstance(e, RateLimitError):
        return ResourceExhaustedError("Rate limit exceeded for AI service. Please try again later.")
    return UnavailableError("AI service error, please try again later")

async def _complete(client: AsyncOpenAI, messages: List[dict], temperature: float) -> str:
    try:
        response = await client.chat.completions.create(
            model=settings.openai_model,
            messages=messages,
            temperature=temperature,
        )
    except OpenAIError as e:
        logger.warning(f"LLM request failed: {e}")
        raise _map_openai_error(e) from e
    return (response.choices[0].message.content or "").strip()

def _clean_suggestion(line: str) -> str:
    # Models like to number or bullet their lists
    line = line.strip().lstrip("-*•").strip()
    if len(line) > 2 and line[0].isdigit() and line[1] in ".)":
        line = line[2:].strip()
    return line.strip('"').strip()

async def suggest_replies(
    client: AsyncOpenAI,
    turns: List[ChatTurn],
    count: int = 3,
    tone: Optional[str] = None,
) -> List[str]:
    """
    Suggest short replies to the latest message of a conversation.

    Args:
        client: OpenAI client
        turns: Conversation so far, oldest first
        count: Number of suggestions wanted
        tone: Optional tone hint such as "friendly" or "formal"

    Returns:
        List[str]: At most ``count`` non-empty suggestions
    """
    system = (
        f"You help the user reply in a chat. Write {count} short, distinct replies "
        "the user could send next. Put each reply on its own line with no numbering."
    )
    if tone:
        system += f" Use a {tone} tone."

    messages = [{"role": "system", "content": system}]
    for turn in turns:
        role = "assistant" if turn.sender == Sender.me else "user"
        messages.append({"role": role, "content": turn.content})

    content = await _complete(client, messages, temperature=0.8)
    suggestions = [_clean_suggestion(line) for line in content.splitlines()]
    return [s for s in suggestions if s][:count]

async def translate_text(
    client: AsyncOpenAI,
    text: str,
    target_language: str,
    source_language: Optional[str] = None,
) -> str:
    source = f"from {source_language} " if source_language else ""
    messages = [
        {
            "role": "system",
            "content": (
                f"Translate the user's message {source}into {target_language}. "
                "Reply with the translation only."
            ),
        },
        {"role": "user", "content": text},
    ]
    return await _complete(client, messages, temperature=0)
