import logging
from fastapi import APIRouter, Depends
from openai import AsyncOpenAI
from app.common import get_current_user
from app.core.errors import AppError, InternalError
from app.schemas.llm_chat import SuggestRepliesRequest, SuggestRepliesResponse, TranslateRequest, TranslateResponse
from app.services.llm_chat_service import get_llm_client, suggest_replies, translate_text

# Configure logger for LLM endpoints
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/llm", tags=["LLM"], dependencies=[Depends(get_current_user)])

@router.post("/suggest-replies", response_model=SuggestRepliesResponse)
async def suggest_replies_api(
    request: SuggestRepliesRequest,
    client: AsyncOpenAI = Depends(get_llm_client)
):
    """
    Suggest replies to the latest message of a conversation.

    Args:
        request: Conversation turns plus the number of suggestions and tone
        client: OpenAI client dependency

    Returns:
        SuggestRepliesResponse: the suggested replies
    """
    logger.info(f"Suggesting {request.count} replies for a {len(request.messages)}-turn conversation")
    try:
        suggestions = await suggest_replies(client, request.messages, request.count, request.tone)
        return SuggestRepliesResponse(suggestions=suggestions)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error suggesting replies: {str(e)}", exc_info=True)
        raise InternalError()

@router.post("/translate", response_model=TranslateResponse)
async def translate_api(
    request: TranslateRequest,
    client: AsyncOpenAI = Depends(get_llm_client)
):
    try:
        translation = await translate_text(client, request.text, request.target_language, request.source_language)
        return TranslateResponse(translation=translation)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error translating text: {str(e)}", exc_info=True)
        raise InternalError()
