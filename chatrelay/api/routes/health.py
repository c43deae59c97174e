"""
Health check endpoint for the chat relay.
"""

import socket
import logging
from typing import Dict, Any

from fastapi import APIRouter, Depends, status

from chatrelay.api.dependencies import get_settings
from chatrelay.settings import Settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="""
    Quick health check endpoint that returns system status and configuration.

    **Use Cases:**
    - Verify API is running
    - Check which LLM provider is the default and which credentials are set
    - Monitor system availability

    **Example Response:**
    ```json
    {
      "status": "healthy",
      "provider": "together",
      "model": "meta-llama/Llama-3.3-70B-Instruct-Turbo",
      "search": {"web": true, "answer": false},
      "socket": "chatrelay-container"
    }
    ```
    """,
)
async def health(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    """Returns basic system health status."""
    llm = settings.llm
    if llm.provider == "openrouter":
        model = llm.openrouter_model
    else:
        model = llm.together_model

    return {
        "status": "healthy",
        "provider": llm.provider,
        "model": model,
        "providers_configured": sorted(
            name for name, key in llm.api_keys().items() if key
        ),
        "search": {
            "web": bool(settings.search.tavily_api_key),
            "answer": bool(settings.search.perplexity_api_key),
        },
        "socket": socket.gethostname(),
    }
