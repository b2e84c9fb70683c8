"""
ClauseGuard Backend — Google Gemini Service Implementation
===========================================================

What:  Concrete LLMService backed by the Google Gemini API.
How:   Builds a GenerativeModel per system instruction, calls
       generate_content_async with an explicit GenerationConfig, and logs
       latency and output size for every call.
Who:   Singleton `gemini_service`, shared by the analyzer and the classifier.

No retries, no circuit breaker and no client-side timeout are applied here:
a failed call surfaces immediately as LLMServiceError and the request fails
(analysis) or degrades (classification). Timeouts are whatever the SDK imposes.
"""

import logging
import time
import uuid
from typing import Optional

import google.generativeai as genai

from clauseguard.config import settings
from clauseguard.services.llm_base import LLMService, LLMServiceError

logger = logging.getLogger(__name__)


class GeminiService(LLMService):
    """
    Google Gemini implementation of single-turn text generation.

    Error Handling:
        SDK raises (network, auth, quota, safety block) → LLMServiceError
        Response with no text (blocked / empty candidates) → LLMServiceError
    """

    def __init__(self, model_name: Optional[str] = None):
        # The SDK keeps the API key in module-level state
        if settings.gemini_api_key:
            genai.configure(api_key=settings.gemini_api_key)

        self.model_name = model_name or settings.gemini_model
        self.model = genai.GenerativeModel(self.model_name)

        logger.info("GeminiService initialized with model=%s", self.model_name)

    def _model_for(self, system_instruction: Optional[str]):
        if not system_instruction:
            return self.model
        return genai.GenerativeModel(self.model_name, system_instruction=system_instruction)

    async def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.3,
        max_output_tokens: int = 800,
    ) -> str:
        """
        Send one prompt to Gemini and return the completion text.

        Flow:
            1. Pick the model (with system instruction if given)
            2. Call generate_content_async with the sampling config
            3. Read response.text (raises ValueError when the answer was blocked)
            4. Reject empty completions

        Raises:
            LLMServiceError: Any SDK failure or an empty completion.
        """
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        logger.info(
            "[%s] Gemini request: prompt=%d chars, temperature=%.2f, max_tokens=%d",
            request_id,
            len(prompt),
            temperature,
            max_output_tokens,
        )

        try:
            model = self._model_for(system_instruction)
            response = await model.generate_content_async(
                prompt,
                generation_config=genai.GenerationConfig(
                    temperature=temperature,
                    max_output_tokens=max_output_tokens,
                ),
            )
            text = response.text
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "[%s] Gemini call failed after %.0fms: %s",
                request_id,
                duration_ms,
                str(e),
            )
            raise LLMServiceError(
                f"Gemini request failed: {type(e).__name__}", request_id=request_id
            ) from e

        duration_ms = (time.time() - start_time) * 1000

        if not text or not text.strip():
            logger.error("[%s] Gemini returned an empty completion", request_id)
            raise LLMServiceError("Gemini returned no content", request_id=request_id)

        logger.info(
            "[%s] Gemini completed in %.0fms, returned %d chars",
            request_id,
            duration_ms,
            len(text),
        )
        return text

    async def health_check(self) -> bool:
        """
        Check if the Gemini API is reachable.

        How:     Lists available models (no token cost).
        Returns: True if reachable and authenticated, False otherwise.
        """
        try:
            model_names = [m.name for m in genai.list_models()]
            target = f"models/{self.model_name}"
            if target not in model_names:
                logger.warning("Configured model %s not found in available models", target)
            return True
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False


# ── Singleton Instance ────────────────────────────────────────────────────
gemini_service = GeminiService()
