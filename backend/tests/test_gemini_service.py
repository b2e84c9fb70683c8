"""
ClauseGuard Backend — Gemini Service Unit Tests (Mocked)
=========================================================

What:  Tests for GeminiService with the Google Generative AI SDK patched out.
How:   Patches the genai module so no network call is made.

What we test:
    ✅ Successful generation returns the completion text
    ✅ System instruction and sampling config forwarded to the SDK
    ✅ SDK exception / blocked response / empty completion → LLMServiceError
    ✅ Health check returns a bool and never raises
    ❌ Real API calls (use integration tests for that)
"""

from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import pytest

from clauseguard.services.gemini_service import GeminiService
from clauseguard.services.llm_base import LLMServiceError


def _mock_model(text="Resposta do modelo", error=None):
    model = MagicMock()
    if error is not None:
        model.generate_content_async = AsyncMock(side_effect=error)
    else:
        response = MagicMock()
        response.text = text
        model.generate_content_async = AsyncMock(return_value=response)
    return model


class TestGeminiServiceMocked:

    @pytest.mark.asyncio
    async def test_generate_success(self):
        with patch("clauseguard.services.gemini_service.genai") as mock_genai:
            model = _mock_model("Cláusula 1: risco.")
            mock_genai.GenerativeModel.return_value = model

            service = GeminiService()
            result = await service.generate("prompt", temperature=0.3, max_output_tokens=800)

            assert result == "Cláusula 1: risco."
            mock_genai.GenerationConfig.assert_called_with(temperature=0.3, max_output_tokens=800)

    @pytest.mark.asyncio
    async def test_system_instruction_builds_dedicated_model(self):
        with patch("clauseguard.services.gemini_service.genai") as mock_genai:
            mock_genai.GenerativeModel.return_value = _mock_model()

            service = GeminiService(model_name="gemini-test")
            await service.generate("prompt", system_instruction="Seja breve.")

            mock_genai.GenerativeModel.assert_called_with(
                "gemini-test", system_instruction="Seja breve."
            )

    @pytest.mark.asyncio
    async def test_sdk_error_wrapped(self):
        with patch("clauseguard.services.gemini_service.genai") as mock_genai:
            mock_genai.GenerativeModel.return_value = _mock_model(error=RuntimeError("403"))

            service = GeminiService()
            with pytest.raises(LLMServiceError) as exc_info:
                await service.generate("prompt")

            assert exc_info.value.request_id

    @pytest.mark.asyncio
    async def test_blocked_response_wrapped(self):
        """response.text raises ValueError when the candidate was blocked."""
        with patch("clauseguard.services.gemini_service.genai") as mock_genai:
            response = MagicMock()
            type(response).text = PropertyMock(side_effect=ValueError("blocked"))
            model = MagicMock()
            model.generate_content_async = AsyncMock(return_value=response)
            mock_genai.GenerativeModel.return_value = model

            service = GeminiService()
            with pytest.raises(LLMServiceError):
                await service.generate("prompt")

    @pytest.mark.asyncio
    async def test_empty_completion_rejected(self):
        with patch("clauseguard.services.gemini_service.genai") as mock_genai:
            mock_genai.GenerativeModel.return_value = _mock_model("   ")

            service = GeminiService()
            with pytest.raises(LLMServiceError, match="no content"):
                await service.generate("prompt")

    @pytest.mark.asyncio
    async def test_health_check_returns_bool(self):
        with patch("clauseguard.services.gemini_service.genai") as mock_genai:
            mock_genai.list_models.return_value = [MagicMock()]

            service = GeminiService()
            assert await service.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_failure_returns_false(self):
        with patch("clauseguard.services.gemini_service.genai") as mock_genai:
            mock_genai.list_models.side_effect = RuntimeError("network down")

            service = GeminiService()
            assert await service.health_check() is False
