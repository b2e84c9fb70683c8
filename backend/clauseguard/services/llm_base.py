"""
ClauseGuard Backend — Abstract LLM Service Interface
=====================================================

What:  Abstract base class defining the contract for text-generation providers.
How:   Concrete implementations inherit from LLMService and implement generate().
Who:   Called by ClauseAnalyzer and ClauseClassifier; each supplies its own
       prompt, system instruction and sampling parameters.
"""

from abc import ABC, abstractmethod
from typing import Optional


class LLMService(ABC):
    """
    Abstract interface for single-turn text generation.

    Contract:
        - generate() sends one prompt and returns the model's raw text
        - Implementations never retry
        - Provider errors and empty completions raise LLMServiceError
        - Callers translate LLMServiceError into their own domain error
    """

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.3,
        max_output_tokens: int = 800,
    ) -> str:
        """
        Run a single completion.

        Args:
            prompt: User-turn content.
            system_instruction: Optional persona / rules for the model.
            temperature: Sampling randomness (low = more deterministic).
            max_output_tokens: Hard ceiling on the completion length.

        Returns:
            The model's text, unmodified. Never empty.

        Raises:
            LLMServiceError: Provider call failed or returned no content.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight reachability test. Returns True if the provider answers."""
        ...


class LLMServiceError(Exception):
    """Provider-level failure. Translated by callers into AnalysisError / ClassificationError."""

    def __init__(self, message: str, request_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.request_id = request_id
