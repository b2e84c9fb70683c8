"""
ClauseGuard Backend — Clause Classifier
========================================

What:  Splits a free-text clause analysis into "safe" and "risky" lists.
How:   Second LLM prompt that requests JSON only
       (`{"seguras": [{"titulo", "resumo"}], "riscos": [...]}`), parsed with the
       lenient extractor and normalized into ClauseSummary entries.
Who:   Called in-process by AnalysisService (soft failure) and exposed through
       POST /api/resumir-clausulas (hard failure).
"""

import logging
from typing import Any, List, Optional

from clauseguard.config import settings
from clauseguard.exceptions import ClassificationError
from clauseguard.schemas.analysis import ClauseClassification, ClauseSummary
from clauseguard.services.gemini_service import gemini_service
from clauseguard.services.json_extraction import extract_json_object
from clauseguard.services.llm_base import LLMService, LLMServiceError

logger = logging.getLogger(__name__)

_TITLE_KEYS = ("titulo", "title", "clausula", "nome")
_SUMMARY_KEYS = ("resumo", "summary", "descricao", "explicacao")


def _first_text(entry: dict, keys) -> str:
    for key in keys:
        value = entry.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def normalize_entries(raw: Any) -> List[ClauseSummary]:
    """
    Coerce whatever the model put in a list into ClauseSummary items.

    Accepts dicts with Portuguese or English keys and bare strings; drops
    anything without a title.
    """
    if not isinstance(raw, list):
        return []

    entries = []
    for item in raw:
        if isinstance(item, str) and item.strip():
            entries.append(ClauseSummary(title=item.strip()))
        elif isinstance(item, dict):
            title = _first_text(item, _TITLE_KEYS)
            if title:
                entries.append(ClauseSummary(title=title, summary=_first_text(item, _SUMMARY_KEYS)))
    return entries


class ClauseClassifier:
    """Classification prompt + lenient parsing."""

    SYSTEM_INSTRUCTION = (
        "Você organiza análises de contratos. Responda sempre e somente com um "
        "objeto JSON válido, sem texto antes ou depois e sem blocos de código."
    )

    PROMPT_TEMPLATE = (
        "Com base na análise de cláusulas abaixo, separe as cláusulas em duas "
        "listas: \"seguras\" (cláusulas comuns ou favoráveis) e \"riscos\" "
        "(cláusulas que merecem atenção). Cada item deve ter um \"titulo\" curto "
        "e um \"resumo\" de no máximo duas frases.\n\n"
        "Formato exato da resposta:\n"
        "{{\"seguras\": [{{\"titulo\": \"...\", \"resumo\": \"...\"}}], "
        "\"riscos\": [{{\"titulo\": \"...\", \"resumo\": \"...\"}}]}}\n\n"
        "Análise:\n{clause_text}"
    )

    def __init__(self, llm: Optional[LLMService] = None):
        self.llm = llm or gemini_service

    def build_prompt(self, clause_text: str) -> str:
        return self.PROMPT_TEMPLATE.format(clause_text=clause_text)

    async def classify(self, clause_text: str) -> ClauseClassification:
        """
        Partition a clause analysis into safe and risky clauses.

        Raises:
            ClassificationError: Provider failure, or no JSON object in the answer.
        """
        try:
            completion = await self.llm.generate(
                self.build_prompt(clause_text),
                system_instruction=self.SYSTEM_INSTRUCTION,
                temperature=settings.classifier_temperature,
                max_output_tokens=settings.classifier_max_tokens,
            )
        except LLMServiceError as e:
            raise ClassificationError(context={"llm_request_id": e.request_id, "cause": e.message})

        extraction = extract_json_object(completion)
        if not extraction.parsed:
            logger.warning(
                "Classification output not parseable (%s); %d chars received",
                extraction.reason,
                len(completion),
            )
            raise ClassificationError(
                message="A resposta do modelo não pôde ser interpretada.",
                context={"reason": extraction.reason},
            )

        result = ClauseClassification(
            safe=normalize_entries(extraction.value.get("seguras")),
            risky=normalize_entries(extraction.value.get("riscos")),
        )
        logger.info(
            "Classified clauses: %d safe, %d risky", len(result.safe), len(result.risky)
        )
        return result


clause_classifier = ClauseClassifier()
