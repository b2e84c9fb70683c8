"""
ClauseGuard Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions, one per failure category.
How:   Each exception class carries a user-facing message, an optional context
       dict (logged, never returned) and the HTTP status it maps to.
       Global exception handlers (registered in main.py) turn them into
       `{"error": message, "code": ..., "request_id": ...}` responses.
Who:   Raised by services; caught by the global handlers.

Exception Hierarchy:
    ClauseGuardError (base)          → 500
    ├── ValidationError              → 400 missing/invalid input
    │   └── UnsupportedMediaError    → 400 media type outside the upload filter
    ├── ExtractionError              → 400 unreadable document / 500 I/O fault
    ├── AnalysisError                → 500 LLM call failed or returned nothing
    ├── ClassificationError          → 500 when exposed; soft inside submit
    ├── NotFoundError                → 404 unknown token
    ├── AnalysisLockedError          → 403 analysis not paid yet
    ├── PaymentStateError            → 400 no checkout session yet
    ├── GatewayError                 → 500 payment provider call failed
    ├── FileStorageError             → 500 temp upload could not be written
    └── DatabaseError                → 500 analysis store failure
"""

from typing import Any, Dict, Optional


class ClauseGuardError(Exception):
    """
    Base exception for all ClauseGuard application errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        context:      Additional debug info (logged but NOT returned to client)
        status_code:  HTTP status used by the global handler
        code:         Machine-readable error code
    """

    status_code: int = 500
    code: str = "server_error"

    def __init__(
        self,
        message: str = "Ocorreu um erro inesperado.",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ClauseGuardError):
    """
    Raised when client input fails validation.

    When:    Missing file or uid, oversize or empty upload, blank clause text,
             missing token, or a document with no readable text.
    HTTP:    400 Bad Request
    """

    status_code = 400
    code = "validation_error"

    def __init__(
        self,
        message: str = "Dados inválidos.",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnsupportedMediaError(ValidationError):
    """Declared media type is not PDF, image or plain text."""

    code = "unsupported_media_type"

    def __init__(
        self,
        media_type: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["media_type"] = media_type
        super().__init__(message="Tipo de arquivo não suportado.", field="file", context=ctx)
        self.media_type = media_type


class ExtractionError(ClauseGuardError):
    """
    Raised when text cannot be extracted from an uploaded document.

    HTTP:
        400 when the document itself is unreadable (corrupt PDF, no text layer)
        500 when the failure is ours (temp file vanished, disk I/O error)
    """

    code = "extraction_error"

    def __init__(
        self,
        message: str = "Não foi possível ler o documento enviado.",
        user_fault: bool = True,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.user_fault = user_fault
        self.status_code = 400 if user_fault else 500


class AnalysisError(ClauseGuardError):
    """
    Raised when the LLM call for clause analysis fails.

    When:    Provider error, blocked prompt, or empty completion.
    HTTP:    500 Internal Server Error (nothing is retried)
    """

    code = "analysis_error"

    def __init__(
        self,
        message: str = "Erro ao processar o contrato.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ClassificationError(ClauseGuardError):
    """
    Raised when the safe/risky classification cannot be produced.

    Inside the submit operation this is a soft failure: the analysis is saved
    with empty lists. Only the standalone classification endpoint surfaces it.
    """

    code = "classification_error"

    def __init__(
        self,
        message: str = "Não foi possível resumir as cláusulas.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ClauseGuardError):
    """
    Raised when a token does not match any stored analysis.

    HTTP:    404 Not Found
    """

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        resource: str = "análise",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} não encontrada."
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class AnalysisLockedError(ClauseGuardError):
    """
    Raised when a client fetches an analysis whose payment is not confirmed.

    HTTP:    403 Forbidden
    """

    status_code = 403
    code = "payment_required"

    def __init__(
        self,
        message: str = "Análise ainda não liberada. Conclua o pagamento para acessá-la.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PaymentStateError(ClauseGuardError):
    """
    Raised when a release check runs before any checkout session exists.

    HTTP:    400 Bad Request
    """

    status_code = 400
    code = "payment_state_error"

    def __init__(
        self,
        message: str = "Nenhuma sessão de pagamento foi criada para este token.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class GatewayError(ClauseGuardError):
    """
    Raised when the payment gateway (Stripe) call fails or is not configured.

    HTTP:    500 Internal Server Error
    """

    code = "gateway_error"

    def __init__(
        self,
        message: str = "Erro ao comunicar com o serviço de pagamento.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(ClauseGuardError):
    """
    Raised when the temporary upload cannot be written to disk.

    HTTP:    500 Internal Server Error
    """

    code = "file_storage_error"

    def __init__(
        self,
        message: str = "Falha ao armazenar o arquivo enviado.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(ClauseGuardError):
    """
    Raised when analysis store operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. Driver details
        are logged server-side only.
    """

    code = "database_error"

    def __init__(
        self,
        message: str = "Erro interno ao acessar os dados. Tente novamente mais tarde.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
