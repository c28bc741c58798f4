"""
Error taxonomy for the generation pipeline.

Three families:
  - RequestValidationError: malformed caller input, caught before any remote call.
  - ClassifiedError: a remote interaction failed or returned an unusable payload.
    ParseError is the sub-kind raised when a payload breaks its contract.
  - GenerationCancelled / StaleResultError: control-flow signals for callers.
"""
from enum import Enum


class ErrorKind(str, Enum):
    """Fixed set of user-facing failure kinds."""

    CREDENTIAL_MISSING = "credential_missing"
    CREDENTIAL_INVALID = "credential_invalid"
    RESOURCE_NOT_FOUND = "resource_not_found"
    QUOTA_EXCEEDED = "quota_exceeded"
    BILLING_REQUIRED = "billing_required"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


# (arabic, english, remediation hint)
_KIND_MESSAGES: dict[ErrorKind, tuple[str, str, str]] = {
    ErrorKind.CREDENTIAL_MISSING: (
        "لم يتم اختيار مفتاح API. يرجى اختيار مفتاح من مشروع مفعل ثم المحاولة مجدداً.",
        "No API key selected. Please select a key from an active project.",
        "select_credential",
    ),
    ErrorKind.RESOURCE_NOT_FOUND: (
        "عذراً، لم يتم العثور على المشروع. يرجى اختيار مشروع مفعل يدعم هذه الخدمة.",
        "Project not found. Please select a valid project for this capability.",
        "select_credential",
    ),
    ErrorKind.CREDENTIAL_INVALID: (
        "مفتاح API غير صالح. يرجى التحقق من إعدادات المفتاح والمحاولة مجدداً.",
        "Invalid API key. Please check your settings.",
        "check_credential",
    ),
    ErrorKind.QUOTA_EXCEEDED: (
        "تجاوزت حد الاستخدام المسموح به حالياً. يرجى الانتظار قليلاً ثم المحاولة.",
        "Quota exhausted. Please try again later.",
        "wait_and_retry",
    ),
    ErrorKind.BILLING_REQUIRED: (
        "يتطلب هذا النموذج تفعيل الفواتير في حسابك. يرجى التأكد من أن المفتاح من مشروع مدفوع.",
        "Paid project and billing required.",
        "enable_billing",
    ),
    ErrorKind.TIMEOUT: (
        "استغرق التوليد وقتاً أطول من المسموح. يرجى المحاولة مرة أخرى لاحقاً.",
        "Generation took too long. Please try again later.",
        "retry",
    ),
    ErrorKind.UNKNOWN: (
        "تعذر توليد المحتوى في الوقت الحالي. يرجى التحقق من الاتصال أو المحاولة لاحقاً.",
        "Could not generate content. Please check your connection or try again later.",
        "retry",
    ),
}

# Retryable, but the caller should not offer an immediate retry.
_DISCOURAGE_IMMEDIATE_RETRY = frozenset({ErrorKind.QUOTA_EXCEEDED, ErrorKind.BILLING_REQUIRED})


class RequestValidationError(ValueError):
    """Caller input cannot produce a valid request. Never sent to the remote service."""


class ClassifiedError(Exception):
    """
    A normalized generation failure.

    Carries the kind, the raw diagnostic (for logs only) and a bilingual
    user-facing message. Attributes are read-only.
    """

    def __init__(self, kind: ErrorKind, diagnostic: str = "", status: int | None = None):
        self._kind = ErrorKind(kind)
        self._diagnostic = diagnostic
        self._status = status
        super().__init__(f"{self._kind.value}: {diagnostic}")

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def diagnostic(self) -> str:
        return self._diagnostic

    @property
    def status(self) -> int | None:
        return self._status

    @property
    def retryable(self) -> bool:
        # Every kind is recoverable by user action.
        return True

    @property
    def discourage_immediate_retry(self) -> bool:
        return self._kind in _DISCOURAGE_IMMEDIATE_RETRY

    @property
    def remediation(self) -> str:
        return _KIND_MESSAGES[self._kind][2]

    def message_for(self, locale: str) -> str:
        """User message in a single language ("ar" or "en")."""
        arabic, english, _ = _KIND_MESSAGES[self._kind]
        return arabic if locale == "ar" else english

    @property
    def user_message(self) -> str:
        """Bilingual message: Arabic first, English in parentheses."""
        arabic, english, _ = _KIND_MESSAGES[self._kind]
        return f"{arabic}\n({english})"

    def to_dict(self) -> dict:
        return {
            "status": "error",
            "kind": self._kind.value,
            "message": self.user_message,
            "retryable": self.retryable,
            "discourageImmediateRetry": self.discourage_immediate_retry,
            "remediation": self.remediation,
            "actions": ["retry", "dismiss"],
        }


class ParseError(ClassifiedError):
    """A payload failed its contract, or an expected binary part was absent."""

    EMPTY_RESPONSE = "EMPTY_RESPONSE"

    def __init__(self, diagnostic: str, kind: ErrorKind = ErrorKind.UNKNOWN, contract: str | None = None):
        super().__init__(kind, diagnostic)
        self._contract = contract

    @property
    def contract(self) -> str | None:
        return self._contract

    @classmethod
    def empty_response(cls, what: str = "binary payload") -> "ParseError":
        return cls(f"{cls.EMPTY_RESPONSE}: no {what} in response", kind=ErrorKind.RESOURCE_NOT_FOUND)


class GenerationCancelled(Exception):
    """Raised when a caller cancels a long-running generation."""


class StaleResultError(Exception):
    """A result arrived after a newer call for the same slot was started."""

    def __init__(self, slot: str, seq: int, latest: int):
        self.slot = slot
        self.seq = seq
        self.latest = latest
        super().__init__(f"Result #{seq} for slot '{slot}' superseded by #{latest}")
