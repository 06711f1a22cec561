"""Failure taxonomy for the image analysis pipeline."""

from collections.abc import Sequence


class AnalysisError(Exception):
    """Base class for every failure raised by the analysis pipeline."""

    kind = "analysis_error"


class InvalidImageError(AnalysisError):
    """Image data is missing, truncated or not decodable."""

    kind = "invalid_image"


class CompletionError(AnalysisError):
    """The completion request failed before any text was obtained."""

    kind = "completion_error"


class ProviderError(CompletionError):
    """Provider answered with a non-success HTTP status."""

    kind = "provider_error"

    def __init__(self, status_code: int, body: str, message: str | None = None):
        super().__init__(message or f"Provider returned HTTP {status_code}")
        self.status_code = status_code
        self.body = body


class UnauthenticatedError(CompletionError):
    """Credential is missing or was rejected (HTTP 401)."""

    kind = "unauthenticated"

    def __init__(
        self,
        body: str = "",
        message: str | None = None,
        status_code: int | None = 401,
    ):
        super().__init__(message or "Provider rejected the API key")
        self.status_code = status_code
        self.body = body


class MissingCredentialError(UnauthenticatedError):
    """No API key is configured, so the provider was never contacted."""

    kind = "missing_credential"

    def __init__(self) -> None:
        super().__init__(message="OpenAI API key not configured", status_code=None)


class RateLimitedError(ProviderError):
    """Provider is throttling requests (HTTP 429)."""

    kind = "rate_limited"

    def __init__(self, body: str = ""):
        super().__init__(429, body, "Provider rate limit exceeded")


class BadRequestError(ProviderError):
    """Provider refused the request as malformed (HTTP 400)."""

    kind = "bad_request"

    def __init__(self, body: str = ""):
        super().__init__(400, body, "Provider rejected the request")


class NetworkError(CompletionError):
    """Transport-level failure talking to the provider."""

    kind = "network_error"


class AnalysisTimeoutError(CompletionError):
    """Completion did not finish within the wall-clock budget."""

    kind = "timeout"


class EmptyResponseError(CompletionError):
    """Completion succeeded but carried no text content."""

    kind = "empty_response"


class MalformedResponseError(CompletionError):
    """Provider answered but the body is not a usable completion."""

    kind = "malformed_response"


class OutputError(AnalysisError):
    """Model text could not be turned into a nutrition record."""

    kind = "output_error"

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


class MalformedOutputError(OutputError):
    """Model text is not a JSON object."""

    kind = "malformed_output"


class _MissingKeysError(OutputError):
    label = "Fields"

    def __init__(self, missing: Sequence[str], raw_text: str):
        self.missing = tuple(missing)
        super().__init__(f"{self.label} missing: {', '.join(self.missing)}", raw_text)


class MissingFieldsError(_MissingKeysError):
    """Required top-level keys are absent or null."""

    kind = "missing_fields"
    label = "Fields"


class MissingMacrosError(_MissingKeysError):
    """Required macro keys are absent or null."""

    kind = "missing_macros"
    label = "Macros"


class MissingVitaminsError(_MissingKeysError):
    """Required vitamin keys are absent or null."""

    kind = "missing_vitamins"
    label = "Vitamins"


class InvalidValueError(OutputError):
    """All keys are present but some values have the wrong type or range."""

    kind = "invalid_value"

    def __init__(self, problems: Sequence[str], raw_text: str):
        self.problems = tuple(problems)
        super().__init__(f"Invalid values: {'; '.join(self.problems)}", raw_text)
