"""Domain errors and failure typing."""


class EnricherError(Exception):
    """Base class for enrichment failures."""

    error_code = "ENRICHER_ERROR"


class ConfigError(EnricherError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class HttpRequestError(EnricherError):
    error_code = "HTTP_ERROR"


class RetryableHttpError(HttpRequestError):
    """A single lookup call failed in a way that is worth retrying."""

    error_code = "HTTP_RETRYABLE"


class BatchExhaustedError(EnricherError):
    """Raised when a batch still fails after the last retry attempt."""

    error_code = "BATCH_EXHAUSTED"

    def __init__(self, start: int, end: int, attempts: int):
        self.start = start
        self.end = end
        self.attempts = attempts
        super().__init__(f"Failed to fetch postcodes {start}-{end} after {attempts} attempts")


class ArtifactReleasedError(EnricherError):
    """Raised when a released download artifact is used."""

    error_code = "ARTIFACT_RELEASED"
