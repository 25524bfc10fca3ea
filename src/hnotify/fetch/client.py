"""HTTP client with retries and failure classification."""

import time
from collections.abc import Callable
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from io import BytesIO
from types import TracebackType

import httpx
import structlog

from hnotify.fetch.config import FetchConfig
from hnotify.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_SERVER_ERROR_MAX,
    HTTP_STATUS_SERVER_ERROR_MIN,
    HTTP_STATUS_TOO_MANY_REQUESTS,
    MAX_RETRY_AFTER_SECONDS,
)
from hnotify.fetch.metrics import FetchMetrics
from hnotify.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchResult,
    ResponseSizeExceededError,
)


logger = structlog.get_logger()


class HttpFetcher:
    """Blocking HTTP GET client shared by both feed endpoints.

    Provides:
    - A single pooled ``httpx.Client`` with an explicit timeout
    - Configurable retry policy with exponential backoff
    - Retry-After handling for 429 responses
    - Maximum response size enforcement
    - Metrics collection
    """

    def __init__(
        self,
        config: FetchConfig,
        run_id: str,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the HTTP fetcher.

        Args:
            config: Fetch configuration.
            run_id: Unique run identifier for logging.
            transport: Optional transport override (tests use MockTransport).
            sleep: Function used to wait between retries.
        """
        self._config = config
        self._sleep = sleep
        self._metrics = FetchMetrics.get_instance()
        self._client = httpx.Client(
            timeout=config.timeout_seconds,
            follow_redirects=True,
            headers={
                "User-Agent": config.user_agent,
                "Accept": "application/json",
            },
            transport=transport,
        )
        self._log = logger.bind(component="fetch", run_id=run_id)

    @property
    def config(self) -> FetchConfig:
        """Get the fetch configuration."""
        return self._config

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._client.close()

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def fetch(self, path: str) -> FetchResult:
        """GET an API path with retry support.

        Never raises for network or HTTP failures; those are reported on
        ``FetchResult.error``.

        Args:
            path: API path relative to the configured base URL.

        Returns:
            FetchResult with status, body and error information.
        """
        url = self._config.url_for(path)
        start_time_ns = time.perf_counter_ns()
        log = self._log.bind(url=url)

        result = self._execute_with_retry(url, log)

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_duration(duration_ms)

        log.debug(
            "fetch_complete",
            status_code=result.status_code,
            bytes=result.body_size,
            attempts=result.attempts,
            duration_ms=round(duration_ms, 2),
            error_class=result.error.error_class.value if result.error else None,
        )
        return result

    def _execute_with_retry(
        self,
        url: str,
        log: structlog.stdlib.BoundLogger,
    ) -> FetchResult:
        """Execute request with retry logic.

        Args:
            url: URL to fetch.
            log: Bound logger.

        Returns:
            FetchResult from the last attempt.
        """
        policy = self._config.retry_policy
        attempt = 0

        while True:
            result = self._execute_single(url, attempt)

            if result.error is None or not policy.should_retry(result.error, attempt):
                break

            if (
                result.error.error_class == FetchErrorClass.RATE_LIMITED
                and result.error.retry_after
            ):
                delay_s = float(min(result.error.retry_after, MAX_RETRY_AFTER_SECONDS))
                log.info("rate_limited", retry_after=delay_s, attempt=attempt)
            else:
                delay_s = policy.get_delay_ms(attempt) / 1000.0

            self._metrics.record_retry()
            log.debug(
                "retry_attempt",
                attempt=attempt + 1,
                delay_ms=int(delay_s * 1000),
                max_retries=policy.max_retries,
                error_class=result.error.error_class.value,
            )
            self._sleep(delay_s)
            attempt += 1

        if result.error is not None:
            self._metrics.record_failure(result.error.error_class)
            log.warning(
                "fetch_failed",
                error_class=result.error.error_class.value,
                error=result.error.message,
                status_code=result.error.status_code,
                attempts=attempt + 1,
            )
        return result.model_copy(update={"attempts": attempt + 1})

    def _execute_single(self, url: str, attempt: int) -> FetchResult:
        """Execute a single HTTP request.

        Args:
            url: URL to fetch.
            attempt: Current attempt number (0-indexed).

        Returns:
            FetchResult from the request.
        """
        try:
            with self._client.stream("GET", url) as response:
                content_length = response.headers.get("content-length")
                if (
                    content_length
                    and content_length.isdigit()
                    and int(content_length) > self._config.max_response_size_bytes
                ):
                    return self._error_result(
                        url,
                        FetchErrorClass.RESPONSE_SIZE_EXCEEDED,
                        f"Response size {content_length} exceeds limit "
                        f"{self._config.max_response_size_bytes}",
                        status_code=response.status_code,
                    )

                body = self._read_body_with_limit(response)
                self._metrics.record_request(response.status_code, len(body))

                return FetchResult(
                    status_code=response.status_code,
                    url=url,
                    body_bytes=body,
                    attempts=attempt + 1,
                    error=self._classify_http_error(
                        response.status_code, response.headers
                    ),
                )

        except ResponseSizeExceededError as e:
            return self._error_result(
                url, FetchErrorClass.RESPONSE_SIZE_EXCEEDED, str(e)
            )

        except httpx.TimeoutException as e:
            return self._error_result(
                url, FetchErrorClass.NETWORK_TIMEOUT, f"Request timed out: {e}"
            )

        except httpx.ConnectError as e:
            return self._error_result(
                url, FetchErrorClass.CONNECTION_ERROR, f"Connection failed: {e}"
            )

        except httpx.HTTPError as e:
            return self._error_result(
                url, FetchErrorClass.UNKNOWN, f"Unexpected error: {e!r}"
            )

    @staticmethod
    def _error_result(
        url: str,
        error_class: FetchErrorClass,
        message: str,
        status_code: int | None = None,
    ) -> FetchResult:
        """Build a failed FetchResult."""
        return FetchResult(
            status_code=status_code or 0,
            url=url,
            error=FetchError(
                error_class=error_class,
                message=message,
                status_code=status_code,
            ),
        )

    def _read_body_with_limit(self, response: httpx.Response) -> bytes:
        """Read response body with size limit.

        Args:
            response: Streaming HTTP response.

        Returns:
            Response body bytes.

        Raises:
            ResponseSizeExceededError: If the size limit is exceeded.
        """
        buffer = BytesIO()
        total_read = 0
        max_size = self._config.max_response_size_bytes

        for chunk in response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
            total_read += len(chunk)
            if total_read > max_size:
                msg = (
                    f"Response size exceeded limit of {max_size} bytes "
                    f"(read {total_read} bytes)"
                )
                raise ResponseSizeExceededError(msg)
            buffer.write(chunk)

        return buffer.getvalue()

    def _classify_http_error(
        self,
        status_code: int,
        headers: httpx.Headers,
    ) -> FetchError | None:
        """Classify HTTP status code as error.

        Args:
            status_code: HTTP status code.
            headers: Response headers.

        Returns:
            FetchError if status indicates error, None otherwise.
        """
        if HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
            return None

        if status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
            return FetchError(
                error_class=FetchErrorClass.RATE_LIMITED,
                message="Rate limited (429 Too Many Requests)",
                status_code=status_code,
                retry_after=self._parse_retry_after(headers.get("retry-after")),
            )

        if HTTP_STATUS_BAD_REQUEST <= status_code < HTTP_STATUS_SERVER_ERROR_MIN:
            return FetchError(
                error_class=FetchErrorClass.HTTP_4XX,
                message=f"Client error ({status_code})",
                status_code=status_code,
            )

        if HTTP_STATUS_SERVER_ERROR_MIN <= status_code < HTTP_STATUS_SERVER_ERROR_MAX:
            return FetchError(
                error_class=FetchErrorClass.HTTP_5XX,
                message=f"Server error ({status_code})",
                status_code=status_code,
            )

        # 1xx/3xx left after redirects are unexpected for a JSON API
        return FetchError(
            error_class=FetchErrorClass.UNKNOWN,
            message=f"Unexpected status code ({status_code})",
            status_code=status_code,
        )

    def _parse_retry_after(self, value: str | None) -> int | None:
        """Parse Retry-After header value.

        Args:
            value: Header value (seconds or HTTP date).

        Returns:
            Seconds to wait, or None if not parseable.
        """
        if not value:
            return None

        try:
            return int(value)
        except ValueError:
            pass

        try:
            dt = parsedate_to_datetime(value)
        except (ValueError, TypeError):
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        delta = dt - datetime.now(UTC)
        return max(0, int(delta.total_seconds()))
