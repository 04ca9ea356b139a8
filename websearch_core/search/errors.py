# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


class SearchError(Exception):
    """Base class for every error raised by the search subsystem."""


class FetchError(SearchError):
    """A request to a provider or page failed at the network level."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class FetchTimeoutError(FetchError):
    pass


class HttpStatusError(FetchError):
    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"HTTP {status_code} from {url}", url=url)
        self.status_code = status_code


class ProviderError(SearchError):
    """A provider answered but its response could not be used."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class EmptyResultsError(ProviderError):
    def __init__(self, provider: str) -> None:
        super().__init__(provider, "no usable results")


class CircuitOpenError(SearchError):
    """Raised without calling the provider while its circuit is open."""

    def __init__(self, name: str, retry_after: float) -> None:
        super().__init__(f"Circuit for {name} is open, retry in {retry_after:.1f}s")
        self.name = name
        self.retry_after = retry_after


class NoEligibleStrategyError(SearchError):
    pass


class SearchExhaustedError(SearchError):
    """Every eligible strategy was tried and failed. `last_error` is the most recent cause."""

    def __init__(self, query: str, attempts: int, last_error: BaseException | None) -> None:
        detail = f": {last_error}" if last_error is not None else ""
        super().__init__(f"Web search failed for {query!r} after {attempts} attempt(s){detail}")
        self.query = query
        self.attempts = attempts
        self.last_error = last_error


class ContentFetchError(SearchError):
    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
