"""
Exception hierarchy for nuscout.

Every error raised on purpose derives from :class:`NuScoutError`, which
carries a human-readable ``message`` and a ``details`` mapping of
structured context (URL, status code, manifest node, ...) for logs.

How the registry layer treats each type:

- :class:`ProtocolError`: one source failed; the aggregator skips it.
- :class:`FatalSearchError`: anything else; the whole search fails.
- :class:`OperationCancelled`: a newer request superseded this one; the
  caller discards it silently.
- :class:`InitializationError`: startup failed; raised by the first
  operation that needs settings.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


def _truncate(text: str, max_length: int = 200) -> str:
    return text if len(text) <= max_length else text[:max_length] + "..."


class NuScoutError(Exception):
    """Base class for nuscout errors.

    Args:
        message: Human-readable description.
        **details: Structured context; ``None`` values are dropped.
    """

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = {k: v for k, v in details.items() if v is not None}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, details={self.details!r})"


class ConfigError(NuScoutError):
    """A configuration file could not be read or failed validation."""

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        super().__init__(message, path=config_path, option=option)
        self.config_path = config_path
        self.option = option


class InitializationError(NuScoutError):
    """Registry settings could not be built at startup."""

    def __init__(
        self,
        message: str,
        *,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message,
            original_error=repr(original_error) if original_error else None,
        )
        self.original_error = original_error


class NetworkError(NuScoutError):
    """An HTTP request failed or returned an unusable body."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **details: Any,
    ) -> None:
        super().__init__(
            message,
            url=url,
            status_code=status_code,
            response=_truncate(response_body) if response_body is not None else None,
            **details,
        )
        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class ProtocolError(NetworkError):
    """One registry source could not serve a request.

    Recoverable: the aggregator logs it and moves on to the next source.
    """

    def __init__(
        self,
        message: str,
        *,
        source_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, source=source_name, **kwargs)
        self.source_name = source_name


class FatalSearchError(NuScoutError):
    """An unexpected failure aborted an aggregated search."""

    def __init__(
        self,
        message: str,
        *,
        search_term: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message,
            term=search_term,
            original_error=str(original_error) if original_error else None,
        )
        self.search_term = search_term
        self.original_error = original_error


class OperationCancelled(NuScoutError):
    """The request's cancellation token fired; not an error for users."""


class MalformedManifestError(NuScoutError):
    """A lock manifest node is missing or has the wrong shape.

    ``node`` is a slash-separated path such as
    ``targets/net6.0/X/1.0.0/compile``.
    """

    def __init__(self, message: str, *, node: Optional[str] = None) -> None:
        super().__init__(message, node=node)
        self.node = node


class FileOperationError(NuScoutError):
    """A local file could not be read or a path failed validation."""

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            message,
            path=file_path,
            operation=operation,
            original_error=str(original_error) if original_error else None,
        )
        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error
