"""
Exception hierarchy for gqlbind.

Builder errors are raised by ``QueryBuilder.build`` when the accumulated
fragments and variables cannot form a request. GraphQL errors are raised by
the transport when a composed operation fails to execute.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


class GqlBindError(Exception):
    """
    Base exception for all gqlbind operations.

    Attributes:
        message: Human-readable error message
        details: Additional error details as keyword arguments
    """

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = kwargs


class BuildError(GqlBindError):
    """Raised when a query builder cannot produce a request payload."""

    pass


class NoQueryError(BuildError):
    """Raised when ``build`` is called on a builder without fragments."""

    def __init__(self, message: str = "no graphql query to be built") -> None:
        super().__init__(message)


class MismatchedVariablesError(BuildError):
    """
    Raised when declared variables do not match the ones the fragments need.

    Attributes:
        required: Every required variable name, in fragment order
        declared: The variable names currently declared on the builder
    """

    def __init__(self, required: Sequence[str], declared: Sequence[str]) -> None:
        self.required: List[str] = list(required)
        self.declared: List[str] = list(declared)
        super().__init__(
            f"mismatched variables; want: {self.required}; got: {self.declared}",
            required=self.required,
            declared=self.declared,
        )

    @property
    def missing(self) -> List[str]:
        """Required names that have no declared value."""
        declared = set(self.declared)
        return [name for name in dict.fromkeys(self.required) if name not in declared]

    @property
    def unused(self) -> List[str]:
        """Declared names that no fragment references."""
        required = set(self.required)
        return [name for name in self.declared if name not in required]


class GraphQLError(GqlBindError):
    """
    Raised when a GraphQL operation cannot be composed or executed.

    Attributes:
        query: Composed operation text (if available)
        variables: Variables sent with the operation (if available)
        original_error: Underlying exception (if any)
    """

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        variables: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.query = query
        self.variables = variables
        self.original_error = original_error


class GraphQLNetworkError(GraphQLError):
    """Raised for connection level failures talking to the endpoint."""

    def __init__(self, message: str, endpoint: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.endpoint = endpoint


class GraphQLTimeoutError(GraphQLError):
    """Raised when the endpoint does not answer within the configured timeout."""

    def __init__(
        self, message: str, timeout_duration: Optional[float] = None, **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)
        self.timeout_duration = timeout_duration


class GraphQLExecutionError(GraphQLError):
    """Raised when the server answers with GraphQL errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        response_data: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.errors = errors or []
        self.response_data = response_data
