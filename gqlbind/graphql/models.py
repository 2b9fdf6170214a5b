"""
GraphQL models and data structures.

This module defines the request, result and configuration types used when
executing built queries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class GraphQLOperationType(str, Enum):
    """GraphQL operation types."""

    QUERY = "query"
    MUTATION = "mutation"


@dataclass(frozen=True)
class GraphQLVariable:
    """
    Variable value with an explicit GraphQL type.

    Use it where the type cannot be inferred from the Python value, e.g.
    ``GraphQLVariable("ID!", "1")`` or ``GraphQLVariable("String", None)``.
    """

    type: str
    value: Any = None


@dataclass
class GraphQLRequest:
    """Composed GraphQL operation ready to be sent."""

    query: str
    variables: Dict[str, Any] = field(default_factory=dict)
    operation_name: Optional[str] = None
    operation_type: GraphQLOperationType = GraphQLOperationType.QUERY

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {"query": self.query}

        if self.variables:
            result["variables"] = self.variables

        if self.operation_name:
            result["operationName"] = self.operation_name

        return result


@dataclass
class GraphQLResult:
    """Result of GraphQL operation."""

    success: bool
    data: Optional[Dict[str, Any]] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)
    extensions: Optional[Dict[str, Any]] = None
    response_time: Optional[float] = None
    status_code: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    raw_response: Optional[str] = None

    @property
    def has_errors(self) -> bool:
        """Check if result has errors."""
        return len(self.errors) > 0

    @property
    def error_messages(self) -> List[str]:
        """Get list of error messages."""
        return [error.get("message", "Unknown error") for error in self.errors]

    def get_data(self, path: Optional[str] = None) -> Any:
        """
        Get data from result with optional path.

        Args:
            path: Dot-separated path to data (e.g., "user.profile.name")

        Returns:
            Data at the specified path or full data if no path
        """
        if not self.data:
            return None

        if not path:
            return self.data

        current: Any = self.data
        for key in path.split("."):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return None

        return current


class GraphQLConfig(BaseModel):
    """Configuration for GraphQL client."""

    model_config = ConfigDict(use_enum_values=True)

    # Endpoint settings
    endpoint: HttpUrl = Field(description="GraphQL endpoint URL")

    # Request settings
    timeout: float = Field(default=30.0, ge=1.0, description="Request timeout in seconds")
    max_retries: int = Field(default=3, ge=0, description="Maximum retry attempts")
    retry_delay: float = Field(default=1.0, ge=0.0, description="Base retry delay in seconds")
    retry_backoff_factor: float = Field(
        default=2.0, ge=1.0, description="Multiplier applied to the delay per attempt"
    )

    # Headers
    headers: Dict[str, str] = Field(default_factory=dict, description="Default headers for requests")
    user_agent: str = Field(default="gqlbind/1.0", description="User-Agent header value")

    # Error handling
    raise_on_errors: bool = Field(
        default=True, description="Raise GraphQLExecutionError when the response has errors"
    )
    include_extensions: bool = Field(default=True, description="Include extensions in response")
