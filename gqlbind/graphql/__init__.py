"""
GraphQL support for gqlbind.

This module provides the immutable query builder together with response
bindings, operation composition and an aiohttp transport.
"""

from .binding import Binding, selection_from_model
from .builder import (
    QueryBinding,
    QueryBuilder,
    QueryExecutor,
    QueryFragment,
    find_variable_names,
)
from .client import GraphQLClient
from .composer import compose_operation, graphql_type, response_key, serialize_variables
from .models import (
    GraphQLConfig,
    GraphQLOperationType,
    GraphQLRequest,
    GraphQLResult,
    GraphQLVariable,
)

__all__ = [
    # Builder
    "QueryBuilder",
    "QueryFragment",
    "QueryBinding",
    "QueryExecutor",
    "find_variable_names",
    # Bindings
    "Binding",
    "selection_from_model",
    # Composition
    "compose_operation",
    "graphql_type",
    "response_key",
    "serialize_variables",
    # Client
    "GraphQLClient",
    "GraphQLConfig",
    # Models
    "GraphQLOperationType",
    "GraphQLRequest",
    "GraphQLResult",
    "GraphQLVariable",
]
