"""
Immutable, fluent query assembly for GraphQL clients.

This package collects query fragments with their result bindings and the
variables they reference, validates that declared variables match the
fragments, and hands the finished payload to a transport.

Features:
- Copy-on-write builder safe to branch and reuse
- Variable extraction and validation at build time
- Pydantic model bindings with derived selection sets
- Async aiohttp transport with retry logic
"""

from .exceptions import (
    BuildError,
    GqlBindError,
    GraphQLError,
    GraphQLExecutionError,
    GraphQLNetworkError,
    GraphQLTimeoutError,
    MismatchedVariablesError,
    NoQueryError,
)
from .graphql import (
    Binding,
    GraphQLClient,
    GraphQLConfig,
    GraphQLOperationType,
    GraphQLRequest,
    GraphQLResult,
    GraphQLVariable,
    QueryBinding,
    QueryBuilder,
    QueryFragment,
    compose_operation,
    find_variable_names,
)
from .config import GlobalConfig, LoggingConfig, LogLevel, load_config
from .logging import setup_logging

__version__ = "1.0.0"

__all__ = [
    # Builder
    "QueryBuilder",
    "QueryFragment",
    "QueryBinding",
    "find_variable_names",
    # Transport
    "Binding",
    "GraphQLClient",
    "GraphQLConfig",
    "GraphQLOperationType",
    "GraphQLRequest",
    "GraphQLResult",
    "GraphQLVariable",
    "compose_operation",
    # Configuration
    "GlobalConfig",
    "LoggingConfig",
    "LogLevel",
    "load_config",
    "setup_logging",
    # Exceptions
    "GqlBindError",
    "BuildError",
    "NoQueryError",
    "MismatchedVariablesError",
    "GraphQLError",
    "GraphQLNetworkError",
    "GraphQLTimeoutError",
    "GraphQLExecutionError",
]
