"""
GraphQL client implementation.

This module provides an aiohttp based transport that executes the payload
produced by ``QueryBuilder.build`` and writes response data into bindings.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

import aiohttp

from ..exceptions import (
    GraphQLError,
    GraphQLExecutionError,
    GraphQLNetworkError,
    GraphQLTimeoutError,
)
from .binding import Binding
from .composer import compose_operation, response_key, serialize_variables
from .models import GraphQLConfig, GraphQLOperationType, GraphQLRequest, GraphQLResult

logger = logging.getLogger(__name__)


class GraphQLClient:
    """
    GraphQL client executing built query bindings.

    Examples:
        Query through a builder:
        ```python
        config = GraphQLConfig(endpoint="https://api.example.com/graphql")
        user = Binding(User)

        async with GraphQLClient(config) as client:
            await (QueryBuilder()
                .bind("user(id: $id)", user)
                .variable("id", "123")
                .execute(client))

        print(user.data.name)
        ```

        Raw request:
        ```python
        async with GraphQLClient(config) as client:
            result = await client.execute(
                GraphQLRequest(query="{ viewer { login } }")
            )
            print(result.get_data("viewer.login"))
        ```
    """

    def __init__(
        self,
        config: GraphQLConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize GraphQL client.

        Args:
            config: GraphQL configuration
            session: Optional externally managed session
        """
        self.config = config
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "GraphQLClient":
        """Async context manager entry."""
        await self._create_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _create_session(self) -> aiohttp.ClientSession:
        """Create HTTP session if none is open."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def execute(
        self,
        request: GraphQLRequest,
        headers: Optional[Dict[str, str]] = None,
    ) -> GraphQLResult:
        """
        Execute a GraphQL request, retrying transport failures.

        Args:
            request: Composed GraphQL request
            headers: Extra headers for this request

        Returns:
            GraphQLResult with operation result

        Raises:
            GraphQLTimeoutError: If every attempt timed out
            GraphQLNetworkError: If every attempt failed to connect
            GraphQLError: If the response is not valid JSON
        """
        endpoint = str(self.config.endpoint)
        attempt = 0

        while True:
            try:
                return await self._execute_once(request, headers)
            except asyncio.TimeoutError as e:
                error: GraphQLError = GraphQLTimeoutError(
                    f"GraphQL request timeout: {e}",
                    timeout_duration=self.config.timeout,
                    query=request.query,
                    variables=request.variables,
                    original_error=e,
                )
            except aiohttp.ClientError as e:
                error = GraphQLNetworkError(
                    f"GraphQL network error: {e}",
                    endpoint=endpoint,
                    query=request.query,
                    variables=request.variables,
                    original_error=e,
                )

            if attempt >= self.config.max_retries:
                logger.error("GraphQL request to %s failed: %s", endpoint, error.message)
                raise error

            delay = self.config.retry_delay * (self.config.retry_backoff_factor ** attempt)
            attempt += 1
            logger.warning(
                "GraphQL request to %s failed (%s), retry %d/%d in %.2fs",
                endpoint,
                error.message,
                attempt,
                self.config.max_retries,
                delay,
            )
            if delay > 0:
                await asyncio.sleep(delay)

    async def _execute_once(
        self,
        request: GraphQLRequest,
        headers: Optional[Dict[str, str]] = None,
    ) -> GraphQLResult:
        session = await self._create_session()
        endpoint = str(self.config.endpoint)

        request_headers = dict(self.config.headers)
        if headers:
            request_headers.update(headers)
        request_headers["Content-Type"] = "application/json"

        logger.debug("POST %s: %s", endpoint, request.query)
        start_time = time.time()
        async with session.post(
            endpoint, json=request.to_dict(), headers=request_headers
        ) as response:
            body = await response.read()
            response_text = body.decode("utf-8", errors="replace")
            response_time = time.time() - start_time
            status = response.status
            response_headers = dict(response.headers)

        try:
            response_data = json.loads(response_text)
        except json.JSONDecodeError as e:
            raise GraphQLError(
                f"Invalid JSON response (status {status}): {response_text[:200]}",
                query=request.query,
                variables=request.variables,
                original_error=e,
            )
        if not isinstance(response_data, dict):
            raise GraphQLError(
                f"Unexpected GraphQL response (status {status}): {response_text[:200]}",
                query=request.query,
                variables=request.variables,
            )

        errors = response_data.get("errors") or []
        return GraphQLResult(
            success=status == 200 and not errors,
            data=response_data.get("data"),
            errors=errors,
            extensions=(
                response_data.get("extensions") if self.config.include_extensions else None
            ),
            response_time=response_time,
            status_code=status,
            headers=response_headers,
            raw_response=response_text,
        )

    async def query(
        self,
        bindings: Sequence[Tuple[str, Any]],
        variables: Dict[str, Any],
        operation_name: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> GraphQLResult:
        """
        Execute built bindings as a query and populate each binding.

        Args:
            bindings: ``(text, binding)`` pairs from ``QueryBuilder.build``
            variables: Variable values from ``QueryBuilder.build``
            operation_name: Optional operation name
            headers: Extra headers for this request

        Returns:
            GraphQLResult of the request

        Raises:
            GraphQLExecutionError: If the response has errors and ``raise_on_errors`` is set
        """
        return await self._run(
            GraphQLOperationType.QUERY, bindings, variables, operation_name, headers
        )

    async def mutate(
        self,
        bindings: Sequence[Tuple[str, Any]],
        variables: Dict[str, Any],
        operation_name: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> GraphQLResult:
        """Execute built bindings as a mutation and populate each binding."""
        return await self._run(
            GraphQLOperationType.MUTATION, bindings, variables, operation_name, headers
        )

    async def _run(
        self,
        operation_type: GraphQLOperationType,
        bindings: Sequence[Tuple[str, Any]],
        variables: Dict[str, Any],
        operation_name: Optional[str],
        headers: Optional[Dict[str, str]],
    ) -> GraphQLResult:
        request = GraphQLRequest(
            query=compose_operation(operation_type, bindings, variables, operation_name),
            variables=serialize_variables(variables),
            operation_name=operation_name,
            operation_type=operation_type,
        )
        result = await self.execute(request, headers=headers)

        if result.has_errors and self.config.raise_on_errors:
            messages = "; ".join(result.error_messages)
            raise GraphQLExecutionError(
                f"GraphQL execution errors: {messages}",
                status_code=result.status_code,
                errors=result.errors,
                response_data=result.data,
                query=request.query,
                variables=request.variables,
            )

        self._populate(bindings, result.data or {})
        return result

    @staticmethod
    def _populate(bindings: Sequence[Tuple[str, Any]], data: Dict[str, Any]) -> None:
        populated: List[str] = []
        missing: List[str] = []
        for text, binding in bindings:
            key = response_key(text)
            if key not in data:
                missing.append(key)
            elif isinstance(binding, Binding):
                binding.populate(data[key])
                populated.append(key)
        logger.debug("Populated bindings %s", populated)
        if missing:
            logger.warning("Response data has no entry for bindings %s", missing)
