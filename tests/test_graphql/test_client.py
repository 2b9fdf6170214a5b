"""
Tests for the aiohttp GraphQL client.
"""

import asyncio
import json
import logging

import aiohttp
import pytest
from aioresponses import aioresponses

from gqlbind import (
    Binding,
    GraphQLClient,
    GraphQLConfig,
    GraphQLError,
    GraphQLExecutionError,
    GraphQLNetworkError,
    GraphQLRequest,
    GraphQLResult,
    GraphQLTimeoutError,
    GraphQLVariable,
    MismatchedVariablesError,
    QueryBuilder,
)


def sent_requests(m, url):
    """Return the request kwargs aioresponses recorded for a POST."""
    return [
        call.kwargs
        for (method, request_url), calls in m.requests.items()
        if method == "POST" and str(request_url) == url
        for call in calls
    ]


class TestGraphQLClientExecute:
    """Test raw request execution."""

    def test_client_creation(self, graphql_config):
        client = GraphQLClient(graphql_config)

        assert client.config == graphql_config
        assert str(client.config.endpoint) == "https://api.example.com/graphql"

    @pytest.mark.asyncio
    async def test_execute_success(self, graphql_config, graphql_endpoint):
        with aioresponses() as m:
            m.post(
                graphql_endpoint,
                payload={"data": {"viewer": {"login": "ada"}}, "extensions": {"cost": 1}},
            )

            async with GraphQLClient(graphql_config) as client:
                result = await client.execute(GraphQLRequest(query="{ viewer { login } }"))

            assert isinstance(result, GraphQLResult)
            assert result.success is True
            assert result.status_code == 200
            assert result.get_data("viewer.login") == "ada"
            assert result.extensions == {"cost": 1}

            sent = sent_requests(m, graphql_endpoint)[0]
            assert sent["json"] == {"query": "{ viewer { login } }"}
            assert sent["headers"]["Authorization"] == "Bearer secret-token"
            assert sent["headers"]["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_execute_with_errors(self, graphql_config, graphql_endpoint):
        with aioresponses() as m:
            m.post(
                graphql_endpoint,
                payload={"data": None, "errors": [{"message": "User not found"}]},
            )

            async with GraphQLClient(graphql_config) as client:
                result = await client.execute(GraphQLRequest(query="{ user { id } }"))

        assert result.success is False
        assert result.has_errors
        assert result.error_messages == ["User not found"]

    @pytest.mark.asyncio
    async def test_execute_invalid_json(self, graphql_config, graphql_endpoint):
        with aioresponses() as m:
            m.post(graphql_endpoint, body="<html>bad gateway</html>", status=502)

            async with GraphQLClient(graphql_config) as client:
                with pytest.raises(GraphQLError, match="Invalid JSON response"):
                    await client.execute(GraphQLRequest(query="{ viewer { id } }"))

    @pytest.mark.asyncio
    async def test_execute_undecodable_body(self, graphql_config, graphql_endpoint):
        with aioresponses() as m:
            m.post(graphql_endpoint, body=b"\xff\xfe\xfa", status=502)

            async with GraphQLClient(graphql_config) as client:
                with pytest.raises(GraphQLError, match="Invalid JSON response") as exc_info:
                    await client.execute(GraphQLRequest(query="{ a }"))

        assert isinstance(exc_info.value.original_error, json.JSONDecodeError)

    @pytest.mark.asyncio
    async def test_execute_backoff_delays(self, graphql_endpoint, monkeypatch):
        config = GraphQLConfig(
            endpoint=graphql_endpoint,
            max_retries=2,
            retry_delay=0.5,
            retry_backoff_factor=2,
        )
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)

        monkeypatch.setattr("gqlbind.graphql.client.asyncio.sleep", fake_sleep)

        with aioresponses() as m:
            m.post(
                graphql_endpoint,
                exception=aiohttp.ClientConnectionError("refused"),
                repeat=True,
            )

            async with GraphQLClient(config) as client:
                with pytest.raises(GraphQLNetworkError):
                    await client.execute(GraphQLRequest(query="{ viewer { id } }"))

        assert delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_execute_retries_network_errors(self, graphql_config, graphql_endpoint):
        with aioresponses() as m:
            m.post(graphql_endpoint, exception=aiohttp.ClientConnectionError("refused"))
            m.post(graphql_endpoint, payload={"data": {"viewer": {"id": "1"}}})

            async with GraphQLClient(graphql_config) as client:
                result = await client.execute(GraphQLRequest(query="{ viewer { id } }"))

            assert result.success is True
            assert len(sent_requests(m, graphql_endpoint)) == 2

    @pytest.mark.asyncio
    async def test_execute_network_error_after_retries(self, graphql_config, graphql_endpoint):
        with aioresponses() as m:
            m.post(
                graphql_endpoint,
                exception=aiohttp.ClientConnectionError("refused"),
                repeat=True,
            )

            async with GraphQLClient(graphql_config) as client:
                with pytest.raises(GraphQLNetworkError) as exc_info:
                    await client.execute(GraphQLRequest(query="{ viewer { id } }"))

            assert exc_info.value.endpoint == graphql_endpoint
            assert isinstance(exc_info.value.original_error, aiohttp.ClientConnectionError)
            assert len(sent_requests(m, graphql_endpoint)) == 3

    @pytest.mark.asyncio
    async def test_execute_timeout(self, graphql_endpoint):
        config = GraphQLConfig(endpoint=graphql_endpoint, max_retries=0)

        with aioresponses() as m:
            m.post(graphql_endpoint, exception=asyncio.TimeoutError())

            async with GraphQLClient(config) as client:
                with pytest.raises(GraphQLTimeoutError) as exc_info:
                    await client.execute(GraphQLRequest(query="{ viewer { id } }"))

        assert exc_info.value.timeout_duration == config.timeout

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, graphql_config):
        client = GraphQLClient(graphql_config)
        await client.close()

        async with client:
            pass
        await client.close()


class TestGraphQLClientBindings:
    """Test executing builder output through the client."""

    @pytest.mark.asyncio
    async def test_builder_execute_populates_bindings(
        self, graphql_config, graphql_endpoint, user_model
    ):
        user = Binding(user_model)
        count = Binding()
        builder = (
            QueryBuilder()
            .bind("user(id: $id)", user)
            .bind("total: userCount", count)
            .variable("id", GraphQLVariable("ID!", "1"))
        )

        with aioresponses() as m:
            m.post(
                graphql_endpoint,
                payload={
                    "data": {
                        "user": {"id": "1", "displayName": "Ada", "profile": None},
                        "total": 7,
                    }
                },
            )

            async with GraphQLClient(graphql_config) as client:
                result = await builder.with_context(operation_name="GetUser").execute(client)

            sent = sent_requests(m, graphql_endpoint)[0]

        assert result.success is True
        assert user.data.display_name == "Ada"
        assert user.data.profile is None
        assert count.data == 7
        assert sent["json"] == {
            "query": (
                "query GetUser($id: ID!) { user(id: $id) "
                "{ id displayName profile { avatar bio } } total: userCount }"
            ),
            "variables": {"id": "1"},
            "operationName": "GetUser",
        }

    @pytest.mark.asyncio
    async def test_builder_mutate(self, graphql_config, graphql_endpoint):
        created = Binding(selection="id")
        builder = (
            QueryBuilder()
            .bind("createUser(name: $name)", created)
            .variable("name", "Jane")
            .with_context(headers={"X-Request-Id": "abc"})
        )

        with aioresponses() as m:
            m.post(graphql_endpoint, payload={"data": {"createUser": {"id": "42"}}})

            async with GraphQLClient(graphql_config) as client:
                await builder.mutate(client)

            sent = sent_requests(m, graphql_endpoint)[0]

        assert created.data == {"id": "42"}
        assert sent["json"]["query"] == (
            "mutation($name: String!) { createUser(name: $name) { id } }"
        )
        assert sent["headers"]["X-Request-Id"] == "abc"
        assert sent["headers"]["Authorization"] == "Bearer secret-token"

    @pytest.mark.asyncio
    async def test_execution_errors_raise(self, graphql_config, graphql_endpoint):
        user = Binding(selection="id")
        builder = QueryBuilder().bind("user(id: $id)", user).variable("id", "x")

        with aioresponses() as m:
            m.post(
                graphql_endpoint,
                payload={"data": {"user": None}, "errors": [{"message": "User not found"}]},
            )

            async with GraphQLClient(graphql_config) as client:
                with pytest.raises(GraphQLExecutionError) as exc_info:
                    await builder.execute(client)

        error = exc_info.value
        assert error.status_code == 200
        assert error.errors == [{"message": "User not found"}]
        assert error.variables == {"id": "x"}
        assert not user.is_populated

    @pytest.mark.asyncio
    async def test_execution_errors_returned_when_not_raising(self, graphql_endpoint):
        config = GraphQLConfig(endpoint=graphql_endpoint, raise_on_errors=False)
        user = Binding(selection="id")
        viewer = Binding(selection="id")
        builder = QueryBuilder().bind("user", user).bind("viewer", viewer)

        with aioresponses() as m:
            m.post(
                graphql_endpoint,
                payload={"data": {"viewer": {"id": "v"}}, "errors": [{"message": "denied"}]},
            )

            async with GraphQLClient(config) as client:
                result = await builder.execute(client)

        assert result.success is False
        assert viewer.data == {"id": "v"}
        assert not user.is_populated

    @pytest.mark.asyncio
    async def test_missing_response_keys_are_logged(
        self, graphql_config, graphql_endpoint, caplog
    ):
        user = Binding(selection="id")
        viewer = Binding(selection="id")
        builder = QueryBuilder().bind("me: user", user).bind("viewer", viewer)

        with aioresponses() as m:
            m.post(graphql_endpoint, payload={"data": {"viewer": {"id": "v"}}})

            async with GraphQLClient(graphql_config) as client:
                with caplog.at_level(logging.WARNING, logger="gqlbind.graphql.client"):
                    result = await builder.execute(client)

        assert result.success is True
        assert viewer.is_populated
        assert not user.is_populated
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "['me']" in warnings[0].getMessage()

    @pytest.mark.asyncio
    async def test_build_error_sends_nothing(self, graphql_config, graphql_endpoint):
        builder = QueryBuilder().bind("x($a)", Binding()).variables({"a": 1, "b": 2})

        with aioresponses() as m:
            async with GraphQLClient(graphql_config) as client:
                with pytest.raises(MismatchedVariablesError):
                    await builder.execute(client)

            assert m.requests == {}

    @pytest.mark.asyncio
    async def test_non_binding_rejected(self, graphql_config):
        builder = QueryBuilder().bind("viewer", {"target": True})

        async with GraphQLClient(graphql_config) as client:
            with pytest.raises(GraphQLError, match="expected Binding"):
                await builder.execute(client)

    def test_request_body_is_json_serializable(self):
        request = GraphQLRequest(query="{ a }", variables={"x": 1}, operation_name="A")

        assert json.loads(json.dumps(request.to_dict())) == {
            "query": "{ a }",
            "variables": {"x": 1},
            "operationName": "A",
        }
