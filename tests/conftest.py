"""
Shared test fixtures and configuration for the gqlbind test suite.
"""

from typing import List, Optional

import pytest
from pydantic import BaseModel, Field

from gqlbind import GraphQLConfig, LoggingConfig


class Profile(BaseModel):
    avatar: str
    bio: Optional[str] = None


class User(BaseModel):
    id: str
    display_name: str = Field(alias="displayName")
    profile: Optional[Profile] = None


class Person(BaseModel):
    name: str
    friends: List[Profile] = []


@pytest.fixture
def graphql_endpoint() -> str:
    return "https://api.example.com/graphql"


@pytest.fixture
def graphql_config(graphql_endpoint: str) -> GraphQLConfig:
    """Client configuration with fast retries for tests."""
    return GraphQLConfig(
        endpoint=graphql_endpoint,
        timeout=5.0,
        max_retries=2,
        retry_delay=0.0,
        headers={"Authorization": "Bearer secret-token"},
    )


@pytest.fixture
def logging_config(tmp_path) -> LoggingConfig:
    return LoggingConfig(
        level="DEBUG",
        enable_console=False,
        enable_file=True,
        file_path=tmp_path / "logs" / "gqlbind.log",
    )


@pytest.fixture
def user_model():
    return User


@pytest.fixture
def person_model():
    return Person
