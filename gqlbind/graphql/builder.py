"""
Immutable GraphQL query builder.

This module provides a fluent interface for collecting query fragments,
their result bindings and the variables they reference. Every mutating call
returns a new builder, so earlier snapshots can be branched and reused safely.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

from ..exceptions import MismatchedVariablesError, NoQueryError

logger = logging.getLogger(__name__)

# GraphQL name grammar: https://spec.graphql.org/June2018/#sec-Names
VARIABLE_NAME_PATTERN = re.compile(r"\$([_A-Za-z][_0-9A-Za-z]*)")

QueryBinding = Tuple[str, Any]


class QueryExecutor(Protocol):
    """Transport able to run built bindings, e.g. ``GraphQLClient``."""

    async def query(
        self, bindings: List[QueryBinding], variables: Dict[str, Any], **options: Any
    ) -> Any: ...

    async def mutate(
        self, bindings: List[QueryBinding], variables: Dict[str, Any], **options: Any
    ) -> Any: ...


def find_variable_names(text: str) -> Tuple[str, ...]:
    """
    Find every variable reference in a query fragment.

    Args:
        text: Query fragment, e.g. ``"user(id: $id)"``

    Returns:
        Variable names without ``$`` in order of appearance, duplicates kept
    """
    return tuple(VARIABLE_NAME_PATTERN.findall(text))


@dataclass(frozen=True)
class QueryFragment:
    """A query fragment with its result binding and required variables."""

    text: str
    binding: Any
    required_variables: Tuple[str, ...]

    @classmethod
    def parse(cls, text: str, binding: Any = None) -> QueryFragment:
        """Create a fragment, scanning ``text`` for variable references."""
        return cls(text, binding, find_variable_names(text))


class QueryBuilder:
    """
    Fluent, immutable builder for multi-fragment GraphQL requests.

    Fragments are raw selections such as ``"user(id: $id)"``. Variables are
    checked against the fragments only when ``build`` is called.

    Examples:
        ```python
        builder = (QueryBuilder()
            .bind("user(id: $id)", Binding(User))
            .bind("viewer", Binding(Viewer))
            .variable("id", "1")
        )
        bindings, variables = builder.build()

        # drop the user query and its now unused "id" variable
        viewer_only = builder.remove("user(id: $id)")
        ```
    """

    __slots__ = ("_fragments", "_variables", "_options")

    def __init__(
        self,
        fragments: Iterable[QueryFragment] = (),
        variables: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Initialize query builder.

        Args:
            fragments: Initial fragments
            variables: Initial variable values
            options: Execution options forwarded to the executor
        """
        self._fragments: Tuple[QueryFragment, ...] = tuple(fragments)
        self._variables: Dict[str, Any] = dict(variables or {})
        self._options: Dict[str, Any] = dict(options or {})

    def _derive(
        self,
        fragments: Optional[Iterable[QueryFragment]] = None,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> QueryBuilder:
        return QueryBuilder(
            self._fragments if fragments is None else fragments,
            self._variables if variables is None else variables,
            self._options,
        )

    @property
    def fragments(self) -> Tuple[QueryFragment, ...]:
        """Registered fragments in insertion order."""
        return self._fragments

    @property
    def options(self) -> Dict[str, Any]:
        """Copy of the execution options."""
        return dict(self._options)

    def __len__(self) -> int:
        return len(self._fragments)

    def __repr__(self) -> str:
        return (
            f"QueryBuilder(fragments={[f.text for f in self._fragments]!r}, "
            f"variables={list(self._variables)!r})"
        )

    def with_context(self, **options: Any) -> QueryBuilder:
        """
        Return a builder carrying execution options.

        Options such as ``operation_name`` or ``headers`` are passed through
        to the executor by ``execute`` and ``mutate``.
        """
        merged = dict(self._options)
        merged.update(options)
        return QueryBuilder(self._fragments, self._variables, merged)

    def bind(self, text: str, binding: Any = None) -> QueryBuilder:
        """
        Add a query fragment and its result binding.

        No validation happens here; unresolved variables surface in ``build``.

        Args:
            text: Query fragment without a selection set
            binding: Destination for the fragment's response data

        Returns:
            New builder with the fragment appended
        """
        fragment = QueryFragment.parse(text, binding)
        logger.debug(
            "Bound query fragment %r requiring %s", text, list(fragment.required_variables)
        )
        return self._derive(fragments=self._fragments + (fragment,))

    query = bind

    def variable(self, name: str, value: Any) -> QueryBuilder:
        """
        Set a variable value, overwriting any previous one.

        ``None`` is a valid value and still counts as declared.
        """
        variables = dict(self._variables)
        variables[name] = value
        return self._derive(variables=variables)

    def variables(self, values: Mapping[str, Any]) -> QueryBuilder:
        """Merge variable values; entries in ``values`` win."""
        variables = dict(self._variables)
        variables.update(values)
        return self._derive(variables=variables)

    def remove(self, text: str, *extra: str) -> QueryBuilder:
        """
        Remove fragments and the variables only they referenced.

        Every fragment whose text matches is removed, duplicates included.
        A variable is dropped when a removed fragment required it and no
        surviving fragment does.

        Args:
            text: Fragment text to remove
            *extra: Further fragment texts to remove

        Returns:
            New builder without the matching fragments
        """
        targets = {text, *extra}
        kept: List[QueryFragment] = []
        orphaned = set()
        for fragment in self._fragments:
            if fragment.text in targets:
                orphaned.update(fragment.required_variables)
            else:
                kept.append(fragment)

        for fragment in kept:
            orphaned.difference_update(fragment.required_variables)

        variables = {k: v for k, v in self._variables.items() if k not in orphaned}
        if orphaned:
            logger.debug("Dropping orphaned variables %s", sorted(orphaned))
        return self._derive(fragments=kept, variables=variables)

    unbind = remove

    def remove_query(self, text: str, *extra: str) -> QueryBuilder:
        """
        Remove fragments only.

        Variables are left untouched; use ``remove`` to drop both.
        """
        targets = {text, *extra}
        return self._derive(
            fragments=[f for f in self._fragments if f.text not in targets]
        )

    def remove_variable(self, name: str, *extra: str) -> QueryBuilder:
        """Remove variables only; fragments may then reference missing names."""
        targets = {name, *extra}
        return self._derive(
            variables={k: v for k, v in self._variables.items() if k not in targets}
        )

    def build(self) -> Tuple[List[QueryBinding], Dict[str, Any]]:
        """
        Validate the builder and produce the request payload.

        Returns:
            ``(text, binding)`` pairs in insertion order and a copy of the variables

        Raises:
            NoQueryError: If no fragment has been bound
            MismatchedVariablesError: If declared and required variables disagree
        """
        if not self._fragments:
            raise NoQueryError()

        required: List[str] = []
        for fragment in self._fragments:
            required.extend(fragment.required_variables)

        mismatched = len(self._variables) != len(required)
        if not mismatched and required:
            mismatched = any(name not in self._variables for name in required)
        if mismatched:
            raise MismatchedVariablesError(required, list(self._variables))

        bindings = [(fragment.text, fragment.binding) for fragment in self._fragments]
        return bindings, dict(self._variables)

    async def execute(self, executor: QueryExecutor) -> Any:
        """
        Build and run the request as a query.

        Args:
            executor: Transport exposing ``query(bindings, variables, **options)``

        Returns:
            Whatever the executor returns
        """
        bindings, variables = self.build()
        return await executor.query(bindings, variables, **self._options)

    async def mutate(self, executor: QueryExecutor) -> Any:
        """Build and run the request as a mutation."""
        bindings, variables = self.build()
        return await executor.mutate(bindings, variables, **self._options)
