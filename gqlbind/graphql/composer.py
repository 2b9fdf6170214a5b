"""
Operation composition.

Turns the ``(bindings, variables)`` payload produced by ``QueryBuilder.build``
into a single GraphQL document with a variable-declaration header.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel

from ..exceptions import GraphQLError
from .binding import Binding
from .models import GraphQLOperationType, GraphQLVariable

_ROOT_FIELD = re.compile(r"^\s*(?:([_A-Za-z][_0-9A-Za-z]*)\s*:\s*)?([_A-Za-z][_0-9A-Za-z]*)")

_SCALAR_TYPES: Tuple[Tuple[type, str], ...] = (
    # bool first, it is a subclass of int
    (bool, "Boolean"),
    (int, "Int"),
    (float, "Float"),
    (str, "String"),
)


def response_key(text: str) -> str:
    """
    Key under which a fragment's data appears in the response.

    Args:
        text: Query fragment such as ``"me: user(id: $id)"``

    Returns:
        The alias when present, otherwise the root field name
    """
    match = _ROOT_FIELD.match(text)
    if match is None:
        raise GraphQLError(f"Cannot determine root field of fragment: {text!r}")
    return match.group(1) or match.group(2)


def graphql_type(value: Any) -> str:
    """
    Infer the GraphQL type of a variable value.

    Raises:
        GraphQLError: If the type cannot be inferred
    """
    if isinstance(value, GraphQLVariable):
        return value.type

    for python_type, name in _SCALAR_TYPES:
        if isinstance(value, python_type):
            return f"{name}!"

    if isinstance(value, BaseModel):
        return f"{type(value).__name__}!"

    if isinstance(value, (list, tuple)) and value:
        return f"[{graphql_type(value[0])}]!"

    raise GraphQLError(
        f"Cannot infer GraphQL type for {type(value).__name__} value {value!r}; "
        "wrap it in GraphQLVariable(type, value)"
    )


def _serialize_value(value: Any) -> Any:
    if isinstance(value, GraphQLVariable):
        return _serialize_value(value.value)
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [_serialize_value(item) for item in value]
    return value


def serialize_variables(variables: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert variable values to JSON-ready data."""
    return {name: _serialize_value(value) for name, value in variables.items()}


def _fragment_text(text: str, binding: Any) -> str:
    if not isinstance(binding, Binding):
        raise GraphQLError(
            f"Fragment {text!r} is bound to {type(binding).__name__}, expected Binding"
        )
    selection = binding.selection_set()
    if selection:
        return f"{text} {{ {selection} }}"
    return text


def compose_operation(
    operation_type: GraphQLOperationType,
    bindings: Sequence[Tuple[str, Any]],
    variables: Mapping[str, Any],
    operation_name: Optional[str] = None,
) -> str:
    """
    Compose a GraphQL document from built bindings.

    Args:
        operation_type: Query or mutation
        bindings: ``(text, binding)`` pairs in request order
        variables: Variable values used for the declaration header
        operation_name: Optional operation name

    Returns:
        Operation text, e.g. ``query($id: ID!) { user(id: $id) { name } }``
    """
    operation_line = GraphQLOperationType(operation_type).value
    if operation_name:
        operation_line += f" {operation_name}"

    if variables:
        var_defs = [f"${name}: {graphql_type(value)}" for name, value in variables.items()]
        operation_line += f"({', '.join(var_defs)})"

    fields: List[str] = [_fragment_text(text, binding) for text, binding in bindings]
    return f"{operation_line} {{ {' '.join(fields)} }}"
