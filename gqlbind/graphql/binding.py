"""
Response bindings.

A binding is the destination a query fragment's response data is written to.
Bindings backed by a pydantic model also describe the selection set that is
requested for the fragment.
"""

from __future__ import annotations

import typing
from typing import Any, List, Optional, Type

from pydantic import BaseModel

from ..exceptions import GraphQLError


def _unwrap(annotation: Any) -> Any:
    """Strip Optional/List/Union wrappers down to the item type."""
    origin = typing.get_origin(annotation)
    if origin is None:
        return annotation
    args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
    if not args:
        return annotation
    # List[Model], Optional[Model], Sequence[Model], ...
    for arg in args:
        inner = _unwrap(arg)
        if isinstance(inner, type) and issubclass(inner, BaseModel):
            return inner
    return _unwrap(args[0])


def selection_from_model(model: Type[BaseModel]) -> str:
    """
    Derive a GraphQL selection set from a pydantic model.

    Field aliases are used as GraphQL field names, nested models become
    nested selections.

    Examples:
        ```python
        class User(BaseModel):
            id: str
            display_name: str = Field(alias="displayName")
            friends: List[Friend] = []

        selection_from_model(User)
        # "id displayName friends { id name }"
        ```
    """
    parts: List[str] = []
    for name, info in model.model_fields.items():
        field_name = info.alias or name
        inner = _unwrap(info.annotation)
        if isinstance(inner, type) and issubclass(inner, BaseModel):
            parts.append(f"{field_name} {{ {selection_from_model(inner)} }}")
        else:
            parts.append(field_name)
    return " ".join(parts)


class Binding:
    """
    Destination for one fragment's response data.

    Examples:
        ```python
        user = Binding(User)
        await QueryBuilder().bind("user(id: $id)", user).variable("id", "1").execute(client)
        print(user.data.display_name)

        # scalar root field
        count = Binding()
        # explicit selection without a model
        raw = Binding(selection="id name")
        ```
    """

    def __init__(
        self,
        model: Optional[Type[BaseModel]] = None,
        selection: Optional[str] = None,
        many: bool = False,
    ):
        """
        Initialize binding.

        Args:
            model: Pydantic model used for the selection set and validation
            selection: Explicit selection set, overrides the model-derived one
            many: Whether the field returns a list of ``model``
        """
        self.model = model
        self.selection = selection
        self.many = many
        self.data: Any = None
        self.raw: Any = None
        self.is_populated = False

    def selection_set(self) -> str:
        """Selection set requested for the bound fragment, empty for scalars."""
        if self.selection is not None:
            return self.selection.strip()
        if self.model is not None:
            return selection_from_model(self.model)
        return ""

    def populate(self, raw: Any) -> Any:
        """
        Store response data for the fragment.

        Args:
            raw: Decoded JSON value at the fragment's response key

        Returns:
            The populated ``data`` value

        Raises:
            GraphQLError: If ``many`` is set and ``raw`` is not a list
        """
        if self.many and raw is not None and not isinstance(raw, list):
            raise GraphQLError(
                f"Expected a list for {self!r}, got {type(raw).__name__}"
            )

        self.raw = raw
        self.is_populated = True
        if raw is None or self.model is None:
            self.data = raw
        elif isinstance(raw, list):
            self.data = [self.model.model_validate(item) for item in raw]
        else:
            self.data = self.model.model_validate(raw)
        return self.data

    def __repr__(self) -> str:
        model = self.model.__name__ if self.model else None
        return f"Binding(model={model}, populated={self.is_populated})"
