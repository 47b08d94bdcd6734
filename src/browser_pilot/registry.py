# registry.py
# Action registry: the set of operations the model is allowed to invoke.
#
# Actions are declared explicitly: name, ordered parameters and description
# are supplied by the author. Nothing is inferred from the callback itself.

from typing import Any, Callable, Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field


class ActionArgumentError(ValueError):
    """Raised when plan arguments cannot be bound to an action's parameters."""


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


class ActionParameter(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str = Field(default="string", description="Type tag shown to the model.")
    required: bool = True
    default: Any = None


class ActionDescription(BaseModel):
    """Prompt-facing view of an action."""

    name: str
    description: str
    parameters: list[ActionParameter]


class Action(BaseModel):
    """A named, parameterised operation exposed to the model."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: tuple[ActionParameter, ...] = ()
    callback: Callable[..., Any] = Field(..., exclude=True)

    def bind(self, args: dict[str, Any]) -> list[Any]:
        """
        Map plan arguments onto the declared parameter order.

        The order in which keys appear in `args` is irrelevant. Undeclared
        keys are ignored; optional parameters fall back to their default.
        """
        values: list[Any] = []
        for param in self.parameters:
            if param.name in args:
                values.append(args[param.name])
            elif not param.required:
                values.append(param.default)
            else:
                raise ActionArgumentError(
                    f"Missing required argument '{param.name}' for action '{self.name}'."
                )
        return values

    def invoke(self, args: dict[str, Any]) -> Any:
        return self.callback(*self.bind(args))


# ---------------------------------------------------------------------------
# ActionRegistry
# ---------------------------------------------------------------------------


class ActionRegistry:
    """
    Name → Action mapping. Insertion order is kept for prompt rendering;
    registering an existing name replaces the earlier action in place.
    """

    def __init__(self, actions: Iterable[Action] = ()) -> None:
        self._actions: dict[str, Action] = {}
        for action in actions:
            self.register(action)

    def register(self, action: Action) -> None:
        self._actions[action.name] = action

    def resolve(self, name: str) -> Action | None:
        return self._actions.get(name)

    def describe(self) -> list[ActionDescription]:
        return [
            ActionDescription(
                name=action.name,
                description=action.description,
                parameters=list(action.parameters),
            )
            for action in self._actions.values()
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._actions

    def __iter__(self) -> Iterator[Action]:
        return iter(self._actions.values())

    def __len__(self) -> int:
        return len(self._actions)
