"""Registry of named admin operations."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from petclaim.db.session import ClientCapability, get_sessionmaker

Handler = Callable[[AsyncSession, Any], Awaitable[dict[str, Any]]]


class AdminOperationError(RuntimeError):
    """Raised when an operation cannot run or its input is invalid."""


class NoInput(BaseModel):
    """Input model for operations that take no parameters."""

    model_config = ConfigDict(extra="forbid")


@dataclass(frozen=True, slots=True)
class AdminOperation:
    """A connect / query-or-mutate / report unit of operator work."""

    name: str
    summary: str
    input_model: type[BaseModel]
    capability: ClientCapability
    handler: Handler

    def parse(self, params: Mapping[str, Any]) -> BaseModel:
        try:
            return self.input_model.model_validate(dict(params))
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
                for err in exc.errors()
            )
            raise AdminOperationError(f"Invalid input for {self.name}: {problems}") from exc


_REGISTRY: dict[str, AdminOperation] = {}


def admin_operation(
    name: str,
    *,
    input_model: type[BaseModel] = NoInput,
    capability: ClientCapability = ClientCapability.ELEVATED,
) -> Callable[[Handler], Handler]:
    """Register ``handler`` under ``name``; the docstring's first line is its summary."""

    def decorator(handler: Handler) -> Handler:
        if name in _REGISTRY:
            raise ValueError(f"Admin operation {name!r} already registered")
        doc = inspect.getdoc(handler) or ""
        _REGISTRY[name] = AdminOperation(
            name=name,
            summary=doc.splitlines()[0] if doc else "",
            input_model=input_model,
            capability=capability,
            handler=handler,
        )
        return handler

    return decorator


def get_operation(name: str) -> AdminOperation:
    try:
        return _REGISTRY[name]
    except KeyError as exc:
        raise AdminOperationError(f"Unknown admin operation: {name}") from exc


def list_operations() -> list[AdminOperation]:
    return [_REGISTRY[name] for name in sorted(_REGISTRY)]


async def run_operation(
    name: str,
    params: Mapping[str, Any] | None = None,
    *,
    sessionmaker: async_sessionmaker[AsyncSession] | None = None,
) -> dict[str, Any]:
    """Validate ``params`` and run the named operation in its own session."""

    operation = get_operation(name)
    parsed = operation.parse(params or {})
    factory = sessionmaker or get_sessionmaker(capability=operation.capability)
    async with factory() as session:
        return await operation.handler(session, parsed)
