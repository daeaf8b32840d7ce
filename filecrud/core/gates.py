"""Per-operation gates: ordered authorization steps run before a handler."""

import inspect
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

import structlog
from starlette.responses import Response

from filecrud.core.exceptions import (
    AuthorizationDenied,
    AuthorizationError,
    ConfigurationError,
    FileCrudError,
)

if TYPE_CHECKING:
    from filecrud.core.context import FileRequestContext

logger = structlog.get_logger()

GATE_NAMES: tuple[str, ...] = ("list", "get", "post", "move", "delete")

CallNext: TypeAlias = Callable[[], Awaitable[Response | None]]
Step: TypeAlias = Callable[
    ["FileRequestContext", CallNext], Response | None | Awaitable[Response | None]
]
Terminal: TypeAlias = Callable[[], Awaitable[Response]]


@dataclass(frozen=True)
class Allow:
    """No extra step; the operation runs straight away."""


@dataclass(frozen=True)
class Deny:
    """Unconditional denial."""


@dataclass(frozen=True)
class Steps:
    """Ordered chain of steps."""

    steps: tuple[Step, ...]


@dataclass(frozen=True)
class Alias:
    """Reuse the steps configured for another gate."""

    name: str


Gate: TypeAlias = Allow | Deny | Steps | Alias


def parse_steps(value: Any) -> tuple[Step, ...]:
    """Normalize a single step or a sequence of steps into a tuple."""
    if value is None:
        return ()
    if callable(value):
        return (value,)
    if isinstance(value, Sequence) and not isinstance(value, str):
        for step in value:
            if not callable(step):
                raise ConfigurationError(f"Gate step {step!r} is not callable")
        return tuple(value)
    raise ConfigurationError(f"Cannot use {value!r} as a step sequence")


def parse_gate(value: Any) -> Gate:
    """Turn a gate option (bool, callable, sequence, alias name) into a Gate."""
    if isinstance(value, Allow | Deny | Steps | Alias):
        return value
    if value is None or value is True:
        return Allow()
    if value is False:
        return Deny()
    if isinstance(value, str):
        return Alias(value)
    steps = parse_steps(value)
    return Steps(steps) if steps else Allow()


class GateRunner:
    """Resolve gates by name and run their steps strictly one at a time."""

    def __init__(self, gates: Mapping[str, Gate]) -> None:
        self._gates = dict(gates)

    def resolve(self, name: str) -> Allow | Deny | Steps:
        """Follow alias indirections until a concrete gate is reached."""
        if name not in self._gates:
            raise ConfigurationError(f"Unknown gate '{name}'")
        seen = [name]
        gate = self._gates[name]
        while isinstance(gate, Alias):
            if gate.name not in self._gates:
                raise ConfigurationError(
                    f"Gate '{seen[-1]}' refers to unknown gate '{gate.name}'"
                )
            if gate.name in seen:
                chain = " -> ".join([*seen, gate.name])
                raise ConfigurationError(f"Gate alias cycle: {chain}")
            seen.append(gate.name)
            gate = self._gates[gate.name]
        return gate

    def validate(self) -> None:
        """Resolve every gate once so bad aliases fail at configuration time."""
        for name in self._gates:
            self.resolve(name)

    async def run(
        self, ctx: "FileRequestContext", name: str, on_allow: Terminal
    ) -> Response:
        """Gate ``on_allow`` behind the named gate.

        Raises ``AuthorizationDenied`` for a ``Deny`` gate and for a chain
        that stopped without producing a response.
        """
        gate = self.resolve(name)
        if isinstance(gate, Allow):
            return await on_allow()
        if isinstance(gate, Deny):
            logger.info("Gate denied request", gate=name, path=ctx.path)
            raise AuthorizationDenied()

        response = await self.run_chain(ctx, gate.steps, on_allow)
        if response is None:
            logger.info("Gate halted without a response", gate=name, path=ctx.path)
            raise AuthorizationDenied()
        return response

    async def run_chain(
        self,
        ctx: "FileRequestContext",
        steps: Sequence[Step],
        on_allow: Terminal,
    ) -> Response | None:
        """Run ``steps`` in order, finishing with ``on_allow``.

        Returns ``None`` when a step neither called ``call_next`` nor
        returned a response. Only exceptions raised by a step's own code
        become ``AuthorizationError``; anything raised further down the
        chain propagates unchanged.
        """

        async def invoke(index: int) -> Response | None:
            if index == len(steps):
                return await on_allow()

            step = steps[index]
            called = False
            downstream: Response | None = None
            downstream_error: Exception | None = None

            async def call_next() -> Response | None:
                nonlocal called, downstream, downstream_error
                if called:
                    raise RuntimeError("call_next() called more than once")
                called = True
                try:
                    downstream = await invoke(index + 1)
                except Exception as exc:
                    downstream_error = exc
                    raise
                return downstream

            try:
                result = step(ctx, call_next)
                if inspect.isawaitable(result):
                    result = await result
            except FileCrudError:
                raise
            except Exception as exc:
                # Errors from later steps or the operation are not this step's.
                if exc is downstream_error:
                    raise
                detail = str(exc) or type(exc).__name__
                logger.warning("Gate step failed", step=index, error=detail)
                raise AuthorizationError(message=detail) from exc

            if result is None:
                return downstream
            if not isinstance(result, Response):
                raise ConfigurationError(
                    f"Gate step returned {type(result).__name__}, expected a Response"
                )
            return result

        return await invoke(0)
