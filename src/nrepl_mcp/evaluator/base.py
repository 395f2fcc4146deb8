"""Evaluator contract - what the bridge needs from a live Clojure session."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class EvalOutcome:
    """The result of one evaluation.

    ``value`` is the printed representation of the result and is ``None``
    when evaluation failed; ``out`` and ``err`` hold whatever the code wrote
    to stdout and stderr. On failure ``err`` starts with ``"Error: "``.
    """

    value: str | None = None
    out: str = ""
    err: str = ""

    @property
    def failed(self) -> bool:
        return self.value is None and self.err.startswith("Error: ")


@dataclass
class OutputBuffer:
    """Per-call sink for output the evaluator streams back.

    One is created for each evaluation and dropped afterwards, so captured
    output never outlives or leaks across calls.
    """

    out: list[str] = field(default_factory=list)
    err: list[str] = field(default_factory=list)
    values: list[str] = field(default_factory=list)

    def write_out(self, text: str) -> None:
        self.out.append(text)

    def write_err(self, text: str) -> None:
        self.err.append(text)

    def add_value(self, text: str) -> None:
        self.values.append(text)

    def outcome(self) -> EvalOutcome:
        return EvalOutcome(
            value=self.values[-1] if self.values else None,
            out="".join(self.out),
            err="".join(self.err),
        )

    def failure(self, message: str) -> EvalOutcome:
        err = "".join(self.err)
        return EvalOutcome(
            value=None,
            out="".join(self.out),
            err=f"Error: {message}\n{err}" if err else f"Error: {message}",
        )


@runtime_checkable
class Evaluator(Protocol):
    """An interactive Clojure session the bridge evaluates against.

    ``evaluate`` never raises for failures of the evaluated code; those come
    back inside the ``EvalOutcome``. Every method raises ``EvaluatorError``
    when the session itself cannot be reached.
    """

    async def evaluate(self, code: str, namespace: str) -> EvalOutcome:
        """Evaluate every form in ``code`` with ``namespace`` as the current namespace."""
        ...

    async def require_namespace(self, namespace: str) -> None:
        """Require ``namespace``, raising ``EvaluationError`` if it cannot be loaded."""
        ...

    async def file_exists(self, path: str) -> bool:
        """Whether ``path`` names a regular file the evaluator can load."""
        ...
