"""Pydantic models describing a calculator session."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _QueryStateBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class Idle(_QueryStateBase):
    kind: Literal["idle"] = "idle"


class Loading(_QueryStateBase):
    kind: Literal["loading"] = "loading"
    query: str
    generation: int = Field(..., ge=1, description="Counter value of the request in flight")


class Success(_QueryStateBase):
    kind: Literal["success"] = "success"
    query: str
    answer: str


class Failure(_QueryStateBase):
    kind: Literal["failure"] = "failure"
    query: str
    message: str


QueryState = Annotated[Union[Idle, Loading, Success, Failure], Field(discriminator="kind")]


class QueryResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str
    answer: str


class SessionState(BaseModel):
    """Root state of one calculator session.

    ``query`` is a single tagged value, so loading, result and error can never
    be set at the same time.
    """

    input_text: str = ""
    query: QueryState = Field(default_factory=Idle)
    show_help: bool = False

    @property
    def is_loading(self) -> bool:
        return isinstance(self.query, Loading)

    @property
    def result(self) -> QueryResult | None:
        if isinstance(self.query, Success):
            return QueryResult(query=self.query.query, answer=self.query.answer)
        return None

    @property
    def error(self) -> str | None:
        if isinstance(self.query, Failure):
            return self.query.message
        return None


class Evaluation(BaseModel):
    """Outcome of one call to the remote evaluator."""

    status: Literal["SUCCESS", "ERROR"]
    answer: str | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _validate_answer_error(self) -> "Evaluation":
        if self.status == "SUCCESS" and (self.answer is None or self.error is not None):
            raise ValueError("a successful evaluation carries an answer and no error")
        if self.status == "ERROR" and (not self.error or self.answer is not None):
            raise ValueError("a failed evaluation carries an error message and no answer")
        return self

    @property
    def ok(self) -> bool:
        return self.status == "SUCCESS"

    @classmethod
    def success(cls, answer: str) -> "Evaluation":
        return cls(status="SUCCESS", answer=answer)

    @classmethod
    def failure(cls, message: str) -> "Evaluation":
        return cls(status="ERROR", error=message)


__all__ = [
    "Evaluation",
    "Failure",
    "Idle",
    "Loading",
    "QueryResult",
    "QueryState",
    "SessionState",
    "Success",
]
