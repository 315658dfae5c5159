"""Shared pytest fixtures: stub evaluators and calculator controllers."""

from __future__ import annotations

import asyncio

import pytest

from mathbot.domain.calculator import AppController
from mathbot.domain.models import Evaluation
from mathbot.domain.presenter import ResultPresenter
from mathbot.i18n import I18nService


class StubEvaluator:
    """Replies from a queue of canned evaluations, recording every query."""

    def __init__(self, *evaluations: Evaluation) -> None:
        self._evaluations = list(evaluations)
        self.calls: list[str] = []

    async def evaluate(self, query: str) -> Evaluation:
        self.calls.append(query)
        if not self._evaluations:
            raise AssertionError(f"Unexpected evaluation of {query!r}")
        return self._evaluations.pop(0)


class GatedEvaluator:
    """Blocks every evaluation until the test releases it."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.started = asyncio.Event()
        self._pending: list[asyncio.Future] = []

    async def evaluate(self, query: str) -> Evaluation:
        self.calls.append(query)
        future = asyncio.get_running_loop().create_future()
        self._pending.append(future)
        self.started.set()
        return await future

    def release(self, evaluation: Evaluation) -> None:
        self._pending.pop(0).set_result(evaluation)


@pytest.fixture
def presenter() -> ResultPresenter:
    return ResultPresenter(I18nService(default_locale="en"), locale="en")


@pytest.fixture
def make_controller(presenter):
    def _make(evaluator) -> AppController:
        return AppController(evaluator, presenter)

    return _make


@pytest.fixture
def stub_evaluator_cls():
    return StubEvaluator


@pytest.fixture
def gated_evaluator() -> GatedEvaluator:
    return GatedEvaluator()
