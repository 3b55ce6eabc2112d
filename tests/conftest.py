from __future__ import annotations

from types import SimpleNamespace
from typing import Callable, List

import pytest

from renoest.config import AIConfig
from renoest.models import LineItem, Project, ProjectAddress, Room


@pytest.fixture
def make_item() -> Callable[..., LineItem]:
    def _create(**overrides) -> LineItem:
        fields = {
            "category": "Tile / Stone",
            "description": "Install porcelain floor tile",
            "unit": "sq ft",
            "quantity": 0.0,
            "unit_price": 0.0,
            "labor_rate": 0.0,
            "eco_profit": 0.0,
            "markup": 0.0,
            "payment_due": "Upon contract signing",
        }
        fields.update(overrides)
        return LineItem(**fields)

    return _create


@pytest.fixture
def sample_project(make_item) -> Project:
    """Kitchen item totals 111 (profit 16); bath item totals 24 (profit 4)."""

    kitchen = Room(
        name="Kitchen",
        items=[make_item(quantity=10, unit_price=5, labor_rate=3, eco_profit=20, markup=15)],
        scope_of_work="Replace backsplash tile",
    )
    bath = Room(
        name="Guest Bath",
        items=[make_item(category="Fixtures / Faucets", quantity=2, unit_price=5, labor_rate=5, eco_profit=20)],
    )
    return Project(
        title="Smith Remodel",
        address=ProjectAddress(street="12 Oak St", city="Springfield", state="IL", zip="62701"),
        rooms=[kitchen, bath],
        contingency_pct=10,
        tax_pct=5,
        discount_pct=2,
    )


class FakeResponses:
    def __init__(self, replies: List[object]) -> None:
        self.replies = list(replies)
        self.calls: List[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeClient:
    def __init__(self, replies: List[object]) -> None:
        self.responses = FakeResponses(replies)


@pytest.fixture
def text_response() -> Callable[..., SimpleNamespace]:
    def _create(text: str, urls: List[str] | None = None) -> SimpleNamespace:
        annotations = [SimpleNamespace(type="url_citation", url=url) for url in urls or []]
        return SimpleNamespace(
            output_text=text,
            output=[SimpleNamespace(content=[SimpleNamespace(text=text, annotations=annotations)])],
        )

    return _create


@pytest.fixture
def ai_config(monkeypatch) -> AIConfig:
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    return AIConfig(enabled=True, model="test-model", scope_model="test-scope-model")


@pytest.fixture
def fake_client_factory():
    """Return ``(factory, client)`` wired to canned replies."""

    def _build(*replies: object):
        client = FakeClient(list(replies))
        return (lambda api_key: client), client

    return _build
