import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.fee_rules import get_rule_config_store, router
from common.fee_rules.config import FeeRulesConfig
from common.fee_rules.errors import RuleSetLoadError
from pipelines.rule_config_store import InMemoryRuleConfigStore


@pytest.fixture
def store() -> InMemoryRuleConfigStore:
    return InMemoryRuleConfigStore(FeeRulesConfig())


@pytest.fixture
def client(store) -> TestClient:
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_rule_config_store] = lambda: store
    return TestClient(app)


def test_list_rules_in_evaluation_order(client):
    resp = client.get("/rules")
    assert resp.status_code == 200
    body = resp.json()
    assert [r["rule_id"] for r in body][0] == "FEE-SPECIFIC-TYPES-PASS-THROUGH"
    assert body[-1]["rule_id"] == "FEE-DEFAULT-SHARE"
    junior = next(r for r in body if r["rule_id"] == "FEE-JUNIOR-SHARE")
    assert junior["enabled"] is False


def test_get_rule(client):
    resp = client.get("/rules/FEE-DEFAULT-SHARE")
    assert resp.status_code == 200
    body = resp.json()
    assert body["display_name"] == "Default percentage share (60%, max 120)"
    assert body["config_model"] == "FeeShareRuleConfig"
    assert "percentage" in body["config_schema"]["properties"]


def test_unknown_rule_is_404(client):
    assert client.get("/rules/NOPE").status_code == 404
    assert client.put("/rules/NOPE", json={}).status_code == 404


def test_update_rule_parameters(client, store):
    resp = client.put("/rules/FEE-DEFAULT-SHARE", json={"percentage": 0.5, "cap_amount": 100})
    assert resp.status_code == 200
    assert resp.json()["display_name"] == "Default percentage share (50%, max 100)"
    assert store.load().rules["FEE-DEFAULT-SHARE"] == {"percentage": "0.5", "cap_amount": "100"}


def test_invalid_parameters_are_rejected(client, store):
    resp = client.put("/rules/FEE-DEFAULT-SHARE", json={"percentage": 2})
    assert resp.status_code == 400
    assert resp.json()["detail"][0]["loc"] == ["percentage"]
    assert store.load().rules == {}


def test_broken_store_is_500():
    class _Broken:
        def load(self):
            raise RuleSetLoadError("bad json")

        def save(self, config):
            pass

    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_rule_config_store] = lambda: _Broken()
    resp = TestClient(app).get("/rules")
    assert resp.status_code == 500
    assert "bad json" in resp.json()["detail"]
