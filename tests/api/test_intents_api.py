import pytest
from fastapi.testclient import TestClient

from conftest import FIXED_MS, SUI_VALIDATOR, VALID_ADDRESS, fixed_clock
from intenus.api.dependencies import get_resolver
from intenus.core.intent import IntentResolver
from intenus.main import app
from intenus.services.tokens import default_token_registry

client = TestClient(app)


@pytest.fixture(autouse=True)
def frozen_resolver():
    app.dependency_overrides[get_resolver] = lambda: IntentResolver(
        fixed_clock, SUI_VALIDATOR, token_registry=default_token_registry
    )
    yield
    app.dependency_overrides.clear()


def build(**fields) -> dict:
    payload = {
        "user_address": VALID_ADDRESS,
        "description": "Swap 100 SUI to USDC",
        "input_token": "SUI",
        "input_amount": "100",
        "output_token": "USDC",
        "priority": "maximize_output",
    }
    payload.update(fields)
    return payload


def built_intent(**fields) -> dict:
    resp = client.post("/intents/build", json=build(**fields))
    assert resp.status_code == 200, resp.json()
    return resp.json()["intent"]


def test_root_and_health():
    assert client.get("/").json()["health"] == "/healthz"
    health = client.get("/healthz").json()
    assert health["status"] == "healthy"
    assert health["igs_version"] == "1.0.0"
    assert health["supported_tokens"] == 5


def test_request_id_header_is_echoed():
    resp = client.get("/healthz", headers={"x-request-id": "abc123"})
    assert resp.headers["x-request-id"] == "abc123"


def test_list_tokens():
    tokens = client.get("/tokens").json()
    assert [t["symbol"] for t in tokens] == ["SUI", "WAL", "USDC", "USDT", "WETH"]
    assert tokens[0]["asset_id"] == "0x2::sui::SUI"


def test_build_intent_with_smart_defaults():
    resp = client.post("/intents/build", json=build())
    assert resp.status_code == 200, resp.json()
    data = resp.json()

    intent = data["intent"]
    assert intent["object"]["created_ts"] == FIXED_MS
    assert intent["constraints"]["max_slippage_bps"] == 100
    assert intent["operation"]["inputs"][0]["amount"] == {"type": "exact", "value": "100000000000"}
    assert intent["operation"]["outputs"][0]["amount"] == {"type": "all"}
    assert data["parameters"]["min_solver_stake"] == "1000000000000"
    assert data["analysis"]["complexity"]["level"] == "moderate"
    assert data["smart_defaults"] == {
        "expected_slippage": "1.00%",
        "estimated_gas_range": "$0.03-0.08",
        "max_gas_cost": "0.05",
        "auto_revoke_hours": 1,
        "solver_competition": "high - competitive",
    }
    assert "explanation" not in data


def test_build_with_market_overrides_and_explanation():
    resp = client.post(
        "/intents/build",
        json=build(
            output_amount="95",
            slippage_bps=25,
            deadline_minutes=10,
            protocol_whitelist=["cetus"],
            market={"volatility": "high", "liquidity": "excellent"},
            include_explanation=True,
        ),
    )
    assert resp.status_code == 200, resp.json()
    data = resp.json()
    assert data["intent"]["constraints"]["max_slippage_bps"] == 25
    assert data["intent"]["constraints"]["routing"]["whitelist_protocols"] == ["cetus"]
    assert data["intent"]["operation"]["outputs"][0]["amount"]["min"] == "95000000"
    assert data["explanation"]["execution_plan"]["estimated_time"] == "10 minutes"


def test_unknown_priority_falls_back_to_balanced():
    intent = built_intent(priority="moon")
    assert intent["preferences"]["optimization_goal"] == "balanced"


def test_invalid_address_is_a_tagged_400():
    resp = client.post("/intents/build", json=build(user_address="0x1234"))
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "InvalidAddress"


def test_unsupported_token_lists_alternatives():
    resp = client.post("/intents/build", json=build(output_token="DOGE"))
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["code"] == "UnsupportedAsset"
    assert "USDC" in detail["supported_tokens"]


def test_bad_human_amount():
    resp = client.post("/intents/build", json=build(input_amount="ten"))
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "InvalidAmount"


@pytest.mark.parametrize(
    "fields,code",
    [
        ({"user_address": "not-an-address", "input_amount": "abc"}, "InvalidAddress"),
        ({"user_address": "not-an-address", "input_token": "DOGE"}, "InvalidAddress"),
        ({"input_amount": "abc", "input_token": "US$"}, "InvalidAmount"),
        ({"input_token": "US$"}, "InvalidSymbol"),
        ({"output_token": "DO GE"}, "InvalidSymbol"),
    ],
)
def test_build_checks_follow_resolver_order(fields, code):
    resp = client.post("/intents/build", json=build(**fields))
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == code


@pytest.mark.parametrize("amount", ["1e5000", "1" * 5000])
def test_oversized_amount_is_a_tagged_400(amount):
    resp = client.post("/intents/build", json=build(input_amount=amount))
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "InvalidAmount"


def test_override_out_of_range():
    resp = client.post("/intents/build", json=build(slippage_bps=20_000))
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "OverrideOutOfRange"


def test_boolean_override_is_rejected_by_schema():
    resp = client.post("/intents/build", json=build(slippage_bps=True))
    assert resp.status_code == 422


def test_validate_roundtrip():
    intent = built_intent()
    resp = client.post("/intents/validate", params={"explain": "true"}, json=intent)
    assert resp.status_code == 200
    data = resp.json()
    assert data["valid"] is True
    assert data["compliance_score"] == 100
    assert data["explanation"]["risk_assessment"]["risk_level"] == "low"


def test_validate_reports_fixes():
    resp = client.post("/intents/validate", json={"user_address": VALID_ADDRESS})
    assert resp.status_code == 200
    data = resp.json()
    assert data["valid"] is False
    assert 'Add igs_version: "1.0.0"' in data["fix_suggestions"]


def test_compare():
    fast = built_intent(priority="fastest_execution", urgency="urgent")
    safe = built_intent(priority="maximum_safety", risk_tolerance="low")
    resp = client.post(
        "/intents/compare",
        json={"intents": [fast, safe], "criteria": ["execution_speed", "privacy_level"]},
    )
    assert resp.status_code == 200, resp.json()
    data = resp.json()
    assert data["best_by_criterion"] == {"execution_speed": 0, "privacy_level": 1}
    assert len(data["items"]) == 2


def test_compare_needs_two_intents():
    resp = client.post("/intents/compare", json={"intents": [built_intent()]})
    assert resp.status_code == 422


def test_compare_rejects_unknown_criterion():
    intent = built_intent()
    resp = client.post("/intents/compare", json={"intents": [intent, intent], "criteria": ["vibes"]})
    assert resp.status_code == 422


def test_compare_rejects_invalid_document():
    resp = client.post("/intents/compare", json={"intents": [built_intent(), {"igs_version": "1.0.0"}]})
    assert resp.status_code == 422
    assert resp.json()["detail"]["index"] == 1


def test_validate_reports_oversized_stake():
    intent = built_intent()
    intent["object"]["policy"]["access_condition"]["min_solver_stake"] = "1" * 5000
    resp = client.post("/intents/validate", json=intent)
    assert resp.status_code == 200
    assert resp.json()["valid"] is False


def test_compare_rejects_non_numeric_gas_cost():
    intent = built_intent()
    intent["constraints"]["max_gas_cost"] = "cheap"
    resp = client.post("/intents/compare", json={"intents": [intent, intent]})
    assert resp.status_code == 422
    assert any("max_gas_cost" in error for error in resp.json()["detail"]["errors"])
