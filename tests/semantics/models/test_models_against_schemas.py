"""Schema conformance tests for core Pydantic models.

This test suite validates that core Pydantic models both accept valid inputs
and reject invalid ones in strict alignment with their corresponding JSON
Schemas.
"""

# pylint: disable=line-too-long,missing-function-docstring
# pylint: disable=redefined-outer-name,global-statement
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from jsonschema import ValidationError as JsonSchemaValidationError
from jsonschema import validate as jsonschema_validate
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from curve_guard.core.domain.types import RequestMetadata, TradeRequest, TradeValidationResult
from curve_guard.core.risk.security_config import SecurityConfig

SCHEMA_REGISTRY = Registry()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def load_schema(name: str) -> dict:
    """
    Load JSON schema from the package's schema directory.
    """
    global SCHEMA_REGISTRY

    root = Path(__file__).parent.parent.parent.parent
    schema_path = root / "curve_guard" / "core" / "schemas" / name

    with schema_path.open("r", encoding="utf-8") as f:
        schema = json.load(f)

    schema_id = schema.get("$id")
    if isinstance(schema_id, str) and schema_id:
        resource = Resource.from_contents(schema, default_specification=DRAFT202012)
        SCHEMA_REGISTRY = SCHEMA_REGISTRY.with_resource(schema_id, resource)

    return schema


def dump_for_jsonschema(model: Any) -> dict:
    """
    Dump a Pydantic model to a JSON-compatible dict for schema validation.
    Excludes None values so optional fields are omitted instead of null.
    """
    return model.model_dump(mode="json", exclude_none=True)


def pydantic_validate(model_type: Any, data: dict[str, Any]) -> Any:
    adapter = TypeAdapter(model_type)
    return adapter.validate_python(data)


def assert_pydantic_then_schema_ok(model_type: Any, data: dict[str, Any], schema: dict[str, Any]) -> dict:
    """
    Validate with Pydantic first, then validate the dumped instance with JSON Schema.
    Returns the dumped instance.
    """
    obj = pydantic_validate(model_type, data)
    instance = dump_for_jsonschema(obj)
    jsonschema_validate(instance=instance, schema=schema, registry=SCHEMA_REGISTRY)
    return instance


def assert_schema_invalid_but_pydantic_rejects(model_type: Any, data: dict[str, Any], schema: dict[str, Any]):
    """
    Ensures Pydantic is at least as strict as the JSON Schema for the given input.
    If schema rejects, Pydantic must reject too (otherwise model is too lax).
    """
    with pytest.raises(JsonSchemaValidationError):
        jsonschema_validate(instance=data, schema=schema, registry=SCHEMA_REGISTRY)

    with pytest.raises(PydanticValidationError):
        pydantic_validate(model_type, data)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module", autouse=True)
def _load_metadata_schema() -> None:
    load_schema("request_metadata.schema.json")


@pytest.fixture(scope="module")
def trade_request_schema() -> dict:
    return load_schema("trade_request.schema.json")


@pytest.fixture(scope="module")
def result_schema() -> dict:
    return load_schema("trade_validation_result.schema.json")


@pytest.fixture(scope="module")
def security_config_schema() -> dict:
    return load_schema("security_config.schema.json")


# ---------------------------------------------------------------------------
# TradeRequest
# ---------------------------------------------------------------------------

def make_trade_request(**overrides) -> dict[str, Any]:
    data: dict[str, Any] = {
        "actor": "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU",
        "amount": 1.5,
        "direction": "buy",
        "current_price": 0.000028,
        "virtual_base_reserves": 30.0,
        "virtual_supply_reserves": 1_073_000_000.0,
        "total_liquidity": 85.0,
    }
    data.update(overrides)
    return data


def test_trade_request_valid_minimal(trade_request_schema):
    assert_pydantic_then_schema_ok(TradeRequest, make_trade_request(), trade_request_schema)


def test_trade_request_valid_with_metadata(trade_request_schema):
    data = make_trade_request(
        direction="sell",
        metadata={"origin_address": "203.0.113.7", "client_signature": "bot/1.2"},
    )
    assert_pydantic_then_schema_ok(TradeRequest, data, trade_request_schema)


def test_trade_request_zero_liquidity_is_allowed(trade_request_schema):
    assert_pydantic_then_schema_ok(TradeRequest, make_trade_request(total_liquidity=0.0), trade_request_schema)


def test_trade_request_exclusive_minimum_constraints(trade_request_schema):
    for field in ("amount", "current_price", "virtual_base_reserves", "virtual_supply_reserves"):
        bad = make_trade_request(**{field: 0.0})
        assert_schema_invalid_but_pydantic_rejects(TradeRequest, bad, trade_request_schema)

    bad = make_trade_request(total_liquidity=-1.0)
    assert_schema_invalid_but_pydantic_rejects(TradeRequest, bad, trade_request_schema)


def test_trade_request_direction_enum(trade_request_schema):
    bad = make_trade_request(direction="swap")
    assert_schema_invalid_but_pydantic_rejects(TradeRequest, bad, trade_request_schema)


def test_trade_request_metadata_min_length(trade_request_schema):
    bad = make_trade_request(metadata={"origin_address": ""})
    assert_schema_invalid_but_pydantic_rejects(TradeRequest, bad, trade_request_schema)


def test_trade_request_rejects_additional_properties(trade_request_schema):
    data = make_trade_request()
    data["slippage_tolerance"] = 0.01

    with pytest.raises(PydanticValidationError):
        pydantic_validate(TradeRequest, data)

    with pytest.raises(JsonSchemaValidationError):
        jsonschema_validate(instance=data, schema=trade_request_schema, registry=SCHEMA_REGISTRY)

    bad_meta = make_trade_request(metadata={"session": "abc"})
    assert_schema_invalid_but_pydantic_rejects(TradeRequest, bad_meta, trade_request_schema)


def test_trade_request_non_finite_amount_rejected_by_model():
    with pytest.raises(PydanticValidationError):
        pydantic_validate(TradeRequest, make_trade_request(amount=float("inf")))
    with pytest.raises(PydanticValidationError):
        pydantic_validate(TradeRequest, make_trade_request(amount=float("nan")))


def test_request_metadata_is_all_optional():
    assert pydantic_validate(RequestMetadata, {}) == RequestMetadata()


# ---------------------------------------------------------------------------
# TradeValidationResult
# ---------------------------------------------------------------------------

def test_validation_result_rejected_shape(result_schema):
    instance = dump_for_jsonschema(TradeValidationResult.rejected("nope"))
    jsonschema_validate(instance=instance, schema=result_schema, registry=SCHEMA_REGISTRY)

    assert instance == {
        "is_valid": False,
        "errors": ["nope"],
        "warnings": [],
        "price_impact": 0.0,
        "slippage": 0.0,
        "estimated_output": 0.0,
    }


def test_validation_result_valid_with_warnings(result_schema):
    data = {
        "is_valid": True,
        "errors": [],
        "warnings": ["Elevated price impact: 3.00%"],
        "price_impact": 0.03,
        "slippage": 0.03,
        "estimated_output": 53_571.4,
    }
    assert_pydantic_then_schema_ok(TradeValidationResult, data, result_schema)


def test_validation_result_negative_numbers_rejected(result_schema):
    for field in ("price_impact", "slippage", "estimated_output"):
        bad = {"is_valid": True, "errors": [], "warnings": [], "price_impact": 0.0, "slippage": 0.0, "estimated_output": 0.0}
        bad[field] = -0.1
        assert_schema_invalid_but_pydantic_rejects(TradeValidationResult, bad, result_schema)


# ---------------------------------------------------------------------------
# SecurityConfig
# ---------------------------------------------------------------------------

def test_security_config_defaults_match_schema(security_config_schema):
    instance = dump_for_jsonschema(SecurityConfig())
    jsonschema_validate(instance=instance, schema=security_config_schema, registry=SCHEMA_REGISTRY)

    assert instance["max_price_impact"] == 0.05
    assert instance["emergency_pause_threshold"] == 0.25
    assert instance["rate_limit_per_minute"] == 10
    assert instance["rate_limit_per_hour"] == 100
    assert instance["max_concurrent_trades_per_actor"] == 3
    assert instance["audit_log_capacity"] == 10_000
    assert "max_daily_volume_per_actor" not in instance


def test_security_config_bounds(security_config_schema):
    for bad in (
        {"max_price_impact": 1.0},
        {"max_price_impact": 0},
        {"min_trade_size_fraction": -0.01},
        {"rate_limit_per_minute": 0},
        {"max_concurrent_trades_per_actor": 0},
        {"audit_log_capacity": 0},
        {"max_daily_volume_per_actor": 0},
    ):
        assert_schema_invalid_but_pydantic_rejects(SecurityConfig, bad, security_config_schema)


def test_security_config_rejects_additional_properties(security_config_schema):
    bad = {"max_price_impact": 0.05, "maxPriceImpact": 0.05}
    assert_schema_invalid_but_pydantic_rejects(SecurityConfig, bad, security_config_schema)


def test_security_config_cross_field_ordering_is_model_only(security_config_schema):
    # Ordering between thresholds is not expressible in the schema.
    data = {"max_price_impact": 0.3, "emergency_pause_threshold": 0.2}
    jsonschema_validate(instance=data, schema=security_config_schema, registry=SCHEMA_REGISTRY)

    with pytest.raises(PydanticValidationError):
        pydantic_validate(SecurityConfig, data)

    with pytest.raises(PydanticValidationError):
        pydantic_validate(SecurityConfig, {"min_trade_size_fraction": 0.2, "max_trade_size_fraction": 0.1})
