"""
Tests for JSON Schema Contract Validators

Комплексное тестирование JSON Schema валидаторов:
- Валидность самих схем
- Валидация правильных данных
- Детекция нарушений required полей и типов
- Детекция нарушений constraints (min/max/enum)
- Интеграция с Pydantic моделями (model_dump(mode="json"))
"""

import pytest
from jsonschema import ValidationError

from src.core.contracts import (
    Contract,
    ContractValidator,
    load_schema,
    validate_auction,
    validate_auction_config,
    validate_market_params,
    validate_position,
)
from src.core.domain import Auction, AuctionStatus, Position
from src.core.math import WAD


# =============================================================================
# FIXTURES - VALID DATA SAMPLES
# =============================================================================


@pytest.fixture
def valid_market_params():
    return {
        "ltv": 75 * WAD // 100,
        "liquidation_threshold": 80 * WAD // 100,
        "liquidation_penalty": 5 * WAD // 100,
        "reserve_factor": 10 * WAD // 100,
    }


@pytest.fixture
def valid_auction_config():
    return {
        "duration": 1200,
        "start_premium": 105 * WAD // 100,
        "end_discount": 95 * WAD // 100,
        "close_factor": WAD // 2,
    }


@pytest.fixture
def auction_model():
    return Auction(
        auction_id=3,
        user="borrower",
        pool="pool",
        debt_to_repay=7_500 * 10**6,
        collateral_for_sale=4_375 * 10**15,
        start_time=1_700_000_000,
        end_time=1_700_001_200,
        start_price=1_890 * WAD,
        end_price=1_710 * WAD,
    )


# =============================================================================
# SCHEMA LOADING
# =============================================================================


class TestSchemaLoading:
    @pytest.mark.parametrize("contract", list(Contract))
    def test_schemas_load_and_are_valid(self, contract):
        schema = load_schema(contract.value)
        assert schema["title"] == contract.value
        assert ContractValidator(contract).schema is schema

    def test_schema_cached(self):
        assert load_schema("position") is load_schema("position")

    def test_missing_schema(self):
        with pytest.raises(FileNotFoundError):
            load_schema("does_not_exist")

    def test_unknown_contract(self):
        with pytest.raises(ValueError):
            ContractValidator("market_state")

    def test_validator_accepts_contract_name(self):
        assert ContractValidator("position").contract is Contract.POSITION


# =============================================================================
# MARKET PARAMS
# =============================================================================


class TestMarketParamsContract:
    def test_valid(self, valid_market_params):
        validate_market_params(valid_market_params)
        assert ContractValidator(Contract.MARKET_PARAMS).is_valid(valid_market_params)

    def test_missing_field(self, valid_market_params):
        del valid_market_params["reserve_factor"]
        with pytest.raises(ValidationError):
            validate_market_params(valid_market_params)

    def test_float_rejected(self, valid_market_params):
        valid_market_params["ltv"] = 0.75
        assert not ContractValidator(Contract.MARKET_PARAMS).is_valid(valid_market_params)

    def test_penalty_above_cap(self, valid_market_params):
        valid_market_params["liquidation_penalty"] = WAD
        errors = list(ContractValidator(Contract.MARKET_PARAMS).iter_errors(valid_market_params))
        assert len(errors) == 1
        assert errors[0].path[0] == "liquidation_penalty"

    def test_describe_errors(self, valid_market_params):
        valid_market_params["ltv"] = -1
        del valid_market_params["reserve_factor"]
        described = ContractValidator(Contract.MARKET_PARAMS).describe_errors(valid_market_params)
        assert len(described) == 2
        assert described[0].startswith("<root>: 'reserve_factor'")
        assert described[1].startswith("ltv: ")

    def test_unknown_field(self, valid_market_params):
        valid_market_params["oracle"] = "0xabc"
        with pytest.raises(ValidationError):
            validate_market_params(valid_market_params)


# =============================================================================
# AUCTION CONFIG
# =============================================================================


class TestAuctionConfigContract:
    def test_valid(self, valid_auction_config):
        validate_auction_config(valid_auction_config)

    def test_start_premium_must_exceed_one(self, valid_auction_config):
        valid_auction_config["start_premium"] = WAD
        assert not ContractValidator(Contract.AUCTION_CONFIG).is_valid(valid_auction_config)

    def test_end_discount_below_one(self, valid_auction_config):
        valid_auction_config["end_discount"] = WAD
        assert not ContractValidator(Contract.AUCTION_CONFIG).is_valid(valid_auction_config)


# =============================================================================
# SNAPSHOTS (Pydantic integration)
# =============================================================================


class TestSnapshotContracts:
    def test_position_dump_validates(self):
        data = Position(collateral_amount=10 * 10**18, borrow_shares=15_000 * 10**6).model_dump(
            mode="json"
        )
        validate_position(data)

    def test_negative_position_rejected(self):
        assert not ContractValidator(Contract.POSITION).is_valid({"collateral_amount": -1, "borrow_shares": 0})

    def test_auction_dump_validates(self, auction_model):
        data = auction_model.model_dump(mode="json")
        assert data["status"] == "active"
        validate_auction(data)

    def test_cancelled_auction_dump_validates(self, auction_model):
        cancelled = auction_model.model_copy(update={"status": AuctionStatus.CANCELLED})
        validate_auction(cancelled.model_dump(mode="json"))

    def test_unknown_status_rejected(self, auction_model):
        data = auction_model.model_dump(mode="json")
        data["status"] = "paused"
        assert not ContractValidator(Contract.AUCTION).is_valid(data)
