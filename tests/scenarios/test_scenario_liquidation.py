"""
Сценарии ликвидации end-to-end

Scenario A: supply → collateral → borrow → падение цены → аукцион →
            полное заполнение в середине аукциона
Scenario B: аукцион без заполнений истекает и отменяется
"""

import logging

import pytest

from src.core.domain import AuctionStatus
from src.core.errors import AuctionExpired
from src.core.math import WAD
from tests.conftest import BORROWER, ETH, KEEPER, SUPPLIER, USDC

HALF_DURATION = 10 * 60


class TestScenarioA:
    """Полная ликвидация через Dutch-аукцион"""

    def test_full_cycle(self, market, caplog):
        caplog.set_level(logging.INFO)
        pool = market.pool
        liquidator = market.liquidator

        # 1. Ликвидность и позиция
        market.supply(SUPPLIER, 100_000 * USDC)
        market.open_position(BORROWER, 10 * ETH, 15_000 * USDC)

        assert pool.health_factor(BORROWER) == 1_066_666_666_666_666_666
        assert not pool.is_liquidatable(BORROWER)

        # 2. Цена collateral падает до $1,800
        market.set_weth_price(1_800)
        assert pool.health_factor(BORROWER) == 96 * WAD // 100
        assert pool.is_liquidatable(BORROWER)

        # 3. Старт аукциона: 50% долга, цены от reference 1,800
        total_debt = pool.get_user_debt(BORROWER)
        auction_id = liquidator.start_auction(KEEPER, pool.address, BORROWER)
        auction = liquidator.get_auction(auction_id)

        assert auction.debt_to_repay == total_debt // 2
        assert auction.start_price == 1_800 * 105 * WAD // 100
        assert auction.end_price == 1_800 * 95 * WAD // 100

        # 4. Середина аукциона: линейная середина цены
        market.advance(HALF_DURATION)
        assert liquidator.get_current_price(auction_id) == (
            (auction.start_price + auction.end_price) // 2
        )

        # 5. Заполнение всего оставшегося долга аукциона
        market.fund_keeper(KEEPER, auction.debt_to_repay)
        pool.accrue_interest()
        debt_before = pool.get_user_debt(BORROWER)
        collateral_before = pool.get_position(BORROWER).collateral_amount

        result = liquidator.liquidate(KEEPER, auction_id, auction.debt_to_repay)

        assert result.debt_repaid == 7_500 * USDC
        assert result.collateral_received == 7_500 * ETH // 1_800
        assert result.execution_price == 1_800 * WAD

        closed = liquidator.get_auction(auction_id)
        assert closed.status == AuctionStatus.COMPLETED
        assert liquidator.has_active_auction(pool.address, BORROWER) == (False, 0)

        # 6. Позиция уменьшилась ровно на погашенное / полученное
        position = pool.get_position(BORROWER)
        assert position.collateral_amount == collateral_before - result.collateral_received
        assert pool.get_user_debt(BORROWER) == debt_before - result.debt_repaid
        assert pool.locked_collateral_of(BORROWER) == 0
        assert market.weth.balance_of(KEEPER) == result.collateral_received
        assert pool.health_factor(BORROWER) > WAD

        for event in ("Deposit", "Borrow", "AuctionStarted", "Liquidation", "AuctionExecuted"):
            assert event in caplog.text


class TestScenarioB:
    """Аукцион без покупателей"""

    def test_expired_auction_is_cancelled(self, funded_market, caplog):
        caplog.set_level(logging.INFO, logger="src.liquidation.dutch_auction")
        market = funded_market
        pool = market.pool
        liquidator = market.liquidator

        market.open_position(BORROWER, 10 * ETH, 15_000 * USDC)
        market.set_weth_price(1_800)
        auction_id = liquidator.start_auction(KEEPER, pool.address, BORROWER)
        auction = liquidator.get_auction(auction_id)
        assert pool.locked_collateral_of(BORROWER) == auction.collateral_for_sale

        market.advance(auction.duration + 1)
        market.fund_keeper(KEEPER, auction.debt_to_repay)

        with pytest.raises(AuctionExpired):
            liquidator.liquidate(KEEPER, auction_id, auction.debt_to_repay)

        liquidator.cancel_expired_auction(KEEPER, auction_id)

        assert liquidator.get_auction(auction_id).status == AuctionStatus.CANCELLED
        assert not liquidator.get_auction(auction_id).is_active
        assert liquidator.has_active_auction(pool.address, BORROWER) == (False, 0)
        assert pool.locked_collateral_of(BORROWER) == 0
        assert pool.get_position(BORROWER).collateral_amount == 10 * ETH
        assert "AuctionCancelled" in caplog.text

        # разблокированный collateral снова доступен заёмщику
        market.usdc.mint(BORROWER, 1_000 * USDC)
        market.usdc.approve(BORROWER, pool.address, pool.get_user_debt(BORROWER))
        pool.repay(BORROWER, pool.get_user_debt(BORROWER))
        pool.withdraw_collateral(BORROWER, 10 * ETH)
        assert market.weth.balance_of(BORROWER) == 10 * ETH
