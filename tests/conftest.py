"""
Общие fixtures: полностью собранный рынок WETH (collateral) / USDC (borrow)
на управляемых часах.
"""

import pytest

from src.core.domain import MarketParams, OracleConfig
from src.core.environment import Environment
from src.ledger import LendingPool
from src.liquidation import DutchAuctionLiquidator
from src.oracle import PriceOracle, RoundBasedFeed
from src.rates import InterestRateModel
from src.tokens import InMemoryToken, PoolToken

ETH = 10**18
USDC = 10**6
WAD = 10**18

OWNER = "owner"
FACTORY = "factory"
SUPPLIER = "supplier"
BORROWER = "borrower"
KEEPER = "keeper"


class Market:
    """Рынок + helpers для сценариев."""

    def __init__(
        self,
        env: Environment,
        params: MarketParams,
        collateral_token_cls: type = InMemoryToken,
    ):
        self.env = env

        self.weth = collateral_token_cls(env, "weth", "WETH", 18)
        self.usdc = InMemoryToken(env, "usdc", "USDC", 6)

        self.weth_feed = RoundBasedFeed(env, decimals=8, description="WETH / USD")
        self.usdc_feed = RoundBasedFeed(env, decimals=8, description="USDC / USD")
        self.weth_feed.push_answer(2000 * 10**8)
        self.usdc_feed.push_answer(10**8)

        self.oracle = PriceOracle(env, OWNER)
        self.oracle.set_oracle_config(
            OWNER, self.weth.address, OracleConfig(primary_feed=self.weth_feed, token_decimals=18)
        )
        self.oracle.set_oracle_config(
            OWNER, self.usdc.address, OracleConfig(primary_feed=self.usdc_feed, token_decimals=6)
        )

        # 2% base, 10% до kink, 100% после kink, kink 80%
        self.rate_model = InterestRateModel(
            base_rate_per_year=2 * WAD // 100,
            slope_before_kink=10 * WAD // 100,
            slope_after_kink=WAD,
            kink=80 * WAD // 100,
        )

        self.pool = LendingPool(env, "pool-weth-usdc", FACTORY)
        self.pool_token = PoolToken(env, "lp-usdc", self.pool.address, "lpUSDC", 6)
        self.liquidator = DutchAuctionLiquidator(env, "liquidator", OWNER, self.oracle)

        self.pool.initialize(
            FACTORY,
            self.weth,
            self.usdc,
            self.rate_model,
            self.oracle,
            params,
            self.pool_token,
            self.liquidator.address,
            OWNER,
        )
        self.liquidator.authorize_pool(OWNER, self.pool)

    # -------------------------------------------------------------------------
    # helpers
    # -------------------------------------------------------------------------

    def supply(self, user: str, amount: int) -> int:
        self.usdc.mint(user, amount)
        self.usdc.approve(user, self.pool.address, amount)
        return self.pool.deposit(user, amount)

    def post_collateral(self, user: str, amount: int) -> None:
        self.weth.mint(user, amount)
        self.weth.approve(user, self.pool.address, amount)
        self.pool.deposit_collateral(user, amount)

    def open_position(self, user: str, collateral: int, debt: int) -> None:
        self.post_collateral(user, collateral)
        self.pool.borrow(user, debt)

    def fund_keeper(self, keeper: str, amount: int) -> None:
        self.usdc.mint(keeper, amount)
        self.usdc.approve(keeper, self.liquidator.address, amount)

    def set_weth_price(self, usd: int) -> None:
        self.weth_feed.push_answer(usd * 10**8)

    def advance(self, seconds: int) -> None:
        """Сдвиг часов с обновлением feeds (ответы остаются свежими)."""
        self.env.advance(seconds)
        self.weth_feed.push_answer(self.weth_feed.latest_round_data().answer)
        self.usdc_feed.push_answer(self.usdc_feed.latest_round_data().answer)


@pytest.fixture
def env() -> Environment:
    return Environment()


@pytest.fixture
def market_params() -> MarketParams:
    """75% LTV, 80% liquidation threshold, 5% penalty, 10% reserve factor."""
    return MarketParams()


@pytest.fixture
def market(env, market_params) -> Market:
    return Market(env, market_params)


@pytest.fixture
def funded_market(market) -> Market:
    """Рынок со 100,000 USDC ликвидности."""
    market.supply(SUPPLIER, 100_000 * USDC)
    return market
