"""
Lending Pool — ledger изолированного рынка

Share-based учёт supply/borrow, начисление процентов, collateral,
health factor и hooks ликвидации.

Состояние рынка:
- total_supply_assets / total_supply_shares — supply сторона
- total_borrow_assets / total_borrow_shares — borrow сторона
- borrow_index — кумулятивный множитель процентов (с 1 WAD)
- total_collateral, total_reserves, last_accrual_time

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. total_supply_shares == 0 ⇔ total_supply_assets == 0 (аналогично borrow)
2. borrow_index не убывает
3. Σ positions.borrow_shares == total_borrow_shares
4. total_borrow_assets <= total_supply_assets (reserve cut ограничен запасом S - B)
5. Округление всегда в пользу протокола:
   - shares при deposit → DOWN, shares при withdraw → UP
   - borrow shares при borrow → UP, при repay → DOWN
   - стоимость collateral → DOWN, стоимость долга → UP

Каждая state-mutating операция — неделимая единица (non_reentrant +
Environment.transaction): при ошибке все изменения откатываются.
Перевод токенов выполняется строго до (pull) или строго после (push)
внутренних изменений.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from src.core.domain.market_params import MarketParams
from src.core.domain.position import Position
from src.core.environment import Environment, Journaled, non_reentrant, require_address
from src.core.errors import (
    AlreadyInitialized,
    InsufficientBalance,
    InsufficientCollateral,
    InsufficientLiquidity,
    InsufficientLocked,
    InvalidParameters,
    MarketNotInitialized,
    NoDebt,
    OnlyFactory,
    OnlyLiquidator,
    OnlyOwner,
    SameToken,
    TransferFailed,
    WouldBeUndercollateralized,
    ZeroAmount,
)
from src.core.math.fixed_point import (
    MAX_UINT256,
    WAD,
    Rounding,
    mul_div,
    usd_to_amount,
    value_in_usd,
    wad_div,
    wad_mul,
)
from src.oracle.price_oracle import PriceOracle
from src.rates.interest_rate_model import InterestRateModel
from src.tokens.pool_token import PoolToken
from src.tokens.token import Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccrualSnapshot:
    """Итоги рынка с учётом начисленных (pending) процентов."""

    total_supply_assets: int
    total_borrow_assets: int
    total_reserves: int
    borrow_index: int
    accrued: int


class LendingPool(Journaled):
    """
    Ledger изолированного рынка.

    Двухфазное создание: LendingPool(env, address, factory), затем
    initialize(...) от имени factory.

    Args:
        env: Окружение (часы, транзакции)
        address: Адрес пула (идентификатор рынка)
        factory: Принципал, единственный имеющий право вызвать initialize
    """

    _journal_fields = (
        "total_supply_assets",
        "total_supply_shares",
        "total_borrow_assets",
        "total_borrow_shares",
        "borrow_index",
        "total_collateral",
        "total_reserves",
        "last_accrual_time",
        "total_locked_collateral",
        "_positions",
        "_locked_collateral",
        "liquidator",
        "owner",
    )

    def __init__(self, env: Environment, address: str, factory: str):
        self.env = env
        self.address = require_address(address, "pool address")
        self.factory = require_address(factory, "factory")

        self.initialized = False
        self._entered = False

        self.collateral_token: Optional[Token] = None
        self.borrow_token: Optional[Token] = None
        self.pool_token: Optional[PoolToken] = None
        self.rate_model: Optional[InterestRateModel] = None
        self.oracle: Optional[PriceOracle] = None
        self.params: Optional[MarketParams] = None
        self.liquidator = ""
        self.owner = ""

        self.total_supply_assets = 0
        self.total_supply_shares = 0
        self.total_borrow_assets = 0
        self.total_borrow_shares = 0
        self.borrow_index = WAD
        self.total_collateral = 0
        self.total_reserves = 0
        self.last_accrual_time = 0
        self.total_locked_collateral = 0

        self._positions: dict[str, Position] = {}
        self._locked_collateral: dict[str, int] = {}

        env.register(self)

    def __repr__(self) -> str:
        return f"LendingPool({self.address})"

    # =========================================================================
    # INITIALIZATION / ADMIN
    # =========================================================================

    def initialize(
        self,
        sender: str,
        collateral_token: Token,
        borrow_token: Token,
        rate_model: InterestRateModel,
        oracle: PriceOracle,
        params: MarketParams,
        pool_token: PoolToken,
        liquidator: str,
        owner: str,
    ) -> None:
        """
        Однократная инициализация рынка.

        Raises:
            OnlyFactory: sender не factory
            AlreadyInitialized: Повторный вызов
            ZeroAddress: Не задан liquidator/owner
            SameToken: collateral и borrow токен совпадают
        """
        if sender != self.factory:
            raise OnlyFactory(f"{sender} is not the factory of {self.address}")
        if self.initialized:
            raise AlreadyInitialized(f"{self.address} already initialized")
        require_address(liquidator, "liquidator")
        require_address(owner, "owner")
        if collateral_token.address == borrow_token.address:
            raise SameToken(f"collateral and borrow token are both {borrow_token.address}")
        if pool_token.pool_address != self.address:
            raise InvalidParameters(
                f"pool token is owned by {pool_token.pool_address}, not {self.address}"
            )

        self.collateral_token = collateral_token
        self.borrow_token = borrow_token
        self.rate_model = rate_model
        self.oracle = oracle
        self.params = params
        self.pool_token = pool_token
        self.liquidator = liquidator
        self.owner = owner
        self.last_accrual_time = self.env.now
        self.initialized = True

        logger.info(
            "MarketInitialized pool=%s collateral=%s borrow=%s ltv=%d lt=%d",
            self.address,
            collateral_token.address,
            borrow_token.address,
            params.ltv,
            params.liquidation_threshold,
        )

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise MarketNotInitialized(f"{self.address} is not initialized")

    def _only_liquidator(self, sender: str) -> None:
        if sender != self.liquidator:
            raise OnlyLiquidator(f"{sender} is not the liquidator of {self.address}")

    @non_reentrant
    def set_liquidator(self, sender: str, liquidator: str) -> None:
        self._require_initialized()
        if sender != self.owner:
            raise OnlyOwner(f"{sender} is not the owner of {self.address}")
        require_address(liquidator, "liquidator")
        previous = self.liquidator
        self.liquidator = liquidator
        logger.info("LiquidatorSet pool=%s old=%s new=%s", self.address, previous, liquidator)

    # =========================================================================
    # INTEREST ACCRUAL
    # =========================================================================

    def _pending_accrual(self) -> AccrualSnapshot:
        """
        Итоги после начисления процентов на текущий момент (без записи).

        factor = 1 + borrow_rate * elapsed (линейно за вызов)
        reserve_cut = min(accrued * reserve_factor, S - B)
        """
        elapsed = self.env.now - self.last_accrual_time
        if elapsed <= 0 or self.total_borrow_assets == 0:
            return AccrualSnapshot(
                total_supply_assets=self.total_supply_assets,
                total_borrow_assets=self.total_borrow_assets,
                total_reserves=self.total_reserves,
                borrow_index=self.borrow_index,
                accrued=0,
            )

        rate = self.rate_model.get_borrow_rate(self.total_supply_assets, self.total_borrow_assets)
        factor = WAD + rate * elapsed

        new_borrow_assets = mul_div(self.total_borrow_assets, factor, WAD, Rounding.UP)
        accrued = new_borrow_assets - self.total_borrow_assets
        # reserves не выводят supply ниже borrow: B <= S сохраняется
        headroom = max(self.total_supply_assets - self.total_borrow_assets, 0)
        reserve_cut = min(wad_mul(accrued, self.params.reserve_factor), headroom)

        return AccrualSnapshot(
            total_supply_assets=self.total_supply_assets + accrued - reserve_cut,
            total_borrow_assets=new_borrow_assets,
            total_reserves=self.total_reserves + reserve_cut,
            borrow_index=mul_div(self.borrow_index, factor, WAD, Rounding.UP),
            accrued=accrued,
        )

    def _accrue_interest(self) -> None:
        if self.env.now == self.last_accrual_time:
            return
        snapshot = self._pending_accrual()
        self.total_supply_assets = snapshot.total_supply_assets
        self.total_borrow_assets = snapshot.total_borrow_assets
        self.total_reserves = snapshot.total_reserves
        self.borrow_index = snapshot.borrow_index
        self.last_accrual_time = self.env.now
        if snapshot.accrued:
            logger.debug(
                "InterestAccrued pool=%s accrued=%d borrow_index=%d",
                self.address,
                snapshot.accrued,
                snapshot.borrow_index,
            )

    @non_reentrant
    def accrue_interest(self) -> None:
        """Начисление процентов на текущий момент. Повторный вызов в ту же секунду — no-op."""
        self._require_initialized()
        self._accrue_interest()

    # =========================================================================
    # SHARE CONVERSIONS
    # =========================================================================

    @staticmethod
    def _to_shares(assets: int, total_assets: int, total_shares: int, rounding: Rounding) -> int:
        if total_shares == 0 or total_assets == 0:
            return assets
        return mul_div(assets, total_shares, total_assets, rounding)

    @staticmethod
    def _to_assets(shares: int, total_assets: int, total_shares: int, rounding: Rounding) -> int:
        if total_shares == 0:
            return shares
        return mul_div(shares, total_assets, total_shares, rounding)

    def convert_to_shares(self, assets: int, rounding: Rounding = Rounding.DOWN) -> int:
        """Supply assets → supply shares (с учётом pending процентов)."""
        pending = self._pending_accrual()
        return self._to_shares(
            assets, pending.total_supply_assets, self.total_supply_shares, rounding
        )

    def convert_to_assets(self, shares: int, rounding: Rounding = Rounding.DOWN) -> int:
        """Supply shares → supply assets (с учётом pending процентов)."""
        pending = self._pending_accrual()
        return self._to_assets(
            shares, pending.total_supply_assets, self.total_supply_shares, rounding
        )

    # =========================================================================
    # TOKEN TRANSFERS
    # =========================================================================

    def _pull(self, token: Token, owner: str, amount: int) -> None:
        if not token.transfer_from(self.address, owner, self.address, amount):
            raise TransferFailed(f"pull of {amount} from {owner} failed")

    def _push(self, token: Token, to: str, amount: int) -> None:
        if not token.transfer(self.address, to, amount):
            raise TransferFailed(f"push of {amount} to {to} failed")

    # =========================================================================
    # SUPPLY SIDE
    # =========================================================================

    @non_reentrant
    def deposit(self, sender: str, assets: int) -> int:
        """
        Поставка ликвидности.

        Returns:
            Выпущенные supply shares (округление вниз)
        """
        self._require_initialized()
        if assets <= 0:
            raise ZeroAmount("deposit amount is zero")
        self._accrue_interest()

        shares = self._to_shares(
            assets, self.total_supply_assets, self.total_supply_shares, Rounding.DOWN
        )
        if shares == 0:
            raise ZeroAmount(f"deposit of {assets} mints zero shares")

        self._pull(self.borrow_token, sender, assets)

        self.total_supply_assets += assets
        self.total_supply_shares += shares
        self.pool_token.mint(self.address, sender, shares)

        logger.info("Deposit pool=%s user=%s assets=%d shares=%d", self.address, sender, assets, shares)
        return shares

    @non_reentrant
    def withdraw(self, sender: str, assets: int) -> int:
        """
        Изъятие ликвидности.

        Returns:
            Сожжённые supply shares (округление вверх)

        Raises:
            InsufficientLiquidity: assets больше свободной ликвидности
            InsufficientBalance: Недостаточно shares у sender
        """
        self._require_initialized()
        if assets <= 0:
            raise ZeroAmount("withdraw amount is zero")
        self._accrue_interest()

        liquidity = self._available_liquidity(self.total_supply_assets, self.total_borrow_assets)
        if assets > liquidity:
            raise InsufficientLiquidity(f"withdraw {assets} exceeds available liquidity {liquidity}")

        shares = self._to_shares(
            assets, self.total_supply_assets, self.total_supply_shares, Rounding.UP
        )
        balance = self.pool_token.balance_of(sender)
        if shares > balance:
            raise InsufficientBalance(f"{sender} holds {balance} shares, needs {shares}")

        remaining_shares = self.total_supply_shares - shares
        remaining_assets = self.total_supply_assets - assets
        if remaining_shares == 0 and remaining_assets > 0:
            if self.total_borrow_assets > 0:
                raise InsufficientLiquidity("last supply share cannot exit while debt is outstanding")
            # остаток от округления без владельцев уходит в резервы
            self.total_reserves += remaining_assets
            remaining_assets = 0

        self.total_supply_shares = remaining_shares
        self.total_supply_assets = remaining_assets
        self.pool_token.burn(self.address, sender, shares)

        self._push(self.borrow_token, sender, assets)

        logger.info("Withdraw pool=%s user=%s assets=%d shares=%d", self.address, sender, assets, shares)
        return shares

    # =========================================================================
    # COLLATERAL
    # =========================================================================

    @non_reentrant
    def deposit_collateral(self, sender: str, amount: int) -> None:
        self._require_initialized()
        if amount <= 0:
            raise ZeroAmount("collateral amount is zero")
        self._accrue_interest()

        self._pull(self.collateral_token, sender, amount)

        position = self.get_position(sender)
        self._positions[sender] = position.with_collateral(position.collateral_amount + amount)
        self.total_collateral += amount

        logger.info("DepositCollateral pool=%s user=%s amount=%d", self.address, sender, amount)

    @non_reentrant
    def withdraw_collateral(self, sender: str, amount: int) -> None:
        """
        Вывод collateral.

        Raises:
            InsufficientCollateral: amount больше collateral позиции
            InsufficientLocked: Часть collateral заблокирована аукционом
            WouldBeUndercollateralized: health factor после вывода < 1 WAD
        """
        self._require_initialized()
        if amount <= 0:
            raise ZeroAmount("collateral amount is zero")
        self._accrue_interest()

        position = self.get_position(sender)
        if amount > position.collateral_amount:
            raise InsufficientCollateral(
                f"{sender} has {position.collateral_amount} collateral, requested {amount}"
            )
        locked = self.locked_collateral_of(sender)
        if amount > position.collateral_amount - locked:
            raise InsufficientLocked(f"{locked} of {sender}'s collateral is locked for liquidation")

        new_collateral = position.collateral_amount - amount
        if position.has_debt:
            debt = self._debt_of(
                position.borrow_shares, self.total_borrow_assets, self.total_borrow_shares
            )
            health = self._health_factor(new_collateral, debt)
            if health < WAD:
                raise WouldBeUndercollateralized(f"health factor after withdrawal {health} < 1 WAD")

        self._positions[sender] = position.with_collateral(new_collateral)
        self.total_collateral -= amount

        self._push(self.collateral_token, sender, amount)

        logger.info("WithdrawCollateral pool=%s user=%s amount=%d", self.address, sender, amount)

    # =========================================================================
    # BORROW SIDE
    # =========================================================================

    @non_reentrant
    def borrow(self, sender: str, amount: int) -> int:
        """
        Заём borrow токена под collateral.

        Returns:
            Выпущенные borrow shares (округление вверх)

        Raises:
            InsufficientLiquidity: amount больше свободной ликвидности
            WouldBeUndercollateralized: health factor после займа < 1 WAD
        """
        self._require_initialized()
        if amount <= 0:
            raise ZeroAmount("borrow amount is zero")
        self._accrue_interest()

        liquidity = self._available_liquidity(self.total_supply_assets, self.total_borrow_assets)
        if amount > liquidity:
            raise InsufficientLiquidity(f"borrow {amount} exceeds available liquidity {liquidity}")

        shares = self._to_shares(
            amount, self.total_borrow_assets, self.total_borrow_shares, Rounding.UP
        )
        position = self.get_position(sender)
        new_total_assets = self.total_borrow_assets + amount
        new_total_shares = self.total_borrow_shares + shares
        new_shares = position.borrow_shares + shares

        debt = self._debt_of(new_shares, new_total_assets, new_total_shares)
        health = self._health_factor(position.collateral_amount, debt)
        if health < WAD:
            raise WouldBeUndercollateralized(f"health factor after borrow {health} < 1 WAD")

        self.total_borrow_assets = new_total_assets
        self.total_borrow_shares = new_total_shares
        self._positions[sender] = position.with_borrow_shares(new_shares)

        self._push(self.borrow_token, sender, amount)

        logger.info("Borrow pool=%s user=%s amount=%d shares=%d", self.address, sender, amount, shares)
        return shares

    @non_reentrant
    def repay(self, sender: str, amount: int) -> int:
        """Погашение собственного долга. Возвращает фактически погашенную сумму."""
        return self._repay(sender, sender, amount)

    @non_reentrant
    def repay_on_behalf(self, sender: str, borrower: str, amount: int) -> int:
        """Погашение долга borrower за счёт sender."""
        return self._repay(sender, borrower, amount)

    def _repay(self, payer: str, borrower: str, amount: int) -> int:
        self._require_initialized()
        if amount <= 0:
            raise ZeroAmount("repay amount is zero")
        self._accrue_interest()

        position = self.get_position(borrower)
        if not position.has_debt:
            raise NoDebt(f"{borrower} has no debt in {self.address}")

        debt = self._debt_of(
            position.borrow_shares, self.total_borrow_assets, self.total_borrow_shares
        )
        paid = min(amount, debt)
        if paid == debt:
            shares = position.borrow_shares
        else:
            shares = mul_div(paid, self.total_borrow_shares, self.total_borrow_assets, Rounding.DOWN)
            if shares == 0:
                raise ZeroAmount(f"repayment of {paid} burns zero shares")

        self._pull(self.borrow_token, payer, paid)

        self.total_borrow_shares -= shares
        self.total_borrow_assets = max(self.total_borrow_assets - paid, 0)
        if self.total_borrow_shares == 0:
            self.total_borrow_assets = 0
        self._positions[borrower] = position.with_borrow_shares(position.borrow_shares - shares)

        logger.info(
            "Repay pool=%s payer=%s borrower=%s amount=%d shares=%d",
            self.address,
            payer,
            borrower,
            paid,
            shares,
        )
        return paid

    # =========================================================================
    # VALUATION
    # =========================================================================

    @staticmethod
    def _debt_of(shares: int, total_assets: int, total_shares: int) -> int:
        """Долг по borrow shares (округление вверх)."""
        if shares == 0 or total_shares == 0:
            return 0
        return mul_div(shares, total_assets, total_shares, Rounding.UP)

    @staticmethod
    def _available_liquidity(supply_assets: int, borrow_assets: int) -> int:
        return max(supply_assets - borrow_assets, 0)

    def _prices(self) -> tuple[int, int]:
        return (
            self.oracle.get_price(self.collateral_token.address),
            self.oracle.get_price(self.borrow_token.address),
        )

    def _health_factor(self, collateral_amount: int, debt: int) -> int:
        """
        collateral_value * liquidation_threshold / debt_value

        Returns:
            Health factor (WAD) или MAX_UINT256 при нулевом долге
        """
        if debt == 0:
            return MAX_UINT256
        collateral_price, borrow_price = self._prices()
        collateral_value = value_in_usd(
            collateral_amount, collateral_price, self.collateral_token.decimals, Rounding.DOWN
        )
        debt_value = value_in_usd(debt, borrow_price, self.borrow_token.decimals, Rounding.UP)
        adjusted = wad_mul(collateral_value, self.params.liquidation_threshold)
        return wad_div(adjusted, debt_value)

    def health_factor(self, user: str) -> int:
        self._require_initialized()
        position = self.get_position(user)
        return self._health_factor(position.collateral_amount, self.get_user_debt(user))

    def is_liquidatable(self, user: str) -> bool:
        return self.health_factor(user) < WAD

    def get_user_debt(self, user: str) -> int:
        """Долг пользователя с учётом pending процентов (округление вверх)."""
        position = self.get_position(user)
        pending = self._pending_accrual()
        return self._debt_of(
            position.borrow_shares, pending.total_borrow_assets, self.total_borrow_shares
        )

    def get_max_borrow(self, user: str) -> int:
        """
        Свободный лимит займа по LTV (не по liquidation threshold).

        max = collateral_value * ltv - debt_value, в единицах borrow токена,
        ограничено свободной ликвидностью пула.
        """
        self._require_initialized()
        position = self.get_position(user)
        collateral_price, borrow_price = self._prices()

        collateral_value = value_in_usd(
            position.collateral_amount, collateral_price, self.collateral_token.decimals, Rounding.DOWN
        )
        max_value = wad_mul(collateral_value, self.params.ltv)
        debt_value = value_in_usd(
            self.get_user_debt(user), borrow_price, self.borrow_token.decimals, Rounding.UP
        )
        if max_value <= debt_value:
            return 0

        headroom = usd_to_amount(
            max_value - debt_value, borrow_price, self.borrow_token.decimals, Rounding.DOWN
        )
        return min(headroom, self.available_liquidity())

    def available_liquidity(self) -> int:
        pending = self._pending_accrual()
        return self._available_liquidity(pending.total_supply_assets, pending.total_borrow_assets)

    def balance_of_underlying(self, user: str) -> int:
        """Supply assets пользователя (по его pool token shares)."""
        self._require_initialized()
        return self.convert_to_assets(self.pool_token.balance_of(user))

    def get_position(self, user: str) -> Position:
        return self._positions.get(user, Position())

    def get_utilization(self) -> int:
        self._require_initialized()
        pending = self._pending_accrual()
        return self.rate_model.get_utilization(
            pending.total_supply_assets, pending.total_borrow_assets
        )

    def get_borrow_rate(self) -> int:
        self._require_initialized()
        pending = self._pending_accrual()
        return self.rate_model.get_borrow_rate(
            pending.total_supply_assets, pending.total_borrow_assets
        )

    def get_supply_rate(self) -> int:
        self._require_initialized()
        pending = self._pending_accrual()
        return self.rate_model.get_supply_rate(
            pending.total_supply_assets, pending.total_borrow_assets, self.params.reserve_factor
        )

    def total_borrow_shares_of_positions(self) -> int:
        return sum(p.borrow_shares for p in self._positions.values())

    # =========================================================================
    # LIQUIDATION HOOKS
    # =========================================================================

    def has_locked_collateral(self, user: str) -> bool:
        return self.locked_collateral_of(user) > 0

    def locked_collateral_of(self, user: str) -> int:
        return self._locked_collateral.get(user, 0)

    @non_reentrant
    def lock_collateral_for_liquidation(self, sender: str, user: str, amount: int) -> None:
        """Резерв collateral под аукцион (нельзя вывести или заблокировать повторно)."""
        self._require_initialized()
        self._only_liquidator(sender)
        if amount <= 0:
            raise ZeroAmount("lock amount is zero")

        position = self.get_position(user)
        locked = self.locked_collateral_of(user)
        if amount > position.collateral_amount - locked:
            raise InsufficientCollateral(
                f"{user} has {position.collateral_amount - locked} unlocked collateral, "
                f"requested {amount}"
            )

        self._locked_collateral[user] = locked + amount
        self.total_locked_collateral += amount
        logger.info("CollateralLocked pool=%s user=%s amount=%d", self.address, user, amount)

    @non_reentrant
    def unlock_collateral_after_liquidation(self, sender: str, user: str, amount: int) -> None:
        self._require_initialized()
        self._only_liquidator(sender)
        if amount <= 0:
            raise ZeroAmount("unlock amount is zero")

        locked = self.locked_collateral_of(user)
        if amount > locked:
            raise InsufficientLocked(f"{user} has {locked} locked, requested unlock of {amount}")

        self._locked_collateral[user] = locked - amount
        self.total_locked_collateral -= amount
        logger.info("CollateralUnlocked pool=%s user=%s amount=%d", self.address, user, amount)

    @non_reentrant
    def execute_liquidation(
        self,
        sender: str,
        user: str,
        liquidator: str,
        debt_repaid: int,
        collateral_seized: int,
    ) -> int:
        """
        Расчёт ликвидации: списание долга и изъятие заблокированного collateral.

        Оплата debt_repaid уже переведена в пул ликвидатором. Seized
        collateral отправляется liquidator. Проверка health factor после
        ликвидации не выполняется.

        Returns:
            Сожжённые borrow shares
        """
        self._require_initialized()
        self._only_liquidator(sender)
        if debt_repaid <= 0 or collateral_seized <= 0:
            raise ZeroAmount("liquidation amounts must be positive")
        self._accrue_interest()

        position = self.get_position(user)
        if not position.has_debt:
            raise NoDebt(f"{user} has no debt in {self.address}")

        locked = self.locked_collateral_of(user)
        if collateral_seized > locked:
            raise InsufficientLocked(f"seizing {collateral_seized} but only {locked} is locked")

        shares = mul_div(
            debt_repaid, self.total_borrow_shares, self.total_borrow_assets, Rounding.DOWN
        )
        shares = min(shares, position.borrow_shares)

        self.total_borrow_shares -= shares
        self.total_borrow_assets = max(self.total_borrow_assets - debt_repaid, 0)
        if self.total_borrow_shares == 0:
            self.total_borrow_assets = 0

        self._locked_collateral[user] = locked - collateral_seized
        self.total_locked_collateral -= collateral_seized
        self.total_collateral -= collateral_seized
        self._positions[user] = Position(
            collateral_amount=position.collateral_amount - collateral_seized,
            borrow_shares=position.borrow_shares - shares,
        )

        self._push(self.collateral_token, liquidator, collateral_seized)

        logger.info(
            "Liquidation pool=%s user=%s liquidator=%s debt_repaid=%d collateral_seized=%d",
            self.address,
            user,
            liquidator,
            debt_repaid,
            collateral_seized,
        )
        return shares
