"""
Dutch Auction Liquidator — жизненный цикл аукционов ликвидации

Состояния: ACTIVE → {COMPLETED, CANCELLED}

start_auction(pool, user):
    debt_to_repay     = min(close_factor * total_debt, recoverable-from-collateral)
    collateral_seized = debt * P_borrow * (1 + penalty) / P_collateral  (decimal-нормализовано, UP)
    reference         = P_collateral / P_borrow
    start_price       = reference * start_premium
    end_price         = reference * end_discount

get_current_price(t):
    start - (start - end) * clamp(t - start_time, 0, duration) / duration

liquidate(auction_id, max_debt):
    collateral_received = debt / current_price (DOWN), с ограничением по
    оставшемуся collateral_for_sale (тогда debt пересчитывается, UP).
    Оплата переводится от вызывающего в пул, затем пул выполняет
    execute_liquidation и отдаёт collateral вызывающему.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Не более одного активного аукциона на (pool, user)
2. debt_to_repay и collateral_for_sale монотонно убывают
3. Цена аукциона не возрастает и равна end_price на end_time
4. Заполнение после end_time невозможно

Health factor после заполнения по цене p не ниже прежнего, пока
debt <= collateral * p. Для всего аукциона это выполняется при
HF >= liquidation_threshold / end_discount; глубже поздние заполнения
могут понижать HF (end_price не ограничивается снизу).
"""

import logging
from typing import Optional

from src.core.domain.auction import Auction, AuctionConfig, AuctionStatus, FillResult
from src.core.environment import Environment, Journaled, non_reentrant, require_address
from src.core.errors import (
    AuctionAlreadyExists,
    AuctionExpired,
    AuctionNotActive,
    AuctionNotExpired,
    InsufficientCollateral,
    InsufficientRepayment,
    NoDebt,
    OnlyOwner,
    PoolNotAuthorized,
    PositionNotLiquidatable,
    TransferFailed,
    ZeroAmount,
)
from src.core.math.fixed_point import WAD, Rounding, mul_div, value_in_usd, wad_div, wad_mul
from src.ledger.lending_pool import LendingPool
from src.oracle.price_oracle import PriceOracle

logger = logging.getLogger(__name__)


class DutchAuctionLiquidator(Journaled):
    """
    Ликвидатор рынков через Dutch-аукционы.

    Args:
        env: Окружение (часы, транзакции)
        address: Адрес ликвидатора (принципал, авторизованный в пулах)
        owner: Владелец (авторизация пулов, конфигурация)
        oracle: Оракул цен
        config: Параметры аукционов
    """

    _journal_fields = (
        "_auctions",
        "_active_auctions",
        "_next_auction_id",
        "_authorized",
        "config",
    )

    def __init__(
        self,
        env: Environment,
        address: str,
        owner: str,
        oracle: PriceOracle,
        config: Optional[AuctionConfig] = None,
    ):
        self.env = env
        self.address = require_address(address, "liquidator address")
        self.owner = require_address(owner, "owner")
        self.oracle = oracle
        self.config = config or AuctionConfig()

        self._entered = False
        self._pools: dict[str, LendingPool] = {}
        self._authorized: set[str] = set()
        self._auctions: dict[int, Auction] = {}
        self._active_auctions: dict[tuple[str, str], int] = {}
        self._next_auction_id = 1

        env.register(self)

    def __repr__(self) -> str:
        return f"DutchAuctionLiquidator({self.address})"

    # =========================================================================
    # ADMIN
    # =========================================================================

    def _only_owner(self, sender: str) -> None:
        if sender != self.owner:
            raise OnlyOwner(f"{sender} is not the liquidator owner")

    def authorize_pool(self, sender: str, pool: LendingPool, authorized: bool = True) -> None:
        self._only_owner(sender)
        self._pools[pool.address] = pool
        if authorized:
            self._authorized.add(pool.address)
        else:
            self._authorized.discard(pool.address)
        logger.info("PoolAuthorized pool=%s authorized=%s", pool.address, authorized)

    def set_auction_config(self, sender: str, config: AuctionConfig) -> None:
        """Новая конфигурация применяется к аукционам, стартующим после вызова."""
        self._only_owner(sender)
        self.config = config
        logger.info(
            "AuctionConfigUpdated duration=%d start_premium=%d end_discount=%d close_factor=%d",
            config.duration,
            config.start_premium,
            config.end_discount,
            config.close_factor,
        )

    def is_pool_authorized(self, pool_address: str) -> bool:
        return pool_address in self._authorized

    def _authorized_pool(self, pool_address: str) -> LendingPool:
        if pool_address not in self._authorized:
            raise PoolNotAuthorized(f"{pool_address} is not authorized")
        return self._pools[pool_address]

    # =========================================================================
    # VIEWS
    # =========================================================================

    def get_auction(self, auction_id: int) -> Auction:
        auction = self._auctions.get(auction_id)
        if auction is None:
            raise AuctionNotActive(f"Auction {auction_id} does not exist")
        return auction

    def has_active_auction(self, pool_address: str, user: str) -> tuple[bool, int]:
        auction_id = self._active_auctions.get((pool_address, user), 0)
        return auction_id != 0, auction_id

    def get_remaining_time(self, auction_id: int) -> int:
        auction = self.get_auction(auction_id)
        if not auction.is_active:
            return 0
        return max(auction.end_time - self.env.now, 0)

    def get_current_price(self, auction_id: int, at: Optional[int] = None) -> int:
        """
        Линейно убывающая цена аукциона (WAD, borrow units за 1 collateral).

        Args:
            auction_id: Идентификатор аукциона
            at: Момент времени (по умолчанию сейчас)
        """
        auction = self.get_auction(auction_id)
        timestamp = self.env.now if at is None else at
        elapsed = min(max(timestamp - auction.start_time, 0), auction.duration)
        drop = mul_div(auction.start_price - auction.end_price, elapsed, auction.duration)
        return auction.start_price - drop

    def calculate_profit(self, auction_id: int, debt_to_repay: int) -> int:
        """
        Оценка прибыли заполнения по текущей цене (USD, WAD, может быть < 0).

        Оракульная стоимость получаемого collateral минус оракульная
        стоимость погашаемого долга. Только для информации.
        """
        auction = self.get_auction(auction_id)
        pool = self._pools[auction.pool]
        debt = min(debt_to_repay, auction.debt_to_repay)
        price = self.get_current_price(auction_id)
        collateral = min(
            self._collateral_for_debt_at_price(pool, debt, price), auction.collateral_for_sale
        )

        collateral_price = self.oracle.get_price(pool.collateral_token.address)
        borrow_price = self.oracle.get_price(pool.borrow_token.address)
        collateral_value = value_in_usd(
            collateral, collateral_price, pool.collateral_token.decimals, Rounding.DOWN
        )
        debt_value = value_in_usd(debt, borrow_price, pool.borrow_token.decimals, Rounding.UP)
        return collateral_value - debt_value

    # =========================================================================
    # SIZING
    # =========================================================================

    @staticmethod
    def _collateral_for_debt_at_price(pool: LendingPool, debt: int, price: int) -> int:
        """collateral = debt / price, decimal-нормализовано (DOWN)."""
        return mul_div(
            debt * 10**pool.collateral_token.decimals,
            WAD,
            10**pool.borrow_token.decimals * price,
            Rounding.DOWN,
        )

    @staticmethod
    def _debt_for_collateral_at_price(pool: LendingPool, collateral: int, price: int) -> int:
        """debt = collateral * price, decimal-нормализовано (UP)."""
        return mul_div(
            collateral * price,
            10**pool.borrow_token.decimals,
            10**pool.collateral_token.decimals * WAD,
            Rounding.UP,
        )

    def _size_auction(
        self,
        pool: LendingPool,
        user: str,
        collateral_price: int,
        borrow_price: int,
    ) -> tuple[int, int]:
        """
        Размер аукциона: (debt_to_repay, collateral_to_seize).

        Если collateral пользователя не покрывает долг с penalty, seize
        ограничивается collateral, а debt пересчитывается вниз.
        """
        total_debt = pool.get_user_debt(user)
        debt = wad_mul(total_debt, self.config.close_factor)
        bonus = WAD + pool.params.liquidation_penalty
        collateral_scale = 10**pool.collateral_token.decimals
        borrow_scale = 10**pool.borrow_token.decimals

        seize = mul_div(
            debt * borrow_price * bonus,
            collateral_scale,
            borrow_scale * collateral_price * WAD,
            Rounding.UP,
        )

        position = pool.get_position(user)
        available = position.collateral_amount - pool.locked_collateral_of(user)
        if seize > available:
            seize = available
            debt = mul_div(
                available * collateral_price * WAD,
                borrow_scale,
                collateral_scale * borrow_price * bonus,
                Rounding.DOWN,
            )

        if debt == 0 or seize == 0:
            raise InsufficientCollateral(f"{user} has no collateral to auction")
        return debt, seize

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @non_reentrant
    def start_auction(self, sender: str, pool_address: str, user: str) -> int:
        """
        Старт аукциона по позиции с health factor < 1 WAD.

        Returns:
            Идентификатор аукциона

        Raises:
            PoolNotAuthorized: Пул не авторизован
            AuctionAlreadyExists: Уже есть активный аукцион (pool, user)
            PositionNotLiquidatable: health factor >= 1 WAD
        """
        pool = self._authorized_pool(pool_address)
        active, existing_id = self.has_active_auction(pool_address, user)
        if active:
            raise AuctionAlreadyExists(f"Auction {existing_id} already active for {user}")

        pool.accrue_interest()
        health = pool.health_factor(user)
        if health >= WAD:
            raise PositionNotLiquidatable(f"{user} health factor {health} >= 1 WAD")

        collateral_price = self.oracle.get_price(pool.collateral_token.address)
        borrow_price = self.oracle.get_price(pool.borrow_token.address)
        debt, seize = self._size_auction(pool, user, collateral_price, borrow_price)

        reference = wad_div(collateral_price, borrow_price)
        start_price = wad_mul(reference, self.config.start_premium)
        end_price = wad_mul(reference, self.config.end_discount)

        pool.lock_collateral_for_liquidation(self.address, user, seize)

        auction_id = self._next_auction_id
        self._next_auction_id += 1
        now = self.env.now
        self._auctions[auction_id] = Auction(
            auction_id=auction_id,
            user=user,
            pool=pool_address,
            debt_to_repay=debt,
            collateral_for_sale=seize,
            start_time=now,
            end_time=now + self.config.duration,
            start_price=start_price,
            end_price=end_price,
        )
        self._active_auctions[(pool_address, user)] = auction_id

        logger.info(
            "AuctionStarted id=%d pool=%s user=%s debt=%d collateral=%d start_price=%d end_price=%d by=%s",
            auction_id,
            pool_address,
            user,
            debt,
            seize,
            start_price,
            end_price,
            sender,
        )
        return auction_id

    @non_reentrant
    def liquidate(self, sender: str, auction_id: int, max_debt_to_repay: int) -> FillResult:
        """
        Заполнение аукциона (полное или частичное) любым вызывающим.

        Вызывающий должен разрешить ликвидатору списание borrow токена.

        Raises:
            AuctionNotActive: Аукцион завершён или отменён
            AuctionExpired: now > end_time
            InsufficientRepayment: Сумма не покупает ни одной единицы collateral
        """
        if max_debt_to_repay <= 0:
            raise ZeroAmount("max_debt_to_repay is zero")
        auction = self.get_auction(auction_id)
        if not auction.is_active:
            raise AuctionNotActive(f"Auction {auction_id} is {auction.status.value}")
        if self.env.now > auction.end_time:
            raise AuctionExpired(f"Auction {auction_id} ended at {auction.end_time}")

        pool = self._pools[auction.pool]
        pool.accrue_interest()
        user_debt = pool.get_user_debt(auction.user)
        if user_debt == 0:
            raise NoDebt(f"{auction.user} has no debt left")

        debt = min(max_debt_to_repay, auction.debt_to_repay, user_debt)
        price = self.get_current_price(auction_id)
        collateral = self._collateral_for_debt_at_price(pool, debt, price)
        if collateral > auction.collateral_for_sale:
            collateral = auction.collateral_for_sale
            debt = self._debt_for_collateral_at_price(pool, collateral, price)
        if collateral == 0:
            raise InsufficientRepayment(f"{debt} buys no collateral at price {price}")

        if not pool.borrow_token.transfer_from(self.address, sender, pool.address, debt):
            raise TransferFailed(f"payment of {debt} from {sender} failed")
        pool.execute_liquidation(self.address, auction.user, sender, debt, collateral)

        remaining_debt = max(auction.debt_to_repay - debt, 0)
        remaining_collateral = auction.collateral_for_sale - collateral
        closed = (
            remaining_debt == 0
            or remaining_collateral == 0
            or pool.get_user_debt(auction.user) == 0
        )

        updated = auction.model_copy(
            update={
                "debt_to_repay": remaining_debt,
                "collateral_for_sale": remaining_collateral,
                "status": AuctionStatus.COMPLETED if closed else AuctionStatus.ACTIVE,
            }
        )
        self._auctions[auction_id] = updated
        if closed:
            del self._active_auctions[(auction.pool, auction.user)]
            if remaining_collateral > 0:
                pool.unlock_collateral_after_liquidation(
                    self.address, auction.user, remaining_collateral
                )

        logger.info(
            "AuctionExecuted id=%d liquidator=%s debt_repaid=%d collateral_received=%d price=%d closed=%s",
            auction_id,
            sender,
            debt,
            collateral,
            price,
            closed,
        )
        return FillResult(debt_repaid=debt, collateral_received=collateral, execution_price=price)

    @non_reentrant
    def cancel_expired_auction(self, sender: str, auction_id: int) -> None:
        """
        Отмена истёкшего аукциона (любым вызывающим при now > end_time).

        Незаполненный collateral разблокируется в пользу заёмщика.
        """
        auction = self.get_auction(auction_id)
        if not auction.is_active:
            raise AuctionNotActive(f"Auction {auction_id} is {auction.status.value}")
        if self.env.now <= auction.end_time:
            raise AuctionNotExpired(f"Auction {auction_id} runs until {auction.end_time}")

        pool = self._pools[auction.pool]
        if auction.collateral_for_sale > 0:
            pool.unlock_collateral_after_liquidation(
                self.address, auction.user, auction.collateral_for_sale
            )

        self._auctions[auction_id] = auction.model_copy(update={"status": AuctionStatus.CANCELLED})
        del self._active_auctions[(auction.pool, auction.user)]

        logger.info(
            "AuctionCancelled id=%d by=%s collateral_returned=%d",
            auction_id,
            sender,
            auction.collateral_for_sale,
        )
