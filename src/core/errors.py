"""
Errors — иерархия ошибок протокола

Каждое нарушение ограничения прерывает операцию целиком (без частичного
применения и без внутренних повторов). Каждый вид ошибки — отдельный класс
со стабильным `code`, чтобы автоматические клиенты (например, бот
ликвидаций) могли ветвиться: пропустить / повторить с меньшей суммой /
подождать.

Категории:
- InvalidInputError  — валидация входов и конфигурации
- AuthorizationError — проверка ролей (liquidator/owner/factory/pool)
- LiquidityError     — недостаточная ликвидность/баланс
- SolvencyError      — нарушение health factor
- AuctionStateError  — состояние аукциона
- OracleError        — источники цен
"""


class ProtocolError(Exception):
    """Базовый класс ошибок протокола."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)

    @property
    def code(self) -> str:
        """Стабильный идентификатор вида ошибки."""
        return type(self).__name__


# =============================================================================
# CATEGORIES
# =============================================================================


class InvalidInputError(ProtocolError):
    pass


class AuthorizationError(ProtocolError):
    pass


class LiquidityError(ProtocolError):
    pass


class SolvencyError(ProtocolError):
    pass


class AuctionStateError(ProtocolError):
    pass


class OracleError(ProtocolError):
    pass


class ReentrantCall(ProtocolError):
    """Повторный вход в защищённую операцию во время её выполнения."""


class TransferFailed(ProtocolError):
    """Внешний токен отказал в переводе."""


# =============================================================================
# VALIDATION
# =============================================================================


class ZeroAmount(InvalidInputError):
    pass


class ZeroAddress(InvalidInputError):
    pass


class SameToken(InvalidInputError):
    pass


class InvalidParameters(InvalidInputError):
    pass


class AlreadyInitialized(InvalidInputError):
    pass


class MarketNotInitialized(InvalidInputError):
    pass


class KinkAboveWad(InvalidInputError):
    pass


class InvalidAuctionConfig(InvalidInputError):
    pass


class InvalidAuctionConfigDuration(InvalidAuctionConfig):
    pass


class InvalidAuctionConfigStartPremium(InvalidAuctionConfig):
    pass


class InvalidAuctionConfigEndDiscount(InvalidAuctionConfig):
    pass


class InvalidAuctionConfigCloseFactor(InvalidAuctionConfig):
    pass


# =============================================================================
# AUTHORIZATION
# =============================================================================


class OnlyLiquidator(AuthorizationError):
    pass


class OnlyOwner(AuthorizationError):
    pass


class OnlyFactory(AuthorizationError):
    pass


class OnlyPool(AuthorizationError):
    pass


class PoolNotAuthorized(AuthorizationError):
    pass


# =============================================================================
# LIQUIDITY / BALANCES
# =============================================================================


class InsufficientLiquidity(LiquidityError):
    pass


class InsufficientBalance(LiquidityError):
    pass


class InsufficientAllowance(LiquidityError):
    pass


class InsufficientCollateral(LiquidityError):
    pass


class InsufficientLocked(LiquidityError):
    pass


class NoDebt(LiquidityError):
    pass


class InsufficientRepayment(LiquidityError):
    pass


# =============================================================================
# SOLVENCY
# =============================================================================


class WouldBeUndercollateralized(SolvencyError):
    pass


class PositionNotLiquidatable(SolvencyError):
    pass


# =============================================================================
# AUCTION STATE
# =============================================================================


class AuctionAlreadyExists(AuctionStateError):
    pass


class AuctionNotActive(AuctionStateError):
    pass


class AuctionExpired(AuctionStateError):
    pass


class AuctionNotExpired(AuctionStateError):
    pass


# =============================================================================
# ORACLE
# =============================================================================


class OracleNotConfigured(OracleError):
    pass


class StalePrice(OracleError):
    pass


class InvalidPrice(OracleError):
    pass


class PriceDeviationTooHigh(OracleError):
    pass


class OraclesUnavailable(OracleError):
    """Ни primary, ни fallback источник не дали валидную цену."""


class SequencerDown(OracleError):
    pass


class GracePeriodNotOver(SequencerDown):
    """Liveness feed поднялся недавно, grace period ещё не истёк."""


class FeedError(OracleError):
    """Источник цены не смог ответить (нет данных, недостаточная история)."""
