"""
Position — позиция пользователя в изолированном рынке

Immutable Pydantic модель. Владелец — ledger рынка; каждое изменение
(collateral deposit/withdraw, borrow/repay, liquidation) создаёт новый
экземпляр через model_copy. Позиция никогда не удаляется, только обнуляется.
"""

from pydantic import BaseModel, Field


class Position(BaseModel):
    """
    Позиция (market, user).

    collateral_amount — в native units collateral токена.
    borrow_shares — доля в borrow-стороне (WAD-scaled).
    """

    collateral_amount: int = Field(default=0, ge=0, description="Collateral (native units)")
    borrow_shares: int = Field(default=0, ge=0, description="Borrow shares (WAD-scaled)")

    model_config = {"frozen": True}  # Immutable

    @property
    def is_empty(self) -> bool:
        return self.collateral_amount == 0 and self.borrow_shares == 0

    @property
    def has_debt(self) -> bool:
        return self.borrow_shares > 0

    def with_collateral(self, collateral_amount: int) -> "Position":
        return self.model_copy(update={"collateral_amount": collateral_amount})

    def with_borrow_shares(self, borrow_shares: int) -> "Position":
        return self.model_copy(update={"borrow_shares": borrow_shares})
