"""Dutch-auction liquidation."""

from src.liquidation.dutch_auction import DutchAuctionLiquidator

__all__ = ["DutchAuctionLiquidator"]
