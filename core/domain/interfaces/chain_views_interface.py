from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Union

from core.domain.schemas.swap_types import RawImpact

# Raw integer quantities are passed through; float/str/Decimal are display units.
TokenQty = Union[int, float, str, Decimal]


class TokenView(ABC):
    @property
    @abstractmethod
    def address(self) -> str:
        raise NotImplementedError

    @abstractmethod
    async def norm_qty(self, qty: TokenQty) -> int:
        raise NotImplementedError

    @abstractmethod
    async def to_display(self, raw_qty: int) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    async def round_qty(self, qty: TokenQty) -> int:
        raise NotImplementedError


class PoolView(ABC):
    @abstractmethod
    async def spot_price(self) -> float:
        raise NotImplementedError

    @abstractmethod
    async def spot_tick(self) -> int:
        raise NotImplementedError

    @abstractmethod
    async def display_price(self) -> float:
        raise NotImplementedError

    @abstractmethod
    async def to_display_price(self, spot_price: float) -> float:
        raise NotImplementedError


class ImpactQuery(ABC):
    @abstractmethod
    async def calc_impact(
        self,
        base: str,
        quote: str,
        pool_idx: int,
        is_buy: bool,
        in_base_qty: bool,
        qty: int,
        tip: int,
        limit_price: int,
    ) -> RawImpact:
        raise NotImplementedError


class HotPathFlagReader(ABC):
    @abstractmethod
    async def is_hot_path_open(self) -> bool:
        raise NotImplementedError


class NativeAssetView(ABC):
    @abstractmethod
    async def amount_needed_beyond_surplus(self, amount: int) -> int:
        raise NotImplementedError
