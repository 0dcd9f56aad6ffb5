"""
Products offered by the auction house.

A product's ``sell_price`` starts at 0 and is written exactly once, at
settlement, and only with a value at or above ``min_price``.
"""

from dataclasses import dataclass, field
from enum import Enum
from threading import Lock
from typing import ClassVar, Optional


class ColorType(str, Enum):
    """Paint used for a painting."""
    OIL = "OIL"
    TEMPERA = "TEMPERA"
    ACRYLIC = "ACRYLIC"


@dataclass(eq=False)
class Product:
    """A lot in the catalog. Identity is the ``id``."""

    kind: ClassVar[str] = "product"

    id: int
    name: str
    min_price: float
    year: int
    sell_price: float = 0.0
    _sale_lock: Lock = field(default_factory=Lock, init=False, repr=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Product):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def is_sold(self) -> bool:
        return self.sell_price > 0

    def mark_sold(self, price: float) -> bool:
        """
        Record the selling price.

        Only the first call with an acceptable price takes effect.

        Args:
            price: Winning bid

        Returns:
            True if this call set the price, False otherwise
        """
        with self._sale_lock:
            if self.is_sold or price < self.min_price or price <= 0:
                return False
            self.sell_price = price
            return True

    def describe(self) -> str:
        """Short label used in transcripts."""
        return f'{self.kind.capitalize()} "{self.name}"'


@dataclass(eq=False)
class Painting(Product):
    kind: ClassVar[str] = "painting"

    painter_name: str = ""
    colors: Optional[ColorType] = None


@dataclass(eq=False)
class Furniture(Product):
    kind: ClassVar[str] = "furniture"

    furniture_type: str = ""
    material: str = ""


@dataclass(eq=False)
class Jewelry(Product):
    kind: ClassVar[str] = "jewelry"

    material: str = ""
    precious_stone: bool = False


@dataclass(eq=False)
class Antique(Product):
    kind: ClassVar[str] = "antique"

    age: int = 0
    origin: str = ""


@dataclass(eq=False)
class Clothing(Product):
    kind: ClassVar[str] = "clothing"

    designer: str = ""
    material: str = ""


PRODUCT_KINDS: dict[str, type[Product]] = {
    cls.kind: cls for cls in (Painting, Furniture, Jewelry, Antique, Clothing)
}
