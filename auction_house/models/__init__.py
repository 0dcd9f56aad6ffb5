# Domain models
from .products import (
    Product,
    Painting,
    Furniture,
    Jewelry,
    Antique,
    Clothing,
    ColorType,
    PRODUCT_KINDS,
)
from .negotiation import NegotiationRecord
from .clients import (
    ClientAgent,
    ClientKind,
    NaturalPerson,
    LegalPerson,
    CompanyType,
    CLIENT_KINDS,
)

__all__ = [
    "Product",
    "Painting",
    "Furniture",
    "Jewelry",
    "Antique",
    "Clothing",
    "ColorType",
    "PRODUCT_KINDS",
    "NegotiationRecord",
    "ClientAgent",
    "ClientKind",
    "NaturalPerson",
    "LegalPerson",
    "CompanyType",
    "CLIENT_KINDS",
]
