"""
Entity Models

Typed, immutable records returned by the Emojisushi API client.
Every model is a frozen dataclass registered with the hydrator
(see emojisushi.services.hydrator), which fills the fields from
raw JSON according to the annotations declared here.

List endpoints respond with a wrapper holding an ordered `data`
sequence of one entity type plus optional pagination `meta`.

Author: Khalil Bannouri
Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# =============================================================================
# SHARED
# =============================================================================

@dataclass(frozen=True)
class PaginationMeta:
    """
    Pagination block attached to list responses.

    Attributes:
        total: Total number of items on the server
        offset: Offset of the first item in `data`
        limit: Requested page size
    """
    total: int = 0
    offset: int = 0
    limit: int = 0


@dataclass(frozen=True)
class Price:
    """Price of a product or variant in one currency."""
    price: str = ""
    price_formatted: str = ""
    currency: str = ""


# =============================================================================
# LOCATIONS
# =============================================================================

@dataclass(frozen=True)
class District:
    """Delivery district inside a city."""
    id: int = 0
    name: str = ""
    city_id: int = 0


@dataclass(frozen=True)
class City:
    """
    City served by the restaurant chain.

    `spots` and `districts` are only populated when requested
    (includeSpots / includeDistricts).
    """
    id: int = 0
    name: str = ""
    slug: str = ""
    is_main: bool = False
    frontend_url: str = ""
    google_map_url: str = ""
    spots: List["Spot"] = field(default_factory=list)
    districts: List[District] = field(default_factory=list)


@dataclass(frozen=True)
class Spot:
    """Physical outlet (restaurant location)."""
    id: int = 0
    name: str = ""
    slug: str = ""
    address: str = ""
    phones: str = ""
    city_id: int = 0
    city: Optional[City] = None
    google_map_url: str = ""
    cover: Optional[str] = None


@dataclass(frozen=True)
class CitiesList:
    data: List[City] = field(default_factory=list)
    meta: Optional[PaginationMeta] = None


@dataclass(frozen=True)
class SpotsList:
    data: List[Spot] = field(default_factory=list)
    meta: Optional[PaginationMeta] = None


# =============================================================================
# MENU
# =============================================================================

@dataclass(frozen=True)
class Category:
    """Menu category."""
    id: int = 0
    name: str = ""
    slug: str = ""
    parent_id: Optional[int] = None
    published: bool = False


@dataclass(frozen=True)
class CategoriesList:
    data: List[Category] = field(default_factory=list)
    meta: Optional[PaginationMeta] = None


@dataclass(frozen=True)
class Variant:
    """
    Purchasable variant of a product (size, filling, ...).

    Attributes:
        attributes: Property values distinguishing the variant
        prices: One price per currency
    """
    id: int = 0
    product_id: int = 0
    name: str = ""
    attributes: Dict[str, Any] = field(default_factory=dict)
    prices: List[Price] = field(default_factory=list)


@dataclass(frozen=True)
class Product:
    """
    Menu product.

    Attributes:
        category_id: Primary category, if any
        categories: Every category the product is listed in
        variants: Variants in backend order (empty for simple products)
        image_sets: Raw image set payloads
    """
    id: int = 0
    name: str = ""
    slug: str = ""
    description: str = ""
    weight: int = 0
    category_id: Optional[int] = None
    categories: List[Category] = field(default_factory=list)
    prices: List[Price] = field(default_factory=list)
    variants: List[Variant] = field(default_factory=list)
    image_sets: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class ProductsList:
    data: List[Product] = field(default_factory=list)
    meta: Optional[PaginationMeta] = None


# =============================================================================
# CART
# =============================================================================

@dataclass(frozen=True)
class CartProduct:
    """
    Line of the cart.

    `id` is the cart line id (used by remove_from_cart), not the product id.
    """
    id: int = 0
    product_id: int = 0
    variant_id: Optional[int] = None
    quantity: int = 0
    price: Optional[Price] = None
    product: Optional[Product] = None
    variant: Optional[Variant] = None


@dataclass(frozen=True)
class Cart:
    data: List[CartProduct] = field(default_factory=list)
    total: str = ""
    total_quantity: int = 0


# =============================================================================
# CHECKOUT
# =============================================================================

@dataclass(frozen=True)
class PaymentMethod:
    id: int = 0
    name: str = ""
    code: str = ""
    description: str = ""
    sort_order: int = 0


@dataclass(frozen=True)
class PaymentMethodsList:
    data: List[PaymentMethod] = field(default_factory=list)
    meta: Optional[PaginationMeta] = None


@dataclass(frozen=True)
class ShipmentMethod:
    id: int = 0
    name: str = ""
    code: str = ""
    description: str = ""
    sort_order: int = 0


@dataclass(frozen=True)
class ShipmentMethodsList:
    data: List[ShipmentMethod] = field(default_factory=list)
    meta: Optional[PaginationMeta] = None


@dataclass(frozen=True)
class PlaceOrderResponse:
    """
    Order confirmation.

    Attributes:
        success: Whether the backend accepted the order
        message: Human-readable confirmation or rejection reason
        order_id: Identifier of the created order
        redirect_url: Payment page for online payment methods
        order: Raw order payload echoed by the backend
    """
    success: bool = False
    message: str = ""
    order_id: Optional[int] = None
    redirect_url: Optional[str] = None
    order: Dict[str, Any] = field(default_factory=dict)


ENTITY_TYPES = (
    PaginationMeta,
    Price,
    District,
    City,
    Spot,
    CitiesList,
    SpotsList,
    Category,
    CategoriesList,
    Variant,
    Product,
    ProductsList,
    CartProduct,
    Cart,
    PaymentMethod,
    PaymentMethodsList,
    ShipmentMethod,
    ShipmentMethodsList,
    PlaceOrderResponse,
)
