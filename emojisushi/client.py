"""
Emojisushi API Client

Typed async client for the Emojisushi restaurant-ordering backend.
Each operation sends one request through the RequestPipeline, decodes the
JSON body and hydrates it into the declared response type.

Derived lookups (get_category, get_product, get_variant, get_payment_method,
get_shipping_method, get_cart_product) fetch one unbounded list and scan it
client-side. The first match in list order wins; ids are not assumed to be
unique on the server. Ids are compared by their string form, so 5 and "5"
match. A missing match returns None.

Usage:
    from emojisushi import EmojisushiApi

    async with EmojisushiApi("https://api.emojisushi.com.ua/api/", lang="uk") as api:
        api.set_header("X-Session-Id", session_id)
        products = await api.get_products(limit=20)
        cart = await api.add_cart_product(product_id=101, quantity=2)

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterable, Optional, Type, TypeVar, Union

import httpx

from emojisushi.core.config import Settings, get_settings
from emojisushi.models import (
    Cart,
    CartProduct,
    CategoriesList,
    Category,
    CitiesList,
    City,
    PaymentMethod,
    PaymentMethodsList,
    PlaceOrderResponse,
    Product,
    ProductsList,
    ShipmentMethod,
    ShipmentMethodsList,
    Spot,
    SpotsList,
    Variant,
)
from emojisushi.options import RequestOptions
from emojisushi.pipeline import DEFAULT_LANG, RequestPipeline
from emojisushi.schemas import (
    AddCartProductRequest,
    CitiesQuery,
    Identifier,
    PaginationParams,
    PlaceOrderRequest,
    ProductsQuery,
    RemoveFromCartRequest,
    SlugOrIdQuery,
)
from emojisushi.services.backend import get_transport
from emojisushi.services.hydrator import BaseHydrator, get_hydrator

logger = logging.getLogger(__name__)

T = TypeVar("T")

Options = Union[RequestOptions, Mapping, None]

# Limit sent by derived lookups to fetch a whole list in one request
UNBOUNDED_LIMIT = 44543534

MENU_CATEGORY_SLUG = "menu"


def _same_id(a: Any, b: Any) -> bool:
    return a is not None and b is not None and str(a) == str(b)


def _first(items: Iterable[T], predicate: Callable[[T], bool]) -> Optional[T]:
    return next((item for item in items if predicate(item)), None)


class EmojisushiApi:
    """
    Emojisushi API client.

    Attributes:
        pipeline: Request layer (base URL, locale, static headers)
        hydrator: Converts response payloads into entity instances
        menu_category_slug: Category searched by get_product / get_variant

    Every operation accepts `options`: per-call transport overrides
    (headers, query, json, timeout) as a RequestOptions or a mapping.

    Raises (every operation):
        TransportError: Network failure or non-2xx response
        HydrationError: Response does not fit the declared type
    """

    def __init__(
        self,
        base_url: str,
        lang: str = DEFAULT_LANG,
        *,
        hydrator: Optional[BaseHydrator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Union[float, httpx.Timeout, None] = None,
        verify: bool = True,
        raise_for_status: bool = True,
        menu_category_slug: str = MENU_CATEGORY_SLUG,
    ):
        self.hydrator = hydrator or get_hydrator()
        self.pipeline = RequestPipeline(
            base_url,
            lang,
            timeout=timeout,
            verify=verify,
            raise_for_status=raise_for_status,
            transport=transport,
        )
        self.menu_category_slug = menu_category_slug

        logger.info(f"EmojisushiApi initialized (lang={lang})")

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "EmojisushiApi":
        """
        Build a client from Settings.

        In development mode the client is wired to the in-memory MockBackend
        unless a transport is given. A configured api_key becomes the
        Authorization header.
        """
        settings = settings or get_settings()

        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

        api = cls(
            settings.base_url,
            settings.lang,
            transport=transport or get_transport(settings),
            timeout=settings.timeout_seconds,
            verify=settings.verify_ssl,
            raise_for_status=settings.raise_for_status,
            menu_category_slug=settings.menu_category_slug,
        )
        if settings.api_key:
            api.set_header("Authorization", f"Bearer {settings.api_key}")
        return api

    @property
    def lang(self) -> str:
        return self.pipeline.lang

    def set_header(self, name: str, value: str) -> None:
        """Set or overwrite a header sent with every subsequent request."""
        self.pipeline.set_header(name, value)

    # =========================================================================
    # PLUMBING
    # =========================================================================

    async def _get(
        self,
        path: str,
        response_type: Type[T],
        query: Optional[Mapping] = None,
        options: Options = None,
    ) -> T:
        payload = await self.pipeline.request("GET", path, query=query, options=options)
        return self.hydrator.hydrate(response_type, payload)

    async def _post(
        self,
        path: str,
        response_type: Type[T],
        json: Optional[Mapping] = None,
        options: Options = None,
    ) -> T:
        payload = await self.pipeline.request("POST", path, json=json or {}, options=options)
        return self.hydrator.hydrate(response_type, payload)

    # =========================================================================
    # LOCATIONS
    # =========================================================================

    async def get_city(self, slug_or_id: Identifier, options: Options = None) -> City:
        """Fetch one city by slug or id."""
        query = SlugOrIdQuery(slug_or_id=slug_or_id).payload()
        return await self._get("city", City, query, options)

    async def get_cities(
        self,
        include_spots: Optional[bool] = None,
        include_districts: Optional[bool] = None,
        options: Options = None,
    ) -> CitiesList:
        """
        Fetch all cities.

        Args:
            include_spots: Embed each city's spots
            include_districts: Embed each city's delivery districts
        """
        query = CitiesQuery(
            includeSpots=include_spots,
            includeDistricts=include_districts,
        ).payload()
        return await self._get("cities", CitiesList, query, options)

    async def get_spot(self, slug_or_id: Identifier, options: Options = None) -> Spot:
        """Fetch one spot by slug or id."""
        query = SlugOrIdQuery(slug_or_id=slug_or_id).payload()
        return await self._get("spot", Spot, query, options)

    async def get_spots(self, options: Options = None) -> SpotsList:
        return await self._get("spots", SpotsList, {}, options)

    # =========================================================================
    # MENU
    # =========================================================================

    async def get_categories(
        self,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        options: Options = None,
    ) -> CategoriesList:
        query = PaginationParams(offset=offset, limit=limit).payload()
        return await self._get("categories", CategoriesList, query, options)

    async def get_category(self, category_id: Identifier, options: Options = None) -> Optional[Category]:
        """First category whose id matches, or None."""
        categories = await self.get_categories(limit=UNBOUNDED_LIMIT, options=options)
        return _first(categories.data, lambda c: _same_id(c.id, category_id))

    async def get_products(
        self,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        category_slug: Optional[str] = None,
        options: Options = None,
    ) -> ProductsList:
        query = ProductsQuery(offset=offset, limit=limit, category_slug=category_slug).payload()
        return await self._get("products", ProductsList, query, options)

    async def _menu_products(self, options: Options) -> list:
        products = await self.get_products(
            limit=UNBOUNDED_LIMIT,
            category_slug=self.menu_category_slug,
            options=options,
        )
        return products.data

    async def get_product(self, product_id: Identifier, options: Options = None) -> Optional[Product]:
        """First product of the menu category whose id matches, or None."""
        products = await self._menu_products(options)
        return _first(products, lambda p: _same_id(p.id, product_id))

    async def get_variant(self, variant_id: Identifier, options: Options = None) -> Optional[Variant]:
        """
        Find a variant among the menu products.

        Products are scanned in list order and, within the first product
        holding a matching variant, its variants in order.
        """
        products = await self._menu_products(options)
        product = _first(
            products,
            lambda p: any(_same_id(v.id, variant_id) for v in p.variants),
        )
        if product is None:
            logger.debug(f"Variant {variant_id} not found in '{self.menu_category_slug}'")
            return None
        return _first(product.variants, lambda v: _same_id(v.id, variant_id))

    # =========================================================================
    # CART
    # =========================================================================

    async def get_cart(self, options: Options = None) -> Cart:
        return await self._get("cart/products", Cart, {}, options)

    async def add_cart_product(
        self,
        product_id: Identifier,
        quantity: int,
        variant_id: Optional[Identifier] = None,
        options: Options = None,
    ) -> Cart:
        """
        Add a product (or one of its variants) to the cart.

        The backend validates quantity and ids; a rejection surfaces
        as TransportError.
        """
        body = AddCartProductRequest(
            product_id=product_id,
            quantity=quantity,
            variant_id=variant_id,
        ).payload()
        return await self._post("cart/add", Cart, body, options)

    async def remove_from_cart(self, cart_product_id: Identifier, options: Options = None) -> Cart:
        """Remove a cart line (CartProduct.id, not the product id)."""
        body = RemoveFromCartRequest(cart_product_id=cart_product_id).payload()
        return await self._post("cart/remove", Cart, body, options)

    async def get_cart_product(
        self,
        product_id: Identifier,
        variant_id: Optional[Identifier] = None,
        options: Options = None,
    ) -> Optional[CartProduct]:
        """
        First cart line holding product_id, or None.

        When variant_id is given the line's variant must match it too;
        otherwise any variant (or none) matches.
        """
        cart = await self.get_cart(options=options)

        def matches(line: CartProduct) -> bool:
            if variant_id is not None and not _same_id(line.variant_id, variant_id):
                return False
            return _same_id(line.product_id, product_id)

        return _first(cart.data, matches)

    async def clear_cart(self, options: Options = None) -> Cart:
        return await self._post("cart/clear", Cart, {}, options)

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    async def get_payment_methods(
        self,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        options: Options = None,
    ) -> PaymentMethodsList:
        query = PaginationParams(offset=offset, limit=limit).payload()
        return await self._get("payments", PaymentMethodsList, query, options)

    async def get_payment_method(
        self,
        payment_method_id: Identifier,
        options: Options = None,
    ) -> Optional[PaymentMethod]:
        """First payment method whose id matches, or None."""
        methods = await self.get_payment_methods(limit=UNBOUNDED_LIMIT, options=options)
        return _first(methods.data, lambda m: _same_id(m.id, payment_method_id))

    async def get_shipping_methods(
        self,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        options: Options = None,
    ) -> ShipmentMethodsList:
        query = PaginationParams(offset=offset, limit=limit).payload()
        return await self._get("shipping", ShipmentMethodsList, query, options)

    async def get_shipping_method(
        self,
        shipping_method_id: Identifier,
        options: Options = None,
    ) -> Optional[ShipmentMethod]:
        """First shipping method whose id matches, or None."""
        methods = await self.get_shipping_methods(limit=UNBOUNDED_LIMIT, options=options)
        return _first(methods.data, lambda m: _same_id(m.id, shipping_method_id))

    async def place_order(
        self,
        phone: str,
        shipping_method_id: int,
        payment_method_id: int,
        spot_id: int,
        firstname: Optional[str] = None,
        lastname: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
        comment: Optional[str] = None,
        sticks: Optional[int] = None,
        change: Optional[str] = None,
        options: Options = None,
    ) -> PlaceOrderResponse:
        """
        Place an order for the current cart.

        Args:
            phone: Customer phone
            shipping_method_id: ShipmentMethod.id
            payment_method_id: PaymentMethod.id
            spot_id: Spot preparing the order
            firstname: Customer first name
            lastname: Customer last name
            email: Customer email
            address: Delivery address (courier shipping)
            comment: Free-form note for the restaurant
            sticks: Number of chopstick sets
            change: Banknote the courier should bring change for
        """
        body = PlaceOrderRequest(
            phone=phone,
            firstname=firstname,
            lastname=lastname,
            email=email,
            shipping_method_id=shipping_method_id,
            payment_method_id=payment_method_id,
            spot_id=spot_id,
            address=address,
            comment=comment,
            sticks=sticks,
            change=change,
        ).payload()

        logger.info(f"Placing order (spot={spot_id}, shipping={shipping_method_id})")
        return await self._post("order/place", PlaceOrderResponse, body, options)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def aclose(self) -> None:
        await self.pipeline.aclose()

    async def __aenter__(self) -> "EmojisushiApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
