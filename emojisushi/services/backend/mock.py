"""
Mock Backend Implementation

Simulates the Emojisushi API without making real network calls.
Used in development mode (ENV_MODE=development) to:
    - Exercise the complete ordering flow locally
    - Run the client's tests without a server
    - Develop without internet connectivity

Behavior:
    - Serves every endpoint used by EmojisushiApi through httpx.MockTransport
    - Honours offset/limit/category_slug like the real backend
    - Keeps one in-memory cart per session header and an order log
    - Rejects requests without the `lang` query parameter (400)
    - Optionally simulates latency and random 503 failures
    - Records every received request for inspection

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import copy
import json
import logging
import random
import threading
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Id"


# =============================================================================
# SEED DATA
# =============================================================================

def _price(amount: str) -> dict:
    return {"price": amount, "price_formatted": f"{amount} ₴", "currency": "UAH"}


DEFAULT_DATA: Dict[str, List[dict]] = {
    "cities": [
        {
            "id": 1, "name": "Одеса", "slug": "odesa", "is_main": True,
            "frontend_url": "https://emojisushi.com.ua",
            "google_map_url": "https://maps.google.com/?q=odesa",
        },
        {
            "id": 2, "name": "Чорноморськ", "slug": "chornomorsk", "is_main": False,
            "frontend_url": "https://chornomorsk.emojisushi.com.ua",
            "google_map_url": "https://maps.google.com/?q=chornomorsk",
        },
    ],
    "districts": [
        {"id": 1, "name": "Приморський", "city_id": 1},
        {"id": 2, "name": "Київський", "city_id": 1},
        {"id": 3, "name": "Центр", "city_id": 2},
    ],
    "spots": [
        {
            "id": 1, "name": "Emoji Sushi Дерибасівська", "slug": "derybasivska",
            "address": "вул. Дерибасівська, 10", "phones": "+380501234567",
            "city_id": 1, "google_map_url": "", "cover": None,
        },
        {
            "id": 2, "name": "Emoji Sushi Таїрова", "slug": "tairova",
            "address": "вул. Академіка Корольова, 33", "phones": "+380501234568",
            "city_id": 1, "google_map_url": "", "cover": None,
        },
        {
            "id": 3, "name": "Emoji Sushi Чорноморськ", "slug": "chornomorsk-center",
            "address": "просп. Миру, 5", "phones": "+380501234569",
            "city_id": 2, "google_map_url": "", "cover": None,
        },
    ],
    "categories": [
        {"id": 1, "name": "Меню", "slug": "menu", "parent_id": None, "published": True},
        {"id": 2, "name": "Роли", "slug": "rolls", "parent_id": 1, "published": True},
        {"id": 3, "name": "Сети", "slug": "sets", "parent_id": 1, "published": True},
        {"id": 4, "name": "Піца", "slug": "pizza", "parent_id": 1, "published": True},
        {"id": 5, "name": "Напої", "slug": "drinks", "parent_id": None, "published": True},
    ],
    "products": [
        {
            "id": 101, "name": "Філадельфія", "slug": "philadelphia",
            "description": "Лосось, вершковий сир, огірок", "weight": 250,
            "category_id": 2, "category_slugs": ["menu", "rolls"],
            "prices": [_price("289.00")], "variants": [], "image_sets": [],
        },
        {
            "id": 102, "name": "Каліфорнія", "slug": "california",
            "description": "Краб, авокадо, ікра масаго", "weight": 230,
            "category_id": 2, "category_slugs": ["menu", "rolls"],
            "prices": [_price("249.00")], "variants": [], "image_sets": [],
        },
        {
            "id": 103, "name": "Сет Emoji", "slug": "emoji-set",
            "description": "32 шматочки", "weight": 1000,
            "category_id": 3, "category_slugs": ["menu", "sets"],
            "prices": [_price("899.00")], "variants": [], "image_sets": [],
        },
        {
            "id": 104, "name": "Маргарита", "slug": "margherita",
            "description": "Томатний соус, моцарела, базилік", "weight": 450,
            "category_id": 4, "category_slugs": ["menu", "pizza"],
            "prices": [_price("199.00")],
            "variants": [
                {
                    "id": 1041, "product_id": 104, "name": "30 см",
                    "attributes": {"size": "30"}, "prices": [_price("199.00")],
                },
                {
                    "id": 1042, "product_id": 104, "name": "40 см",
                    "attributes": {"size": "40"}, "prices": [_price("279.00")],
                },
            ],
            "image_sets": [],
        },
        {
            "id": 105, "name": "Coca-Cola 0.5", "slug": "coca-cola",
            "description": "", "weight": 500,
            "category_id": 5, "category_slugs": ["drinks"],
            "prices": [_price("45.00")], "variants": [], "image_sets": [],
        },
    ],
    "payment_methods": [
        {"id": 1, "name": "Готівка", "code": "cash", "description": "Оплата кур'єру", "sort_order": 1},
        {"id": 2, "name": "Картка онлайн", "code": "card", "description": "", "sort_order": 2},
    ],
    "shipping_methods": [
        {"id": 1, "name": "Самовивіз", "code": "takeaway", "description": "", "sort_order": 1},
        {"id": 2, "name": "Доставка кур'єром", "code": "courier", "description": "", "sort_order": 2},
    ],
}


def _same_id(a: Any, b: Any) -> bool:
    return a is not None and b is not None and str(a) == str(b)


def _same_variant(a: Any, b: Any) -> bool:
    return (a is None and b is None) or _same_id(a, b)


def _error(status_code: int, message: str) -> httpx.Response:
    return httpx.Response(status_code, json={"success": False, "message": message})


class MockBackend:
    """
    In-memory Emojisushi API.

    Attributes:
        failure_rate: Probability of a simulated 503 (0.0-1.0)
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds
        session_header: Request header whose value selects the cart
        requests: Every request received, in order
        carts: Cart lines per session
        orders: Orders placed so far

    Example:
        >>> backend = MockBackend()
        >>> api = EmojisushiApi("https://mock.emojisushi/api/", transport=backend.transport())
        >>> cart = await api.add_cart_product(product_id=101, quantity=2)
        >>> cart.total
        '578.00'
    """

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
        data: Optional[Dict[str, List[dict]]] = None,
        seed: Optional[int] = None,
        session_header: str = SESSION_HEADER,
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.session_header = session_header

        self._data = copy.deepcopy(data if data is not None else DEFAULT_DATA)
        self._random = random.Random(seed)
        self._lock = threading.Lock()

        self.requests: List[httpx.Request] = []
        self.carts: Dict[str, List[dict]] = {}
        self.orders: List[dict] = []
        self._next_cart_line_id = 1
        self._next_order_id = 1

        self._routes: Dict[tuple, Callable[[httpx.Request], httpx.Response]] = {
            ("GET", "cart/products"): self._get_cart,
            ("POST", "cart/add"): self._add_to_cart,
            ("POST", "cart/remove"): self._remove_from_cart,
            ("POST", "cart/clear"): self._clear_cart,
            ("POST", "order/place"): self._place_order,
            ("GET", "categories"): self._get_categories,
            ("GET", "products"): self._get_products,
            ("GET", "payments"): self._get_payment_methods,
            ("GET", "shipping"): self._get_shipping_methods,
            ("GET", "cities"): self._get_cities,
            ("GET", "spots"): self._get_spots,
            ("GET", "city"): self._get_city,
            ("GET", "spot"): self._get_spot,
        }

        logger.info(
            f"MockBackend initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"latency={min_latency}-{max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    def transport(self) -> httpx.MockTransport:
        """Return an httpx transport answering from this backend."""
        return httpx.MockTransport(self.handle)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    async def handle(self, request: httpx.Request) -> httpx.Response:
        """httpx.MockTransport handler."""
        self.requests.append(request)

        await self._simulate_latency()

        if self._should_fail():
            logger.debug(f"Mock: simulated failure for {request.method} {request.url.path}")
            return _error(503, "Service temporarily unavailable")

        if not request.url.params.get("lang"):
            return _error(400, "The lang parameter is required")

        handler = self._resolve(request.method, request.url.path)
        if handler is None:
            return _error(404, f"No route for {request.method} {request.url.path}")

        with self._lock:
            return handler(request)

    def _resolve(self, method: str, path: str) -> Optional[Callable[[httpx.Request], httpx.Response]]:
        path = path.rstrip("/")
        # Longest route first so "cart/products" wins over "products"
        for (route_method, route), handler in sorted(
            self._routes.items(), key=lambda item: -len(item[0][1])
        ):
            if route_method == method and (path == route or path.endswith(f"/{route}")):
                return handler
        return None

    async def _simulate_latency(self) -> float:
        """
        Simulate network latency.

        Returns:
            float: Actual latency in milliseconds
        """
        if self.max_latency <= 0:
            return 0.0
        latency = self._random.uniform(self.min_latency, self.max_latency)
        await asyncio.sleep(latency)
        return latency * 1000

    def _should_fail(self) -> bool:
        """Determine if this request should simulate a failure."""
        return self.failure_rate > 0 and self._random.random() < self.failure_rate

    @staticmethod
    def _body(request: httpx.Request) -> dict:
        if not request.content:
            return {}
        body = json.loads(request.content)
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _flag(request: httpx.Request, name: str) -> bool:
        return request.url.params.get(name, "").lower() in ("1", "true")

    def _paginate(self, request: httpx.Request, items: List[dict]) -> httpx.Response:
        params = request.url.params
        try:
            offset = max(int(params.get("offset", 0)), 0)
            limit = int(params["limit"]) if "limit" in params else len(items)
        except ValueError:
            return _error(422, "offset and limit must be integers")

        page = items[offset:offset + limit]
        return httpx.Response(200, json={
            "data": page,
            "meta": {"total": len(items), "offset": offset, "limit": limit},
        })

    # =========================================================================
    # LOCATIONS
    # =========================================================================

    def _city_payload(self, city: dict, spots: bool, districts: bool) -> dict:
        payload = dict(city)
        if spots:
            payload["spots"] = [s for s in self._data["spots"] if s["city_id"] == city["id"]]
        if districts:
            payload["districts"] = [d for d in self._data["districts"] if d["city_id"] == city["id"]]
        return payload

    def _get_cities(self, request: httpx.Request) -> httpx.Response:
        spots = self._flag(request, "includeSpots")
        districts = self._flag(request, "includeDistricts")
        cities = [self._city_payload(c, spots, districts) for c in self._data["cities"]]
        return self._paginate(request, cities)

    def _get_city(self, request: httpx.Request) -> httpx.Response:
        key = request.url.params.get("slug_or_id")
        for city in self._data["cities"]:
            if key == city["slug"] or _same_id(key, city["id"]):
                return httpx.Response(200, json=self._city_payload(city, True, True))
        return _error(404, "City not found")

    def _spot_payload(self, spot: dict) -> dict:
        city = next(c for c in self._data["cities"] if c["id"] == spot["city_id"])
        return {**spot, "city": city}

    def _get_spots(self, request: httpx.Request) -> httpx.Response:
        return self._paginate(request, [self._spot_payload(s) for s in self._data["spots"]])

    def _get_spot(self, request: httpx.Request) -> httpx.Response:
        key = request.url.params.get("slug_or_id")
        for spot in self._data["spots"]:
            if key == spot["slug"] or _same_id(key, spot["id"]):
                return httpx.Response(200, json=self._spot_payload(spot))
        return _error(404, "Spot not found")

    # =========================================================================
    # MENU
    # =========================================================================

    def _get_categories(self, request: httpx.Request) -> httpx.Response:
        return self._paginate(request, self._data["categories"])

    def _product_payload(self, product: dict) -> dict:
        payload = {k: v for k, v in product.items() if k != "category_slugs"}
        payload["categories"] = [
            c for c in self._data["categories"] if c["slug"] in product["category_slugs"]
        ]
        return payload

    def _get_products(self, request: httpx.Request) -> httpx.Response:
        slug = request.url.params.get("category_slug")
        products = [
            self._product_payload(p)
            for p in self._data["products"]
            if slug is None or slug in p["category_slugs"]
        ]
        return self._paginate(request, products)

    def _find_product(self, product_id: Any) -> Optional[dict]:
        return next((p for p in self._data["products"] if _same_id(p["id"], product_id)), None)

    # =========================================================================
    # CART
    # =========================================================================

    def cart_for(self, session: str = "") -> List[dict]:
        """Cart lines of one session (created empty on first use)."""
        return self.carts.setdefault(session, [])

    def _session(self, request: httpx.Request) -> str:
        return request.headers.get(self.session_header, "")

    def _cart_payload(self, cart: List[dict]) -> dict:
        total = Decimal("0")
        lines = []
        for line in cart:
            product = self._find_product(line["product_id"])
            variant = next(
                (v for v in product["variants"] if _same_id(v["id"], line["variant_id"])),
                None,
            )
            price = (variant or product)["prices"][0]
            total += Decimal(price["price"]) * line["quantity"]
            lines.append({
                **line,
                "price": price,
                "product": self._product_payload(product),
                "variant": variant,
            })

        return {
            "data": lines,
            "total": f"{total:.2f}",
            "total_quantity": sum(line["quantity"] for line in cart),
        }

    def _get_cart(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=self._cart_payload(self.cart_for(self._session(request))))

    def _add_to_cart(self, request: httpx.Request) -> httpx.Response:
        body = self._body(request)
        cart = self.cart_for(self._session(request))
        product = self._find_product(body.get("product_id"))
        if product is None:
            return _error(422, "Product not found")

        variant_id = body.get("variant_id")
        if variant_id is not None and not any(_same_id(v["id"], variant_id) for v in product["variants"]):
            return _error(422, "Variant not found")
        if variant_id is None and product["variants"]:
            return _error(422, "This product requires a variant")

        try:
            quantity = int(body.get("quantity", 1))
        except (TypeError, ValueError):
            return _error(422, "quantity must be an integer")
        if quantity < 1:
            return _error(422, "quantity must be positive")

        for line in cart:
            if line["product_id"] == product["id"] and _same_variant(line["variant_id"], variant_id):
                line["quantity"] += quantity
                break
        else:
            cart.append({
                "id": self._next_cart_line_id,
                "product_id": product["id"],
                "variant_id": int(variant_id) if variant_id is not None else None,
                "quantity": quantity,
            })
            self._next_cart_line_id += 1

        logger.debug(f"Mock: cart now has {len(cart)} line(s)")
        return httpx.Response(200, json=self._cart_payload(cart))

    def _remove_from_cart(self, request: httpx.Request) -> httpx.Response:
        cart = self.cart_for(self._session(request))
        line_id = self._body(request).get("cart_product_id")
        cart[:] = [line for line in cart if not _same_id(line["id"], line_id)]
        return httpx.Response(200, json=self._cart_payload(cart))

    def _clear_cart(self, request: httpx.Request) -> httpx.Response:
        cart = self.cart_for(self._session(request))
        cart.clear()
        return httpx.Response(200, json=self._cart_payload(cart))

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    def _get_payment_methods(self, request: httpx.Request) -> httpx.Response:
        return self._paginate(request, self._data["payment_methods"])

    def _get_shipping_methods(self, request: httpx.Request) -> httpx.Response:
        return self._paginate(request, self._data["shipping_methods"])

    def _place_order(self, request: httpx.Request) -> httpx.Response:
        body = self._body(request)
        cart_lines = self.cart_for(self._session(request))

        if not body.get("phone"):
            return _error(422, "phone is required")
        if not cart_lines:
            return _error(422, "Cart is empty")

        checks = (
            ("shipping_method_id", "shipping_methods"),
            ("payment_method_id", "payment_methods"),
            ("spot_id", "spots"),
        )
        for field_name, collection in checks:
            if not any(_same_id(item["id"], body.get(field_name)) for item in self._data[collection]):
                return _error(422, f"Unknown {field_name}")

        cart = self._cart_payload(cart_lines)
        order = {
            "id": self._next_order_id,
            "phone": body["phone"],
            "firstname": body.get("firstname"),
            "lastname": body.get("lastname"),
            "email": body.get("email"),
            "address": body.get("address"),
            "comment": body.get("comment"),
            "sticks": body.get("sticks"),
            "change": body.get("change"),
            "shipping_method_id": body["shipping_method_id"],
            "payment_method_id": body["payment_method_id"],
            "spot_id": body["spot_id"],
            "lines": cart["data"],
            "total": cart["total"],
            "lang": request.url.params.get("lang"),
        }
        self.orders.append(order)
        self._next_order_id += 1
        cart_lines.clear()

        payment = next(m for m in self._data["payment_methods"] if _same_id(m["id"], body["payment_method_id"]))
        redirect_url = (
            f"https://pay.mock.emojisushi/{order['id']}" if payment["code"] == "card" else None
        )

        logger.info(f"Mock: order #{order['id']} placed - {order['total']} UAH")

        return httpx.Response(200, json={
            "success": True,
            "message": "Order placed",
            "order_id": order["id"],
            "redirect_url": redirect_url,
            "order": order,
        })
