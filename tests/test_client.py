import json

import httpx
import pytest

from emojisushi import UNBOUNDED_LIMIT, EmojisushiApi, RequestOptions
from emojisushi.core.exceptions import HydrationError, TransportError
from emojisushi.models import Cart, City, ProductsList


PRODUCTS = {
    "data": [
        {"id": 7, "name": "first", "variants": [{"id": 70, "name": "small"}]},
        {"id": 8, "name": "other", "variants": [{"id": 70, "name": "duplicate"}, {"id": 80, "name": "large"}]},
        {"id": 7, "name": "second"},
    ],
}

CART = {
    "data": [
        {"id": 1, "product_id": 5, "variant_id": None, "quantity": 1},
        {"id": 2, "product_id": 5, "variant_id": 9, "quantity": 2},
        {"id": 3, "product_id": 6, "variant_id": 9, "quantity": 1},
    ],
    "total": "100.00",
    "total_quantity": 4,
}


# =============================================================================
# DERIVED LOOKUPS
# =============================================================================

@pytest.mark.asyncio
async def test_get_product_returns_first_match(make_api):
    api, handler = make_api({"products": PRODUCTS})

    product = await api.get_product(7)

    assert product.name == "first"


@pytest.mark.asyncio
async def test_get_product_fetches_whole_menu_in_one_request(make_api):
    api, handler = make_api({"products": PRODUCTS})

    await api.get_product(7)

    assert len(handler.requests) == 1
    params = handler.requests[0].url.params
    assert params["limit"] == str(UNBOUNDED_LIMIT)
    assert params["category_slug"] == "menu"
    assert params["lang"] == "uk"


@pytest.mark.asyncio
async def test_get_product_uses_configured_menu_slug(make_api):
    api, handler = make_api({"products": PRODUCTS}, menu_category_slug="catalog")

    await api.get_product(7)

    assert handler.requests[0].url.params["category_slug"] == "catalog"


@pytest.mark.asyncio
async def test_lookup_ids_compare_by_string_form(make_api):
    api, _ = make_api({"products": PRODUCTS})

    assert (await api.get_product("7")).name == "first"
    assert (await api.get_product("8")).name == "other"


@pytest.mark.asyncio
async def test_lookup_miss_returns_none(make_api):
    api, _ = make_api({"products": PRODUCTS, "payments": {"data": []}})

    assert await api.get_product(99) is None
    assert await api.get_variant(99) is None
    assert await api.get_payment_method(1) is None


@pytest.mark.asyncio
async def test_get_variant_searches_products_in_order(make_api):
    api, _ = make_api({"products": PRODUCTS})

    assert (await api.get_variant(70)).name == "small"
    assert (await api.get_variant("80")).name == "large"


@pytest.mark.asyncio
async def test_get_category_scans_unbounded_list(make_api):
    api, handler = make_api({"categories": {"data": [
        {"id": 1, "slug": "menu"},
        {"id": 2, "slug": "rolls"},
        {"id": 2, "slug": "rolls-copy"},
    ]}})

    category = await api.get_category(2)

    assert category.slug == "rolls"
    assert handler.requests[0].url.params["limit"] == str(UNBOUNDED_LIMIT)


@pytest.mark.asyncio
async def test_get_payment_and_shipping_method(make_api):
    api, handler = make_api({
        "payments": {"data": [{"id": 1, "code": "cash"}, {"id": 2, "code": "card"}]},
        "shipping": {"data": [{"id": 1, "code": "takeaway"}, {"id": 2, "code": "courier"}]},
    })

    assert (await api.get_payment_method(2)).code == "card"
    assert (await api.get_shipping_method("1")).code == "takeaway"
    assert [r.url.path for r in handler.requests] == ["/api/payments", "/api/shipping"]


@pytest.mark.asyncio
async def test_get_cart_product_without_variant_matches_any_line(make_api):
    api, _ = make_api({"cart/products": CART})

    line = await api.get_cart_product(5)

    assert line.id == 1


@pytest.mark.asyncio
async def test_get_cart_product_with_variant_requires_both(make_api):
    api, _ = make_api({"cart/products": CART})

    assert (await api.get_cart_product(5, variant_id=9)).id == 2
    assert (await api.get_cart_product(6, variant_id="9")).id == 3
    assert await api.get_cart_product(5, variant_id=8) is None


# =============================================================================
# REQUEST SHAPES
# =============================================================================

@pytest.mark.asyncio
async def test_operations_hit_expected_endpoints(make_api):
    api, handler = make_api()

    await api.get_city("odesa")
    await api.get_spot(3)
    await api.get_spots()
    await api.get_cart()
    await api.clear_cart()

    assert [(r.method, r.url.path) for r in handler.requests] == [
        ("GET", "/api/city"),
        ("GET", "/api/spot"),
        ("GET", "/api/spots"),
        ("GET", "/api/cart/products"),
        ("POST", "/api/cart/clear"),
    ]
    assert handler.requests[0].url.params["slug_or_id"] == "odesa"
    assert handler.requests[1].url.params["slug_or_id"] == "3"


@pytest.mark.asyncio
async def test_get_cities_sends_include_flags(make_api):
    api, handler = make_api({"cities": {"data": [{"id": 1, "slug": "odesa"}]}})

    cities = await api.get_cities(include_spots=True)

    params = handler.requests[0].url.params
    assert params["includeSpots"] == "1"
    assert "includeDistricts" not in params
    assert isinstance(cities.data[0], City)


@pytest.mark.asyncio
async def test_pagination_params_are_sent_only_when_given(make_api):
    api, handler = make_api()

    await api.get_products(offset=10, limit=5)
    await api.get_products()

    assert handler.requests[0].url.query == b"offset=10&limit=5&lang=uk"
    assert handler.requests[1].url.query == b"lang=uk"


@pytest.mark.asyncio
async def test_add_cart_product_posts_json_without_nulls(make_api):
    api, handler = make_api({"cart/add": {"data": [{"id": 1, "product_id": 101, "quantity": 2}], "total": "578.00"}})

    cart = await api.add_cart_product(product_id=101, quantity=2)

    request = handler.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/cart/add"
    assert json.loads(request.content) == {"product_id": 101, "quantity": 2}
    assert isinstance(cart, Cart)
    assert cart.total == "578.00"


@pytest.mark.asyncio
async def test_remove_from_cart_posts_line_id(make_api):
    api, handler = make_api()

    await api.remove_from_cart(12)

    assert json.loads(handler.requests[0].content) == {"cart_product_id": 12}


@pytest.mark.asyncio
async def test_place_order_body(make_api):
    api, handler = make_api({"order/place": {"success": True, "message": "ok", "order_id": 5}})

    response = await api.place_order(
        phone="+380501234567",
        shipping_method_id=2,
        payment_method_id=1,
        spot_id=1,
        firstname="Olena",
        sticks=2,
    )

    assert json.loads(handler.requests[0].content) == {
        "phone": "+380501234567",
        "firstname": "Olena",
        "shipping_method_id": 2,
        "payment_method_id": 1,
        "spot_id": 1,
        "sticks": 2,
    }
    assert response.success is True
    assert response.order_id == 5
    assert response.redirect_url is None


@pytest.mark.asyncio
async def test_pagination_values_are_passed_through(make_api):
    api, handler = make_api()

    await api.get_payment_methods(limit=0)
    await api.get_shipping_methods(offset=-1, limit=1)

    assert handler.requests[0].url.params["limit"] == "0"
    assert handler.requests[1].url.params["offset"] == "-1"


@pytest.mark.asyncio
async def test_order_details_are_left_to_the_backend(make_api):
    api, handler = make_api()

    await api.add_cart_product(product_id=101, quantity=0)
    await api.place_order(
        phone="12-34-56",
        shipping_method_id=1,
        payment_method_id=1,
        spot_id=1,
        email="not-an-email",
    )

    assert len(handler.requests) == 2
    assert json.loads(handler.requests[0].content)["quantity"] == 0
    body = json.loads(handler.requests[1].content)
    assert body["phone"] == "12-34-56"
    assert body["email"] == "not-an-email"


@pytest.mark.asyncio
async def test_backend_rejection_surfaces_as_transport_error(make_api):
    api, _ = make_api({"cart/add": httpx.Response(422, json={"message": "quantity must be positive"})})

    with pytest.raises(TransportError) as exc_info:
        await api.add_cart_product(product_id=101, quantity=0)

    assert exc_info.value.status_code == 422


@pytest.mark.asyncio
async def test_options_merge_into_operation_query(make_api):
    api, handler = make_api()

    await api.get_products(
        limit=5,
        options={"query": {"limit": 50, "filter": {"tag": "hot"}}},
    )

    params = handler.requests[0].url.params
    assert params["limit"] == "5"
    assert params["filter[tag]"] == "hot"


@pytest.mark.asyncio
async def test_options_headers_and_static_headers(make_api):
    api, handler = make_api()
    api.set_header("X-Session-Id", "abc")

    await api.get_cart(options=RequestOptions(headers={"X-Session-Id": "other", "X-Trace": "1"}))

    headers = handler.requests[0].headers
    assert headers["X-Session-Id"] == "abc"
    assert headers["X-Trace"] == "1"


@pytest.mark.asyncio
async def test_unknown_option_keys_are_rejected(make_api):
    api, handler = make_api()

    with pytest.raises(TypeError):
        await api.get_spots(options={"retries": 3})

    assert handler.requests == []


@pytest.mark.asyncio
async def test_lang_is_applied_to_every_request(make_api):
    api, handler = make_api(lang="en")

    await api.get_spots()
    await api.clear_cart()

    assert api.lang == "en"
    assert all(r.url.params["lang"] == "en" for r in handler.requests)


# =============================================================================
# ERRORS
# =============================================================================

@pytest.mark.asyncio
async def test_transport_errors_propagate(make_api):
    api, _ = make_api({"spots": httpx.Response(502)})

    with pytest.raises(TransportError) as exc_info:
        await api.get_spots()

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_wrong_payload_shape_raises_hydration_error(make_api):
    api, _ = make_api({"cart/products": [1, 2, 3]})

    with pytest.raises(HydrationError):
        await api.get_cart()


@pytest.mark.asyncio
async def test_custom_hydrator_is_used(make_api, hydrator):
    api, _ = make_api({"products": PRODUCTS}, hydrator=hydrator)

    products = await api.get_products()

    assert api.hydrator is hydrator
    assert isinstance(products, ProductsList)
    assert len(products.data) == 3


@pytest.mark.asyncio
async def test_client_closes_as_context_manager():
    handler_calls = []

    def handler(request):
        handler_calls.append(request)
        return httpx.Response(200, json={})

    async with EmojisushiApi("https://api.test/api", transport=httpx.MockTransport(handler)) as api:
        await api.get_spots()

    assert api.pipeline._client.is_closed
    assert len(handler_calls) == 1
