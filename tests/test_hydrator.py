import dataclasses
from datetime import datetime
from typing import List, Optional

import pytest

from emojisushi.core.exceptions import HydrationError
from emojisushi.models import (
    Cart,
    CartProduct,
    CategoriesList,
    Category,
    CitiesList,
    City,
    District,
    PaymentMethod,
    Product,
    ProductsList,
    Spot,
    Variant,
)
from emojisushi.services.hydrator import DataclassHydrator, FieldKind


def _price(amount):
    return {"price": amount, "price_formatted": f"{amount} ₴", "currency": "UAH"}


PRODUCTS_PAYLOAD = {
    "data": [
        {
            "id": 104,
            "name": "Margherita",
            "slug": "margherita",
            "description": "Tomato, mozzarella",
            "weight": 450,
            "category_id": 4,
            "categories": [
                {"id": 1, "name": "Menu", "slug": "menu", "parent_id": None, "published": True},
                {"id": 4, "name": "Pizza", "slug": "pizza", "parent_id": 1, "published": True},
            ],
            "prices": [_price("199.00")],
            "variants": [
                {
                    "id": 1041,
                    "product_id": 104,
                    "name": "30 cm",
                    "attributes": {"size": "30"},
                    "prices": [_price("199.00")],
                },
                {
                    "id": 1042,
                    "product_id": 104,
                    "name": "40 cm",
                    "attributes": {"size": "40", "tags": ["big"]},
                    "prices": [_price("279.00")],
                },
            ],
            "image_sets": [{"images": [{"path": "/img/1.png"}]}],
        },
        {
            "id": 101,
            "name": "Philadelphia",
            "slug": "philadelphia",
            "description": "",
            "weight": 250,
            "category_id": None,
            "categories": [],
            "prices": [_price("289.00")],
            "variants": [],
            "image_sets": [],
        },
    ],
    "meta": {"total": 2, "offset": 0, "limit": 25},
}


def test_missing_primitive_fields_get_type_defaults(hydrator):
    method = hydrator.hydrate(PaymentMethod, {"id": 5})

    assert method.id == 5
    assert method.name == ""
    assert method.sort_order == 0


def test_absent_list_field_is_empty_list(hydrator):
    products = hydrator.hydrate(ProductsList, {})

    assert products.data == []
    assert products.meta is None


def test_optional_fields_are_none_when_missing_or_null(hydrator):
    category = hydrator.hydrate(Category, {"id": 2, "parent_id": None})
    line = hydrator.hydrate(CartProduct, {"product_id": 101})

    assert category.parent_id is None
    assert line.variant_id is None
    assert line.product is None


def test_nested_entities_and_lists_are_hydrated(hydrator):
    products = hydrator.hydrate(ProductsList, PRODUCTS_PAYLOAD)

    pizza = products.data[0]
    assert isinstance(pizza, Product)
    assert [v.id for v in pizza.variants] == [1041, 1042]
    assert isinstance(pizza.variants[1], Variant)
    assert pizza.variants[1].prices[0].price == "279.00"
    assert pizza.categories[1].slug == "pizza"
    assert products.meta.total == 2


def test_primitives_are_coerced(hydrator):
    product = hydrator.hydrate(Product, {"id": "7", "weight": 250.0, "name": 12})
    category = hydrator.hydrate(Category, {"published": "1", "parent_id": "3"})

    assert product.id == 7
    assert product.weight == 250
    assert product.name == "12"
    assert category.published is True
    assert category.parent_id == 3


def test_uncoercible_primitive_falls_back_to_default(hydrator):
    product = hydrator.hydrate(Product, {"id": "abc", "weight": 2.5, "name": {"uk": "x"}})

    assert product.id == 0
    assert product.weight == 0
    assert product.name == ""


def test_unknown_keys_are_ignored(hydrator):
    city = hydrator.hydrate(City, {"id": 1, "slug": "odesa", "timezone": "Europe/Kyiv"})

    assert city.slug == "odesa"
    assert not hasattr(city, "timezone")


def test_php_empty_array_for_mapping_field_becomes_empty_dict(hydrator):
    variant = hydrator.hydrate(Variant, {"id": 1, "attributes": []})

    assert variant.attributes == {}


def test_php_empty_array_for_optional_entity_becomes_none(hydrator):
    products = hydrator.hydrate(ProductsList, {"data": [], "meta": []})
    spot = hydrator.hydrate(Spot, {"id": 3, "city": []})

    assert products.meta is None
    assert spot.city is None


def test_php_empty_array_for_required_entity_becomes_default():
    @dataclasses.dataclass(frozen=True)
    class Delivery:
        id: int = 0
        district: District = District()

    hydrator = DataclassHydrator()
    hydrator.register(Delivery)

    assert hydrator.hydrate(Delivery, {"id": 1, "district": []}).district == District()


def test_non_list_value_for_list_field_becomes_empty(hydrator):
    products = hydrator.hydrate(ProductsList, {"data": "oops"})

    assert products.data == []


def test_hydration_returns_distinct_equal_instances(hydrator):
    first = hydrator.hydrate(ProductsList, PRODUCTS_PAYLOAD)
    second = hydrator.hydrate(ProductsList, PRODUCTS_PAYLOAD)

    assert first == second
    assert first is not second
    assert first.data[0] is not second.data[0]
    assert first.data[0].variants[0].attributes is not PRODUCTS_PAYLOAD["data"][0]["variants"][0]["attributes"]


def test_hydrated_entities_are_frozen(hydrator):
    city = hydrator.hydrate(City, {"id": 1})

    with pytest.raises(dataclasses.FrozenInstanceError):
        city.name = "Kyiv"


def test_cyclic_references_hydrate(hydrator):
    cities = hydrator.hydrate(CitiesList, {
        "data": [{
            "id": 1,
            "slug": "odesa",
            "spots": [{"id": 3, "city_id": 1, "city": {"id": 1, "slug": "odesa"}}],
        }],
    })

    spot = cities.data[0].spots[0]
    assert isinstance(spot, Spot)
    assert spot.city.slug == "odesa"
    assert spot.city.spots == []


def test_round_trip_reproduces_payload(hydrator):
    products = hydrator.hydrate(ProductsList, PRODUCTS_PAYLOAD)

    assert hydrator.extract(products) == PRODUCTS_PAYLOAD


def test_round_trip_of_categories_list(hydrator):
    payload = {
        "data": [
            {"id": 1, "name": "Menu", "slug": "menu", "parent_id": None, "published": True},
            {"id": 2, "name": "Rolls", "slug": "rolls", "parent_id": 1, "published": False},
        ],
        "meta": {"total": 2, "offset": 0, "limit": 2},
    }

    assert hydrator.extract(hydrator.hydrate(CategoriesList, payload)) == payload


def test_unregistered_type_raises(hydrator):
    @dataclasses.dataclass(frozen=True)
    class Coupon:
        code: str = ""

    with pytest.raises(HydrationError, match="Coupon is not a registered entity type"):
        hydrator.hydrate(Coupon, {"code": "SUSHI"})

    with pytest.raises(HydrationError):
        hydrator.hydrate(dict, {})


def test_root_must_be_an_object(hydrator):
    with pytest.raises(HydrationError) as exc_info:
        hydrator.hydrate(Cart, [{"id": 1}])

    assert exc_info.value.target == "Cart"


def test_malformed_nested_entity_raises_with_path(hydrator):
    with pytest.raises(HydrationError) as exc_info:
        hydrator.hydrate(Cart, {"data": [{"id": 1, "product": "oops"}]})

    assert exc_info.value.path == "Cart.data[0].product"


def test_non_object_list_element_raises(hydrator):
    with pytest.raises(HydrationError) as exc_info:
        hydrator.hydrate(ProductsList, {"data": [1, 2]})

    assert exc_info.value.path == "ProductsList.data[0]"


def test_extract_of_unregistered_instance_raises(hydrator):
    with pytest.raises(HydrationError):
        hydrator.extract(object())


def test_register_builds_descriptors_for_reachable_types():
    hydrator = DataclassHydrator()
    descriptor = hydrator.register(ProductsList)

    assert hydrator.is_registered(Product)
    assert hydrator.is_registered(Variant)
    assert [f.name for f in descriptor.fields] == ["data", "meta"]

    variants = next(f for f in hydrator.descriptor_for(Product).fields if f.name == "variants")
    assert variants.kind == FieldKind.ENTITY_LIST
    assert variants.nested is Variant


def test_register_handles_cycles():
    hydrator = DataclassHydrator()
    hydrator.register(City)

    assert hydrator.is_registered(Spot)


def test_unsupported_annotation_is_rejected():
    @dataclasses.dataclass(frozen=True)
    class Order:
        created_at: datetime = datetime(2024, 1, 1)

    with pytest.raises(HydrationError, match="Unsupported annotation"):
        DataclassHydrator().register(Order)


def test_custom_entities_can_be_registered():
    @dataclasses.dataclass(frozen=True)
    class Review:
        id: int = 0
        rating: float = 0.0
        tags: List[str] = dataclasses.field(default_factory=list)
        reply: Optional[str] = None

    hydrator = DataclassHydrator()
    hydrator.register(Review)
    review = hydrator.hydrate(Review, {"id": 1, "rating": "4.5", "tags": ["fresh"]})

    assert review == Review(id=1, rating=4.5, tags=["fresh"], reply=None)
