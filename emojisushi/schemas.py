"""
Pydantic Schemas for Request Payloads

Parameters of the paginated and mutating operations are shaped here
before any network I/O. Values are passed through to the backend as
given (the backend owns range and format rules); optional fields left
as None are omitted from the payload.

Author: Khalil Bannouri
Version: 1.0.0
"""

from pydantic import BaseModel, Field
from typing import Optional, Union


Identifier = Union[int, str]


class RequestSchema(BaseModel):
    """Base schema: payload() drops unset optional values."""

    def payload(self) -> dict:
        return self.model_dump(exclude_none=True)


# =============================================================================
# QUERY SCHEMAS
# =============================================================================

class PaginationParams(RequestSchema):
    """offset/limit accepted by list endpoints."""
    offset: Optional[int] = Field(None, examples=[0])
    limit: Optional[int] = Field(None, examples=[25])


class ProductsQuery(PaginationParams):
    category_slug: Optional[str] = Field(None, examples=["menu"])


class CitiesQuery(RequestSchema):
    """Flags of the cities endpoint (backend uses camelCase names)."""
    includeSpots: Optional[bool] = None
    includeDistricts: Optional[bool] = None


class SlugOrIdQuery(RequestSchema):
    slug_or_id: Identifier = Field(..., examples=["odesa", 1])


# =============================================================================
# CART SCHEMAS
# =============================================================================

class AddCartProductRequest(RequestSchema):
    """Body of cart/add."""
    product_id: Identifier = Field(..., examples=[42])
    quantity: int = Field(..., examples=[2])
    variant_id: Optional[Identifier] = Field(None, examples=[7])


class RemoveFromCartRequest(RequestSchema):
    """Body of cart/remove. cart_product_id is the cart line id."""
    cart_product_id: Identifier = Field(..., examples=[1001])


# =============================================================================
# ORDER SCHEMAS
# =============================================================================

class PlaceOrderRequest(RequestSchema):
    """Body of order/place."""

    # Customer Info
    phone: str = Field(..., examples=["+380 50 123 4567"])
    firstname: Optional[str] = Field(None, examples=["Olena"])
    lastname: Optional[str] = Field(None, examples=["Shevchenko"])
    email: Optional[str] = Field(None, examples=["olena@example.com"])

    # Checkout choices
    shipping_method_id: Identifier = Field(..., examples=[1])
    payment_method_id: Identifier = Field(..., examples=[1])
    spot_id: Identifier = Field(..., examples=[1])

    # Delivery
    address: Optional[str] = Field(None)
    comment: Optional[str] = Field(None)
    sticks: Optional[int] = Field(None, examples=[2])
    change: Optional[str] = Field(None, examples=["500"])
