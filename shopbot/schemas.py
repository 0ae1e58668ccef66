"""
Pydantic schemas for the storefront.

Mini-app payloads are decoded here, at the boundary, into one of the known
variants. Workflow code never looks at raw JSON.
"""

import json
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class AddToCartPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["add_to_cart"]
    product_id: int = Field(..., alias="productId")
    qty: int = Field(..., ge=1, description="New quantity for the line, not an increment")


class PlaceOrderPayload(BaseModel):
    action: Literal["order"]
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)


AppAction = Annotated[Union[AddToCartPayload, PlaceOrderPayload], Field(discriminator="action")]

_app_action_adapter = TypeAdapter(AppAction)
KNOWN_ACTIONS = ("add_to_cart", "order")


def decode_app_payload(raw: str) -> Optional[Union[AddToCartPayload, PlaceOrderPayload]]:
    """
    Returns None for an unknown or missing action. Invalid JSON, or a known
    action with missing/invalid fields, raises (json.JSONDecodeError or
    pydantic.ValidationError).
    """
    data = json.loads(raw)
    if not isinstance(data, dict) or data.get("action") not in KNOWN_ACTIONS:
        return None
    return _app_action_adapter.validate_python(data)


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    image_id: Optional[str] = None
    image_url: Optional[str] = None
