import json

import pytest
from pydantic import ValidationError

from shopbot.schemas import AddToCartPayload, PlaceOrderPayload, decode_app_payload


def test_add_to_cart_decodes_camel_case_id():
    payload = decode_app_payload(json.dumps({"action": "add_to_cart", "productId": "5", "qty": 2}))
    assert payload == AddToCartPayload(action="add_to_cart", product_id=5, qty=2)


def test_order_decodes():
    payload = decode_app_payload(json.dumps({"action": "order", "name": "Ali", "address": "X", "phone": "123"}))
    assert isinstance(payload, PlaceOrderPayload)
    assert (payload.name, payload.address, payload.phone) == ("Ali", "X", "123")


@pytest.mark.parametrize("raw", ['{"action": "wishlist"}', '{"qty": 1}', "[1, 2]"])
def test_unknown_shapes_are_ignored(raw):
    assert decode_app_payload(raw) is None


def test_missing_field_on_known_action_raises():
    with pytest.raises(ValidationError):
        decode_app_payload(json.dumps({"action": "order", "name": "Ali", "address": "X"}))


def test_non_positive_quantity_raises():
    with pytest.raises(ValidationError):
        decode_app_payload(json.dumps({"action": "add_to_cart", "productId": 1, "qty": 0}))


def test_invalid_json_raises():
    with pytest.raises(json.JSONDecodeError):
        decode_app_payload("{not json")
