"""Tests for the client-side order cart."""

import pytest

from stockroom.client.api import ApiError
from stockroom.client.cart import OrderCart, CartError, order_line_from_product


def product(product_id, supplier_id=1, current_stock=2, min_quantity=10, case_price=4.5):
    return {
        'id': product_id,
        'name': f'Product {product_id}',
        'current_stock': current_stock,
        'min_quantity': min_quantity,
        'case_price': case_price,
        'order_unit': 'case',
        'supplier_id': supplier_id,
        'supplier_name': f'Supplier {supplier_id}' if supplier_id else None,
    }


class RecordingClient:

    def __init__(self, fail_on=None):
        self.orders = []
        self.fail_on = fail_on

    def create_order(self, order):
        if order['supplier_id'] == self.fail_on:
            raise ApiError(500, 'boom')
        self.orders.append(order)
        return {'id': len(self.orders), **order}


class TestOrderLine:

    def test_defaults_to_shortfall(self):
        line = order_line_from_product(product(1, current_stock=2, min_quantity=10))
        assert line['requested_quantity'] == 8
        assert line['unit_price'] == 4.5

    def test_invalid_numbers_fall_back_to_zero(self):
        line = order_line_from_product(product(1, current_stock='lots', min_quantity=None, case_price='n/a'))
        assert line['requested_quantity'] == 0
        assert line['unit_price'] == 0.0

    def test_shortfall_is_not_clamped(self):
        assert order_line_from_product(product(1, current_stock=12, min_quantity=10))['requested_quantity'] == -2


class TestOrderCart:

    def test_adding_twice_keeps_one_entry(self):
        cart = OrderCart()
        assert cart.add(product(1)) is True
        assert cart.add(product(1, current_stock=0)) is False
        assert len(cart) == 1
        assert cart.items()[0]['requested_quantity'] == 8

    def test_total_and_quantity_edit(self):
        cart = OrderCart()
        cart.add(product(1, case_price=2.0))
        cart.add(product(2, case_price=3.0))
        cart.set_quantity(1, 1)
        cart.set_quantity(2, 2)
        assert cart.total() == 8.0

    def test_remove_and_clear(self):
        cart = OrderCart()
        cart.add(product(1))
        cart.add(product(2))
        cart.remove(1)
        assert 1 not in cart and 2 in cart
        cart.clear()
        assert len(cart) == 0

    def test_set_quantity_of_missing_product(self):
        with pytest.raises(KeyError):
            OrderCart().set_quantity(5, 1)

    def test_submit_places_one_order_per_supplier(self):
        cart = OrderCart()
        cart.add(product(1, supplier_id=1))
        cart.add(product(2, supplier_id=2))
        cart.add(product(3, supplier_id=1))
        client = RecordingClient()

        placed = cart.submit(client)

        assert len(placed) == 2
        assert [o['supplier_id'] for o in client.orders] == [1, 2]
        assert [i['product_id'] for i in client.orders[0]['items']] == [1, 3]
        assert len(cart) == 0

    def test_submit_refuses_lines_without_supplier(self):
        cart = OrderCart()
        cart.add(product(1, supplier_id=1))
        cart.add(product(2, supplier_id=None))
        client = RecordingClient()
        with pytest.raises(CartError):
            cart.submit(client)
        assert client.orders == []
        assert len(cart) == 2

    def test_failed_supplier_keeps_its_lines(self):
        cart = OrderCart()
        cart.add(product(1, supplier_id=1))
        cart.add(product(2, supplier_id=2))
        with pytest.raises(ApiError):
            cart.submit(RecordingClient(fail_on=2))
        assert [line['product_id'] for line in cart.items()] == [2]

    def test_empty_cart(self):
        with pytest.raises(CartError):
            OrderCart().submit(RecordingClient())
