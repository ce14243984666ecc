"""Tests for the HTTP client using a recording stand-in for requests.Session."""

import pytest
import requests

from stockroom.client.api import StockroomClient, ApiError, AuthenticationRequired


class FakeResponse:

    def __init__(self, status_code, data=None, reason='OK'):
        self.status_code = status_code
        self._data = data
        self.reason = reason

    def json(self):
        if self._data is None:
            raise ValueError('No JSON body')
        return self._data


class FakeSession:

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_client(*responses, token=None):
    session = FakeSession(*responses)
    return StockroomClient('http://stock.local/', token=token, session=session), session


class TestRequests:

    def test_login_stores_token(self):
        client, session = make_client(FakeResponse(200, {'token': 'abc', 'user': {'id': 1, 'role': 'user'}}))
        user = client.login('bob@stockroom.io', 'secret123')
        assert user == {'id': 1, 'role': 'user'}
        assert client.token == 'abc'
        method, url, kwargs = session.calls[0]
        assert (method, url) == ('POST', 'http://stock.local/api/auth/login')
        assert kwargs['headers'] == {}

    def test_bearer_header_sent(self):
        client, session = make_client(FakeResponse(200, []), token='abc')
        assert client.get_inventory() == []
        assert session.calls[0][2]['headers'] == {'Authorization': 'Bearer abc'}

    def test_monthly_report_passes_query(self):
        client, session = make_client(FakeResponse(200, []), token='abc')
        client.get_monthly_top_products(2025, 3)
        method, url, kwargs = session.calls[0]
        assert url == 'http://stock.local/api/reports/monthly-top-products'
        assert kwargs['params'] == {'year': 2025, 'month': 3, 'limit': 5}

    def test_supplier_lookup_by_name(self):
        client, session = make_client(FakeResponse(200, {'id': 4, 'name': 'Acme'}), token='abc')
        assert client.get_supplier_by_name('acme') == {'id': 4, 'name': 'Acme'}
        assert session.calls[0][2]['params'] == {'name': 'acme'}

    def test_supplier_lookup_miss_returns_none(self):
        client, _ = make_client(FakeResponse(404, {'error': "Supplier 'Acme' not found."}, 'NOT FOUND'), token='abc')
        assert client.get_supplier_by_name('Acme') is None

    def test_no_content_returns_none(self):
        client, _ = make_client(FakeResponse(204), token='abc')
        assert client.delete_user(3) is None

    def test_logout_clears_token(self):
        client, _ = make_client(token='abc')
        client.logout()
        assert client.token is None


class TestErrors:

    def test_server_error_message_is_surfaced(self):
        client, _ = make_client(FakeResponse(400, {'error': "Supplier 'Acme' already exists."}, 'BAD REQUEST'),
                                token='abc')
        with pytest.raises(ApiError) as exc:
            client.create_supplier({'name': 'Acme'})
        assert exc.value.status == 400
        assert exc.value.message == "Supplier 'Acme' already exists."

    def test_unauthorized_raises_authentication_required(self):
        client, _ = make_client(FakeResponse(401, {'error': 'Invalid token'}, 'UNAUTHORIZED'), token='old')
        with pytest.raises(AuthenticationRequired):
            client.get_profile()

    def test_non_json_error_uses_reason(self):
        client, _ = make_client(FakeResponse(502, None, 'Bad Gateway'), token='abc')
        with pytest.raises(ApiError) as exc:
            client.get_suppliers()
        assert exc.value.message == 'Bad Gateway'

    def test_connection_failure(self):
        client, _ = make_client(requests.exceptions.ConnectionError('refused'), token='abc')
        with pytest.raises(ApiError) as exc:
            client.get_suppliers()
        assert exc.value.status is None
