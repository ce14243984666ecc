"""Tests for the idle/loading/ready/error list lifecycle."""

import pytest

from stockroom.client.api import ApiError, AuthenticationRequired
from stockroom.client.loader import ListLoader, IDLE, LOADING, READY, ERROR


class Source:

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class TestListLoader:

    def test_starts_idle(self):
        loader = ListLoader(Source())
        assert loader.state == IDLE
        assert loader.items == []

    def test_load_success(self):
        loader = ListLoader(Source([1, 2]))
        assert loader.load() == READY
        assert loader.items == [1, 2]
        assert loader.error is None

    def test_load_failure_keeps_previous_items(self):
        loader = ListLoader(Source([1], ApiError(500, 'Database unavailable')))
        loader.load()
        assert loader.load() == ERROR
        assert loader.error == 'Database unavailable'
        assert loader.items == [1]

    def test_dismiss_error(self):
        loader = ListLoader(Source(ApiError(500, 'nope')))
        loader.load()
        loader.dismiss_error()
        assert loader.error is None

    def test_mutation_refetches(self):
        source = Source([1], [1, 2])
        loader = ListLoader(source)
        loader.load()
        actions = []
        assert loader.mutate(lambda: actions.append('saved')) == READY
        assert actions == ['saved']
        assert source.calls == 2
        assert loader.items == [1, 2]

    def test_failed_mutation_skips_refetch(self):
        source = Source([1])
        loader = ListLoader(source)
        loader.load()

        def action():
            raise ApiError(400, 'Cannot delete product with active or pending orders.')

        assert loader.mutate(action) == ERROR
        assert source.calls == 1
        assert loader.error == 'Cannot delete product with active or pending orders.'

    def test_confirmed_action_runs_in_loading_state(self):
        loader = ListLoader(Source([{'id': 1, 'role': 'user'}]))
        loader.load()
        seen = []

        def action():
            seen.append(loader.state)
            return {'id': 1, 'role': 'admin'}

        assert loader.apply_confirmed(action, lambda items, updated: [updated]) == READY
        assert seen == [LOADING]
        assert loader.items == [{'id': 1, 'role': 'admin'}]

    def test_authentication_failure_is_reraised(self):
        loader = ListLoader(Source(AuthenticationRequired(401, 'Invalid token')))
        with pytest.raises(AuthenticationRequired):
            loader.load()
        assert loader.state == ERROR
        assert loader.error == 'Invalid token'
