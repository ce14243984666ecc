import logging

from stockroom.client.api import ApiError, AuthenticationRequired

logger = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
READY = "ready"
ERROR = "error"


class ListLoader:
    """
    Loading lifecycle for one fetched list: idle -> loading -> ready | error.
    Mutations re-enter loading and refetch the authoritative list instead of
    patching it locally. AuthenticationRequired is recorded like any other
    failure and then re-raised so the caller can send the user to log in.
    """

    def __init__(self, fetch):
        self.fetch = fetch
        self.state = IDLE
        self.items = []
        self.error = None

    def _fail(self, error):
        self.state = ERROR
        self.error = error.message
        if isinstance(error, AuthenticationRequired):
            raise error

    def load(self):
        self.state = LOADING
        self.error = None
        try:
            items = self.fetch()
        except ApiError as e:
            logger.error(f"Loading list failed: {e.message}")
            self._fail(e)
            return self.state
        self.items = list(items or [])
        self.state = READY
        return self.state

    def mutate(self, action):
        """Run a server-side change, then refetch the list."""
        self.state = LOADING
        self.error = None
        try:
            action()
        except ApiError as e:
            logger.error(f"Mutation failed: {e.message}")
            self._fail(e)
            return self.state
        return self.load()

    def apply_confirmed(self, action, patch):
        """Run a server-side change and, once it succeeds, patch the loaded items.

        ``patch(items, result)`` returns the new list; the list is not refetched.
        """
        self.state = LOADING
        self.error = None
        try:
            result = action()
        except ApiError as e:
            logger.error(f"Update failed: {e.message}")
            self._fail(e)
            return self.state
        self.items = patch(list(self.items), result)
        self.state = READY
        self.error = None
        return self.state

    def dismiss_error(self):
        self.error = None
