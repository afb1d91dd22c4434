"""REST API client for the spellol daily server."""

import requests


class SpellolAPIClient:
    """Client for communicating with the spellol daily REST API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 120):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request."""
        params = {k: v for k, v in (params or {}).items() if v is not None}
        response = self.session.get(f"{self.base_url}{endpoint}", params=params,
                                    timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, data: dict = None) -> dict:
        """Make a POST request."""
        response = self.session.post(f"{self.base_url}{endpoint}", json=data or {},
                                     timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def health_check(self) -> dict:
        """Check if the server is running."""
        return self._get("/")

    def rotate(self) -> dict:
        """Trigger a daily rotation."""
        return self._post("/api/rotate")

    def get_daily(self, difficulty: str = None) -> dict:
        """Get the active daily set."""
        return self._get("/api/daily", {'difficulty': difficulty})

    def get_recent_events(self, event_type: str = None, limit: int = 20) -> dict:
        """Get recent server events."""
        return self._get("/api/events/recent", {'event_type': event_type, 'limit': limit})
