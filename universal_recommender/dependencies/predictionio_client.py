"""PredictionIO event server and engine server clients."""

import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from universal_recommender.constants.app_constants import AppConstants

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class EngineClient:
    """Sends queries to a deployed engine."""

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT):
        self.url = url.rstrip('/')
        self.timeout = timeout
        self._session = requests.Session()
        logger.info("Initialized EngineClient for %s", self.url)

    def close(self) -> None:
        self._session.close()

    def send_query(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a query payload and return the decoded response.

        Raises:
            requests.HTTPError: If the engine answers with a non-2xx status
        """
        response = self._session.post(
            f"{self.url}/{AppConstants.QUERIES_PATH}",
            json=data,
            headers=HEADERS,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()


class EventClient:
    """Creates events on the event server of one app, identified by its access key."""

    def __init__(self, access_key: Optional[str], url: str, threads: int = 1,
                 timeout: float = DEFAULT_TIMEOUT):
        self.access_key = access_key
        self.url = url.rstrip('/')
        self.threads = max(int(threads), 1)
        self.timeout = timeout
        self._session = requests.Session()
        adapter = HTTPAdapter(pool_connections=self.threads, pool_maxsize=self.threads)
        self._session.mount('http://', adapter)
        self._session.mount('https://', adapter)
        logger.info("Initialized EventClient for %s (pool size %d)", self.url, self.threads)

    def close(self) -> None:
        self._session.close()

    def create_event(self, event: str, entity_type: str, entity_id: str,
                     body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        POST one event.

        Args:
            event: Event name, e.g. ``$set`` or ``purchase``
            entity_type: Type of the entity performing the event
            entity_id: ID of that entity
            body: Remaining event fields (targetEntityType, properties, eventTime, ...)

        Returns:
            Dict: Server response, normally ``{"eventId": ...}``
        """
        payload = {
            AppConstants.EVENT: event,
            AppConstants.ENTITY_TYPE: entity_type,
            AppConstants.ENTITY_ID: entity_id,
        }
        payload.update(body or {})
        response = self._session.post(
            f"{self.url}/{AppConstants.EVENTS_PATH}",
            params={AppConstants.ACCESS_KEY: self.access_key},
            json=payload,
            headers=HEADERS,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()
