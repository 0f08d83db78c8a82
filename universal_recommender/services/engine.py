import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from universal_recommender.config.engine_config import EngineConfig
from universal_recommender.constants.app_constants import AppConstants
from universal_recommender.dependencies.predictionio_client import EngineClient, EventClient
from universal_recommender.entity.event_entity import EntityEvent, InteractionEvent
from universal_recommender.services.query import Query
from universal_recommender.utils.datetime_utils import to_iso8601

logger = logging.getLogger(__name__)


class Engine:
    """
    Entry point to one Universal Recommender deployment.

    Clients are built on first use and kept for the lifetime of the engine;
    changing ``config`` afterwards does not rebuild them.
    """

    def __init__(self, config: Optional[EngineConfig] = None, **overrides: Any):
        """
        Args:
            config: Connection settings. Read from ``UR_*`` environment variables if omitted.
            **overrides: Values replacing fields of ``config``
        """
        if config is None:
            config = EngineConfig.from_env(**overrides)
        elif overrides:
            config = config.with_overrides(**overrides)
        self.config = config
        self._event_client: Optional[EventClient] = None
        self._engine_client: Optional[EngineClient] = None

    def query(self) -> Query:
        """Returns a new query bound to this engine."""
        return Query(engine=self)

    @property
    def event_client(self) -> EventClient:
        if self._event_client is None:
            self._event_client = EventClient(
                self.config.access_key,
                self.config.event_url,
                self.config.threads,
                timeout=self.config.timeout,
            )
        return self._event_client

    @property
    def engine_client(self) -> EngineClient:
        if self._engine_client is None:
            self._engine_client = EngineClient(self.config.engine_url, timeout=self.config.timeout)
        return self._engine_client

    def execute_query(self, query: Query, reify: bool = True, **reifier_options: Any) -> Any:
        """
        Executes a query against the engine and returns the item scores.

        Args:
            query: Query to run
            reify: Pass results through the configured reifier
            **reifier_options: Forwarded to the reifier

        Returns:
            List of ``{"item": ..., "score": ...}`` dicts, or the reifier's result

        Example:
            engine.execute_query(query)
            # => [{"item": "i-1", "score": 1.0}]
        """
        payload = query.query_hash()
        logger.debug("Executing query %s", payload)
        query_results = self.engine_client.send_query(payload).get(AppConstants.ITEM_SCORES, [])

        if reify:
            return self.reify(query_results, **reifier_options)
        return query_results

    def reify(self, query_results: List[Dict[str, Any]], **reifier_options: Any) -> Any:
        """
        Runs results through the configured reifier. Without one the results
        are returned as is.
        """
        if self.config.reifier is None:
            return query_results
        return self.config.reifier(query_results, **reifier_options)

    def upsert_entity(self, type: str, id: Any, properties: Optional[Dict[str, Any]] = None) -> Any:
        """
        Creates or updates an item or user.

        Only 'item' properties are used when filtering results in queries.

        Example:
            engine.upsert_entity(type='item', id='i-1', properties={'available': ['yes']})
        """
        entity = EntityEvent(entity_type=type, entity_id=id, properties=properties or {})
        logger.debug("Upserting %s %s", entity.entity_type, entity.entity_id)
        return self.event_client.create_event(
            entity.event, entity.entity_type, entity.entity_id, entity.to_event_body()
        )

    def export_entity(self, io, type: str, id: Any, properties: Optional[Dict[str, Any]] = None) -> None:
        """Writes an item or user as one line of a JSON Lines file."""
        entity = EntityEvent(entity_type=type, entity_id=id, properties=properties or {})
        self._write_line(io, entity.to_export_dict())

    def record_event(self, type: str, user: Any, item: Any, properties: Optional[Dict[str, Any]] = None,
                     at: Optional[datetime] = None) -> Any:
        """
        Records an event that took place between a user and an item.

        Args:
            type: Name of the event, e.g. 'viewed-item'
            user: ID of the user
            item: ID of the item
            properties: Event specific properties
            at: When the event occurred. Defaults to now.
        """
        event = self._interaction_event(type, user, item, properties, at)
        logger.debug("Recording %s event for user %s", event.event, event.entity_id)
        return self.event_client.create_event(
            event.event, event.entity_type, event.entity_id, event.to_event_body()
        )

    def export_event(self, io, type: str, user: Any, item: Any, properties: Optional[Dict[str, Any]] = None,
                     at: Optional[datetime] = None) -> None:
        """Writes a user/item event as one line of a JSON Lines file."""
        event = self._interaction_event(type, user, item, properties, at)
        self._write_line(io, event.to_export_dict())

    @staticmethod
    def _interaction_event(type, user, item, properties, at) -> InteractionEvent:
        return InteractionEvent(
            event=type,
            entity_id=user,
            target_entity_id=item,
            properties=properties or {},
            event_time=to_iso8601(at),
        )

    @staticmethod
    def _write_line(io, data: Dict[str, Any]) -> None:
        io.write(json.dumps(data) + "\n")
