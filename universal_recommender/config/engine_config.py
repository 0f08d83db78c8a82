import os
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from universal_recommender.constants.app_constants import AppConstants

Reifier = Callable[..., Any]


class EngineConfig(BaseModel):
    """
    Connection settings for a Universal Recommender deployment.

    The event server and the engine (query) server share a host but listen on
    different ports. ``threads`` is handed to the event client to size its
    connection pool.
    """
    model_config = ConfigDict(extra='forbid')

    host: Optional[str] = Field(None, description="Host where the engine and event server can be reached")
    engine_port: Optional[int] = Field(None, description="Port of the deployed engine (query server)")
    event_port: Optional[int] = Field(None, description="Port of the event server")
    access_key: Optional[str] = Field(None, description="Access key of the event server app")
    threads: int = Field(1, description="Concurrent requests allowed to the event server")
    timeout: float = Field(10.0, description="HTTP timeout in seconds")
    reifier: Optional[Reifier] = Field(None, description="Turns raw item scores into domain objects",
                                       exclude=True)

    @property
    def engine_url(self) -> str:
        return f"http://{self.host}:{self.engine_port}"

    @property
    def event_url(self) -> str:
        return f"http://{self.host}:{self.event_port}"

    @classmethod
    def from_env(cls, **overrides: Any) -> 'EngineConfig':
        """
        Build a config from ``UR_*`` environment variables (a ``.env`` file is
        loaded first). Keyword arguments win over the environment.
        """
        load_dotenv()
        values = {
            'host': os.getenv(AppConstants.ENV_HOST),
            'engine_port': os.getenv(AppConstants.ENV_ENGINE_PORT),
            'event_port': os.getenv(AppConstants.ENV_EVENT_PORT),
            'access_key': os.getenv(AppConstants.ENV_ACCESS_KEY),
            'threads': os.getenv(AppConstants.ENV_THREADS),
        }
        values = {key: value for key, value in values.items() if value is not None}
        values.update(overrides)
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> 'EngineConfig':
        """Returns a validated copy with ``overrides`` replacing fields."""
        values = self.model_dump()
        values['reifier'] = self.reifier
        values.update(overrides)
        return self.model_validate(values)
