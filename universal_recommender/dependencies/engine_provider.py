from universal_recommender.config.engine_config import EngineConfig
from universal_recommender.services.engine import Engine

__engine = None


def get_engine() -> Engine:
    """Dependency provider for Engine (singleton, configured from the environment)"""
    global __engine

    if __engine is None:
        __engine = Engine(EngineConfig.from_env())

    return __engine


def reset_engine() -> None:
    global __engine
    __engine = None
