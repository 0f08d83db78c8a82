from enum import Enum


class EventName(str, Enum):
    SET = "$set"


class EntityType(str, Enum):
    USER = "user"
    ITEM = "item"
