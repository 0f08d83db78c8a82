from typing import Any, ClassVar, Dict, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator

from universal_recommender.constants.app_constants import AppConstants
from universal_recommender.constants.event_name import EntityType, EventName

'''
Live call : create_event(event, entityType, entityId, <body>)
JSON Lines: {"event": .., "entityType": .., "entityId": .., <body>}
'''


class _EventEntity(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # sent as positional arguments on the live call, not in the body
    HEADER_FIELDS: ClassVar[Set[str]] = {'event', 'entity_type', 'entity_id'}

    def to_event_body(self) -> Dict[str, Any]:
        """Body passed to the event client alongside event, entity type and id."""
        return self.model_dump(by_alias=True, exclude=self.HEADER_FIELDS)

    def to_export_dict(self) -> Dict[str, Any]:
        """Flat shape of one line in a JSON Lines import file."""
        return self.model_dump(by_alias=True)


class EntityEvent(_EventEntity):
    """A ``$set`` event creating or updating a user or an item."""
    event: str = EventName.SET.value
    entity_type: str = Field(..., alias=AppConstants.ENTITY_TYPE)
    entity_id: str = Field(..., alias=AppConstants.ENTITY_ID)
    properties: Dict[str, Any] = Field(default_factory=dict, alias=AppConstants.PROPERTIES)

    @field_validator('entity_id', mode='before')
    @classmethod
    def _id_to_str(cls, v: Any) -> str:
        return str(v)


class InteractionEvent(_EventEntity):
    """A named event performed by a user on an item."""
    event: str
    entity_type: str = Field(EntityType.USER.value, alias=AppConstants.ENTITY_TYPE)
    entity_id: str = Field(..., alias=AppConstants.ENTITY_ID)
    target_entity_type: str = Field(EntityType.ITEM.value, alias=AppConstants.TARGET_ENTITY_TYPE)
    target_entity_id: str = Field(..., alias=AppConstants.TARGET_ENTITY_ID)
    properties: Dict[str, Any] = Field(default_factory=dict, alias=AppConstants.PROPERTIES)
    event_time: str = Field(..., alias=AppConstants.EVENT_TIME)

    @field_validator('entity_id', 'target_entity_id', mode='before')
    @classmethod
    def _ids_to_str(cls, v: Any) -> str:
        return str(v)
