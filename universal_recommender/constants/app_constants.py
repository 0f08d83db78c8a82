class AppConstants:
    # query response
    ITEM_SCORES = "itemScores"

    # event payload
    EVENT = "event"
    ENTITY_TYPE = "entityType"
    ENTITY_ID = "entityId"
    TARGET_ENTITY_TYPE = "targetEntityType"
    TARGET_ENTITY_ID = "targetEntityId"
    PROPERTIES = "properties"
    EVENT_TIME = "eventTime"
    ACCESS_KEY = "accessKey"

    # biases
    WHERE_BIAS = -1.0
    NOT_BIAS = 0.0

    # endpoints
    QUERIES_PATH = "queries.json"
    EVENTS_PATH = "events.json"

    # environment
    ENV_HOST = "UR_HOST"
    ENV_ENGINE_PORT = "UR_ENGINE_PORT"
    ENV_EVENT_PORT = "UR_EVENT_PORT"
    ENV_ACCESS_KEY = "UR_ACCESS_KEY"
    ENV_THREADS = "UR_THREADS"
    ENV_S3_BUCKET = "AWS_S3_BUCKET_NAME"
