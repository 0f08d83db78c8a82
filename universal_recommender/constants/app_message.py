class AppMessage:
    BOOST_AMOUNT_INVALID = "amount must be greater than 1.0"
    DEBOOST_AMOUNT_INVALID = "amount must be between 0.0 and 1.0 exclusive"
    QUERY_ENGINE_MISSING = "query is not bound to an engine"
    S3_BUCKET_MISSING = "AWS_S3_BUCKET_NAME environment variable must be set"
