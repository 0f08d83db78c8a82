import os

import boto3
from dotenv import load_dotenv

load_dotenv()

__s3_client = None


def get_s3_client():
    global __s3_client
    if __s3_client is None:
        __s3_client = boto3.client(
            's3',
            aws_access_key_id=os.getenv('AWS_S3_ACCESS_KEY_ID'),
            aws_secret_access_key=os.getenv('AWS_S3_SECRET_ACCESS_KEY'),
            region_name=os.getenv('AWS_S3_REGION', 'ap-south-1')
        )
    return __s3_client
