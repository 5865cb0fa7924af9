import logging

import boto3
from botocore.exceptions import ClientError
from fastapi import HTTPException

from moturn import config

logger = logging.getLogger(__name__)


def get_s3_client():
    """Get S3 client with credentials from environment variables"""
    return boto3.client(
        's3',
        region_name=config.S3_REGION
    )


def public_url(file_name: str) -> str:
    return f"https://{config.S3_BUCKET}.s3.{config.S3_REGION}.amazonaws.com/{file_name}"


def upload_file_to_s3(file_data: bytes, file_name: str, content_type: str = "image/jpeg") -> str:
    """
    Upload a file to S3 and return its public URL
    """
    try:
        s3_client = get_s3_client()
        s3_client.put_object(
            Bucket=config.S3_BUCKET,
            Key=file_name,
            Body=file_data,
            ContentType=content_type
        )
    except ClientError as e:
        logger.exception(f"Failed to upload {file_name} to S3")
        raise HTTPException(status_code=500, detail=f"Failed to upload file to S3: {str(e)}")
    return public_url(file_name)
