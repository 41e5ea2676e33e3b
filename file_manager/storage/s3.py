"""
AWS S3 storage backend.
"""
import json
import logging
from functools import wraps
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from file_manager.storage.base import Store, StorageError

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = ('404', 'NoSuchKey', 'NotFound')


def handle_aws_errors(func):
    """Decorator to turn AWS errors into StorageError."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ClientError as e:
            error_code = e.response['Error']['Code']
            error_msg = e.response['Error'].get('Message', '')
            if error_code == 'AccessDenied':
                raise StorageError("AWS permission denied")
            elif error_code == 'NoSuchBucket':
                raise StorageError("S3 bucket does not exist")
            raise StorageError(f"AWS error ({error_code}): {error_msg}")
        except BotoCoreError as e:
            raise StorageError(f"AWS error: {e}")
    return wrapper


class S3Store(Store):
    """Stores collections as JSON objects and blobs as raw objects in one bucket."""

    name = 'AWS S3'

    def __init__(self, bucket_name: str, region: str, aws_access_key: str = None,
                 aws_secret_key: str = None, prefix: str = 'file-manager', s3_client=None):
        """Initialize S3 store."""
        self.bucket_name = bucket_name
        self.region = region
        self.prefix = prefix.strip('/')

        if s3_client is None:
            session_kwargs = {'region_name': region}
            if aws_access_key and aws_secret_key:
                session_kwargs['aws_access_key_id'] = aws_access_key
                session_kwargs['aws_secret_access_key'] = aws_secret_key
            s3_client = boto3.client('s3', **session_kwargs)
        self.s3_client = s3_client

    def _key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    def initialize(self) -> bool:
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 bucket {self.bucket_name} is not reachable: {e}")
            return False

    def _get_object(self, key: str) -> Optional[bytes]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=self._key(key))
        except ClientError as e:
            if e.response['Error']['Code'] in NOT_FOUND_CODES:
                return None
            raise
        return response['Body'].read()

    def _put_object(self, key: str, body: bytes, content_type: str) -> None:
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=self._key(key),
            Body=body,
            ContentType=content_type,
            ACL='private',
            ServerSideEncryption='AES256'
        )

    @handle_aws_errors
    def load(self, collection: str) -> Optional[Any]:
        body = self._get_object(f"{collection}.json")
        if body is None:
            return None
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt collection {collection} in S3: {e}")

    @handle_aws_errors
    def save(self, collection: str, data: Any) -> None:
        body = json.dumps(data, indent=2, ensure_ascii=False).encode('utf-8')
        self._put_object(f"{collection}.json", body, 'application/json')

    @handle_aws_errors
    def put_blob(self, key: str, data: bytes, content_type: str = 'application/octet-stream') -> None:
        self._put_object(key, data, content_type)

    @handle_aws_errors
    def get_blob(self, key: str) -> Optional[bytes]:
        return self._get_object(key)

    @handle_aws_errors
    def delete_blob(self, key: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=self._key(key))
        except ClientError as e:
            if e.response['Error']['Code'] in NOT_FOUND_CODES:
                return False
            raise
        self.s3_client.delete_object(Bucket=self.bucket_name, Key=self._key(key))
        return True

    @handle_aws_errors
    def generate_presigned_url(self, key: str, expires_in: int = 3600) -> str:
        """
        Generate presigned URL for downloading a blob directly from S3.

        Args:
            key: Blob key
            expires_in: URL expiration time in seconds

        Returns:
            Presigned URL string
        """
        return self.s3_client.generate_presigned_url(
            'get_object',
            Params={'Bucket': self.bucket_name, 'Key': self._key(key)},
            ExpiresIn=expires_in
        )

    def describe(self) -> Dict[str, Any]:
        return {
            'type': self.name,
            'status': 'Connected',
            'location': f"s3://{self.bucket_name}/{self.prefix}",
        }
