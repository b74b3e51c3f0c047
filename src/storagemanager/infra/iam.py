"""IAM-backed policy store.

Policies are managed policies of the configured IAM endpoint (AWS IAM or an
IAM-compatible API). Policy names are unique, so ARNs are resolved by name.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator
from urllib.parse import unquote

from aiobotocore.session import AioSession, get_session
from botocore.exceptions import ClientError

from storagemanager.config import S3Config
from storagemanager.errors import PolicyNotFoundError
from storagemanager.policies.store import PolicyStore

logger = logging.getLogger(__name__)


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


class IamPolicyStore(PolicyStore):
    """PolicyStore implementation using the IAM managed policy API."""

    def __init__(self, config: S3Config, session: AioSession | None = None) -> None:
        self._config = config
        self._session = session or get_session()

    @asynccontextmanager
    async def client(self) -> AsyncGenerator[Any, None]:
        async with self._session.create_client(
            "iam",
            endpoint_url=self._config.iam_endpoint or self._config.endpoint,
            aws_access_key_id=self._config.access_key,
            aws_secret_access_key=self._config.secret_key,
            region_name=self._config.region,
        ) as client:
            yield client

    async def _list(self, iam: Any, prefix: str) -> list[dict[str, Any]]:
        policies: list[dict[str, Any]] = []
        paginator = iam.get_paginator("list_policies")
        async for page in paginator.paginate(Scope="Local"):
            for policy in page.get("Policies", []):
                if policy["PolicyName"].startswith(prefix):
                    policies.append(policy)
        return policies

    async def _find_arn(self, iam: Any, name: str) -> str | None:
        for policy in await self._list(iam, name):
            if policy["PolicyName"] == name:
                return policy["Arn"]
        return None

    async def create_policy(self, name: str, document: str) -> None:
        async with self.client() as iam:
            await iam.create_policy(PolicyName=name, PolicyDocument=document)
        logger.debug("IAM policy created: %s", name)

    async def delete_policy(self, name: str) -> None:
        async with self.client() as iam:
            arn = await self._find_arn(iam, name)
            if arn is None:
                logger.debug("IAM policy %s does not exist, nothing to delete", name)
                return
            try:
                # Non-default versions must be removed before the policy itself
                versions = await iam.list_policy_versions(PolicyArn=arn)
                for version in versions.get("Versions", []):
                    if not version.get("IsDefaultVersion"):
                        await iam.delete_policy_version(
                            PolicyArn=arn, VersionId=version["VersionId"]
                        )
                await iam.delete_policy(PolicyArn=arn)
            except ClientError as e:
                if _error_code(e) != "NoSuchEntity":
                    raise
                logger.debug("IAM policy %s already deleted", name)

    async def list_policies(self, prefix: str) -> list[str]:
        async with self.client() as iam:
            return [policy["PolicyName"] for policy in await self._list(iam, prefix)]

    async def get_policy(self, name: str) -> str:
        async with self.client() as iam:
            arn = await self._find_arn(iam, name)
            if arn is None:
                raise PolicyNotFoundError(name)
            policy = await iam.get_policy(PolicyArn=arn)
            version_id = policy["Policy"]["DefaultVersionId"]
            version = await iam.get_policy_version(PolicyArn=arn, VersionId=version_id)

        document = version["PolicyVersion"]["Document"]
        # botocore decodes documents into dicts; raw responses are URL-encoded JSON
        if isinstance(document, str):
            return unquote(document)
        return json.dumps(document)
