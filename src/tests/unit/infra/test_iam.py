"""Tests for IamPolicyStore with a mocked IAM client."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError

from storagemanager.config import S3Config
from storagemanager.errors import ErrorCode, PolicyNotFoundError
from storagemanager.infra.iam import IamPolicyStore

POLICIES = [
    {"PolicyName": "acme_reports_admin", "Arn": "arn:aws:iam::1:policy/acme_reports_admin"},
    {"PolicyName": "acme_reports_user", "Arn": "arn:aws:iam::1:policy/acme_reports_user"},
    {"PolicyName": "spc_all_public", "Arn": "arn:aws:iam::1:policy/spc_all_public"},
]


def _paginator(pages: list[dict]) -> MagicMock:
    paginator = MagicMock()

    async def paginate(**kwargs):
        for page in pages:
            yield page

    paginator.paginate = paginate
    return paginator


@pytest.fixture
def mock_iam() -> MagicMock:
    iam = MagicMock()
    iam.get_paginator.return_value = _paginator(
        [{"Policies": POLICIES[:2]}, {"Policies": POLICIES[2:]}]
    )
    iam.create_policy = AsyncMock()
    iam.delete_policy = AsyncMock()
    iam.list_policy_versions = AsyncMock(
        return_value={
            "Versions": [
                {"VersionId": "v1", "IsDefaultVersion": False},
                {"VersionId": "v2", "IsDefaultVersion": True},
            ]
        }
    )
    iam.delete_policy_version = AsyncMock()
    iam.get_policy = AsyncMock(return_value={"Policy": {"DefaultVersionId": "v2"}})
    iam.get_policy_version = AsyncMock()
    return iam


@pytest.fixture
def store(mock_iam: MagicMock) -> IamPolicyStore:
    session = MagicMock()
    session.create_client.return_value.__aenter__.return_value = mock_iam
    config = S3Config(endpoint="http://minio:9000", access_key="k", secret_key="s")
    return IamPolicyStore(config, session=session)


class TestIamPolicyStore:
    async def test_list_filters_by_prefix(self, store: IamPolicyStore) -> None:
        assert await store.list_policies("acme_") == ["acme_reports_admin", "acme_reports_user"]

    async def test_create_policy(self, store: IamPolicyStore, mock_iam: MagicMock) -> None:
        await store.create_policy("acme_x_admin", '{"Version": "1"}')

        mock_iam.create_policy.assert_awaited_once_with(
            PolicyName="acme_x_admin", PolicyDocument='{"Version": "1"}'
        )

    async def test_delete_removes_non_default_versions_first(
        self, store: IamPolicyStore, mock_iam: MagicMock
    ) -> None:
        await store.delete_policy("acme_reports_admin")

        arn = "arn:aws:iam::1:policy/acme_reports_admin"
        mock_iam.delete_policy_version.assert_awaited_once_with(PolicyArn=arn, VersionId="v1")
        mock_iam.delete_policy.assert_awaited_once_with(PolicyArn=arn)

    async def test_delete_absent_policy_is_noop(self, store: IamPolicyStore, mock_iam: MagicMock) -> None:
        await store.delete_policy("globex_maps_admin")

        mock_iam.delete_policy.assert_not_awaited()

    async def test_delete_race_with_no_such_entity_is_noop(
        self, store: IamPolicyStore, mock_iam: MagicMock
    ) -> None:
        mock_iam.delete_policy.side_effect = ClientError(
            {"Error": {"Code": "NoSuchEntity", "Message": "gone"}}, "DeletePolicy"
        )

        await store.delete_policy("acme_reports_admin")

    async def test_delete_other_errors_propagate(self, store: IamPolicyStore, mock_iam: MagicMock) -> None:
        mock_iam.delete_policy.side_effect = ClientError(
            {"Error": {"Code": "DeleteConflict", "Message": "attached"}}, "DeletePolicy"
        )

        with pytest.raises(ClientError):
            await store.delete_policy("acme_reports_admin")

    async def test_get_policy_decoded_document(self, store: IamPolicyStore, mock_iam: MagicMock) -> None:
        document = {"Version": "2012-10-17", "Statement": []}
        mock_iam.get_policy_version.return_value = {"PolicyVersion": {"Document": document}}

        text = await store.get_policy("spc_all_public")

        assert json.loads(text) == document
        mock_iam.get_policy_version.assert_awaited_once_with(
            PolicyArn="arn:aws:iam::1:policy/spc_all_public", VersionId="v2"
        )

    async def test_get_policy_url_encoded_document(
        self, store: IamPolicyStore, mock_iam: MagicMock
    ) -> None:
        mock_iam.get_policy_version.return_value = {
            "PolicyVersion": {"Document": "%7B%22Version%22%3A%20%221%22%7D"}
        }

        assert json.loads(await store.get_policy("spc_all_public")) == {"Version": "1"}

    async def test_get_missing_policy_raises_not_found(self, store: IamPolicyStore) -> None:
        with pytest.raises(PolicyNotFoundError) as exc_info:
            await store.get_policy("missing")

        assert exc_info.value.code == ErrorCode.UNABLE_FIND_SPC_POLICY
        assert exc_info.value.status_code == 409
