"""Unit tests for organization and space context endpoints."""

from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from storagemanager.core.models import Confidentiality
from storagemanager.errors import (
    ContainerProvisioningError,
    NameTakenError,
    OrganizationStorageMissingError,
    PermissionDeniedError,
)

ORG_URL = "/v2.0/context/organization/"
SPACE_URL = "/v2.0/context/organization/acme/space/"


class TestAuthentication:
    """Bearer token handling."""

    def test_missing_token_is_401(self, client: TestClient, mock_orchestrator: MagicMock) -> None:
        response = client.post(ORG_URL, json={"name": "acme"})

        assert response.status_code == 401
        mock_orchestrator.create_organization_storage.assert_not_awaited()

    def test_invalid_token_is_401(self, client: TestClient) -> None:
        response = client.post(
            ORG_URL, json={"name": "acme"}, headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401

    def test_missing_role_is_403(self, client: TestClient, auth_headers) -> None:
        response = client.delete(f"{ORG_URL}acme", headers=auth_headers("viewer"))

        assert response.status_code == 403
        error = response.json()["error"]
        assert error["code"] == 20031
        assert error["category"] == "forbidden"

    def test_roles_compare_case_insensitively(self, client: TestClient, auth_headers) -> None:
        response = client.delete(f"{ORG_URL}acme", headers=auth_headers("sdk_admin"))

        assert response.status_code == 204


class TestOrganizationEndpoints:
    def test_create_with_superuser(
        self, client: TestClient, auth_headers, mock_orchestrator: MagicMock
    ) -> None:
        response = client.post(ORG_URL, json={"name": "acme"}, headers=auth_headers("SDK_ADMIN"))

        assert response.status_code == 200
        assert response.json() == {"status": "created", "organization": "acme", "space": None}
        mock_orchestrator.create_organization_storage.assert_awaited_once_with("acme")

    def test_create_with_org_create_role(self, client: TestClient, auth_headers) -> None:
        response = client.post(
            ORG_URL, json={"name": "acme"}, headers=auth_headers("org_create_permission")
        )

        assert response.status_code == 200

    def test_org_create_role_cannot_delete(self, client: TestClient, auth_headers) -> None:
        response = client.delete(f"{ORG_URL}acme", headers=auth_headers("org_create_permission"))

        assert response.status_code == 403

    def test_delete(self, client: TestClient, auth_headers, mock_orchestrator: MagicMock) -> None:
        response = client.delete(f"{ORG_URL}acme", headers=auth_headers("SDK_ADMIN"))

        assert response.status_code == 204
        assert response.content == b""
        mock_orchestrator.delete_organization_storage.assert_awaited_once_with("acme")

    def test_invalid_name_is_rejected(
        self, client: TestClient, auth_headers, mock_orchestrator: MagicMock
    ) -> None:
        response = client.post(ORG_URL, json={"name": "-acme"}, headers=auth_headers("SDK_ADMIN"))

        assert response.status_code == 422
        mock_orchestrator.create_organization_storage.assert_not_awaited()

    def test_name_taken_maps_to_409(
        self, client: TestClient, auth_headers, mock_orchestrator: MagicMock
    ) -> None:
        mock_orchestrator.create_organization_storage.side_effect = NameTakenError(
            "StorageAccountAlreadyTaken - The name is taken"
        )

        response = client.post(ORG_URL, json={"name": "acme"}, headers=auth_headers("SDK_ADMIN"))

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == 40001
        assert error["category"] == "conflict"
        assert error["message"].startswith("40001: ")
        assert "StorageAccountAlreadyTaken - The name is taken" in error["message"]

    def test_permission_denied_maps_to_502(
        self, client: TestClient, auth_headers, mock_orchestrator: MagicMock
    ) -> None:
        mock_orchestrator.create_organization_storage.side_effect = PermissionDeniedError(
            "AuthorizationFailed - no access"
        )

        response = client.post(ORG_URL, json={"name": "acme"}, headers=auth_headers("SDK_ADMIN"))

        assert response.status_code == 502
        assert response.json()["error"]["code"] == 50000

    def test_unhandled_error_maps_to_unknown(
        self, client: TestClient, auth_headers, mock_orchestrator: MagicMock
    ) -> None:
        mock_orchestrator.delete_organization_storage.side_effect = RuntimeError("boom")

        response = client.delete(f"{ORG_URL}acme", headers=auth_headers("SDK_ADMIN"))

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == 50001
        assert "boom" not in error["message"]


class TestSpaceEndpoints:
    def test_create(self, client: TestClient, auth_headers, mock_orchestrator: MagicMock) -> None:
        response = client.post(
            SPACE_URL,
            json={"name": "reports", "confidentiality": "PUBLIC"},
            headers=auth_headers("SDK_ADMIN"),
        )

        assert response.status_code == 200
        assert response.json() == {"status": "created", "organization": "acme", "space": "reports"}
        mock_orchestrator.create_space_storage.assert_awaited_once_with(
            "acme", "reports", Confidentiality.PUBLIC
        )

    def test_create_without_confidentiality(
        self, client: TestClient, auth_headers, mock_orchestrator: MagicMock
    ) -> None:
        response = client.post(SPACE_URL, json={"name": "reports"}, headers=auth_headers("SDK_ADMIN"))

        assert response.status_code == 200
        mock_orchestrator.create_space_storage.assert_awaited_once_with("acme", "reports", None)

    def test_create_requires_superuser(self, client: TestClient, auth_headers) -> None:
        response = client.post(
            SPACE_URL, json={"name": "reports"}, headers=auth_headers("org_create_permission")
        )

        assert response.status_code == 403

    def test_unknown_confidentiality_is_rejected(self, client: TestClient, auth_headers) -> None:
        response = client.post(
            SPACE_URL,
            json={"name": "reports", "confidentiality": "SECRET"},
            headers=auth_headers("SDK_ADMIN"),
        )

        assert response.status_code == 422

    def test_missing_organization_maps_to_400(
        self, client: TestClient, auth_headers, mock_orchestrator: MagicMock
    ) -> None:
        mock_orchestrator.create_space_storage.side_effect = OrganizationStorageMissingError("acme")

        response = client.post(SPACE_URL, json={"name": "reports"}, headers=auth_headers("SDK_ADMIN"))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == 20023

    def test_container_retry_exhaustion_maps_to_502(
        self, client: TestClient, auth_headers, mock_orchestrator: MagicMock
    ) -> None:
        mock_orchestrator.create_space_storage.side_effect = ContainerProvisioningError(
            "account not ready"
        )

        response = client.post(SPACE_URL, json={"name": "reports"}, headers=auth_headers("SDK_ADMIN"))

        assert response.status_code == 502
        assert response.json()["error"]["code"] == 20003

    def test_delete_with_confidentiality(
        self, client: TestClient, auth_headers, mock_orchestrator: MagicMock
    ) -> None:
        response = client.delete(
            f"{SPACE_URL}reports",
            params={"confidentiality": "PUBLIC"},
            headers=auth_headers("SDK_ADMIN"),
        )

        assert response.status_code == 204
        mock_orchestrator.delete_space_storage.assert_awaited_once_with(
            "acme", "reports", Confidentiality.PUBLIC
        )

    def test_delete_without_confidentiality(
        self, client: TestClient, auth_headers, mock_orchestrator: MagicMock
    ) -> None:
        response = client.delete(f"{SPACE_URL}reports", headers=auth_headers("SDK_ADMIN"))

        assert response.status_code == 204
        mock_orchestrator.delete_space_storage.assert_awaited_once_with("acme", "reports", None)
