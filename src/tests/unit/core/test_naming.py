"""Tests for resource naming and domain models."""

import pytest
from pydantic import ValidationError

from storagemanager.core.models import Confidentiality, Organization, Space
from storagemanager.core.naming import PUBLIC_POLICY_NAME, ResourceNaming


class TestResourceNaming:
    def test_prefixes(self) -> None:
        assert ResourceNaming.organization_prefix("acme") == "acme/"
        assert ResourceNaming.space_prefix("acme", "reports") == "acme/reports/"

    def test_policy_names(self) -> None:
        assert ResourceNaming.policy_name("acme", "reports", "admin") == "acme_reports_admin"
        assert PUBLIC_POLICY_NAME == "spc_all_public"

    @pytest.mark.parametrize(
        ("key", "space"),
        [
            ("acme/reports/", "reports"),
            ("acme/reports/2024/a.csv", "reports"),
            ("acme/", None),
            ("acme/readme.txt", None),
            ("acme_eu/sales/", None),
        ],
    )
    def test_space_from_key(self, key: str, space: str | None) -> None:
        assert ResourceNaming.space_from_key("acme", key) == space

    @pytest.mark.parametrize("name", ["loadingzone", "LoadingZone", "LOADINGZONE"])
    def test_loadingzone_is_case_insensitive(self, name: str) -> None:
        assert ResourceNaming.is_loadingzone(name) is True

    def test_regular_space_is_not_loadingzone(self) -> None:
        assert ResourceNaming.is_loadingzone("reports") is False


class TestModels:
    def test_public_space(self) -> None:
        space = Space(
            name="reports",
            organization=Organization(name="acme"),
            confidentiality=Confidentiality.PUBLIC,
        )
        assert space.is_public is True

    def test_space_without_confidentiality_is_not_public(self) -> None:
        space = Space(name="reports", organization=Organization(name="acme"))
        assert space.is_public is False

    @pytest.mark.parametrize("name", ["../etc", "", "a/b", "-acme", ".hidden"])
    def test_invalid_names_rejected(self, name: str) -> None:
        with pytest.raises(ValidationError):
            Organization(name=name)
