"""Unit tests for naming helpers and the vendor region map."""

from __future__ import annotations

import logging

import pytest

from eks_infra.utils.enums import Environment, Region, Vendor
from eks_infra.utils.naming import (
    clean_environment,
    clean_region,
    clean_string,
    resource_name,
)
from eks_infra.utils.vendor import get_aws_region


class TestCleanString:
    """Tests for clean_string."""

    def test_strips_non_alphanumerics_and_lowercases(self) -> None:
        assert clean_string("Test-VPC_01 !") == "testvpc01"

    def test_none_is_empty(self) -> None:
        assert clean_string(None) == ""

    def test_non_ascii_letters_dropped(self) -> None:
        assert clean_string("café-api") == "cafapi"


class TestCleanEnvironment:
    """Tests for clean_environment."""

    @pytest.mark.parametrize(
        ("env", "code"),
        [
            (Environment.DEVELOPMENT, "dev"),
            (Environment.STAGING, "stg"),
            (Environment.PRODUCTION, "prod"),
            (Environment.OTHERS, "o"),
            ("production", "prod"),
        ],
    )
    def test_known_codes(self, env, code: str) -> None:
        assert clean_environment(env) == code

    def test_unknown_falls_back_to_dev_with_warning(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="eks_infra.utils.naming"):
            assert clean_environment("qa") == "dev"
        assert "Unknown environment" in caplog.text

    def test_none_falls_back(self) -> None:
        assert clean_environment(None) == "dev"


class TestCleanRegion:
    """Tests for clean_region."""

    @pytest.mark.parametrize(
        ("region", "code"),
        [
            (Region.AUSTRALIA_EAST, "aue"),
            (Region.US_EAST, "use"),
            (Region.ASIA_SOUTHEAST, "ase"),
            (Region.EUROPE_WEST, "euw"),
            (Region.OTHERS, "o"),
        ],
    )
    def test_known_codes(self, region: Region, code: str) -> None:
        assert clean_region(region) == code

    def test_unknown_falls_back_to_o_with_warning(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="eks_infra.utils.naming"):
            assert clean_region("MARS_NORTH") == "o"
        assert "Unknown region" in caplog.text


class TestResourceName:
    def test_composes_cleaned_fragments(self) -> None:
        name = resource_name("my-app", Environment.DEVELOPMENT, "role", Region.AUSTRALIA_EAST)
        assert name == "myapp-dev-role-aue"


class TestGetAwsRegion:
    """Tests for the vendor/region to AWS region mapping."""

    @pytest.mark.parametrize(
        ("region", "expected"),
        [
            (Region.US_EAST, "us-east-1"),
            (Region.ASIA_SOUTHEAST, "ap-southeast-1"),
            (Region.EUROPE_WEST, "eu-west-1"),
            (Region.AUSTRALIA_EAST, "ap-southeast-2"),
            (Region.OTHERS, "ap-southeast-2"),
        ],
    )
    def test_aws_regions(self, region: Region, expected: str) -> None:
        assert get_aws_region(Vendor.AWS, region) == expected

    def test_non_aws_vendor_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unsupported vendor: AZURE. Only AWS is supported."):
            get_aws_region(Vendor.AZURE, Region.US_EAST)
