"""Tests for slug and id generation."""

from unittest.mock import patch

import pytest

from overcontext.api.slug import generate_unique_id, slugify


class TestSlugify:
    @pytest.mark.parametrize(
        "name, slug",
        [
            ("John Doe", "john-doe"),
            ("API Reference", "api-reference"),
            ("  padded  ", "padded"),
            ("snake_case_name", "snake-case-name"),
            ("Hello, World!", "hello-world"),
            ("a -- b", "a-b"),
            ("-leading and trailing-", "leading-and-trailing"),
            ("Café Olé", "caf-ol"),
            ("v2.0 release", "v20-release"),
            ("!!!", ""),
            ("", ""),
        ],
    )
    def test_slugify(self, name, slug):
        assert slugify(name) == slug


class TestGenerateUniqueId:
    def test_bare_slug_when_free(self):
        assert generate_unique_id("John Doe", lambda candidate: False) == "john-doe"

    def test_numbered_suffix(self):
        taken = {"john-doe", "john-doe-2"}

        assert generate_unique_id("John Doe", taken.__contains__) == "john-doe-3"

    def test_timestamp_fallback(self):
        taken = {"x"} | {f"x-{n}" for n in range(2, 101)}

        with patch("overcontext.api.slug.time.time", return_value=1700000000.5):
            assert generate_unique_id("X", taken.__contains__) == "x-1700000000500"
