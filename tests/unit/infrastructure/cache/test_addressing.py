"""Tests for cache keys and paths."""

from pathlib import Path

import pytest

from imagecache.domain.entities.params import GeometryParams
from imagecache.infrastructure.cache.addressing import (
    canonicalize_params,
    compute_key,
    compute_path,
    params_digest,
    split_key,
)


class TestComputeKey:
    """Test cache key derivation."""

    def test_is_deterministic(self) -> None:
        params = {"coords": "1,2,3,4", "max_size": 100}
        assert compute_key("crop", "a.jpg", params) == compute_key("crop", "a.jpg", params)

    def test_ignores_parameter_order(self) -> None:
        """Test that insertion order of parameters does not change the key."""
        first = {"max_size": 100, "coords": "1,2,3,4", "ratio": "16:9"}
        second = {"ratio": "16:9", "coords": "1,2,3,4", "max_size": 100}
        assert compute_key("crop", "a.jpg", first) == compute_key("crop", "a.jpg", second)

    @pytest.mark.parametrize(
        "changed",
        [
            {"max_size": 101, "coords": "1,2,3,4"},
            {"max_size": 100, "coords": "1,2,3,5"},
            {"max_size": 100, "coords": "1,2,3,4", "ratio": "4:3"},
        ],
    )
    def test_any_changed_value_changes_key(self, changed: dict[str, object]) -> None:
        base = {"max_size": 100, "coords": "1,2,3,4"}
        assert compute_key("crop", "a.jpg", base) != compute_key("crop", "a.jpg", changed)

    def test_model_and_mapping_agree(self) -> None:
        """Test that validated params and the equivalent dict address the same entry."""
        model = GeometryParams.model_validate({"maxSize": 100, "coords": "1,2,3,4"})
        assert compute_key("crop", "a.jpg", model) == compute_key(
            "crop", "a.jpg", {"coords": "1,2,3,4", "max_size": 100}
        )

    def test_none_values_are_dropped(self) -> None:
        assert compute_key("crop", "a.jpg", {"ratio": None}) == compute_key("crop", "a.jpg")

    def test_template_and_filename_are_embedded(self) -> None:
        assert compute_key("large", "dir/a.jpg") == "large:dir/a.jpg"
        template, filename, digest = split_key(compute_key("crop", "a.jpg", {"max_size": 5}))
        assert (template, filename) == ("crop", "a.jpg")
        assert digest == params_digest({"max_size": 5})

    def test_split_key_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            split_key("no-separator")


class TestComputePath:
    """Test cache path layout."""

    def test_without_params(self, tmp_path: Path) -> None:
        assert compute_path(tmp_path, "large", "a.jpg") == tmp_path / "large" / "a.jpg"

    def test_with_params_uses_two_level_fan_out(self, tmp_path: Path) -> None:
        params = {"max_size": 100}
        digest = params_digest(params)
        assert digest is not None and len(digest) == 64

        path = compute_path(tmp_path, "crop", "a.jpg", params)
        assert path == tmp_path / "crop" / digest[:2] / digest[2:] / "a.jpg"

    def test_canonical_form_is_compact_and_sorted(self) -> None:
        assert canonicalize_params({"b": 1, "a": "x"}) == '{"a":"x","b":1}'
        assert canonicalize_params(None) == "{}"
