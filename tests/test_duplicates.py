"""Tests for duplicate reference detection."""

import pytest

from conftest import interior, ref, run
from tes3_validator.validators.duplicates import DuplicateRefValidator


class TestDuplicateRefs:
    """Test duplicate placements in one cell."""

    def test_identical_references(self, reporter) -> None:
        """Test exactly one message for two identical Key_Test references."""
        cell = interior("Vault", [
            ref("Key_Test", (10, 20, 30), refr_index=1),
            ref("Key_Test", (10, 20, 30), refr_index=2),
        ])
        run([cell], DuplicateRefValidator(reporter, 0.0))

        assert len(reporter.lines) == 1
        assert "Key_Test" in reporter.lines[0]
        assert reporter.lines[0] == (
            "Cell Vault contains duplicate reference Key_Test at position [10, 20, 30] [10, 20, 30]"
        )

    @pytest.mark.parametrize(
        "threshold,offset,expected",
        [
            (0.0, 1.0, 0),
            (4.0, 2.0, 1),
            (3.9, 2.0, 0),
        ],
    )
    def test_threshold_is_squared_distance(self, reporter, threshold, offset, expected) -> None:
        """Test that near references count when within the squared threshold."""
        cell = interior("Vault", [
            ref("chair", (0, 0, 0), refr_index=1),
            ref("chair", (offset, 0, 0), refr_index=2),
        ])
        run([cell], DuplicateRefValidator(reporter, threshold))
        assert len(reporter.lines) == expected

    def test_differences_prevent_match(self, reporter) -> None:
        """Test that rotation, scale, id or deletion keep references apart."""
        cell = interior("Vault", [
            ref("chair", refr_index=1),
            ref("chair", refr_index=2, rotation=[0.0, 0.0, 1.5]),
            ref("chair", refr_index=3, scale=1.2),
            ref("table", refr_index=4),
            ref("chair", refr_index=5, deleted=True),
        ])
        run([cell], DuplicateRefValidator(reporter))
        assert reporter.lines == []

    def test_missing_scale_equals_one(self, reporter) -> None:
        """Test that an absent scale matches an explicit scale of 1."""
        cell = interior("Vault", [
            ref("chair", refr_index=1),
            ref("CHAIR", refr_index=2, scale=1.0),
        ])
        run([cell], DuplicateRefValidator(reporter))
        assert len(reporter.lines) == 1
