"""
Tests for size conversion utilities — critical for correct size filtering.
"""
import pytest
from rmdupes.utils.convert_utils import ConvertUtils


class TestHumanToBytes:
    """Test conversion from human-readable sizes (e.g., "500KB") to bytes."""

    def test_bytes_without_suffix(self):
        """Plain numbers should be interpreted as bytes."""
        assert ConvertUtils.human_to_bytes("0") == 0
        assert ConvertUtils.human_to_bytes("1024") == 1024
        assert ConvertUtils.human_to_bytes("500000") == 500000

    def test_bytes_with_b_suffix(self):
        assert ConvertUtils.human_to_bytes("0B") == 0
        assert ConvertUtils.human_to_bytes("1024B") == 1024

    def test_binary_multipliers(self):
        """K/M/G/T suffixes multiply by powers of 1024, with or without the trailing B."""
        assert ConvertUtils.human_to_bytes("1K") == 1024
        assert ConvertUtils.human_to_bytes("1.5KB") == 1536
        assert ConvertUtils.human_to_bytes("1M") == 1024 ** 2
        assert ConvertUtils.human_to_bytes("0.5GB") == 512 * 1024 ** 2
        assert ConvertUtils.human_to_bytes("2T") == 2 * 1024 ** 4

    def test_case_and_whitespace(self):
        assert ConvertUtils.human_to_bytes("1kb") == 1024
        assert ConvertUtils.human_to_bytes(" 1KB ") == 1024
        assert ConvertUtils.human_to_bytes("\t1mb\n") == 1024 * 1024

    def test_space_between_number_and_unit(self):
        assert ConvertUtils.human_to_bytes("64 k") == 64 * 1024
        assert ConvertUtils.human_to_bytes("1.5 GB") == 1536 * 1024 ** 2
        assert ConvertUtils.human_to_bytes("3P") == 3 * 1024 ** 5

    def test_rejects_negative_values(self):
        with pytest.raises(ValueError, match="Negative size not allowed"):
            ConvertUtils.human_to_bytes("-1")
        with pytest.raises(ValueError, match="Negative size not allowed"):
            ConvertUtils.human_to_bytes("-1KB")

    @pytest.mark.parametrize("bad", ["", "invalid", "1.2.3KB", "1KB2", "1 XB", "KB"])
    def test_rejects_invalid_formats(self, bad):
        with pytest.raises(ValueError):
            ConvertUtils.human_to_bytes(bad)


class TestBytesToHuman:
    """Test conversion from bytes to human-readable format."""

    def test_small_values_are_whole_bytes(self):
        assert ConvertUtils.bytes_to_human(0) == "0B"
        assert ConvertUtils.bytes_to_human(512) == "512B"
        assert ConvertUtils.bytes_to_human(1023) == "1023B"

    def test_larger_units(self):
        assert ConvertUtils.bytes_to_human(1024) == "1.00KB"
        assert ConvertUtils.bytes_to_human(1536) == "1.50KB"
        assert ConvertUtils.bytes_to_human(1024 * 1024) == "1.00MB"
        assert ConvertUtils.bytes_to_human(500 * 1024 ** 3) == "500.00GB"

    def test_largest_unit_is_exabytes(self):
        assert ConvertUtils.bytes_to_human(1024 ** 6) == "1.00EB"
        assert ConvertUtils.bytes_to_human(2048 * 1024 ** 6) == "2048.00EB"

    def test_precision(self):
        """Should show exactly 2 decimal places."""
        assert ConvertUtils.bytes_to_human(1500) == "1.46KB"  # 1500/1024 = 1.4648...

    def test_negative_is_clamped(self):
        assert ConvertUtils.bytes_to_human(-5) == "0B"


class TestTimestampToHuman:

    def test_formats_local_time(self):
        import time
        ts = time.mktime((2024, 3, 15, 10, 30, 0, 0, 0, -1))
        assert ConvertUtils.timestamp_to_human(ts) == "2024-03-15 10:30:00"

    def test_custom_format(self):
        import time
        ts = time.mktime((2024, 3, 15, 10, 30, 0, 0, 0, -1))
        assert ConvertUtils.timestamp_to_human(ts, "%Y/%m/%d") == "2024/03/15"

    def test_invalid_timestamp(self):
        assert ConvertUtils.timestamp_to_human(1e20) == "Invalid timestamp"
