"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
Size and time formatting shared by the --minsize/--maxsize switches and the listing output.
"""
import re
import time

# Binary multiples: K = 1024, M = 1024 ** 2, ...
_UNITS = ("B", "KB", "MB", "GB", "TB", "PB", "EB")
_MULTIPLIERS = {"": 1, "K": 1024, "M": 1024 ** 2, "G": 1024 ** 3, "T": 1024 ** 4, "P": 1024 ** 5}

# "<number>[ ]<K|M|G|T|P>[B]", e.g. 1000, 1.5GB, 64 k, 2048KB
_SIZE_PATTERN = re.compile(r"(?P<value>-?\d+(?:\.\d+)?)\s*(?P<prefix>[KMGTP]?)B?", re.IGNORECASE)


class ConvertUtils:
    @staticmethod
    def bytes_to_human(size_bytes: int) -> str:
        """
        Convert bytes to human-readable string (e.g., 512B, 1.50KB, 3.20MB).
        Negative input is shown as 0B.
        """
        if size_bytes < 1024:
            return f"{max(size_bytes, 0)}B"

        exponent = min((int(size_bytes).bit_length() - 1) // 10, len(_UNITS) - 1)
        return f"{size_bytes / 1024 ** exponent:.2f}{_UNITS[exponent]}"

    @staticmethod
    def human_to_bytes(size_str: str) -> int:
        """
        Parse a size switch value into bytes.
        Accepts a plain byte count or a number with a K/M/G/T/P prefix, the trailing B optional,
        case-insensitive, e.g. '1000', '1K', '1.5GB', '64 kb'.
        Raises:
            ValueError: the value is negative or not in one of the forms above
        """
        match = _SIZE_PATTERN.fullmatch(size_str.strip())
        if match is None:
            raise ValueError(
                f"Invalid size format: '{size_str}'. "
                f"Supported formats: 1.5GB, 2048KB, 1000, 1K, 1M, etc."
            )

        value = float(match.group("value"))
        if value < 0:
            raise ValueError(f"Negative size not allowed: '{size_str}'")
        return int(value * _MULTIPLIERS[match.group("prefix").upper()])

    @staticmethod
    def timestamp_to_human(timestamp: float, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
        """Unix timestamp as local time; 'Invalid timestamp' when it cannot be represented."""
        try:
            return time.strftime(fmt, time.localtime(timestamp))
        except (OverflowError, OSError, ValueError):
            return "Invalid timestamp"
