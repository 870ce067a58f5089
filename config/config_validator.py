"""Search settings validation."""

from typing import Tuple, List

from .search_settings import SearchSettings

MAX_FILE_SIZE_CEILING = 1024 * 1024 * 1024  # 1 GiB
MAX_DEPTH_CEILING = 64


class SettingsValidator:
    """Validates search settings before a session uses them."""

    def validate_settings(self, settings: SearchSettings) -> Tuple[bool, List[str]]:
        """
        Validate search settings.

        Args:
            settings: Settings to validate

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        # Result caps and batch sizes
        for name in ('max_results', 'per_file_match_limit', 'scan_batch_size',
                     'initial_batch_size', 'load_more_batch_size'):
            value = getattr(settings, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(f"{name} must be a positive integer")

        # File size ceiling
        if settings.max_file_size <= 0:
            errors.append("max_file_size must be positive")
        elif settings.max_file_size > MAX_FILE_SIZE_CEILING:
            errors.append("max_file_size too large (max 1GB)")

        if settings.context_size < 0:
            errors.append("context_size cannot be negative")

        if settings.max_depth < 0:
            errors.append("max_depth cannot be negative")
        elif settings.max_depth > MAX_DEPTH_CEILING:
            errors.append(f"max_depth too large (max {MAX_DEPTH_CEILING})")

        if not settings.ignore_file_name or '/' in settings.ignore_file_name:
            errors.append(f"Invalid ignore file name: {settings.ignore_file_name!r}")

        for pattern in settings.exclude_patterns:
            if not isinstance(pattern, str) or not pattern.strip():
                errors.append(f"Invalid exclude pattern: {pattern!r}")

        if settings.text_extensions is not None:
            for ext in settings.text_extensions:
                if not isinstance(ext, str) or not ext.startswith('.'):
                    errors.append(f"Invalid file extension: {ext!r}")

        return len(errors) == 0, errors
