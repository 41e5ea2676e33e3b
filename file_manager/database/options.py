"""Upload form option lists mixin for database."""
from typing import Dict, List

OPTIONS = 'options'

DEFAULT_OPTIONS = {
    'fileTypes': ['WORKING', 'REPORT', 'SCHEME MASTER', 'DATA'],
    'assetTypes': ['Equity', 'Fixed Income', 'Hybrid', 'Money Market'],
    'clientCodes': [
        'CANERA', 'BOI', 'INVESCO', 'PGIM', 'OLD BRIDGE',
        'ADITYA BIRLA', 'DSP', 'EDELWEISS', 'TATA'
    ],
}

OPTION_KINDS = tuple(DEFAULT_OPTIONS)


class OptionError(Exception):
    """Invalid option change, carrying the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


def normalize_option(kind: str, value: str) -> str:
    value = (value or '').strip()
    return value.upper() if kind == 'clientCodes' else value


class OptionsMixin:
    """Mixin managing the fileTypes, assetTypes and clientCodes lists."""

    def get_options(self) -> Dict[str, List[str]]:
        stored = self._load_dict(OPTIONS) or {}
        return {kind: list(stored.get(kind, DEFAULT_OPTIONS[kind])) for kind in OPTION_KINDS}

    def _check_kind(self, kind: str) -> None:
        if kind not in OPTION_KINDS:
            raise OptionError(f"Unknown option type '{kind}'. Allowed: {', '.join(OPTION_KINDS)}")

    def add_option(self, kind: str, value: str) -> Dict[str, List[str]]:
        """
        Add a value to an option list.

        Raises:
            OptionError on unknown kind, blank value or duplicate
        """
        self._check_kind(kind)
        value = normalize_option(kind, value)
        if not value:
            raise OptionError('Value is required')
        with self.lock:
            options = self.get_options()
            if value in options[kind]:
                raise OptionError(f"'{value}' already exists")
            options[kind].append(value)
            self._save(OPTIONS, options)
        return options

    def remove_option(self, kind: str, value: str) -> Dict[str, List[str]]:
        """
        Remove a value from an option list.

        Raises:
            OptionError on unknown kind (400) or missing value (404)
        """
        self._check_kind(kind)
        value = normalize_option(kind, value)
        with self.lock:
            options = self.get_options()
            if value not in options[kind]:
                raise OptionError(f"'{value}' not found", 404)
            options[kind].remove(value)
            self._save(OPTIONS, options)
        return options
