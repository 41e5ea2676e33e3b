"""File statistics mixin for database."""
from collections import Counter
from typing import Any, Dict, List, Optional

from file_manager.utils.formatters import format_storage, month_key, utc_now_iso

STATS = 'stats'


def compute_file_stats(files: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Aggregate counts over file records.

    Missing tags count as 'Unknown'; monthly buckets use the YYYY-MM prefix
    of file_date and skip records without a date.
    """
    total_storage = sum(f.get('file_size') or 0 for f in files)
    months = Counter(month_key(f.get('file_date')) for f in files if f.get('file_date'))
    return {
        'total_files': len(files),
        'total_storage': format_storage(total_storage),
        'total_storage_bytes': total_storage,
        'file_type_stats': dict(Counter(f.get('file_type') or 'Unknown' for f in files)),
        'client_code_stats': dict(Counter(f.get('client_code') or 'Unknown' for f in files)),
        'asset_type_stats': dict(Counter(f.get('asset_type') or 'Unknown' for f in files)),
        'monthly_stats': dict(sorted(months.items())),
    }


class StatsMixin:
    """Mixin keeping a cached stats document next to the file collection."""

    def update_stats(self) -> Dict[str, Any]:
        """Recalculate stats from all file records and persist them."""
        stats = compute_file_stats(self.list_files())
        stats['updated_at'] = utc_now_iso()
        self._save(STATS, stats)
        return stats

    def get_stats(self) -> Optional[Dict[str, Any]]:
        """The last persisted stats document, if any."""
        return self._load_dict(STATS)
