"""Login and download activity log mixin for database."""
import uuid
from typing import Any, Dict, List, Optional

from file_manager.utils.formatters import format_size_kb, format_storage, utc_now_iso

LOGIN_LOGS = 'login_logs'
DOWNLOAD_LOGS = 'download_logs'


class ActivityMixin:
    """Mixin recording logins and downloads, newest entries kept."""

    def _append_log(self, collection: str, entry: Dict[str, Any]) -> Dict[str, Any]:
        with self.lock:
            logs = self._load_list(collection)
            logs.append(entry)
            self._save(collection, logs[-self.log_retention:])
        return entry

    def log_login(self, employee_code: str, status: str, name: Optional[str] = None,
                  reason: Optional[str] = None, ip: Optional[str] = None) -> Dict[str, Any]:
        return self._append_log(LOGIN_LOGS, {
            'id': str(uuid.uuid4()),
            'employeeCode': employee_code,
            'name': name,
            'status': status,
            'reason': reason,
            'ip': ip,
            'timestamp': utc_now_iso(),
        })

    def log_download(self, file_record: Dict[str, Any], user: str) -> Dict[str, Any]:
        return self._append_log(DOWNLOAD_LOGS, {
            'id': str(uuid.uuid4()),
            'file_id': file_record.get('id'),
            'filename': file_record.get('filename'),
            'user': user,
            'size': format_size_kb(file_record.get('file_size')),
            'timestamp': utc_now_iso(),
        })

    def get_login_logs(self) -> List[Dict[str, Any]]:
        return list(reversed(self._load_list(LOGIN_LOGS)))

    def get_download_logs(self) -> List[Dict[str, Any]]:
        return list(reversed(self._load_list(DOWNLOAD_LOGS)))

    def user_activity_stats(self) -> List[Dict[str, Any]]:
        """Per-user upload, download and login counts."""
        files = self.list_files()
        downloads = self._load_list(DOWNLOAD_LOGS)
        logins = self._load_list(LOGIN_LOGS)

        stats = []
        for user in self.list_users():
            code = user.get('employeeCode')
            email = self.user_email(code)
            uploaded = [f for f in files if f.get('uploaded_by') == email]
            stats.append({
                'employeeCode': code,
                'name': user.get('name'),
                'role': user.get('role'),
                'status': user.get('status'),
                'lastLogin': user.get('lastLogin'),
                'filesUploaded': len(uploaded),
                'storageUsed': format_storage(sum(f.get('file_size') or 0 for f in uploaded)),
                'downloads': sum(1 for d in downloads if d.get('user') == email),
                'logins': sum(1 for entry in logins
                              if entry.get('employeeCode') == code and entry.get('status') == 'success'),
            })
        return stats
