"""
File routes: upload, listing, downloads, statistics and options.
"""
import uuid
from datetime import datetime, timezone
from io import BytesIO

from flask import Blueprint, current_app, g, jsonify, request, send_file
from werkzeug.exceptions import HTTPException

from file_manager.database import get_db
from file_manager.database.files import filter_files, sort_newest_first
from file_manager.database.stats import compute_file_stats
from file_manager.models import FileRecord, Roles, public_file
from file_manager.services.workbook_service import WorkbookError, merge_workbooks, validate_excel, zip_files
from file_manager.storage import StorageError
from file_manager.utils.auth import role_required, token_required
from file_manager.utils.formatters import safe_filename_part, utc_now_iso
from file_manager.utils.validators import (
    ValidationError, error_response_body, parse_int_arg, require_text,
    sanitize_filename, validate_choice, validate_date, validate_file_size,
    validate_mimetype
)

bp = Blueprint('files', __name__, url_prefix='/api/files')

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
BULK_MODES = ('merge', 'zip')


def _filters_from_args():
    args = request.args
    return {
        'file_type': args.get('fileType') or None,
        'asset_type': args.get('assetType') or None,
        'client_code': args.get('clientCode') or None,
        'start_date': args.get('startDate') or None,
        'end_date': args.get('endDate') or None,
        'search': args.get('search') or None,
    }


@bp.route('/upload', methods=['POST'])
@token_required
def upload_file():
    """
    Upload one Excel file with its metadata.

    Expected form data:
        - file: Excel workbook
        - fileType: one of the configured file types
        - assetType, clientCode: non-empty text
        - fileDate: YYYY-MM-DD
    """
    try:
        db = get_db()
        upload = request.files.get('file')
        current_app.logger.info(
            f"Upload request from {g.current_user['id']}: "
            f"{upload.filename if upload else 'no file'}"
        )

        if upload is not None and upload.filename:
            try:
                validate_mimetype(upload.mimetype, current_app.config['ALLOWED_EXCEL_MIMETYPES'])
            except ValidationError as e:
                return jsonify({'error': str(e)}), 400

        form = request.form
        errors = []
        fields = {}
        for field in ('fileType', 'assetType', 'clientCode'):
            try:
                fields[field] = require_text(form, field)
            except ValidationError as e:
                errors.append(e)
        if 'fileType' in fields:
            try:
                validate_choice(fields['fileType'], db.get_options()['fileTypes'], 'fileType')
            except ValidationError as e:
                errors.append(e)
        if errors:
            current_app.logger.info(f"Upload validation errors: {[str(e) for e in errors]}")
            return jsonify(error_response_body(errors)), 400

        try:
            file_date = validate_date(require_text(form, 'fileDate', 'File date is required'))
        except ValidationError as e:
            return jsonify({'error': str(e)}), 400

        if upload is None or not upload.filename:
            return jsonify({'error': 'No file uploaded'}), 400

        content = upload.read()
        try:
            validate_file_size(len(content), current_app.config['MAX_UPLOAD_MB'])
            validate_excel(content)
        except (ValidationError, WorkbookError) as e:
            return jsonify({'error': str(e)}), 400

        file_id = str(uuid.uuid4())
        record = FileRecord(
            id=file_id,
            filename=upload.filename,
            file_type=fields['fileType'],
            asset_type=fields['assetType'],
            client_code=fields['clientCode'],
            file_date=file_date,
            file_size=len(content),
            content_type=upload.mimetype,
            uploaded_at=utc_now_iso(),
            uploaded_by=g.current_user['email'],
            blob_key=f"uploads/{file_id}/{sanitize_filename(upload.filename)}"
        ).to_dict()

        try:
            db.add_file(record, content)
        except StorageError as e:
            current_app.logger.error(f"Failed to save file {upload.filename}: {e}")
            return jsonify({'error': 'Failed to save file to database'}), 500

        current_app.logger.info(f"File uploaded successfully: {file_id} {upload.filename}")
        return jsonify({
            'message': 'File uploaded successfully',
            'file': public_file(record)
        }), 201

    except HTTPException:
        # Oversized bodies surface here as 413 and go to the app's error handler
        raise
    except Exception as e:
        current_app.logger.error(f"Upload error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to upload file'}), 500


@bp.route('', methods=['GET'])
@bp.route('/', methods=['GET'])
@token_required
def list_files():
    """
    List files with filtering and pagination.

    Query parameters:
        - fileType, assetType, clientCode: exact match
        - startDate, endDate: inclusive YYYY-MM-DD bounds on file_date
        - search: case-insensitive filename substring
        - page: >= 1 (default 1)
        - limit: 1-100 (default 20)

    Returns:
        {"files": [...], "total": 42, "page": 1, "limit": 20}
    """
    errors = []
    page = limit = None
    try:
        page = parse_int_arg(request.args.get('page'), 'page', 1, minimum=1)
    except ValidationError as e:
        errors.append(e)
    try:
        limit = parse_int_arg(request.args.get('limit'), 'limit', 20, minimum=1, maximum=100)
    except ValidationError as e:
        errors.append(e)
    if errors:
        return jsonify(error_response_body(errors)), 400

    try:
        files, total = get_db().query_files(_filters_from_args(), page=page, limit=limit)
        return jsonify({
            'files': [public_file(f) for f in files],
            'total': total,
            'page': page,
            'limit': limit
        }), 200
    except Exception as e:
        current_app.logger.error(f"Get files error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to fetch files'}), 500


@bp.route('/bulk-download', methods=['GET'])
@token_required
def bulk_download():
    """
    Download every file matching the filters, merged into one workbook or zipped.

    Query parameters:
        - fileType, assetType, clientCode, startDate, endDate, search: as for listing
        - mode: 'merge' (default) or 'zip'
    """
    mode = request.args.get('mode') or 'merge'
    if mode not in BULK_MODES:
        return jsonify(error_response_body([
            ValidationError(f"mode must be one of: {', '.join(BULK_MODES)}", 'mode')
        ])), 400

    try:
        db = get_db()
        filters = _filters_from_args()
        matching = sort_newest_first(filter_files(db.list_files(), **filters))
        if not matching:
            return jsonify({'error': 'No files found for given filters'}), 404

        filename_base = (
            f"files_{safe_filename_part(filters['file_type'])}"
            f"_{safe_filename_part(filters['asset_type'])}"
            f"_{safe_filename_part(filters['client_code'])}"
            f"_{safe_filename_part(filters['start_date'])}"
            f"_to_{safe_filename_part(filters['end_date'])}"
        )
        payloads = ((f.get('filename'), db.get_file_content(f)) for f in matching)

        if mode == 'zip':
            return send_file(
                zip_files(payloads),
                mimetype='application/zip',
                as_attachment=True,
                download_name=f"{filename_base}.zip"
            )

        return send_file(
            merge_workbooks(payloads),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=f"{filename_base}_consolidated.xlsx"
        )
    except Exception as e:
        current_app.logger.error(f"Bulk download error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to prepare bulk download'}), 500


@bp.route('/<file_id>/download', methods=['GET'])
@token_required
def download_file(file_id):
    """Download a single file as an attachment."""
    try:
        db = get_db()
        record = db.get_file(file_id)
        if not record:
            return jsonify({'error': 'File not found'}), 404

        content = db.get_file_content(record)
        if content is None:
            return jsonify({'error': 'File not found in storage'}), 404

        try:
            db.log_download(record, g.current_user['email'])
        except StorageError as e:
            current_app.logger.error(f"Failed to log download of {file_id}: {e}")

        return send_file(
            BytesIO(content),
            mimetype=record.get('content_type') or XLSX_MIMETYPE,
            as_attachment=True,
            download_name=record.get('filename') or f"{file_id}.xlsx"
        )
    except Exception as e:
        current_app.logger.error(f"Download error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to download file'}), 500


@bp.route('/<file_id>', methods=['DELETE'])
@token_required
@role_required(Roles.ADMIN)
def delete_file(file_id):
    """Delete a file record and its payload (admin only)."""
    try:
        removed = get_db().remove_file(file_id)
        if not removed:
            return jsonify({'error': 'File not found'}), 404
        current_app.logger.info(f"File {file_id} deleted by {g.current_user['id']}")
        return jsonify({'message': 'File deleted successfully'}), 200
    except StorageError as e:
        current_app.logger.error(f"Delete error: {e}")
        return jsonify({'error': 'Failed to remove file from database'}), 500
    except Exception as e:
        current_app.logger.error(f"Delete error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to delete file'}), 500


@bp.route('/stats', methods=['GET'])
@token_required
def get_stats():
    """
    Live statistics over all files.

    Returns:
        {
            "total_files": 3,
            "total_storage": "1.5 MB",
            "file_type_stats": {...},
            "client_code_stats": {...},
            "asset_type_stats": {...},
            "monthly_stats": {"2024-01": 2, ...}
        }
    """
    try:
        return jsonify(compute_file_stats(get_db().list_files())), 200
    except Exception as e:
        current_app.logger.error(f"Get stats error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to get statistics'}), 500


@bp.route('/db-status', methods=['GET'])
def db_status():
    """Describe the storage backend in use."""
    try:
        status = get_db().status()
        status['timestamp'] = datetime.now(timezone.utc).isoformat()
        return jsonify(status), 200
    except Exception as e:
        current_app.logger.error(f"Database status error: {e}", exc_info=True)
        return jsonify({'error': 'Failed to fetch database status'}), 500


@bp.route('/options', methods=['GET'])
def get_options():
    """Option lists for the upload form."""
    try:
        return jsonify(get_db().get_options()), 200
    except Exception as e:
        current_app.logger.error(f"Error reading options: {e}", exc_info=True)
        return jsonify({'error': 'Failed to load options'}), 500
