"""
Service banner and health routes.
"""
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from file_manager.database import get_db

bp = Blueprint('main', __name__)

API_VERSION = '1.0.0'


@bp.route('/')
def index():
    """Banner confirming the API is up."""
    return jsonify({
        'message': 'File Manager API is running',
        'version': API_VERSION,
        'timestamp': datetime.now(timezone.utc).isoformat()
    }), 200


@bp.route('/api/health')
def health_check():
    """Health check with the storage backend in use."""
    try:
        database = get_db().status()['type']
    except Exception as e:
        current_app.logger.error(f"Health check storage error: {e}")
        database = 'Unavailable'
    return jsonify({
        'status': 'OK',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'environment': current_app.config.get('FLASK_ENV', 'development'),
        'cors': 'enabled',
        'database': database
    }), 200
