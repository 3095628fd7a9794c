"""Image upload blueprint and the static route serving stored uploads."""
from flask import Blueprint, jsonify, request, current_app, send_from_directory

from cafepos.database import get_session
from cafepos.middleware import require_auth, current_actor
from cafepos.models import AuditAction
from cafepos.services import audit_service
from cafepos.services.storage_service import StorageService

uploads_bp = Blueprint('uploads', __name__)


@uploads_bp.route('/api/upload', methods=['POST'])
@require_auth
def upload_image():
    """Store the multipart field ``image``; returns ``{url}``."""
    url = StorageService().save_image(request.files.get('image'))
    filename = url.rsplit('/', 1)[-1]

    audit_service.log_action(get_session(), current_actor(), AuditAction.FILE_UPLOADED,
                             f"Uploaded image: {filename}")
    return jsonify({'url': url})


@uploads_bp.route('/uploads/<path:filename>', methods=['GET'])
def serve_upload(filename):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
