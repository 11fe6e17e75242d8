from flask import Blueprint, request, jsonify, current_app

from waiver_intake.errors import ValidationError, PersistenceError
from waiver_intake.services.waiver_service import WaiverService

waiver_bp = Blueprint('waiver', __name__)


@waiver_bp.route('/api/waiver', methods=['POST'])
def submit_waiver():
    """
    Public Endpoint: Submit Waiver
    Body: flat JSON, images as data URLs under signature_png / id_photo_front
    """
    data = request.get_json(silent=True)

    try:
        waiver_id = WaiverService.process_submission(data)
    except ValidationError as e:
        current_app.logger.warning(f"Waiver rejected: {e}")
        return jsonify({"ok": False, "error": str(e)}), 400
    except PersistenceError as e:
        return jsonify({
            "ok": False,
            "error": e.message,
            "details": e.details,
            "hint": e.hint,
        }), 500
    except Exception as e:
        current_app.logger.error(f"Waiver handler exception: {e}", exc_info=True)
        return jsonify({"ok": False, "error": "Server error"}), 500

    return jsonify({"ok": True, "waiver_id": waiver_id}), 200
