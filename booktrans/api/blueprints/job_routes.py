"""
Translation job control routes
"""
from flask import Blueprint, request, jsonify

from booktrans.config import API_ENDPOINT, DEFAULT_BATCH_SIZE, TranslationConfig
from booktrans.core.exceptions import (
    InvalidJobStateError,
    ProviderRequestError,
    ProviderUnavailableError
)
from booktrans.core.models import StartOutcome, WorkUnit
from booktrans.core.translator import Translator
from booktrans.utils.unified_logger import info


def _parse_units(raw_units):
    """
    Accept units as plain strings or as {'text', 'chapter_index', 'sentence_index'}.

    Strings get their list position as sentence_index.
    """
    units = []
    for position, raw in enumerate(raw_units):
        if isinstance(raw, str):
            units.append(WorkUnit(text=raw, sentence_index=position))
        elif isinstance(raw, dict) and isinstance(raw.get('text'), str):
            units.append(WorkUnit.from_dict(raw))
        else:
            raise ValueError(f"Invalid unit at position {position}")
    return units


def _job_payload(controller):
    job = controller.get_current()
    return {"job": job.to_dict() if job else None}


def create_job_blueprint(controller):
    """
    Create and configure the job blueprint

    Args:
        controller: JobController instance
    """
    bp = Blueprint('jobs', __name__)

    @bp.errorhandler(InvalidJobStateError)
    def handle_invalid_state(e):
        return jsonify({
            "error": str(e),
            "operation": e.operation,
            "status": e.status
        }), 409

    @bp.route('/api/health', methods=['GET'])
    def health_check():
        """API health check endpoint"""
        return jsonify({
            "status": "ok",
            "message": "Translation API is running",
            "provider_configured": controller.translator is not None,
            "ollama_default_endpoint": API_ENDPOINT
        })

    @bp.route('/api/jobs', methods=['POST'])
    def start_job():
        """Start a new translation job (stops a running one first)"""
        data = request.get_json(silent=True) or {}

        for field in ('owner_id', 'title', 'units'):
            value = data.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                return jsonify({"error": f"Missing or empty field: {field}"}), 400
        if not isinstance(data['units'], list):
            return jsonify({"error": "Field 'units' must be a list"}), 400

        # Provider settings in the request replace the current translator
        settings = {}
        try:
            units = _parse_units(data['units'])
            batch_size = int(data.get('batch_size', DEFAULT_BATCH_SIZE))
            if 'model' in data or 'llm_provider' in data:
                config = TranslationConfig.from_web_request(data)
                settings = {
                    'translator': Translator.from_config(config),
                    'source_language': config.source_language,
                    'target_language': config.target_language,
                    'custom_instructions': config.custom_instructions
                }
        except (TypeError, ValueError) as e:
            return jsonify({"error": str(e)}), 400

        try:
            outcome = controller.start(data['owner_id'], data['title'], units, batch_size, **settings)
        except ProviderUnavailableError as e:
            return jsonify({"error": str(e)}), 503
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        if outcome == StartOutcome.ALREADY_COMPLETE:
            return jsonify({
                "outcome": outcome.value,
                "message": "Every unit is already translated",
                "job": None
            }), 200

        info(f"Job for '{data['title']}' started from the web interface")
        return jsonify({"outcome": outcome.value, **_job_payload(controller)}), 202

    @bp.route('/api/jobs/current', methods=['GET'])
    def get_current_job():
        """Snapshot of the current job, or null when idle"""
        return jsonify(_job_payload(controller))

    def _control(operation, action):
        if not action():
            job = controller.get_current()
            raise InvalidJobStateError(
                f"Cannot {operation} in the current state",
                operation=operation,
                status=job.status.value if job else None
            )
        return jsonify(_job_payload(controller))

    @bp.route('/api/jobs/current/pause', methods=['POST'])
    def pause_job():
        return _control('pause', controller.pause)

    @bp.route('/api/jobs/current/resume', methods=['POST'])
    def resume_job():
        return _control('resume', controller.resume)

    @bp.route('/api/jobs/current/stop', methods=['POST'])
    def stop_job():
        return _control('stop', controller.stop)

    @bp.route('/api/jobs/current/clear', methods=['POST'])
    def clear_completed_job():
        return _control('clear', controller.clear_completed)

    @bp.route('/api/translate-unit', methods=['POST'])
    def translate_unit():
        """Translate one sentence through the cache (reader lookup)"""
        data = request.get_json(silent=True) or {}
        owner_id = data.get('owner_id')
        text = data.get('text')
        if not owner_id or not isinstance(text, str) or not text.strip():
            return jsonify({"error": "Fields 'owner_id' and 'text' are required"}), 400

        try:
            translated = controller.translate_unit(owner_id, text)
        except ProviderUnavailableError as e:
            return jsonify({"error": str(e)}), 503
        except ProviderRequestError as e:
            return jsonify({"error": str(e)}), 502

        return jsonify({"owner_id": owner_id, "text": text, "translated_text": translated})

    return bp
