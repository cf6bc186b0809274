"""
Translation cache management routes
"""
from flask import Blueprint, request, jsonify


def create_cache_blueprint(cache):
    """
    Create and configure the cache blueprint

    Args:
        cache: ContentCache instance
    """
    bp = Blueprint('cache', __name__)

    @bp.route('/api/cache/stats', methods=['GET'])
    def get_cache_stats():
        return jsonify(cache.stats().to_dict())

    @bp.route('/api/cache/<owner_id>', methods=['GET'])
    def lookup_translation(owner_id):
        """Look up the cached translation of ?text= for one owner"""
        text = request.args.get('text')
        if not text:
            return jsonify({"error": "Query parameter 'text' is required"}), 400

        entry = cache.get(owner_id, text)
        if entry is None:
            return jsonify({"error": "Translation not cached"}), 404
        return jsonify(entry.to_dict())

    @bp.route('/api/cache/<owner_id>', methods=['DELETE'])
    def delete_owner_translations(owner_id):
        deleted = cache.delete_by_owner(owner_id)
        return jsonify({"owner_id": owner_id, "deleted": deleted})

    @bp.route('/api/cache', methods=['DELETE'])
    def clear_cache():
        deleted = cache.clear_all()
        return jsonify({"deleted": deleted})

    return bp
