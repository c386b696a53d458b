"""Main blueprint with health check endpoint."""
from flask import Blueprint, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError
from sales_catalog.database import ping

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """
    Health check endpoint that validates database connection.

    Returns:
        200: Healthy (DB connected)
        500: Unhealthy (DB error)
    """
    try:
        if ping():
            return jsonify({
                'status': 'healthy',
                'database': 'connected'
            }), 200
        return jsonify({
            'status': 'unhealthy',
            'database': 'error',
            'message': 'Unexpected query result'
        }), 500

    except SQLAlchemyError as e:
        current_app.logger.error(f"Health check failed: {e}")
        return jsonify({
            'status': 'unhealthy',
            'database': 'disconnected',
            'message': 'Failed to connect to database'
        }), 500
