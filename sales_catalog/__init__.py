"""Flask application factory."""
import logging
import os
import traceback

from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from sales_catalog.database import init_db


def configure_logging(app):
    """Apply LOG_LEVEL and a timestamped format to the root and app loggers."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    logging.getLogger().setLevel(level)
    app.logger.setLevel(level)


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging(app)

    from sales_catalog.utils.json_provider import SalesJSONProvider
    app.json = SalesJSONProvider(app)

    # Initialize Sentry for error tracking in production
    sentry_dsn = app.config.get('SENTRY_DSN')
    if sentry_dsn and (app.config.get('ENV') == 'production' or os.getenv('FLASK_ENV') == 'production'):
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=sentry_dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            environment=app.config.get('ENV', 'production'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Setup Prometheus metrics instrumentation
    from sales_catalog.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Initialize database
    init_db(app)

    # Error Handlers
    from sales_catalog.exceptions import SalesCatalogError

    @app.errorhandler(SalesCatalogError)
    def handle_sales_catalog_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"SalesCatalogError [{error.status_code}]: {error.message}")
        else:
            app.logger.warning(f"SalesCatalogError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'status': 'error', 'message': 'Not Found'}), 404

    @app.errorhandler(HTTPException)
    def http_error(error):
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(SQLAlchemyError)
    def database_error(error):
        app.logger.error(f"Database error: {error}")
        return jsonify({'status': 'error', 'message': 'Database error'}), 500

    @app.errorhandler(500)
    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from sales_catalog.blueprints.main import main_bp
    from sales_catalog.blueprints.sales import sales_bp
    from sales_catalog.blueprints.metrics import metrics_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(metrics_bp)

    # Register CLI commands
    from sales_catalog.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"Sales catalog ready (ENV={app.config.get('ENV')})")

    return app
