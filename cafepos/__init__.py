"""Flask application factory."""
import logging
import traceback

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from cafepos.database import init_db


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Error tracking, production only
    if app.config.get('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get('ENV', 'production')
        )

    # Prometheus instrumentation
    from cafepos.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Database
    store = init_db(app)
    if app.config.get('AUTO_INIT_DB'):
        from cafepos.services.seed_service import seed_database
        store.create_all()
        try:
            seed_database(store.session(), app.config)
        finally:
            store.remove()

    # Live order events
    from cafepos.services.event_service import init_events
    init_events(app)

    from cafepos.middleware import load_current_user

    @app.before_request
    def before_request_handler():
        """Resolve the bearer token, if any, for each request."""
        load_current_user()

    # Error Handlers
    from cafepos.exceptions import CafeError

    @app.errorhandler(CafeError)
    def handle_cafe_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"CafeError [{error.status_code}]: {error.message}")
        else:
            app.logger.warning(f"CafeError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from cafepos.blueprints.auth import auth_bp
    from cafepos.blueprints.users import users_bp
    from cafepos.blueprints.catalog import catalog_bp
    from cafepos.blueprints.stock import stock_bp
    from cafepos.blueprints.expenses import expenses_bp
    from cafepos.blueprints.orders import orders_bp
    from cafepos.blueprints.stats import stats_bp
    from cafepos.blueprints.settings import settings_bp
    from cafepos.blueprints.uploads import uploads_bp
    from cafepos.blueprints.logs import logs_bp
    from cafepos.blueprints.events import events_bp
    from cafepos.blueprints.metrics import metrics_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(stock_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(stats_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(uploads_bp)
    app.register_blueprint(logs_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(metrics_bp)

    # CLI commands
    from cafepos.cli_commands import init_cli_commands
    init_cli_commands(app)

    return app
