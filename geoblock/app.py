"""
Geoblock Service - Flask application for country-based access control.
Provides ForwardAuth endpoint for Traefik (or any auth_request proxy).
"""

import os
import logging
from flask import Flask, jsonify, request

from .config import Config
from .utils import HealthCheckFilter, new_request_id, render_forbidden
from .verification import GeoblockFilter

logger = logging.getLogger(__name__)

# Apply filter to werkzeug logger (Flask's HTTP request logger)
logging.getLogger('werkzeug').addFilter(HealthCheckFilter())


def create_app(config=None, database=None):
    """
    Create the Flask service.

    The service answers ForwardAuth sub-requests from the proxy, so it only
    asks the filter for decisions via check(); the proxy itself plays the
    role of the downstream handler.

    Args:
        config: Config object (default: Config.load())
        database: Country database handle (default: opened from config)

    Raises:
        ConfigurationError: the service must not start with a broken policy
    """
    # Configure logging
    logging.basicConfig(level=logging.INFO)

    if config is None:
        config = Config.load()
    config.log()

    app = Flask(__name__)
    geoblock_filter = GeoblockFilter(app.wsgi_app, config, database=database)
    app.extensions['geoblock'] = geoblock_filter

    @app.route('/verify', methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'HEAD', 'OPTIONS'])
    def verify():
        """ForwardAuth verification endpoint."""
        # Prefer X-Forwarded-Host (from reverse proxy) over Host header
        host = request.headers.get('X-Forwarded-Host') or request.headers.get('Host', '')
        logger.debug(f"Request headers: Host={host}, "
                     f"X-Forwarded-For={request.headers.get('X-Forwarded-For')}, "
                     f"X-Real-IP={request.headers.get('X-Real-IP')}")

        try:
            decision = geoblock_filter.check(request.headers, host)
        except Exception as e:
            # Fail closed: an unexpected error must not let traffic through
            logger.error(f"Error processing request: {e}", exc_info=True)
            request_id = new_request_id()
            logger.info(f"Rejected request {request_id} (internal error)")
            return render_forbidden(request_id)

        if decision.allow:
            return '', 200

        request_id = new_request_id()
        logger.info(f"Rejected request {request_id} for {host}: "
                    f"{decision.ip} ({decision.country}) {decision.reason}")
        return render_forbidden(request_id)

    @app.route('/health')
    def health():
        """Health check endpoint."""
        status = {
            "status": "healthy",
            "database": geoblock_filter.database is not None,
            "config": config.to_dict(),
        }
        return jsonify(status), 200

    return app


if __name__ == '__main__':
    port = int(os.getenv('PORT', 9876))
    create_app().run(host='0.0.0.0', port=port, debug=False)
