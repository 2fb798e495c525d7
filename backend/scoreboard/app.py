"""
Scoreboard - Read-only API Application
======================================
Main application entry point that builds the board and serves it with Flask.

This module:
- Builds the board once, before the first request
- Registers the board blueprint
- Defines core routes (/health)

Route Organization:
- /health          -> Health check
- /api/board/*     -> Board, posts, scores, histograms
"""

from typing import Optional

from flask import Flask, jsonify
from dotenv import load_dotenv
from flask_cors import CORS

from scoreboard.routes import board_bp
from scoreboard.config import AppConfig, get_config, apply_environment_overrides
from scoreboard.logging_config import get_board_logger
from scoreboard.models import Board
from scoreboard.pipeline import build_board

# Load environment variables
load_dotenv()

logger = get_board_logger("app")


def create_app(
    config_override: Optional[AppConfig] = None,
    board: Optional[Board] = None
) -> Flask:
    """
    Application factory function.

    Args:
        config_override: Optional AppConfig instance to use instead of global config
        board: Prebuilt board; built from the configured data when omitted

    Returns:
        Configured Flask application instance

    Raises:
        RuntimeError: If the board cannot be built
    """
    if config_override is None:
        app_config = apply_environment_overrides(get_config())
    else:
        app_config = config_override

    if board is None:
        board = build_board(app_config)

    app = Flask(__name__)
    CORS(app, origins=app_config.flask.cors_origins)

    app.app_config = app_config
    app.board = board

    app.register_blueprint(board_bp, url_prefix='/api/board')

    logger.info(
        "Initialized Flask app",
        extra={
            'run_id': board.run_id,
            'post_count': board.post_count,
            'score_count': board.score_count,
        }
    )

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint for monitoring."""
        return {
            'status': 'healthy',
            'run_id': board.run_id,
            'post_count': board.post_count,
        }, 200

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}")
        return jsonify({'error': 'Internal server error'}), 500

    return app


if __name__ == '__main__':
    app = create_app()
    flask_config = get_config().flask
    app.run(
        debug=flask_config.debug,
        host=flask_config.host,
        port=flask_config.port
    )
