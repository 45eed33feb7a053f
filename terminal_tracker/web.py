"""Flask surface for the heatmap panel's message contract."""

import logging
import os
import threading

from flask import Flask, jsonify, render_template, request

from terminal_tracker.controller import TrackerController

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")


def create_app(controller: TrackerController) -> Flask:
    app = Flask(__name__, template_folder=_TEMPLATE_DIR)
    app.config["CONTROLLER"] = controller

    def _no_panel():
        return jsonify(error="no active heatmap panel"), 409

    @app.route("/")
    def index():
        controller.show_heatmap()
        return render_template("heatmap.html")

    @app.route("/api/messages", methods=["POST"])
    def post_message():
        panel = controller.panel
        if panel is None:
            return _no_panel()
        message = request.get_json(silent=True)
        if not isinstance(message, dict):
            return jsonify(error="message must be a JSON object"), 400
        panel.receive_message(message)
        return jsonify(messages=panel.drain())

    @app.route("/api/messages", methods=["GET"])
    def pending_messages():
        panel = controller.panel
        if panel is None:
            return _no_panel()
        return jsonify(messages=panel.drain())

    @app.route("/api/panel", methods=["DELETE"])
    def dispose_panel():
        panel = controller.panel
        if panel is None:
            return _no_panel()
        panel.dispose()
        return jsonify(status="disposed")

    @app.route("/api/today")
    def today():
        stats = controller.today_stats()
        return jsonify(stats=stats.to_dict(), status=controller.status_text())

    @app.route("/health")
    def health():
        return jsonify(status="ok", panel_active=controller.panel is not None)

    return app


def run_web(app: Flask, host: str, port: int) -> threading.Thread:
    """Serve *app* from a daemon thread."""
    thread = threading.Thread(
        target=app.run,
        kwargs={"host": host, "port": port, "use_reloader": False},
        daemon=True,
    )
    thread.start()
    logger.info("Heatmap panel available at http://%s:%d/", host, port)
    return thread
