#!/usr/bin/env python3
"""
Gateway registration sidecar

Features:
- Registers this instance with the gateway on startup
- Keeps the registration alive (heartbeat, retry, registry verification)
- Deregisters on shutdown (atexit, SIGTERM, SIGINT)
- Health and registration diagnostics endpoints
- Prometheus metrics
"""

import atexit
import logging
import os
import signal
import sys
import time

from flask import Flask, Response, jsonify
from flask_cors import CORS
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from gateway_registry.agent import GatewayRegistryAgent
from gateway_registry.config import ConfigurationError, RegistrationConfig
from gateway_registry.logging_setup import configure_logging

logger = logging.getLogger(__name__)


def create_app(agent: GatewayRegistryAgent) -> Flask:
    """Build the diagnostics app around a registration agent"""
    app = Flask(__name__)
    CORS(app)

    @app.route("/health", methods=["GET"])
    def health():
        """Health check endpoint"""
        return jsonify(
            {
                "status": "healthy",
                "service": agent.config.service_name,
                "timestamp": time.time(),
                "registration": agent.registration_info(),
            }
        ), 200

    @app.route("/registration", methods=["GET"])
    def registration():
        """Current gateway registration"""
        return jsonify(agent.registration_info()), 200

    @app.route("/metrics")
    def metrics():
        """Prometheus metrics"""
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

    return app


def install_shutdown_hooks(agent: GatewayRegistryAgent):
    """
    Stop the agent once, on interpreter exit

    SIGTERM/SIGINT only raise SystemExit; the agent is stopped by the atexit
    hook after the main thread has left any section holding the agent lock.
    """
    atexit.register(agent.stop)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        sys.exit(0)

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)


def main():
    configure_logging()

    try:
        config = RegistrationConfig.from_env()
    except ConfigurationError as e:
        logger.error(f"❌ Invalid gateway registration config: {e}")
        sys.exit(1)

    agent = GatewayRegistryAgent(config)
    install_shutdown_hooks(agent)
    agent.start()

    app = create_app(agent)
    port = int(os.environ.get("PORT", "3000"))
    logger.info(f"Registration sidecar for {config.service_name} starting on port {port}...")
    app.run(host="0.0.0.0", port=port, debug=False)


if __name__ == "__main__":
    main()
