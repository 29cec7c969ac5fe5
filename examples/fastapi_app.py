"""Minimal app serving the stockgate proxy and notification endpoints."""

import logging

import uvicorn

from stockgate.config import GatewaySettings
from stockgate.server import create_app

logging.basicConfig(level=logging.DEBUG)

app = create_app(GatewaySettings(cors_origins=["http://localhost:8081"]))


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=3001)
