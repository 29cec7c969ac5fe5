"""
stockgate - Remote Inventory Gateway

An authenticated client and a reverse proxy for a third-party inventory
management REST API, plus a small Telegram notification side-channel.

The proxy does NOT cache, retry or transform business data - it forwards
calls and normalizes errors.
"""

from stockgate.catalog import Catalog, DocumentAccessor, EntityAccessor
from stockgate.client import InventoryClient
from stockgate.config import GatewaySettings
from stockgate.errors import (
    ConfigurationError,
    ConnectivityError,
    InvalidNotification,
    ProtocolError,
    ProxyForwardingError,
    StockgateError,
    UpstreamError,
)
from stockgate.models import (
    ConnectionStatus,
    EntityKind,
    GatewayConfig,
    Page,
    QueryFilters,
    SearchResult,
)
from stockgate.notify import TelegramNotifier
from stockgate.proxy import ReverseProxy
from stockgate.store import CredentialStore

__all__ = [
    # Client
    "InventoryClient",
    "CredentialStore",
    "Catalog",
    "EntityAccessor",
    "DocumentAccessor",
    # Server
    "ReverseProxy",
    "TelegramNotifier",
    "GatewaySettings",
    # Models
    "GatewayConfig",
    "ConnectionStatus",
    "EntityKind",
    "Page",
    "QueryFilters",
    "SearchResult",
    # Errors
    "StockgateError",
    "ConfigurationError",
    "ConnectivityError",
    "UpstreamError",
    "ProtocolError",
    "ProxyForwardingError",
    "InvalidNotification",
]

__version__ = "0.1.0"
