"""
API layer: the remote gateway client and a local development backend.
"""

from .gateway import ApiFailure, ApiResponse, ApiSuccess, Endpoints, RemoteGateway
from .dev_server import DevBackendAPI, create_app

__all__ = [
    "RemoteGateway",
    "ApiSuccess",
    "ApiFailure",
    "ApiResponse",
    "Endpoints",
    "DevBackendAPI",
    "create_app",
]
