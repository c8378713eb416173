"""
Top-level package for the Odoo JSON-RPC client.

Environment variables are loaded from the nearest `.env` so ODOO_URL,
ODOO_DB, ODOO_LOGIN and ODOO_PASSWORD can live next to the project.
"""
from dotenv import find_dotenv, load_dotenv

_ = load_dotenv(find_dotenv(usecwd=True))

from .client import OdooClient
from .collapser import RelationCollapser
from .config import ConnectionConfig, LoggingConfig, ResolutionConfig, Settings
from .errors import (
    AmbiguousMetadataError,
    AuthenticationError,
    ErrorCode,
    MalformedInputError,
    NotFoundError,
    NotRelationalFieldError,
    OdooRPCError,
    RemoteError,
    TransportError,
)
from .expander import RelationExpander
from .metadata import MetadataResolver
from .session import SessionHandle, SessionManager
from .transport import JsonRpcTransport, Transport
from .types import Cardinality, MultipleRelation, RelationDescriptor, RelationSpec, SingleRelation

__all__ = [
    "OdooClient",
    "Transport",
    "JsonRpcTransport",
    "SessionHandle",
    "SessionManager",
    "MetadataResolver",
    "RelationExpander",
    "RelationCollapser",
    "Cardinality",
    "SingleRelation",
    "MultipleRelation",
    "RelationDescriptor",
    "RelationSpec",
    "Settings",
    "ConnectionConfig",
    "ResolutionConfig",
    "LoggingConfig",
    "ErrorCode",
    "OdooRPCError",
    "NotFoundError",
    "AmbiguousMetadataError",
    "NotRelationalFieldError",
    "MalformedInputError",
    "RemoteError",
    "TransportError",
    "AuthenticationError",
]
