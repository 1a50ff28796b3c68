# kwildb_query/__init__.py

from .builder import Builder
from .table import Table
from .query import Comparison, Like, Nullity, Between, In, build_where
from .result import StatementResult, check_reply
from .exceptions import ConnectionNotFound, ExecutionError
from .connector import Connector, SqliteConnector, create_connector
from .settings import ConnectorConfig, ConnectorSettings, load_settings

__all__ = [
    'Builder',
    'Table',
    'Comparison',
    'Like',
    'Nullity',
    'Between',
    'In',
    'build_where',
    'StatementResult',
    'check_reply',
    'ConnectionNotFound',
    'ExecutionError',
    'Connector',
    'SqliteConnector',
    'create_connector',
    'ConnectorConfig',
    'ConnectorSettings',
    'load_settings',
]
