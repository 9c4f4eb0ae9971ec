"""Plaid workflow automation node"""

__version__ = "0.1.0"

from .models.core import NodeConfig, NodeExecutionData, PlaidCredentials
from .node import PlaidNode
from .utils.error_handler import NodeOperationError, PlaidNodeError

__all__ = [
    '__version__',
    'NodeConfig',
    'NodeExecutionData',
    'PlaidCredentials',
    'PlaidNode',
    'NodeOperationError',
    'PlaidNodeError',
]
