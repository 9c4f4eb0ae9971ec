"""Example plugin exposing sandbox public token creation as a node operation."""

from typing import Type

from plaid_node.operations.base import PlaidOperation
from plaid_node.sandbox import SandboxPublicTokenOperation
from plaid_node.utils.plugin_manager import OperationPlugin


class SandboxPublicTokenPlugin(OperationPlugin):
    """Adds sandbox/createPublicToken to the node

    Useful for test workflows that need a fresh public token to feed into
    linkToken/exchangeToken without going through Plaid Link.
    """

    def get_name(self) -> str:
        return "sandbox_public_token"

    def get_operation_class(self) -> Type[PlaidOperation]:
        return SandboxPublicTokenOperation

    def get_priority(self) -> int:
        return 10


# Plugin classes are automatically discovered by the plugin manager
# No need for explicit registration
