"""Plaid workflow node: dispatches each input item to one Plaid operation."""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import requests

from .api.client import PlaidApiClient
from .api.credentials import AccessTokenResolver, select_token_resolver
from .models.core import NodeConfig, NodeExecutionData, PlaidCredentials
from .utils.error_handler import (
    AuthResolutionError,
    ErrorHandler,
    NodeOperationError,
    ParameterError,
    TransportError,
    build_error_record,
    classify_exception,
    format_error_message,
)
from .utils.plugin_manager import PluginManager
from .utils.validation import ParameterReader


logger = logging.getLogger(__name__)

Parameters = Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]


class PlaidNode:
    """Execution entry point used by the workflow host

    Items are processed strictly one after another. Every emitted record is
    paired with the index of the input item that produced it, and records of
    item i always precede those of item i + 1.

    Example:
        node = PlaidNode()
        results = node.execute(
            items=[{}],
            parameters={'resource': 'transaction', 'operation': 'sync', 'cursor': cursor},
            credentials={'clientId': '...', 'secret': '...', 'accessToken': '...'},
        )
    """

    def __init__(self,
                 config: Optional[NodeConfig] = None,
                 plugin_manager: Optional[PluginManager] = None,
                 error_handler: Optional[ErrorHandler] = None,
                 session: Optional[requests.Session] = None):
        """Initialize the node

        Args:
            config: Node configuration (defaults apply when omitted)
            plugin_manager: Operation registry; built from config when omitted
            error_handler: Collector for per-item failures
            session: Optional requests session shared by the API client
        """
        self.config = config or NodeConfig()
        self.plugin_manager = plugin_manager or PluginManager(self.config)
        self.error_handler = error_handler or ErrorHandler(self.config.log_directory)
        self.session = session

    def describe(self) -> List[Dict[str, Any]]:
        """List supported (resource, operation) pairs and their parameter names"""
        return [description.to_dict() for description in self.plugin_manager.describe_operations()]

    def execute(self,
                items: Sequence[Any],
                parameters: Parameters,
                credentials: Union[PlaidCredentials, Mapping[str, Any]],
                continue_on_fail: Optional[bool] = None) -> List[NodeExecutionData]:
        """Run the selected operation once per input item

        Args:
            items: Input items handed over by the host
            parameters: Resolved node parameters, either one mapping for all
                items or one mapping per item
            credentials: PlaidCredentials or the host's credential mapping
            continue_on_fail: Failure-tolerant mode; defaults to config

        Returns:
            Output records in emission order, each paired with its item index

        Raises:
            NodeOperationError: First failure in strict mode
            AuthResolutionError: Client id or secret missing from the credentials
        """
        if not isinstance(credentials, PlaidCredentials):
            credentials = PlaidCredentials.from_dict(dict(credentials or {}))
        if not credentials.client_id or not credentials.secret:
            raise AuthResolutionError("Plaid credentials require both a client id and a secret")
        if continue_on_fail is None:
            continue_on_fail = self.config.continue_on_fail

        # Failures are only kept for the current execution
        self.error_handler.clear_errors()

        token_resolver = select_token_resolver(credentials)
        logger.info(
            f"Executing {len(items)} items against {credentials.environment} "
            f"(auth method: {token_resolver.name})"
        )

        results: List[NodeExecutionData] = []
        client = PlaidApiClient(
            credentials,
            timeout=self.config.request_timeout,
            plaid_version=self.config.plaid_version,
            session=self.session,
        )

        with client:
            for index in range(len(items)):
                resource = operation = None
                try:
                    item_parameters = self._parameters_for_item(parameters, index)
                    resource = item_parameters.get('resource')
                    operation = item_parameters.get('operation')
                    records = self._execute_item(item_parameters, credentials, client, token_resolver)
                except Exception as e:
                    error = classify_exception(e)
                    self.error_handler.record_error(error, index, resource, operation)

                    if continue_on_fail:
                        results.append(NodeExecutionData(
                            json=build_error_record(error, resource, operation),
                            paired_item=index
                        ))
                        continue

                    raise NodeOperationError(format_error_message(error), index, error) from e

                results.extend(NodeExecutionData(json=record, paired_item=index) for record in records)
                logger.debug(f"Item {index} produced {len(records)} records")

        return results

    def _execute_item(self,
                      item_parameters: Mapping[str, Any],
                      credentials: PlaidCredentials,
                      client: PlaidApiClient,
                      token_resolver: AccessTokenResolver) -> List[Dict[str, Any]]:
        """Perform one upstream call for one input item"""
        resource = item_parameters.get('resource')
        operation = item_parameters.get('operation')
        if not resource or not operation:
            raise ParameterError("Parameters 'resource' and 'operation' are required")

        adapter = self.plugin_manager.get_operation(resource, operation)
        if adapter is None:
            raise ParameterError(f"Unsupported operation '{operation}' for resource '{resource}'", 'operation')

        request = adapter.parse_parameters(ParameterReader(item_parameters))

        body = adapter.build_body(request)
        if adapter.requires_access_token:
            body['access_token'] = token_resolver.resolve(credentials, client)

        response = client.post(adapter.endpoint, body)
        try:
            return adapter.process_response(response, request)
        except (AttributeError, TypeError, KeyError) as e:
            raise TransportError(f"Plaid API returned an unexpected response shape: {e}") from e

    @staticmethod
    def _parameters_for_item(parameters: Parameters, index: int) -> Dict[str, Any]:
        if isinstance(parameters, Mapping):
            return dict(parameters)
        if not isinstance(parameters, Sequence) or isinstance(parameters, str) or index >= len(parameters):
            raise ParameterError(f"No parameters supplied for item {index}")

        item_parameters = parameters[index]
        if not isinstance(item_parameters, Mapping):
            raise ParameterError(
                f"Parameters for item {index} must be a mapping, got {type(item_parameters).__name__}"
            )
        return dict(item_parameters)
