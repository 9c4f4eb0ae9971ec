"""Command-line interface for running Plaid node operations."""

import json
import os
import sys
import click
from typing import Any, Dict, List, Optional, Tuple
import logging

from .api.client import PlaidApiClient
from .models.core import PlaidCredentials
from .node import PlaidNode
from .sandbox import DEFAULT_TEST_INSTITUTION, TEST_INSTITUTIONS, create_test_access_token, is_sandbox
from .utils.config_manager import ConfigManager
from .utils.error_handler import ErrorHandler, NodeOperationError, PlaidNodeError


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class PlaidNodeCLI:
    """Main CLI class wiring configuration into the node"""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize CLI with configuration"""
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.load_config()
        self.error_handler = ErrorHandler(self.config.log_directory)
        self.node = PlaidNode(self.config, error_handler=self.error_handler)

    def run_operation(self,
                      resource: str,
                      operation: str,
                      parameters: Dict[str, Any],
                      credentials: PlaidCredentials,
                      items: Optional[List[Any]] = None,
                      continue_on_fail: Optional[bool] = None) -> List[Dict[str, Any]]:
        """Execute one operation and return printable records"""
        item_list = items if items else [{}]
        item_parameters = dict(parameters)
        item_parameters['resource'] = resource
        item_parameters['operation'] = operation

        results = self.node.execute(item_list, item_parameters, credentials, continue_on_fail=continue_on_fail)
        return [{'paired_item': result.paired_item, 'json': result.json} for result in results]

    def generate_config_template(self, output_path: str) -> bool:
        """Generate configuration template file"""
        try:
            self.config_manager.save_config_template(output_path)
            return True
        except OSError as e:
            logger.error(f"Failed to generate config template at {output_path}: {e}")
            return False


def parse_param_options(params: Tuple[str, ...]) -> Dict[str, Any]:
    """Turn repeated key=value options into a parameter mapping

    Values that parse as JSON (numbers, booleans, lists, objects) are decoded;
    anything else is kept as a string.
    """
    parameters: Dict[str, Any] = {}
    for param in params:
        if '=' not in param:
            raise click.BadParameter(f"Expected key=value, got '{param}'", param_hint='--param')

        key, raw_value = param.split('=', 1)
        key = key.strip()
        if not key:
            raise click.BadParameter(f"Missing parameter name in '{param}'", param_hint='--param')

        try:
            parameters[key] = json.loads(raw_value)
        except ValueError:
            parameters[key] = raw_value
    return parameters


def load_items(items_path: Optional[str]) -> Optional[List[Any]]:
    if not items_path:
        return None

    with open(items_path, 'r', encoding='utf-8') as f:
        items = json.load(f)

    if not isinstance(items, list):
        raise click.BadParameter("Items file must contain a JSON list", param_hint='--items')
    return items


def build_credentials(client_id: Optional[str],
                      secret: Optional[str],
                      environment: Optional[str],
                      access_token: Optional[str],
                      public_token: Optional[str]) -> PlaidCredentials:
    """Build credentials from options, falling back to PLAID_* environment variables"""
    credentials = PlaidCredentials.from_dict({
        'client_id': client_id or os.environ.get('PLAID_CLIENT_ID'),
        'secret': secret or os.environ.get('PLAID_SECRET'),
        'environment': environment or os.environ.get('PLAID_ENV'),
        'access_token': access_token or os.environ.get('PLAID_ACCESS_TOKEN'),
        'public_token': public_token or os.environ.get('PLAID_PUBLIC_TOKEN'),
    })

    if not credentials.client_id or not credentials.secret:
        raise click.UsageError(
            "Plaid client id and secret are required (--client-id/--secret or "
            "PLAID_CLIENT_ID/PLAID_SECRET)"
        )
    return credentials


def credential_options(func):
    """Attach the shared credential options to a command"""
    options = [
        click.option('--client-id', help='Plaid client id (default: $PLAID_CLIENT_ID)'),
        click.option('--secret', help='Plaid secret (default: $PLAID_SECRET)'),
        click.option('--environment', '-e', type=click.Choice(['sandbox', 'production']),
                     help='Plaid environment (default: $PLAID_ENV or sandbox)'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


# CLI Commands using Click
@click.group()
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, config, verbose):
    """Plaid Node - Run Plaid banking operations from workflows and the shell"""

    # Set up logging level
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Initialize CLI instance
    ctx.ensure_object(dict)
    ctx.obj['cli'] = PlaidNodeCLI(config)


@cli.command()
@click.pass_context
def operations(ctx):
    """List supported resource/operation pairs"""

    cli_instance = ctx.obj['cli']

    click.echo("Supported Operations")
    click.echo("=" * 40)
    for description in cli_instance.node.describe():
        token_note = " (access token)" if description['requires_access_token'] else ""
        click.echo(f"{description['resource']}/{description['operation']}{token_note}")
        click.echo(f"    Endpoint: {description['endpoint']}")
        if description['parameters']:
            click.echo(f"    Parameters: {', '.join(description['parameters'])}")


@cli.command()
@click.argument('resource')
@click.argument('operation')
@click.option('--param', '-p', 'params', multiple=True, help='Operation parameter as key=value (repeatable)')
@click.option('--items', 'items_path', type=click.Path(exists=True, dir_okay=False),
              help='JSON file with a list of input items')
@credential_options
@click.option('--access-token', help='Stored access token (default: $PLAID_ACCESS_TOKEN)')
@click.option('--public-token', help='Public token to exchange (default: $PLAID_PUBLIC_TOKEN)')
@click.option('--continue-on-fail', is_flag=True,
              help='Emit error records instead of aborting (default: continue_on_fail from config)')
@click.pass_context
def run(ctx, resource, operation, params, items_path, client_id, secret, environment,
        access_token, public_token, continue_on_fail):
    """Execute RESOURCE OPERATION and print the records as JSON"""

    cli_instance = ctx.obj['cli']

    parameters = parse_param_options(params)
    items = load_items(items_path)
    credentials = build_credentials(client_id, secret, environment, access_token, public_token)

    try:
        records = cli_instance.run_operation(
            resource, operation, parameters, credentials,
            items=items, continue_on_fail=continue_on_fail or None
        )
    except NodeOperationError as e:
        click.echo(f"✗ Item {e.item_index} failed: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(records, indent=2, default=str))


@cli.command('sandbox-token')
@click.argument('institution_id', required=False)
@click.option('--list', 'list_institutions', is_flag=True, help='List known test institutions')
@credential_options
@click.pass_context
def sandbox_token(ctx, institution_id, list_institutions, client_id, secret, environment):
    """Create a sandbox access token for INSTITUTION_ID (default: Tartan Bank)"""

    if list_institutions:
        click.echo("Test Institutions")
        click.echo("=" * 40)
        for known_id, name in TEST_INSTITUTIONS.items():
            marker = " (default)" if known_id == DEFAULT_TEST_INSTITUTION else ""
            click.echo(f"  {known_id}: {name}{marker}")
        return

    cli_instance = ctx.obj['cli']
    credentials = build_credentials(client_id, secret, environment, None, None)
    if not is_sandbox(credentials.environment):
        click.echo("✗ Test tokens can only be created in the sandbox environment", err=True)
        sys.exit(1)

    institution_id = institution_id or DEFAULT_TEST_INSTITUTION
    click.echo(f"Using institution: {TEST_INSTITUTIONS.get(institution_id, institution_id)}")

    try:
        with PlaidApiClient(credentials,
                            timeout=cli_instance.config.request_timeout,
                            plaid_version=cli_instance.config.plaid_version) as client:
            result = create_test_access_token(client, institution_id)
    except PlaidNodeError as e:
        click.echo(f"✗ Failed to create test access token ({e.error_code}): {e.error_message}", err=True)
        sys.exit(1)

    click.echo("✓ Test access token created")
    click.echo(f"  Access token: {result['access_token']}")
    click.echo(f"  Item id: {result['item_id']}")
    click.echo(f"  Accounts: {len(result['accounts'])}")
    for account in result['accounts']:
        click.echo(f"    - {account['name']} ({account['type']}/{account['subtype']}) ****{account['mask']}")


@cli.command()
@click.argument('output_path', default='plaid_node.json')
@click.option('--format', type=click.Choice(['json', 'yaml']), default='json', help='Configuration file format')
@click.pass_context
def init_config(ctx, output_path, format):
    """Generate configuration template file"""

    cli_instance = ctx.obj['cli']

    # Adjust extension based on format
    if format == 'yaml' and not output_path.endswith(('.yml', '.yaml')):
        output_path = output_path.replace('.json', '.yml')
    elif format == 'json' and not output_path.endswith('.json'):
        output_path = output_path.replace('.yml', '.json').replace('.yaml', '.json')

    if cli_instance.generate_config_template(output_path):
        click.echo(f"✓ Configuration template generated: {output_path}")
    else:
        click.echo("✗ Failed to generate configuration template")
        sys.exit(1)


if __name__ == '__main__':
    cli()
