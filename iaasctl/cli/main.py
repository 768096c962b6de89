"""
Main CLI module with argument parsing and command execution.

Commands follow a resource/action structure:

    iaasctl machines list|show|create|delete
    iaasctl iaas list|describe
    iaasctl heal list|check|run|run-all
"""
import argparse
import json
import os
import sys
from typing import Any, Dict, List, Optional

from iaasctl import __version__
from iaasctl.domain.core.exceptions import DomainException
from iaasctl.domain.provider.exceptions import BadParamsError
from iaasctl.infrastructure.context import OperationContext
from iaasctl.config.schemas.logging_schema import LoggingConfig
from iaasctl.infrastructure.logging.logger import get_logger, setup_logging
from iaasctl.cli.formatters import format_output

FORMATS = ["json", "yaml", "table"]


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the resource-action structure."""
    parser = argparse.ArgumentParser(
        prog=os.path.basename(sys.argv[0]) or "iaasctl",
        description="Provision docker hosts on IaaS backends and heal the cluster controller",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s machines create --iaas ec2 pool=dev     # Create dev-<n> on IaaS ec2
  %(prog)s machines list --format table            # List catalogued machines
  %(prog)s iaas describe dockermachine             # Show accepted params
  %(prog)s heal run bootstrap                      # Heal the bootstrap node if needed
        """
    )

    # Global options
    parser.add_argument('--config', help='Configuration file path')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Override the configured logging level')
    parser.add_argument('--format', choices=FORMATS, default='json', help='Output format')
    parser.add_argument('--timeout', type=float, help='Give up after this many seconds')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='resource', help='Available resources')

    # Machines resource
    machines_parser = subparsers.add_parser('machines', help='Manage machines')
    machines_subparsers = machines_parser.add_subparsers(dest='action', help='Machine actions')
    machines_list = machines_subparsers.add_parser('list', help='List catalogued machines')
    machines_list.add_argument('--address', help='Only the machine with this network address')
    machines_show = machines_subparsers.add_parser('show', help='Show machine details')
    machines_show.add_argument('name', help='Machine name')
    machines_create = machines_subparsers.add_parser('create', help='Create a machine')
    machines_create.add_argument('--iaas', required=True, help='IaaS instance name')
    machines_create.add_argument('params', nargs='*', metavar='key=value', help='Creation params')
    machines_delete = machines_subparsers.add_parser('delete', help='Destroy a machine')
    machines_delete.add_argument('name', help='Machine name')

    # IaaS resource
    iaas_parser = subparsers.add_parser('iaas', help='Inspect IaaS instances')
    iaas_subparsers = iaas_parser.add_subparsers(dest='action', help='IaaS actions')
    iaas_subparsers.add_parser('list', help='List configured IaaS instances')
    iaas_describe = iaas_subparsers.add_parser('describe', help='Describe the params of an IaaS')
    iaas_describe.add_argument('name', help='IaaS instance name')

    # Heal resource
    heal_parser = subparsers.add_parser('heal', help='Run healers')
    heal_subparsers = heal_parser.add_subparsers(dest='action', help='Heal actions')
    heal_subparsers.add_parser('list', help='List registered healers')
    heal_check = heal_subparsers.add_parser('check', help='Probe without healing')
    heal_check.add_argument('name', help='Healer name')
    heal_run = heal_subparsers.add_parser('run', help='Run a healer once')
    heal_run.add_argument('name', help='Healer name')
    heal_subparsers.add_parser('run-all', help='Run every healer once')

    return parser


def parse_params(items: List[str]) -> Dict[str, str]:
    """Parse ``key=value`` arguments."""
    params = {}
    for item in items:
        key, sep, value = item.partition('=')
        if not sep or not key:
            raise BadParamsError(f"Expected key=value, got '{item}'", item)
        params[key] = value
    return params


def _machine_view(machine) -> Dict[str, Any]:
    return machine.to_dict(include_secrets=False)


def execute_command(args: argparse.Namespace, app, context: OperationContext) -> Any:
    """Execute the command selected by ``args`` and return its result."""
    service = app.machine_service
    controller = app.heal_controller
    command = (args.resource, args.action)

    if command == ('machines', 'list'):
        if args.address:
            machine = service.find_by_address(args.address)
            return {"machines": [_machine_view(machine)] if machine else []}
        return {"machines": [_machine_view(m) for m in service.list_machines()]}
    if command == ('machines', 'show'):
        return _machine_view(service.get_machine(args.name))
    if command == ('machines', 'create'):
        machine = service.create_machine(args.iaas, parse_params(args.params), context)
        return _machine_view(machine)
    if command == ('machines', 'delete'):
        service.destroy_machine(args.name, context)
        return {"deleted": args.name}

    if command == ('iaas', 'list'):
        config = app.config_manager
        return {"instances": [
            {"name": name, "kind": config.get_optional(f"iaas:{name}:provider") or name}
            for name in service.list_instances()
        ]}
    if command == ('iaas', 'describe'):
        return {"name": args.name, "description": service.describe(args.name)}

    if command == ('heal', 'list'):
        return {"healers": app.healer_registry.get_registered_names()}
    if command == ('heal', 'check'):
        return {"name": args.name, "needs_heal": controller.check(args.name, context)}
    if command == ('heal', 'run'):
        return controller.run(args.name, context).to_dict()
    if command == ('heal', 'run-all'):
        results = []
        for name, outcome in controller.run_all(context).items():
            if isinstance(outcome, DomainException):
                results.append({"name": name, "healed": False, "error": outcome.to_dict()})
            else:
                results.append(outcome.to_dict())
        return {"results": results}

    raise ValueError(f"Unknown command: {args.resource} {args.action}")


def _print_error(error: Dict[str, Any]) -> None:
    print(json.dumps(error, indent=2, default=str), file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.resource:
        parser.print_help(sys.stderr)
        sys.exit(1)
    if not args.action:
        print(f"Error: No action specified for {args.resource}. Use --help for usage information.",
              file=sys.stderr)
        sys.exit(1)

    # Configuration is read before its logging section applies; keep stdout for output
    setup_logging(LoggingConfig(level=args.log_level or "WARNING"))
    logger = get_logger(__name__)
    try:
        from iaasctl.bootstrap import create_application
        app = create_application(args.config, args.log_level)
        context = OperationContext(args.timeout)
        result = execute_command(args, app, context)
        print(format_output(result, args.format))
    except DomainException as e:
        logger.error(f"{args.resource} {args.action} failed: {e}")
        _print_error(e.to_dict())
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
