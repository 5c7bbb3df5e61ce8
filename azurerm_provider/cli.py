#!/usr/bin/env python

import argparse
import logging
import os
import sys

import yaml

from .config import ProviderConfig
from .errors import ConfigurationError, ProviderError
from .provider import Provider

DEFAULT_CONFIG_PATH = os.path.join(os.getcwd(), "provider.yaml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="azurerm-provider",
        description="Manage Azure resources declaratively, one resource at a time.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,  # Shows default values in help
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help="Path to the provider config file.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("resources", help="List the supported resource types.")

    docs = subparsers.add_parser("docs", help="Render a resource type's documentation.")
    docs.add_argument("type_name", help="Resource type, e.g. azurerm_healthcare_service.")

    apply = subparsers.add_parser(
        "apply", help="Create a resource, or update it when --id is given."
    )
    apply.add_argument("type_name", help="Resource type, e.g. azurerm_healthcare_service.")
    apply.add_argument("--file", required=True, help="YAML file with the resource configuration.")
    apply.add_argument("--id", default="", help="Identifier of the resource to update.")

    for command, help_text in (
        ("read", "Refresh a resource from the API."),
        ("delete", "Delete a resource."),
        ("import", "Import an existing resource by its identifier."),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("type_name", help="Resource type, e.g. azurerm_healthcare_service.")
        sub.add_argument("--id", required=True, help="Resource identifier.")

    return parser


def load_resource_file(path: str) -> dict:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (IOError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Error reading or parsing resource file '{path}': {e}"
        ) from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Resource file '{path}' must contain a mapping.")
    return data


def run_command(args, provider: Provider) -> dict | list | str | None:
    """Executes one parsed command and returns what should be printed."""
    if args.command == "resources":
        return provider.resource_types()

    if args.command == "docs":
        return provider.get_plugin(args.type_name).render_documentation()

    resource = provider.get_resource(args.type_name)
    ctx = provider.new_context()

    if args.command == "apply":
        values = load_resource_file(args.file)
        d = provider.new_resource_data(args.type_name, values=values, resource_id=args.id)
        resource.run("update" if args.id else "create", d, ctx)
        return d.to_dict()

    d = provider.new_resource_data(args.type_name, resource_id=args.id)
    resource.run(args.command, d, ctx)
    if args.command == "delete":
        return None
    return d.to_dict()


def main(argv=None):
    """
    Main function to parse command-line arguments and run one lifecycle operation.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        # `docs` and `resources` do not talk to the API, so credentials are optional for them.
        if args.command in ("docs", "resources") and not os.path.exists(args.config):
            config = ProviderConfig.model_construct(access_token="", subscription_id="")
        else:
            config = ProviderConfig.from_file(args.config)
        provider = Provider(config)
        output = run_command(args, provider)
    except ProviderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130

    if isinstance(output, str):
        print(output)
    elif output is not None:
        print(yaml.safe_dump(output, sort_keys=False), end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())
