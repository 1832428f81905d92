from __future__ import annotations

import argparse
import sys
from typing import Sequence

from . import config
from .deployment_view import get_target_name
from .errors import DocGenError
from .orchestrator import Orchestrator, Parameters
from .settings import GeneratorSettings, load_settings


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taste-docgen",
        description="Assemble a TASTE design document from a DOCX template",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    generate = subparsers.add_parser("generate", help="Generate document in CLI mode")
    generate.add_argument("-t", "--template-path", help="Input template file path")
    generate.add_argument("-i", "--interface-view", help="Input Interface View file path")
    generate.add_argument("-d", "--deployment-view", help="Input Deployment View file path")
    generate.add_argument("-p", "--opus2-model-path", help="Input OPUS2 model file path")
    generate.add_argument("-o", "--output-path", help="Output file path")
    generate.add_argument(
        "--target",
        help="Deployment target; system object export is skipped when empty",
    )
    generate.add_argument(
        "--template-directory",
        help="Directory that relative template and document hook paths resolve against",
    )
    generate.add_argument("--template-processor", help="Template processor binary")
    generate.add_argument("--system-object-exporter", help="System object exporter binary")
    generate.add_argument(
        "--system-object-type",
        action="append",
        dest="system_object_types",
        help="System object type to export (repeatable)",
    )
    generate.add_argument("--tag", help=f"Hook tag (default: {config.DEFAULT_TAG})")
    generate.add_argument(
        "--timeout",
        type=float,
        help="Timeout in seconds for each external process",
    )
    generate.add_argument("-c", "--config", help="Settings file path")

    guess = subparsers.add_parser(
        "guess-target",
        help="Print the partition hosting the most functions in a Deployment View",
    )
    guess.add_argument("-d", "--deployment-view", required=True, help="Deployment View file path")
    return parser


def build_parameters(args: argparse.Namespace, settings: GeneratorSettings) -> Parameters:
    def pick(value, fallback):
        return fallback if value is None else value

    return Parameters(
        template_path=pick(args.template_path, settings.template_path),
        interface_view_path=pick(args.interface_view, settings.interface_view_path),
        deployment_view_path=pick(args.deployment_view, settings.deployment_view_path),
        opus2_model_path=pick(args.opus2_model_path, settings.opus2_model_path),
        output_path=pick(args.output_path, settings.output_path),
        target=pick(args.target, settings.target),
        template_directory=pick(args.template_directory, settings.template_directory),
        template_processor_binary=pick(args.template_processor, settings.template_processor_binary),
        system_object_exporter_binary=pick(
            args.system_object_exporter, settings.system_object_exporter_binary
        ),
        system_object_types=pick(args.system_object_types, settings.system_object_types),
        tag=pick(args.tag, settings.tag),
        process_timeout=args.timeout,
    )


def cmd_generate(args: argparse.Namespace, orchestrator: Orchestrator | None = None) -> int:
    settings = load_settings(args.config)
    config.cleanup_logs(settings.log_retention_days)
    parameters = build_parameters(args, settings)
    orchestrator = orchestrator or Orchestrator()
    print(f"Generating document from {parameters.template_path}")
    try:
        output = orchestrator.generate(parameters)
    except (DocGenError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(output)
    return 0


def cmd_guess_target(args: argparse.Namespace) -> int:
    name = get_target_name(args.deployment_view)
    if name is None:
        print(f"Error: no partition found in {args.deployment_view}", file=sys.stderr)
        return 1
    print(name)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    if args.command == "generate":
        return cmd_generate(args)
    if args.command == "guess-target":
        return cmd_guess_target(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
