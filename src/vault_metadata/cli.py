"""Command-line interface for the vault metadata workflow step."""

import argparse
import json
import logging
import sys
from concurrent.futures import wait
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from schemas.invocation import StepInvocation, VersionNumber
from vault_metadata.clients import DataverseClient
from vault_metadata.config import ConfigError, load_config
from vault_metadata.core import DataverseRepository, VaultMetadataTaskFactory
from vault_metadata.dispatch import QueueFullError, TaskQueue
from vault_metadata.identifiers import IdMintingService, IdValidator
from vault_metadata.logging_utils import setup_logging

DEFAULT_CONFIG = Path("./etc/config.yml")


def _load_invocations(path: Path) -> list[StepInvocation]:
    """Read one JSON step invocation per non-empty line."""
    invocations = []
    for line_number, line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
        if not line.strip():
            continue
        try:
            invocations.append(StepInvocation.model_validate_json(line))
        except PydanticValidationError as e:
            raise ValueError(f"{path}:{line_number}: invalid step invocation: {e}") from e
    return invocations


def run_step(args: argparse.Namespace) -> int:
    """Execute the run-step command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if the workflow was resumed with Success, 1 otherwise)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = load_config(args.config)
        version = VersionNumber.parse(args.version)
    except (ConfigError, ValueError) as e:
        logger.error(f"{e}")
        return 1

    invocation = StepInvocation(
        invocation_id=args.invocation_id,
        global_id=args.global_id,
        dataset_id=args.dataset_id,
        major_version=version.major,
        minor_version=version.minor,
    )

    with DataverseClient(config.dataverse.client_config()) as client:
        factory = VaultMetadataTaskFactory(
            DataverseRepository(client, config.vault_metadata_key)
        )
        task = factory.create(invocation)
        task.run()

    logger.info(f"Task for {invocation.global_id} {version}: {task.state.value}")
    if task.error is not None:
        logger.error(f"  Error: {task.error}")

    return 0 if task.succeeded else 1


def run_batch(args: argparse.Namespace) -> int:
    """Execute the run-batch command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if every workflow was resumed with Success, 1 otherwise)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = load_config(args.config)
        invocations = _load_invocations(args.invocations)
    except (ConfigError, OSError, ValueError) as e:
        logger.error(f"{e}")
        return 1

    if not invocations:
        logger.warning(f"No step invocations in {args.invocations}")
        return 0

    rejected = 0
    with DataverseClient(config.dataverse.client_config()) as client:
        # Create the shared httpx client before the workers start.
        _ = client.client
        factory = VaultMetadataTaskFactory(
            DataverseRepository(client, config.vault_metadata_key)
        )
        tasks = [factory.create(invocation) for invocation in invocations]

        with TaskQueue(config.task_queue) as queue:
            futures = []
            for task in tasks:
                try:
                    futures.append(queue.submit(task.run))
                except QueueFullError as e:
                    rejected += 1
                    logger.error(f"Rejected {task!r}: {e}")
            wait(futures)

    succeeded = sum(1 for task in tasks if task.succeeded)
    logger.info(f"Processed {len(tasks) - rejected} of {len(tasks)} invocations")
    logger.info(f"  Succeeded: {succeeded}")
    for task in tasks:
        if task.error is not None:
            logger.warning(f"  Failed: {task.invocation.global_id}: {task.error}")

    return 0 if succeeded == len(tasks) else 1


def check_id(args: argparse.Namespace) -> int:
    """Execute the check-id command.

    Returns:
        Exit code (0 if every identifier is a valid bag id or NBN)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    validator = IdValidator()
    all_valid = True
    for identifier in args.ids:
        if validator.is_valid_bag_id(identifier):
            logger.info(f"{identifier}: valid bag id")
        elif validator.is_valid_nbn(identifier):
            logger.info(f"{identifier}: valid NBN")
        else:
            logger.error(f"{identifier}: not a valid bag id or NBN")
            all_valid = False

    return 0 if all_valid else 1


def mint_id(args: argparse.Namespace) -> int:
    """Execute the mint-id command, printing one identifier per line."""
    minting_service = IdMintingService()
    mint = minting_service.mint_bag_id if args.kind == "bag-id" else minting_service.mint_nbn
    for _ in range(args.count):
        print(mint())
    return 0


def check_config(args: argparse.Namespace) -> int:
    """Execute the check-config command."""
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(e.message)
        for error in e.errors:
            logger.error(f"  - {error}")
        return 1

    key = config.vault_metadata_key
    logger.info(f"Configuration OK: {args.config}")
    logger.info(f"  Dataverse: {config.dataverse.base_url}")
    logger.info(f"  API key: {'set' if config.dataverse.api_key else 'not set'}")
    logger.info(
        f"  Task queue: {config.task_queue.max_threads} threads, "
        f"{config.task_queue.max_queue_size} queued"
    )
    logger.info(f"  Vault metadata key: {'enabled' if key and key.enabled else 'disabled'}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="vault-metadata",
        description="Set the vault metadata of Dataverse dataset versions during publication",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    step_parser = subparsers.add_parser(
        "run-step",
        help="Run the workflow step for one invocation",
        description="Set the vault metadata of one dataset version and resume its publication workflow.",
    )
    step_parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help=f"Configuration file (default: {DEFAULT_CONFIG})",
    )
    step_parser.add_argument("--invocation-id", required=True, help="Workflow invocation id")
    step_parser.add_argument("--global-id", required=True, help="Persistent identifier of the dataset")
    step_parser.add_argument("--dataset-id", required=True, help="Database id of the dataset")
    step_parser.add_argument(
        "--version",
        required=True,
        help="Version being published, as <major>.<minor>",
    )
    step_parser.set_defaults(func=run_step)

    batch_parser = subparsers.add_parser(
        "run-batch",
        help="Run the workflow step for many invocations concurrently",
        description="Read step invocations (one JSON object per line) and process them on the task queue.",
    )
    batch_parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help=f"Configuration file (default: {DEFAULT_CONFIG})",
    )
    batch_parser.add_argument(
        "--invocations",
        type=Path,
        required=True,
        help="JSON-lines file with step invocations",
    )
    batch_parser.set_defaults(func=run_batch)

    check_id_parser = subparsers.add_parser(
        "check-id",
        help="Check whether identifiers are valid bag ids or NBNs",
    )
    check_id_parser.add_argument("ids", nargs="+", help="Identifiers to check")
    check_id_parser.set_defaults(func=check_id)

    mint_parser = subparsers.add_parser(
        "mint-id",
        help="Mint new bag ids or NBNs",
    )
    mint_parser.add_argument("kind", choices=["bag-id", "nbn"], help="Kind of identifier")
    mint_parser.add_argument("--count", type=int, default=1, help="Number to mint (default: 1)")
    mint_parser.set_defaults(func=mint_id)

    config_parser = subparsers.add_parser(
        "check-config",
        help="Load a configuration file and report its settings",
    )
    config_parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help=f"Configuration file (default: {DEFAULT_CONFIG})",
    )
    config_parser.set_defaults(func=check_config)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
