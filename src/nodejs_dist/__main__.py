"""Download and verify a Node.js binary distribution archive. Use --help for usage."""

import argparse
import logging
import platform
import sys
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from config import load_config
from config.config import NodeDistConfig
from core.errors.exceptions import UnsupportedPlatformError
from core.logging import generate_run_id, log_exception, log_task_startup, setup_logging
from nodejs_dist.operating_system import OperatingSystem
from nodejs_dist.paths import resolve_nodejs_paths
from nodejs_dist.task import download_and_verify

# Placeholder logger until setup_logging() is called in main()
logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="nodejs-dist",
        description="Download a Node.js binary distribution and verify it against "
        "the signed SHASUMS256.txt.asc of the release",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Host platform, version from config.yaml / NODEJS_VERSION
    nodejs-dist

    # Specific release and platform
    nodejs-dist --node-version 20.9.0 --os windows --arch x64

    # Only print the URLs that would be used
    nodejs-dist --node-version 20.9.0 --os linux --arch arm64 --print-paths

    # Hash-only verification (checksum list signature NOT checked)
    nodejs-dist --skip-signature

    # Trust only the armored keys listed in the key list, never a keyserver
    nodejs-dist --no-keyserver
        """,
    )

    parser.add_argument(
        "--node-version",
        help="Node.js version, e.g. 20.9.0 (default: from config / NODEJS_VERSION)",
    )

    parser.add_argument(
        "--os",
        dest="os_type",
        help="Operating system: windows, macos or linux (default: host)",
    )

    parser.add_argument(
        "--arch",
        help="Architecture: arm64, armv7, x86 or x86_64 (default: host)",
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for the archive and checksum list; emptied before download "
        "(default: from config / NODEJS_DIST_OUTPUT_DIR)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.yaml file (default: src/config/config.yaml)",
    )

    parser.add_argument(
        "--archive-max-bytes",
        type=int,
        help="Maximum archive size in bytes",
    )

    parser.add_argument(
        "--shasums-max-bytes",
        type=int,
        help="Maximum checksum list size in bytes",
    )

    parser.add_argument(
        "--skip-signature",
        action="store_true",
        help="Do not verify the checksum list signature (reduced security)",
    )

    parser.add_argument(
        "--no-keyserver",
        action="store_true",
        help="Do not fetch listed fingerprints from the keyserver; only armored key files are used",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from config, INFO)",
    )

    parser.add_argument(
        "--print-paths",
        action="store_true",
        help="Print the resolved URLs and destination, then exit without downloading",
    )

    return parser.parse_args(argv)


def build_overrides(args: argparse.Namespace) -> dict:
    """Translate CLI flags into config overrides (unset flags are omitted)."""
    overrides: dict = {}
    if args.node_version:
        overrides["node_version"] = args.node_version
    if args.output_dir:
        overrides["output_directory"] = str(args.output_dir)

    download = {}
    if args.archive_max_bytes is not None:
        download["archive_max_bytes"] = args.archive_max_bytes
    if args.shasums_max_bytes is not None:
        download["shasums_max_bytes"] = args.shasums_max_bytes
    if download:
        overrides["download"] = download

    verification = {}
    if args.skip_signature:
        verification["require_signature"] = False
    if args.no_keyserver:
        verification["keyserver"] = None
    if verification:
        overrides["verification"] = verification

    logging_overrides = {}
    if args.log_level:
        logging_overrides["level"] = args.log_level
    if args.json_logs:
        logging_overrides["json"] = True
    if logging_overrides:
        overrides["logging"] = logging_overrides

    return overrides


def resolve_operating_system(args: argparse.Namespace) -> OperatingSystem:
    return OperatingSystem.parse(
        args.os_type or platform.system(),
        args.arch or platform.machine(),
    )


def _setup_logging(run_id: str, config: NodeDistConfig | None, args: argparse.Namespace) -> None:
    level_name = (config.log_level if config else None) or args.log_level or "INFO"
    setup_logging(
        stage="nodejs_dist",
        run_id=run_id,
        log_dir=Path(config.log_dir) if config and config.log_dir else None,
        json_format=(config.json_logs if config else False) or args.json_logs,
        console_level=getattr(logging, level_name),
    )


def main(argv: list[str] | None = None) -> int:
    global logger

    load_dotenv(find_dotenv(usecwd=True))
    args = parse_args(argv)

    run_id = generate_run_id()
    _setup_logging(run_id, None, args)
    logger = logging.getLogger(__name__)

    try:
        config = load_config(config_path=args.config, overrides=build_overrides(args))
        operating_system = resolve_operating_system(args)
    except (ValueError, FileNotFoundError) as e:
        logger.error(f"Configuration error: {e}", extra={"error": str(e)})
        return EXIT_USAGE
    except UnsupportedPlatformError as e:
        log_exception(logger, e, "Unsupported platform", include_traceback=False)
        return EXIT_USAGE

    _setup_logging(run_id, config, args)

    output_directory = Path(config.output_directory)

    if args.print_paths:
        try:
            paths = resolve_nodejs_paths(
                config.node_version, operating_system, config.dist_base_url
            )
        except UnsupportedPlatformError as e:
            log_exception(logger, e, "Unsupported platform", include_traceback=False)
            return EXIT_USAGE
        print(paths.download_url)
        print(paths.shasums_url)
        print(output_directory / paths.download_file_name)
        return EXIT_SUCCESS

    log_task_startup(
        logger,
        "Node.js binary distribution download",
        {"Platform": str(operating_system), **config.to_settings()},
    )

    try:
        outcome = download_and_verify(
            operating_system,
            config.node_version,
            output_directory,
            config,
            run_id=run_id,
        )
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, shutting down...")
        return 130

    if not outcome.success:
        log_exception(
            logger,
            outcome.error,
            f"Node.js download failed in step {outcome.failed_step}",
            include_traceback=False,
            failed_step=outcome.failed_step,
        )
        return EXIT_FAILURE

    print(outcome.archive_path)
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
