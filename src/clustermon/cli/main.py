"""
Command-line interface for clustermon.

Subcommands:
- watch:   stream realtime metrics from the configured endpoint, merge them
           into a running aggregate and print a host table per sample
- local:   print a one-shot psutil snapshot of this node
- timings: summarize latency samples (integer nanoseconds, one per line)
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

import aiohttp

from ..aggregation import ClusterMetricsAggregator
from ..collectors import LocalMetricsCollector
from ..config import get_config, set_config_path
from ..config.validators import LOG_LEVELS, validate_metric_types
from ..models.config import AppConfig
from ..models.options import MetricsOptions
from ..models.realtime import RealtimeMetrics
from ..reporting import hosts_frame, timings_frame
from ..stats import TimeDurations
from ..streaming import MetricsClient
from ..validation import (
    MetricsRequestError,
    StreamError,
    ValidationError,
    handle_cli_error,
    validate_endpoint,
    validate_positive_float,
    validate_positive_integer,
    validate_string_list,
)

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stdout,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clustermon",
        description="Stream, aggregate and summarize cluster metrics.",
    )
    parser.add_argument("-c", "--config", type=Path, help="Path to config.toml (default: conf/config.toml)")
    parser.add_argument("--log-level", choices=LOG_LEVELS, type=str.upper,
                        help="Override [logging] level from the config")
    sub = parser.add_subparsers(dest="command", required=True)

    watch = sub.add_parser("watch", help="Stream realtime metrics from the endpoint")
    watch.add_argument("-e", "--endpoint", help="host[:port], overrides [client] endpoint")
    watch.add_argument("--secure", action="store_true", default=None, help="Use https")
    watch.add_argument("-t", "--types", help="Comma-separated metric types, e.g. 'cpu,mem'")
    watch.add_argument("-n", type=int, dest="n", help="Number of samples, 0 for endless")
    watch.add_argument("-i", "--interval", type=float, help="Seconds between samples")
    watch.add_argument("--hosts", help="Comma-separated hosts to include")
    watch.add_argument("--by-host", action="store_true", default=None, help="Request a per-host breakdown")
    watch.add_argument("--by-disk", action="store_true", default=None, help="Request a per-disk breakdown")
    watch.add_argument("--timeout", type=float, help="Stop after this many seconds")

    local = sub.add_parser("local", help="Print a local psutil snapshot")
    local.add_argument("-t", "--types", default="cpu,mem,net,disk", help="Comma-separated metric types")
    local.add_argument("--interface", help="Network interface to report instead of all")
    local.add_argument("--by-disk", action="store_true", help="Include a per-disk breakdown")
    local.add_argument("--json", action="store_true", help="Print the wire JSON instead of a table")

    timings = sub.add_parser("timings", help="Summarize latency samples from a file")
    timings.add_argument("file", type=Path, help="File with one integer nanosecond sample per line")
    timings.add_argument("--json", action="store_true", help="Print the wire JSON instead of a table")
    return parser


def read_samples(path: Path) -> TimeDurations:
    """
    Read integer nanosecond samples, one per line.

    Blank lines and lines starting with '#' are skipped.

    Raises:
        ValidationError: If a line is not a non-negative integer
    """
    samples = TimeDurations()
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            text = line.strip()
            if not text or text.startswith("#"):
                continue
            samples.append(validate_positive_integer(
                text, min_value=0, field_name=f"{path.name}:{lineno}",
            ))
    return samples


def _load_app_config(args: argparse.Namespace) -> AppConfig:
    if args.config:
        set_config_path(args.config)
    try:
        return get_config()
    except FileNotFoundError:
        if args.config:
            raise
        logger.warning("No configuration file found, using built-in defaults")
        return AppConfig()


def _watch_options(args: argparse.Namespace, app_config: AppConfig) -> MetricsOptions:
    options = app_config.stream.to_options()
    if args.types is not None:
        options.types = validate_metric_types(args.types, field_name="--types")
    if args.n is not None:
        options.n = validate_positive_integer(args.n, min_value=0, field_name="-n")
    if args.interval is not None:
        options.interval = validate_positive_float(args.interval, field_name="--interval")
    if args.hosts is not None:
        options.hosts = validate_string_list(args.hosts, field_name="--hosts")
    if args.by_host is not None:
        options.by_host = args.by_host
    if args.by_disk is not None:
        options.by_disk = args.by_disk
    return options


async def watch(client: MetricsClient, options: MetricsOptions,
                aggregator: ClusterMetricsAggregator,
                timeout: Optional[float] = None) -> int:
    """
    Stream from ``client`` printing each sample, until the final frame.

    Every sample is merged into ``aggregator`` as it arrives, so the
    aggregate holds everything received even if the stream is cut short.

    Returns:
        Number of samples received
    """
    samples = 0

    async def on_sample(envelope: RealtimeMetrics) -> None:
        nonlocal samples
        samples += 1
        await aggregator.merge(envelope)
        print(f"--- sample {samples} ({len(envelope.hosts)} hosts) ---")
        print(hosts_frame(envelope))
        for error in envelope.errors:
            logger.warning(f"Server reported: {error}")

    await client.metrics(options, on_sample, timeout=timeout)
    return samples


async def _run_watch(args: argparse.Namespace, app_config: AppConfig) -> int:
    client_config = app_config.client
    endpoint = validate_endpoint(args.endpoint, field_name="--endpoint") if args.endpoint else client_config.endpoint
    secure = args.secure if args.secure is not None else client_config.secure
    options = _watch_options(args, app_config)

    task = asyncio.current_task()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, task.cancel)
    except NotImplementedError:
        logger.debug("Signal handlers not supported on this platform")

    logger.info(f"Watching {endpoint} (types: {options.types.names() or ['all']}, n: {options.n or 'endless'})")
    aggregator = ClusterMetricsAggregator()
    try:
        async with MetricsClient(endpoint, secure=secure, headers=client_config.headers(),
                                 request_timeout=client_config.request_timeout) as client:
            await watch(client, options, aggregator, timeout=args.timeout)
    except asyncio.CancelledError:
        logger.info("Watch interrupted")
        return 130
    except TimeoutError:
        logger.info(f"Watch stopped after {args.timeout}s with {aggregator.envelopes_merged} samples")
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except NotImplementedError:
            pass

    print("--- aggregate ---")
    print(hosts_frame(aggregator.snapshot()))
    return 0


def _run_local(args: argparse.Namespace) -> int:
    options = MetricsOptions(
        types=validate_metric_types(args.types, field_name="--types"),
        by_disk=args.by_disk,
    )
    snapshot = LocalMetricsCollector(interface=args.interface).collect(options)
    if args.json:
        print(snapshot.to_json(indent=2))
    else:
        print(hosts_frame(snapshot))
    for error in snapshot.errors:
        logger.warning(f"Collection error: {error}")
    return 0


def _run_timings(args: argparse.Namespace) -> int:
    samples = read_samples(args.file)
    summary = samples.measure()
    logger.info(f"Summarized {len(samples)} samples from {args.file}")
    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print(timings_frame({args.file.name: summary}))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI with ``argv`` and return the process exit code.

    Configuration is only loaded for ``watch``; ``local`` and ``timings``
    work without a config file.
    """
    args = build_parser().parse_args(argv)
    _setup_logging(args.log_level or "INFO")

    try:
        if args.command == "timings":
            return _run_timings(args)
        if args.command == "local":
            return _run_local(args)

        app_config = _load_app_config(args)
        if not args.log_level:
            logging.getLogger().setLevel(app_config.logging.level)
        return asyncio.run(_run_watch(args, app_config))
    except ValidationError as e:
        handle_cli_error(e, f"{args.command} arguments", exit_code=2, logger=logger)
    except FileNotFoundError as e:
        handle_cli_error(e, f"{args.command} input", exit_code=1, logger=logger)
    except (MetricsRequestError, StreamError, aiohttp.ClientError) as e:
        handle_cli_error(e, "metrics stream", exit_code=1, include_traceback=True, logger=logger)
    except OSError as e:
        handle_cli_error(e, args.command, exit_code=1, include_traceback=True, logger=logger)
    return 1


def main_cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    main_cli()
