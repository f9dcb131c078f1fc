# main.py
import argparse
import asyncio
import signal
import sys

from rich.console import Console

from acsdk.core.config import TrackingConfig
from acsdk.core.logging_config import configure_logging
from acsdk.core.managers.sinks import LoggingEventSink, QueueEventSink
from acsdk.core.models.job_event import JobEvent
from acsdk.core.settings import app_settings, logger
from acsdk.sdk import create_client_sdk

console = Console()

STYLES = {"success": "bold green", "fail": "bold red", "error": "yellow", "close": "dim"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="acsdk", description="Automation Cloud client tools")
    commands = parser.add_subparsers(dest="command", required=True)

    track = commands.add_parser("track", help="follow a job's events until it finishes")
    track.add_argument("job_id")
    track.add_argument("--token", help="API token (default: $AC_TOKEN)")
    track.add_argument("--api-url", help=f"API base URL (default: {app_settings.AC_API_URL})")
    track.add_argument("--sse", action="store_true", help="use server-sent events instead of polling")
    track.add_argument("--interval", type=float, help="base poll interval in seconds")
    track.add_argument("--verbose", action="store_true", help="log every event")
    return parser


async def track(args: argparse.Namespace) -> int:
    token = args.token or (app_settings.AC_TOKEN.get_secret_value() if app_settings.AC_TOKEN else None)
    if not token:
        console.print("[red]No token: pass --token or set AC_TOKEN[/red]")
        return 2

    defaults = TrackingConfig.from_app_settings(app_settings)
    config = defaults.model_copy(
        update={
            "use_push_channel": args.sse or defaults.use_push_channel,
            "poll_interval": args.interval or defaults.poll_interval,
        }
    )

    exit_code = 1
    async with create_client_sdk(token, api_url=args.api_url, config=config) as client:
        events = QueueEventSink()
        sink = LoggingEventSink(events) if args.verbose else events
        handle = client.track_job(args.job_id, sink)

        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, handle.stop)
        except NotImplementedError:  # pragma: no cover - Windows event loops
            pass

        async for event in events:
            style = STYLES.get(event.kind, "")
            payload = event.payload
            if isinstance(payload, JobEvent):
                extra = payload.model_dump(exclude={"object", "name", "createdAt"})
                console.print(f"[{style}]{event.name}[/]" if style else event.name, payload.createdAt, extra or "")
            elif isinstance(payload, Exception):
                console.print(f"[{style}]error[/]", f"{type(payload).__name__}: {payload}")
            else:
                console.print(f"[{style}]{event.name}[/]")
            if event.kind == "success":
                exit_code = 0

        await handle.wait()
    logger.debug(f"[cli] tracking finished job_id={args.job_id} exit_code={exit_code}")
    return exit_code


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(app_settings.AC_LOG_LEVEL)
    if args.verbose:
        app_settings.print_settings(logger)
    return asyncio.run(track(args))


if __name__ == "__main__":
    sys.exit(main())
