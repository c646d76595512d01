from __future__ import annotations

import argparse
import logging
import os
import sys
import uuid

import uvicorn

from judgehub.api.http_app import build_app
from judgehub.logging_setup import configure_logging
from judgehub.roles import SUPPORTED_ROLES, RuntimeRole, validate_role
from judgehub.services.bootstrap import RuntimeContainer, build_runtime_container

API_PORT = 3500
WORKER_PORT = 3600


def _default_port(role: RuntimeRole) -> int:
    return WORKER_PORT if role.runs_judge else API_PORT


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Contest platform runtime entrypoint")
    parser.add_argument("--role", required=True, help=f"Runtime role ({', '.join(SUPPORTED_ROLES)})")
    parser.add_argument("--host", default=os.getenv("APP_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL"))
    parser.add_argument(
        "--dry-run-startup",
        action="store_true",
        help="Build the runtime wiring, log it and exit",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable code reload (dev mode)",
    )
    return parser.parse_args(argv)


def describe_container(container: RuntimeContainer) -> str:
    """One-line summary of which implementations were wired."""
    return (
        f"repository={type(container.repository).__name__} "
        f"judge={type(container.judge).__name__} "
        f"translator={type(container.translator).__name__} "
        f"judge_loop={'on' if container.judge_loop is not None else 'off'}"
    )


def _build_app_for(*, role: RuntimeRole, run_id: str, container: RuntimeContainer) -> object:
    return build_app(
        role=role.name,
        run_id=run_id,
        judge_loop=container.judge_loop,
        api_deps=container.api_deps,
        on_startup=container.on_startup,
        on_shutdown=container.on_shutdown,
    )


def create_runtime_app() -> object:
    role = validate_role(os.getenv("APP_ROLE", "api"))
    configure_logging(os.getenv("LOG_LEVEL"))
    return _build_app_for(role=role, run_id=str(uuid.uuid4()), container=build_runtime_container(role))


def run(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        role = validate_role(args.role)
    except ValueError as exc:
        sys.stderr.write(f"ERROR: {exc}\n")
        sys.stderr.write(f"Try one of: {', '.join(SUPPORTED_ROLES)}\n")
        return 2

    configure_logging(args.log_level)
    run_id = str(uuid.uuid4())
    logger = logging.getLogger("runtime")
    log_extra = {"role": role.name, "service": role.name, "run_id": run_id}

    # Building the container never touches the network; pools open on app startup.
    container = build_runtime_container(role)
    logger.info("runtime initialized", extra={**log_extra, "detail": describe_container(container)})

    if args.dry_run_startup:
        logger.info("dry-run startup complete", extra=log_extra)
        return 0

    port = args.port if args.port is not None else _default_port(role)
    if args.reload:
        os.environ["APP_ROLE"] = role.name
        if args.log_level:
            os.environ["LOG_LEVEL"] = args.log_level
        uvicorn.run(
            "judgehub.main:create_runtime_app",
            host=args.host,
            port=port,
            log_level="warning",
            reload=True,
            factory=True,
        )
    else:
        app = _build_app_for(role=role, run_id=run_id, container=container)
        uvicorn.run(app, host=args.host, port=port, log_level="warning")
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
