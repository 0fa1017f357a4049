"""Main module entrypoint for local runtime execution.

This module validates startup configuration, configures logging and either
launches the FastAPI service or runs one period administration command.
"""

import argparse
import json
import logging
import sys
from uuid import UUID

import uvicorn

from app.api.routers import api_serialize_transition_result
from app.bootstrap import bootstrap_create_application, bootstrap_create_services
from app.config import AppSettings, config_load_settings
from app.domain import ActorContext, ActorRole, LedgerError

logger = logging.getLogger(__name__)

CLI_ACTOR_ID = "cli"


def main(argv: list[str] | None = None) -> None:
    """Run selected runtime command with validated startup configuration.

    Args:
        argv: Optional argument list; defaults to `sys.argv[1:]`.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with status 1 when a ledger command is rejected.
    """

    argument_parser = main_build_argument_parser()
    parsed_arguments = argument_parser.parse_args(argv)

    settings = config_load_settings()
    main_configure_logging(settings)

    if parsed_arguments.command == "api":
        application = bootstrap_create_application(settings)
        uvicorn.run(
            application,
            host=settings.application_host,
            port=settings.application_port,
            log_config=None,
        )
        return

    if parsed_arguments.command == "project-bootstrap" and not (
        parsed_arguments.project_id or parsed_arguments.name
    ):
        argument_parser.error("project-bootstrap requires --project-id or --name")
    if parsed_arguments.command == "period-close" and parsed_arguments.period_id is None:
        argument_parser.error("period-close requires --period-id")
    if parsed_arguments.command == "period-name" and (parsed_arguments.period_id is None or not parsed_arguments.name):
        argument_parser.error("period-name requires --period-id and --name")
    if parsed_arguments.command == "period-reset" and parsed_arguments.project_id is None:
        argument_parser.error("period-reset requires --project-id")

    try:
        payload = main_run_ledger_command(settings, parsed_arguments)
    except LedgerError as error:
        logger.error("%s rejected: %s", parsed_arguments.command, error)
        print(json.dumps({"status": "error", "code": error.error_code, "message": str(error)}), file=sys.stderr)
        raise SystemExit(1) from error

    print(json.dumps(payload, indent=2))


def main_build_argument_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Parser for runtime commands.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    argument_parser = argparse.ArgumentParser(description="Partner period ledger runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "project-bootstrap", "period-close", "period-name", "period-reset"),
        help="Runtime command: `api` starts server, `project-bootstrap` creates the opening period, "
        "`period-close` closes one active period, `period-name` activates a pending period, "
        "`period-reset` hard-resets a project's periods",
        type=str,
    )
    argument_parser.add_argument("--project-id", dest="project_id", type=UUID, help="Target project id")
    argument_parser.add_argument(
        "--period-id",
        dest="period_id",
        type=UUID,
        help="Target period id for `period-close` and `period-name`",
    )
    argument_parser.add_argument(
        "--name",
        dest="name",
        type=str,
        help="Project name for `project-bootstrap` (creates the project when --project-id is omitted); "
        "period name for `period-name`",
    )
    argument_parser.add_argument("--description", dest="description", type=str, help="Optional project description")
    return argument_parser


def main_run_ledger_command(settings: AppSettings, parsed_arguments: argparse.Namespace) -> dict[str, object]:
    """Run one period administration command as the local ADMIN operator.

    Args:
        settings: Validated application settings.
        parsed_arguments: Parsed CLI arguments.

    Returns:
        dict[str, object]: JSON-serializable command result.

    Raises:
        LedgerError: Raised when the ledger rejects the command.
    """

    services = bootstrap_create_services(settings)
    actor = ActorContext(actor_id=CLI_ACTOR_ID, role=ActorRole.ADMIN)

    if parsed_arguments.command == "project-bootstrap":
        project_id = parsed_arguments.project_id
        if project_id is None:
            project = services.project_repository.db_project_create(
                name=parsed_arguments.name,
                description=parsed_arguments.description,
            )
            project_id = project.project_id
            logger.info("project created project_id=%s", project_id)
        result = services.period_workflow.job_period_bootstrap(project_id=project_id, actor=actor)
        return {"project_id": str(project_id), **api_serialize_transition_result(result)}

    if parsed_arguments.command == "period-close":
        result = services.period_workflow.job_period_close(period_id=parsed_arguments.period_id, actor=actor)
        return api_serialize_transition_result(result)

    if parsed_arguments.command == "period-name":
        result = services.period_workflow.job_period_name(
            period_id=parsed_arguments.period_id,
            name=parsed_arguments.name,
            actor=actor,
        )
        return api_serialize_transition_result(result)

    result = services.period_workflow.job_period_hard_reset(project_id=parsed_arguments.project_id, actor=actor)
    return api_serialize_transition_result(result)


def main_configure_logging(settings: AppSettings) -> None:
    """Configure root logging once from settings.

    Args:
        settings: Validated application settings.

    Returns:
        None: Configures logging handlers as side effect.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    main()
