"""
CLI Application - Command line entry point for imssync.

Usage:
    # List the issues of the mapped project
    imssync --mapping mapping.json list

    # Show one issue
    imssync find GAME-12

    # Events since a timestamp, one JSON object per line
    imssync events GAME-12 --since 2024-05-01T00:00:00+00:00

    # Preview, then apply, a change
    imssync update GAME-12 --state IN_PROGRESS --estimation M
    imssync update GAME-12 --state IN_PROGRESS --estimation M --execute

Environment Variables:
    JIRA_URL, JIRA_EMAIL, JIRA_API_TOKEN, JIRA_TIMEOUT, IMSSYNC_MAPPING_FILE
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional
from uuid import UUID

from ..adapters.config import EnvironmentConfigProvider, load_mapping_configuration
from ..adapters.jira import JiraConnector
from ..adapters.memory import InMemoryEventLog
from ..application.commands import (
    AddCommentCommand,
    ChangeIssueFieldCommand,
    CommandBatch,
    CreateIssueCommand,
)
from ..application.sync import EventPoller
from ..core.domain.entities import CreateIssueInput
from ..core.domain.enums import IssueField, IssuePriority, IssueState, TShirtSizeEstimation
from ..core.domain.lookup import IssueNotFound
from ..core.domain.mapping import IssueMappingConfiguration
from ..core.exceptions import ImsConnectorError
from ..core.ports.ims_connector import ImsConnectorPort
from .exit_codes import ExitCode
from .output import Console


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imssync",
        description="Synchronize Scrum game issues with an issue management system",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--env-file", type=Path, help="Path to .env file")
    parser.add_argument("--mapping", help="Path to the JSON mapping configuration")
    parser.add_argument("--jira-url", help="Override JIRA_URL")
    parser.add_argument(
        "--execute",
        action="store_true",
        help="Actually make changes (default is dry-run)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List issues of the mapped project")

    find = commands.add_parser("find", help="Show one issue")
    find.add_argument("issue")

    events = commands.add_parser("events", help="Print events of an issue since a timestamp")
    events.add_argument("issue")
    events.add_argument("--since", type=_timestamp, required=True, help="ISO-8601 timestamp")

    update = commands.add_parser("update", help="Change fields of an issue")
    update.add_argument("issue")
    update.add_argument("--title")
    update.add_argument("--description")
    update.add_argument("--state", type=_enum(IssueState))
    update.add_argument("--priority", type=_enum(IssuePriority))
    update.add_argument("--type", dest="type_name")
    sprint = update.add_mutually_exclusive_group()
    sprint.add_argument("--sprint", type=int)
    sprint.add_argument("--backlog", action="store_true", help="Move to the backlog")
    update.add_argument("--estimation", type=_enum(TShirtSizeEstimation))
    update.add_argument("--assignee", type=UUID)

    comment = commands.add_parser("comment", help="Add a comment to an issue")
    comment.add_argument("issue")
    comment.add_argument("text")

    create = commands.add_parser("create", help="Create an issue")
    create.add_argument("--title", required=True)
    create.add_argument("--description", default="")
    create.add_argument("--type", dest="type_name")
    create.add_argument("--state", type=_enum(IssueState))
    create.add_argument("--priority", type=_enum(IssuePriority))
    create.add_argument("--estimation", type=_enum(TShirtSizeEstimation))
    create.add_argument("--sprint", type=int)
    create.add_argument("--assignee", type=UUID, action="append", default=[])
    create.add_argument("--reference", help="Idempotency key; retries return the same issue")

    poll = commands.add_parser("poll", help="Poll events of several issues once")
    poll.add_argument("issues", nargs="+")
    poll.add_argument("--since", type=_timestamp, required=True, help="ISO-8601 timestamp")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    console = Console()

    provider = EnvironmentConfigProvider(
        env_file=args.env_file,
        cli_overrides={
            "jira_url": args.jira_url,
            "mapping": args.mapping,
            "execute": args.execute or None,
            "verbose": args.verbose or None,
        },
    )
    errors = provider.validate()
    if errors:
        for error in errors:
            console.error(error)
        return ExitCode.CONFIG_ERROR

    app_config = provider.load()

    try:
        mapping_configuration = load_mapping_configuration(app_config.mapping_path)
    except ImsConnectorError as e:
        console.error(str(e))
        return ExitCode.from_exception(e)

    connector = JiraConnector(app_config.tracker)
    return run_command(args, connector, mapping_configuration, console)


def run_command(
    args: argparse.Namespace,
    connector: ImsConnectorPort,
    mapping_configuration: IssueMappingConfiguration,
    console: Console,
) -> int:
    """Run a parsed command against a connector."""
    logger = logging.getLogger("imssync")
    cfg = mapping_configuration

    try:
        if args.command == "list":
            console.issue_table(connector.list_issues(cfg.project_id, cfg))
            return ExitCode.SUCCESS

        if args.command == "find":
            lookup = connector.find_issue(args.issue, cfg)
            if isinstance(lookup, IssueNotFound):
                console.error(f"Issue {lookup.issue_id} not found")
                return ExitCode.NOT_FOUND
            console.issue(lookup.issue)
            return ExitCode.SUCCESS

        if args.command == "events":
            console.events(connector.get_events_for_issue(args.issue, args.since, cfg))
            return ExitCode.SUCCESS

        if args.command == "poll":
            poller = EventPoller(connector, cfg, InMemoryEventLog())
            for issue_id in args.issues:
                poller.track(issue_id, args.since)
            result = poller.poll()
            console.poll_result(result)
            return ExitCode.SUCCESS if result.success else ExitCode.ERROR

    except ImsConnectorError as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        console.error(str(e))
        return ExitCode.from_exception(e)

    dry_run = not args.execute
    if dry_run:
        console.dry_run_banner()

    batch = CommandBatch(stop_on_error=True)
    for command in _write_commands(args, connector, cfg, dry_run):
        batch.add(command)

    if not batch.commands:
        console.warning("Nothing to do")
        return ExitCode.SUCCESS

    results = batch.execute_all()
    for command, result in zip(batch.commands, results):
        console.command_result(command.name, result)

    failed = next((r for r in results if not r.success), None)
    if failed is not None:
        return ExitCode.from_exception(failed.exception) if failed.exception else ExitCode.ERROR

    last_issue = results[-1].data
    if last_issue is not None:
        console.issue(last_issue)
    return ExitCode.SUCCESS


def run() -> None:
    """Entry point for the imssync console script."""
    sys.exit(main())


# -------------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------------

def _write_commands(args, connector, cfg, dry_run: bool) -> list:
    if args.command == "comment":
        return [AddCommentCommand(connector, args.issue, args.text, cfg, dry_run=dry_run)]

    if args.command == "create":
        create_input = CreateIssueInput(
            title=args.title,
            description=args.description,
            type_name=args.type_name,
            state=args.state,
            priority=args.priority,
            estimation=args.estimation,
            sprint_number=args.sprint,
            assignee_ids=list(args.assignee),
            client_reference=args.reference,
        )
        return [CreateIssueCommand(connector, cfg.project_id, create_input, cfg, dry_run=dry_run)]

    changes = [
        (IssueField.TITLE, args.title),
        (IssueField.DESCRIPTION, args.description),
        (IssueField.TYPE, args.type_name),
        (IssueField.PRIORITY, args.priority),
        (IssueField.ESTIMATION, args.estimation),
        (IssueField.ASSIGNEE, args.assignee),
        (IssueField.SPRINT, args.sprint),
        (IssueField.STATE, args.state),
    ]
    commands = [
        ChangeIssueFieldCommand(connector, args.issue, field, value, cfg, dry_run=dry_run)
        for field, value in changes
        if value is not None
    ]
    if args.backlog:
        commands.append(
            ChangeIssueFieldCommand(connector, args.issue, IssueField.SPRINT, None, cfg, dry_run=dry_run)
        )
    return commands


def _enum(enum_cls):
    def parse(value: str):
        try:
            return enum_cls.from_string(value)
        except ValueError as e:
            raise argparse.ArgumentTypeError(str(e))
    parse.__name__ = enum_cls.__name__
    return parse


def _timestamp(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Not an ISO-8601 timestamp: {value!r}")


if __name__ == "__main__":
    run()
