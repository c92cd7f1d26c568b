#!/usr/bin/env python3
"""
Main CLI Entry Point for govledger.

Drives a governance ledger kept in a JSON state file:
- Ledger initialization and membership management
- Proposal lifecycle (propose, vote, amend, extend, cancel, finalize)
- Vote delegation
- Parameter tuning, statistics and the event history
"""

import json
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, NoReturn

import click
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..config import GovernanceSettings
from ..core.clock import Clock, ManualClock, SystemClock
from ..core.events import GovernanceEventType
from ..core.state_store import StateStoreError, load_ledger, save_ledger
from ..datastructures.governance_errors import LedgerResult
from ..datastructures.governance_ledger import GovernanceLedger
from ..datastructures.governance_types import ProposalStatus, ProposalView

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

STATUS_STYLES = {
    ProposalStatus.PENDING: "[yellow]Pending[/yellow]",
    ProposalStatus.ACCEPTED: "[green]Accepted[/green]",
    ProposalStatus.REJECTED: "[red]Rejected[/red]",
    ProposalStatus.CANCELLED: "[dim]Cancelled[/dim]",
}


def _format_time(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, UTC).strftime("%Y-%m-%d %H:%M:%S UTC")


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]Error: {escape(message)}[/red]")
    sys.exit(1)


def _clock(ctx: click.Context) -> Clock:
    at = ctx.obj["at"]
    return ManualClock(current=at) if at is not None else SystemClock()


def _load(ctx: click.Context) -> GovernanceLedger:
    try:
        return load_ledger(ctx.obj["state"], clock=_clock(ctx))
    except StateStoreError as e:
        _fail(str(e))


def _caller(ctx: click.Context) -> str:
    caller = ctx.obj["caller"]
    if not caller:
        raise click.UsageError("This command needs a caller identity; pass --as")
    return caller


def _check(result: LedgerResult[Any]) -> Any:
    """Return the result value or print the error code and exit 1."""
    error = result.error
    if result.success or error is None:
        return result.value
    err_console.print(
        f"[red]Error: {error.code.value}[/red]"
        + (f" [dim]{escape(error.message)}[/dim]" if error.message else "")
    )
    sys.exit(1)


def _commit(ctx: click.Context, ledger: GovernanceLedger) -> None:
    save_ledger(ledger, ctx.obj["state"])


def _print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def _proposal_table(views: list[ProposalView], title: str) -> Table:
    table = Table(title=title)

    table.add_column("ID", style="cyan", no_wrap=True, justify="right")
    table.add_column("Description", style="magenta")
    table.add_column("Proposer", style="green")
    table.add_column("Status", justify="center")
    table.add_column("For", justify="right")
    table.add_column("Against", justify="right")
    table.add_column("Deadline", style="blue")

    for view in views:
        table.add_row(
            str(view.proposal_id),
            escape(view.description),
            escape(view.proposer),
            STATUS_STYLES[view.status],
            str(view.for_votes),
            str(view.against_votes),
            _format_time(view.voting_deadline),
        )
    return table


def _view_to_dict(view: ProposalView) -> dict[str, Any]:
    return {
        "proposal_id": view.proposal_id,
        "description": view.description,
        "proposer": view.proposer,
        "created_at": view.created_at,
        "voting_deadline": view.voting_deadline,
        "status": view.status.value,
        "total_votes": view.total_votes,
        "for_votes": view.for_votes,
        "against_votes": view.against_votes,
        "time_remaining": view.time_remaining,
        "is_open": view.is_open,
    }


output_option = click.option(
    "--output",
    "-o",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--state",
    "-s",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Ledger state file (default: GOVLEDGER_STATE_FILE or govledger.json)",
)
@click.option(
    "--as",
    "caller",
    envvar="GOVLEDGER_CALLER",
    default=None,
    help="Identity of the member issuing the command",
)
@click.option(
    "--at",
    type=float,
    default=None,
    help="Evaluate the command at this epoch time instead of now",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    state: Path | None,
    caller: str | None,
    at: float | None,
):
    """
    govledger: single-organization governance ledger.

    Manage members, proposals, votes and delegations stored in a JSON state
    file. Mutating commands act on behalf of the identity given with --as.
    """
    settings = GovernanceSettings()
    settings.apply_logging(verbose=verbose)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose
    ctx.obj["state"] = state or settings.state_file
    ctx.obj["caller"] = caller
    ctx.obj["at"] = at


@cli.command()
@click.argument("owner")
@click.option("--name", "-n", default="governance", help="Organization name")
@click.option("--force", is_flag=True, help="Overwrite an existing state file")
@click.pass_context
def init(ctx: click.Context, owner: str, name: str, force: bool):
    """Create a new ledger owned by OWNER."""
    state: Path = ctx.obj["state"]
    if state.exists() and not force:
        _fail(f"{state} already exists (use --force to overwrite)")

    settings: GovernanceSettings = ctx.obj["settings"]
    try:
        ledger = GovernanceLedger(
            owner=owner,
            config=settings.to_governance_config(name),
            clock=_clock(ctx),
        )
    except ValueError as e:
        _fail(str(e))

    _commit(ctx, ledger)
    console.print(
        f"[green]Created ledger '{escape(name)}' owned by {escape(owner)} in {escape(str(state))}[/green]"
    )


@cli.group()
def member():
    """Manage membership."""


@member.command("add")
@click.argument("identity")
@click.pass_context
def member_add(ctx: click.Context, identity: str):
    """Admit IDENTITY as a member (owner only)."""
    ledger = _load(ctx)
    _check(ledger.add_member(_caller(ctx), identity))
    _commit(ctx, ledger)
    console.print(f"[green]Added member {escape(identity)}[/green]")


@member.command("remove")
@click.argument("identity")
@click.pass_context
def member_remove(ctx: click.Context, identity: str):
    """Remove member IDENTITY (owner only)."""
    ledger = _load(ctx)
    _check(ledger.remove_member(_caller(ctx), identity))
    _commit(ctx, ledger)
    console.print(f"[green]Removed member {escape(identity)}[/green]")


@member.command("list")
@output_option
@click.pass_context
def member_list(ctx: click.Context, output: str):
    """List members and their delegates."""
    ledger = _load(ctx)
    members = ledger.members()

    if output == "json":
        _print_json(
            [
                {
                    "member": m,
                    "owner": m == ledger.owner,
                    "delegate": ledger.delegate_of(m),
                }
                for m in members
            ]
        )
        return

    table = Table(title=f"Members of {escape(ledger.name)} ({len(members)})")
    table.add_column("Member", style="cyan")
    table.add_column("Role", justify="center")
    table.add_column("Delegate", style="green")
    for m in members:
        table.add_row(
            escape(m),
            "[bold]owner[/bold]" if m == ledger.owner else "member",
            escape(ledger.delegate_of(m) or "-"),
        )
    console.print(table)


@cli.command("transfer-ownership")
@click.argument("new_owner")
@click.pass_context
def transfer_ownership(ctx: click.Context, new_owner: str):
    """Hand ownership to NEW_OWNER (owner only)."""
    ledger = _load(ctx)
    _check(ledger.transfer_ownership(_caller(ctx), new_owner))
    _commit(ctx, ledger)
    console.print(f"[green]Ownership transferred to {escape(new_owner)}[/green]")


@cli.command()
@click.argument("description")
@click.option("--duration", "-d", type=float, default=None, help="Voting period in seconds")
@click.pass_context
def propose(ctx: click.Context, description: str, duration: float | None):
    """Open a proposal for voting."""
    ledger = _load(ctx)
    proposal_id = _check(ledger.create_proposal(_caller(ctx), description, duration))
    _commit(ctx, ledger)
    console.print(f"[green]Created proposal {proposal_id}[/green]")


@cli.command()
@click.argument("proposal_id", type=int)
@click.argument("choice")
@click.pass_context
def vote(ctx: click.Context, proposal_id: int, choice: str):
    """Vote CHOICE (for/against) on a proposal."""
    ledger = _load(ctx)
    voter = _check(ledger.cast_vote(_caller(ctx), proposal_id, choice))
    _commit(ctx, ledger)
    console.print(
        f"[green]Recorded {escape(choice.lower())} vote on proposal "
        f"{proposal_id} for {escape(voter)}[/green]"
    )


@cli.command()
@click.argument("proposal_id", type=int)
@click.pass_context
def withdraw(ctx: click.Context, proposal_id: int):
    """Withdraw your vote from a proposal."""
    ledger = _load(ctx)
    voter = _check(ledger.withdraw_vote(_caller(ctx), proposal_id))
    _commit(ctx, ledger)
    console.print(
        f"[green]Withdrew vote of {escape(voter)} on proposal {proposal_id}[/green]"
    )


@cli.command("delegate")
@click.argument("delegate")
@click.pass_context
def delegate_vote(ctx: click.Context, delegate: str):
    """Delegate your vote to DELEGATE."""
    ledger = _load(ctx)
    _check(ledger.delegate_vote(_caller(ctx), delegate))
    _commit(ctx, ledger)
    console.print(f"[green]Delegated vote to {escape(delegate)}[/green]")


@cli.command("revoke-delegation")
@click.pass_context
def revoke_delegation(ctx: click.Context):
    """Revoke your current delegation, if any."""
    ledger = _load(ctx)
    previous = _check(ledger.revoke_delegation(_caller(ctx)))
    _commit(ctx, ledger)
    if previous is None:
        console.print("[yellow]No delegation to revoke[/yellow]")
    else:
        console.print(f"[green]Revoked delegation to {escape(previous)}[/green]")


@cli.command()
@click.argument("proposal_id", type=int)
@click.option("--description", default=None, help="New description")
@click.option("--duration", "-d", type=float, default=None, help="Restart voting for this many seconds")
@click.pass_context
def amend(
    ctx: click.Context,
    proposal_id: int,
    description: str | None,
    duration: float | None,
):
    """Amend a pending proposal."""
    ledger = _load(ctx)
    _check(ledger.amend_proposal(_caller(ctx), proposal_id, description, duration))
    _commit(ctx, ledger)
    console.print(f"[green]Amended proposal {proposal_id}[/green]")


@cli.command()
@click.argument("proposal_id", type=int)
@click.option("--deadline", type=float, default=None, help="New deadline (epoch seconds)")
@click.option("--by", "by_seconds", type=float, default=None, help="Push the deadline back by this many seconds")
@click.pass_context
def extend(
    ctx: click.Context,
    proposal_id: int,
    deadline: float | None,
    by_seconds: float | None,
):
    """Extend a proposal's voting period (owner only)."""
    if (deadline is None) == (by_seconds is None):
        raise click.UsageError("Pass exactly one of --deadline or --by")

    ledger = _load(ctx)
    if by_seconds is not None:
        view = _check(ledger.get_proposal(proposal_id))
        deadline = view.voting_deadline + by_seconds

    _check(ledger.extend_voting_period(_caller(ctx), proposal_id, deadline))
    _commit(ctx, ledger)
    console.print(
        f"[green]Proposal {proposal_id} now closes at {_format_time(deadline)}[/green]"
    )


@cli.command()
@click.argument("proposal_id", type=int)
@click.pass_context
def cancel(ctx: click.Context, proposal_id: int):
    """Cancel a pending proposal (owner only)."""
    ledger = _load(ctx)
    _check(ledger.cancel_proposal(_caller(ctx), proposal_id))
    _commit(ctx, ledger)
    console.print(f"[green]Cancelled proposal {proposal_id}[/green]")


@cli.command()
@click.argument("proposal_id", type=int)
@click.pass_context
def finalize(ctx: click.Context, proposal_id: int):
    """Finalize a proposal whose voting period has ended (owner only)."""
    ledger = _load(ctx)
    status = _check(ledger.finalize_proposal(_caller(ctx), proposal_id))
    _commit(ctx, ledger)
    console.print(f"Proposal {proposal_id}: {STATUS_STYLES[status]}")


@cli.command("batch-finalize")
@click.argument("proposal_ids", type=int, nargs=-1, required=True)
@output_option
@click.pass_context
def batch_finalize(ctx: click.Context, proposal_ids: tuple[int, ...], output: str):
    """Finalize several proposals, skipping ineligible ones (owner only)."""
    ledger = _load(ctx)
    outcomes = _check(ledger.batch_finalize(_caller(ctx), list(proposal_ids)))
    _commit(ctx, ledger)

    if output == "json":
        _print_json(
            [
                {
                    "proposal_id": o.proposal_id,
                    "status": o.status.value if o.status else None,
                    "skipped_reason": o.skipped_reason.value if o.skipped_reason else None,
                }
                for o in outcomes
            ]
        )
        return

    table = Table(title="Batch Finalize")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Outcome", justify="center")
    for o in outcomes:
        outcome = (
            f"[dim]skipped: {o.skipped_reason.value}[/dim]"
            if o.skipped
            else STATUS_STYLES[o.status]
        )
        table.add_row(str(o.proposal_id), outcome)
    console.print(table)


@cli.command()
@click.argument("percent", type=int)
@click.pass_context
def quorum(ctx: click.Context, percent: int):
    """Set the quorum percentage (owner only)."""
    ledger = _load(ctx)
    _check(ledger.adjust_quorum_percent(_caller(ctx), percent))
    _commit(ctx, ledger)
    console.print(f"[green]Quorum set to {percent}%[/green]")


@cli.command()
@click.argument("seconds", type=float)
@click.pass_context
def period(ctx: click.Context, seconds: float):
    """Set the default voting period in seconds (owner only)."""
    ledger = _load(ctx)
    _check(ledger.update_voting_period(_caller(ctx), seconds))
    _commit(ctx, ledger)
    console.print(f"[green]Default voting period set to {seconds:g}s[/green]")


@cli.command()
@click.argument("proposal_id", type=int)
@output_option
@click.pass_context
def show(ctx: click.Context, proposal_id: int, output: str):
    """Show one proposal with its tally and votes."""
    ledger = _load(ctx)
    view = _check(ledger.get_proposal(proposal_id))
    tally = _check(ledger.calculate_voting_result(proposal_id))
    votes = _check(ledger.get_proposal_votes(proposal_id))

    if output == "json":
        data = _view_to_dict(view)
        data["participation_percent"] = tally.participation_percent
        data["quorum_reached"] = tally.quorum_reached
        data["votes"] = [v.to_dict() for v in votes]
        _print_json(data)
        return

    lines = [
        f"[bold]{escape(view.description)}[/bold]",
        f"Proposer: {escape(view.proposer)}",
        f"Status: {STATUS_STYLES[view.status]}",
        f"Created: {_format_time(view.created_at)}",
        f"Deadline: {_format_time(view.voting_deadline)}"
        + (f" ({view.time_remaining:.0f}s left)" if view.is_open else ""),
        f"Votes: {view.for_votes} for / {view.against_votes} against "
        f"({tally.participation_percent}% of {tally.member_count} members, "
        f"quorum {tally.quorum_percent}%"
        + (" reached)" if tally.quorum_reached else " not reached)"),
    ]
    for v in votes:
        by = f" (cast by {escape(v.cast_by)})" if v.is_delegated else ""
        lines.append(f"  {escape(v.voter)}: {v.choice.value}{by}")

    console.print(Panel("\n".join(lines), title=f"Proposal {proposal_id}"))


@cli.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in ProposalStatus]),
    default=None,
    help="Only show proposals with this status",
)
@output_option
@click.pass_context
def list_proposals(ctx: click.Context, status: str | None, output: str):
    """List proposals."""
    ledger = _load(ctx)
    wanted = ProposalStatus(status) if status else None
    views = [
        _check(ledger.get_proposal(pid)) for pid in ledger.list_proposals(wanted)
    ]

    if output == "json":
        _print_json([_view_to_dict(v) for v in views])
        return

    if not views:
        console.print("[yellow]No proposals[/yellow]")
        return
    console.print(_proposal_table(views, f"Proposals of {escape(ledger.name)}"))


@cli.command()
@output_option
@click.pass_context
def stats(ctx: click.Context, output: str):
    """Show ledger statistics."""
    ledger = _load(ctx)
    statistics = ledger.get_ledger_statistics()

    if output == "json":
        _print_json(statistics)
        return

    table = Table(title=f"Ledger {escape(ledger.name)}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    for key, value in statistics.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                table.add_row(f"{key}.{sub_key}", escape(str(sub_value)))
        else:
            table.add_row(key, escape(str(value)))
    console.print(table)


@cli.command()
@click.option(
    "--type",
    "event_type",
    type=click.Choice([t.value for t in GovernanceEventType]),
    default=None,
    help="Only show events of this type",
)
@click.option("--limit", "-n", type=int, default=20, help="Show at most this many recent events")
@output_option
@click.pass_context
def events(ctx: click.Context, event_type: str | None, limit: int, output: str):
    """Show recent governance events."""
    ledger = _load(ctx)
    history = ledger.events.history(
        GovernanceEventType(event_type) if event_type else None
    )
    if limit > 0:
        history = history[-limit:]

    if output == "json":
        _print_json([e.to_dict() for e in history])
        return

    table = Table(title="Governance Events")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Time", style="blue")
    table.add_column("Event", style="magenta")
    table.add_column("Details")
    for event in history:
        details = ", ".join(f"{k}={v}" for k, v in event.payload.items())
        table.add_row(
            str(event.sequence),
            _format_time(event.timestamp),
            event.event_type.value,
            escape(details),
        )
    console.print(table)


def main():
    """Main CLI entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as e:
        if "--verbose" in sys.argv or "-v" in sys.argv:
            logger.exception(f"Unexpected error: {e}")
        err_console.print(f"[red]Unexpected error: {escape(str(e))}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
