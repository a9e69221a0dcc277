"""
CLI entry point: btl bars | shell | stats | journal | export | clear | account | health.

Every command loads config from --config (default config.yaml, built-in
defaults when that file is absent) and reads the journal from the path it
names. ``shell`` is the interactive replay; everything else is one-shot.
"""

import logging
import os
import shlex
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
from dotenv import load_dotenv

from config import AppConfig, config_from_dict, load_config

load_dotenv()

logger = logging.getLogger("btl")

DEFAULT_CONFIG_PATH = "config.yaml"


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s  %(message)s",
        stream=sys.stderr,
    )


def _load_app_config(config_path: str) -> AppConfig:
    if config_path == DEFAULT_CONFIG_PATH and not Path(config_path).exists():
        logger.info("No %s found, using built-in defaults", config_path)
        return config_from_dict({})
    return load_config(config_path)


@click.group()
@click.option("--config", "config_path", default=DEFAULT_CONFIG_PATH, help="Path to config file.")
@click.pass_context
def cli(ctx: click.Context, config_path: str) -> None:
    """backtestlab: deterministic market replay for practising trade execution."""
    _setup_logging()
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ---------- btl bars ----------


@cli.command()
@click.option("--seed", default=None, help="Session seed (default: config session.seed).")
@click.option("--count", default=None, type=int, help="Number of bars to generate.")
@click.option("--last", "last_n", default=None, type=int, help="Only print the last N bars.")
@click.pass_context
def bars(ctx: click.Context, seed: str | None, count: int | None, last_n: int | None) -> None:
    """Print the bars a seed produces."""
    cfg = _load_app_config(ctx.obj["config_path"])
    from cli.output import format_bars
    from replay_core.bars import generate_bars

    seed = seed or cfg.session.seed
    count = cfg.session.bar_count if count is None else count
    if count < 0:
        raise click.BadParameter("must be >= 0", param_hint="--count")
    series = generate_bars(cfg.session.seed_prefix + seed, count)
    start = 0
    if last_n is not None and last_n < len(series):
        start = len(series) - last_n
    click.echo(f"=== Bars: {seed} ({len(series)}) ===")
    click.echo(format_bars(series[start:], start=start))


# ---------- btl shell ----------


@dataclass
class _ShellState:
    controller: Any
    scheduler: Any
    sizing: Any
    events: Any = None
    default_risk: float = 25.0
    running: bool = True


_ALIASES = {"n": "next", "p": "prev", "q": "quit", "exit": "quit"}


@click.group(name="replay", add_help_option=False)
def _shell_commands() -> None:
    """Commands available inside ``btl shell``."""


def _echo_step(state: _ShellState, result) -> None:
    from cli.output import format_hud

    if not result.moved:
        click.echo("(cursor did not move)")
    click.echo(format_hud(state.controller.session, cash_per_r=_cash_per_r(state)))


def _cash_per_r(state: _ShellState) -> float | None:
    pos = state.controller.session.position
    if pos is None:
        return None
    return state.sizing.cash_per_r(pos.risk_fraction)


@_shell_commands.command(name="next")
@click.argument("count", default=1, type=int)
@click.pass_obj
def _next(state: _ShellState, count: int) -> None:
    _echo_step(state, state.controller.step_by(count))


@_shell_commands.command(name="prev")
@click.argument("count", default=1, type=int)
@click.pass_obj
def _prev(state: _ShellState, count: int) -> None:
    _echo_step(state, state.controller.step_by(-count))


@_shell_commands.command(name="jump")
@click.argument("index", type=int)
@click.pass_obj
def _jump(state: _ShellState, index: int) -> None:
    _echo_step(state, state.controller.jump_to(index))


@_shell_commands.command(name="day")
@click.pass_obj
def _day(state: _ShellState) -> None:
    _echo_step(state, state.controller.next_day_open())


@_shell_commands.command(name="session")
@click.pass_obj
def _session(state: _ShellState) -> None:
    _echo_step(state, state.controller.next_session())


@_shell_commands.command(name="ny")
@click.pass_obj
def _ny(state: _ShellState) -> None:
    _echo_step(state, state.controller.next_ny_session())


def _entry_options(fn):
    options = [
        click.option("--stop", type=float, default=None, help="Stop price (default: derived)."),
        click.option("--target", type=float, default=None, help="Target price (default: derived)."),
        click.option("--entry", type=float, default=None, help="Entry price for limit/stop orders."),
        click.option("--order", "order_type", type=click.Choice(["market", "limit", "stop"]), default="market"),
        click.option("--risk", type=float, default=None, help="Risk percentage of the account (1-100)."),
        click.option("--be", "auto_breakeven", is_flag=True, default=False, help="Move stop to entry at +1R."),
        click.option("--setup", default="", help="Setup tag."),
        click.option("--notes", default="", help="Free-form notes."),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _enter(state: _ShellState, direction: str, **kwargs) -> None:
    from cli.output import format_position
    from replay_core.contracts import Direction, EntryRequest, OrderType

    risk = kwargs.pop("risk")
    request = EntryRequest(
        direction=Direction(direction),
        order_type=OrderType(kwargs.pop("order_type")),
        entry_price=kwargs.pop("entry"),
        stop_price=kwargs.pop("stop"),
        target_price=kwargs.pop("target"),
        risk_fraction=risk if risk is not None else state.default_risk,
        **kwargs,
    )
    result = state.controller.enter(request)
    if not result.ok:
        click.echo(f"Entry rejected: {result.reject_reason}")
        return
    session = state.controller.session
    click.echo(format_position(session.position, session.current_price, _cash_per_r(state)))


@_shell_commands.command(name="long")
@_entry_options
@click.pass_obj
def _long(state: _ShellState, **kwargs) -> None:
    _enter(state, "long", **kwargs)


@_shell_commands.command(name="short")
@_entry_options
@click.pass_obj
def _short(state: _ShellState, **kwargs) -> None:
    _enter(state, "short", **kwargs)


@_shell_commands.command(name="close")
@click.pass_obj
def _close(state: _ShellState) -> None:
    result = state.controller.close()
    if not result.ok:
        click.echo(f"Close rejected: {result.reject_reason}")


@_shell_commands.command(name="play")
@click.argument("speed", required=False, type=float)
@click.pass_obj
def _play(state: _ShellState, speed: float | None) -> None:
    from cli.output import format_hud

    if speed is not None and speed <= 0:
        raise click.BadParameter("speed must be > 0", param_hint="SPEED")
    state.controller.play(speed)
    try:
        state.scheduler.run()
    except KeyboardInterrupt:
        state.controller.pause()
        click.echo("\nPaused.")
    click.echo(format_hud(state.controller.session, cash_per_r=_cash_per_r(state)))


@_shell_commands.command(name="reset")
@click.argument("seed", required=False)
@click.pass_obj
def _reset(state: _ShellState, seed: str | None) -> None:
    _echo_step(state, state.controller.reset(seed))


@_shell_commands.command(name="stats")
@click.pass_obj
def _stats(state: _ShellState) -> None:
    from cli.output import format_stats

    click.echo(format_stats(state.controller.stats()))


@_shell_commands.command(name="hud")
@click.pass_obj
def _hud(state: _ShellState) -> None:
    from cli.output import format_hud

    click.echo(format_hud(state.controller.session, cash_per_r=_cash_per_r(state)))


@_shell_commands.command(name="quit")
@click.pass_obj
def _quit(state: _ShellState) -> None:
    state.running = False


def _run_shell_line(state: _ShellState, line: str) -> None:
    try:
        args = shlex.split(line)
    except ValueError as e:
        click.echo(f"Error: {e}")
        if state.events is not None:
            state.events.error(message=str(e), detail=line)
        return
    if not args:
        return
    args[0] = _ALIASES.get(args[0], args[0])
    try:
        _shell_commands.main(args, prog_name="", standalone_mode=False, obj=state)
    except click.ClickException as e:
        click.echo(f"Error: {e.format_message()}")
        if state.events is not None:
            state.events.error(message=e.format_message(), detail=line)


@cli.command()
@click.option("--seed", default=None, help="Session seed (default: config session.seed).")
@click.pass_context
def shell(ctx: click.Context, seed: str | None) -> None:
    """Interactive replay. Type 'quit' (or send EOF) to leave."""
    cfg = _load_app_config(ctx.obj["config_path"])
    from cli.output import format_close_event, format_hud
    from cli.structured_log import StructuredEventLogger
    from config.engine_config import load_engine_config
    from journal import AccountSizeStore, JournalStore
    from playback import ReplayController, SleepScheduler
    from replay_core.sizing import sizing_from_config

    engine_cfg = load_engine_config(mode=cfg.sizing.backtest_mode)
    events = StructuredEventLogger(seed or cfg.session.seed, enabled=cfg.alerting.structured_logs)

    def on_event(event_type: str, payload: dict) -> None:
        events.handle(event_type, payload)
        if event_type == "trade_closed":
            click.echo(format_close_event(payload))
        elif event_type == "breakeven_moved":
            click.echo(f"Stop moved to breakeven at {payload['stop']:.5f}")

    accounts = AccountSizeStore(cfg.journal.account_sizes_path)
    scheduler = SleepScheduler()
    controller = ReplayController(
        cfg, engine_cfg, JournalStore(cfg.journal.path),
        scheduler=scheduler,
        event_callback=on_event,
        seed=seed,
    )
    state = _ShellState(
        controller=controller,
        scheduler=scheduler,
        sizing=sizing_from_config(cfg.sizing, accounts.get(cfg.sizing.backtest_mode)),
        events=events,
        default_risk=cfg.sizing.default_risk_pct,
    )

    click.echo(format_hud(controller.session))
    click.echo("Commands: next [k], prev [k], jump I, day, session, ny, long/short [opts], "
               "close, play [speed], reset [seed], stats, hud, quit")
    while state.running:
        try:
            line = click.prompt("btl", default="", show_default=False, prompt_suffix="> ")
        except click.Abort:
            break
        _run_shell_line(state, line)
    controller.pause()
    click.echo("Bye.")


# ---------- btl stats ----------


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Win rate, average R, expectancy, profit factor and max drawdown."""
    cfg = _load_app_config(ctx.obj["config_path"])
    from cli.output import format_stats
    from journal import JournalStore
    from replay_core.analytics import summarize

    click.echo(format_stats(summarize(JournalStore(cfg.journal.path).load())))


# ---------- btl journal ----------


@cli.command()
@click.option("--limit", default=None, type=int, help="Show only the N most recent trades.")
@click.pass_context
def journal(ctx: click.Context, limit: int | None) -> None:
    """List closed trades, newest first."""
    cfg = _load_app_config(ctx.obj["config_path"])
    from cli.output import format_journal
    from journal import JournalStore

    click.echo(format_journal(JournalStore(cfg.journal.path).load(), limit=limit))


# ---------- btl export ----------


@cli.command()
@click.option("--out", "out_path", default=None, help="CSV path (default: config journal.export_path).")
@click.pass_context
def export(ctx: click.Context, out_path: str | None) -> None:
    """Export the journal to CSV."""
    cfg = _load_app_config(ctx.obj["config_path"])
    from journal import JournalStore, export_csv

    records = JournalStore(cfg.journal.path).load()
    out = out_path or cfg.journal.export_path
    if export_csv(records, out):
        click.echo(f"Exported {len(records)} trade(s) to {out}")
    else:
        click.echo("Journal is empty, nothing to export.")


# ---------- btl clear ----------


@cli.command()
@click.option("--yes", is_flag=True, default=False, help="Confirm clearing the journal.")
@click.pass_context
def clear(ctx: click.Context, yes: bool) -> None:
    """Delete every journal entry."""
    cfg = _load_app_config(ctx.obj["config_path"])
    from journal import JournalStore

    if not yes:
        click.echo("Refusing to clear the journal without --yes.")
        raise SystemExit(1)
    JournalStore(cfg.journal.path).clear()
    click.echo(f"Journal cleared ({cfg.journal.path}).")


# ---------- btl account ----------


@cli.command()
@click.option("--mode", default=None, help="Backtest mode (default: config sizing.backtest_mode).")
@click.option("--set", "new_size", default=None, type=float, help="Persist a new account size.")
@click.pass_context
def account(ctx: click.Context, mode: str | None, new_size: float | None) -> None:
    """Show or set the account size used for cash-per-R."""
    cfg = _load_app_config(ctx.obj["config_path"])
    from journal import AccountSizeStore
    from replay_core.sizing import sizing_from_config

    store = AccountSizeStore(cfg.journal.account_sizes_path)
    mode = mode or cfg.sizing.backtest_mode
    if new_size is not None:
        store.set(mode, new_size)
    size = store.get(mode)
    policy = sizing_from_config(cfg.sizing, size)
    click.echo(f"Account ({mode}) : ${size:,.2f}")
    click.echo(f"Sizing mode     : {cfg.sizing.mode}")
    click.echo(f"Cash per R      : ${policy.cash_per_r(cfg.sizing.default_risk_pct):,.2f}"
               f" at {cfg.sizing.default_risk_pct:g}% risk")


# ---------- btl health ----------


@cli.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check system health: config, engine config, journal store.

    Exit code 0 = healthy, 1 = unhealthy.
    """
    checks: list[tuple[str, bool, str]] = []

    try:
        cfg = _load_app_config(ctx.obj["config_path"])
        checks.append(("config", True, f"loaded (seed={cfg.session.seed}, bars={cfg.session.bar_count})"))
    except (OSError, ValueError) as e:
        checks.append(("config", False, str(e)))
        _print_health(checks)
        raise SystemExit(1)

    from config.engine_config import EngineConfigError, load_engine_config

    try:
        engine_cfg = load_engine_config(mode=cfg.sizing.backtest_mode)
        checks.append(("engine_config", True, f"validated (version={engine_cfg.version})"))
    except EngineConfigError as e:
        checks.append(("engine_config", False, str(e)))

    from journal import JournalStore

    store = JournalStore(cfg.journal.path)
    try:
        count = len(store.load())
        writable = _writable_dir(store.path.parent)
        detail = f"{count} trade(s) in {store.path}"
        checks.append(("journal", writable, detail if writable else f"{store.path.parent} is not writable"))
    except OSError as e:
        checks.append(("journal", False, str(e)))

    _print_health(checks)
    healthy = all(ok for _, ok, _ in checks)
    raise SystemExit(0 if healthy else 1)


def _writable_dir(path: Path) -> bool:
    while not path.exists():
        if path.parent == path:
            return False
        path = path.parent
    return path.is_dir() and os.access(path, os.W_OK)


def _print_health(checks: list[tuple[str, bool, str]]) -> None:
    for name, ok, detail in checks:
        status = "OK" if ok else "FAIL"
        click.echo(f"  [{status}] {name}: {detail}")
    healthy = all(ok for _, ok, _ in checks)
    click.echo(f"\nHealth: {'HEALTHY' if healthy else 'UNHEALTHY'}")


if __name__ == "__main__":
    cli()
