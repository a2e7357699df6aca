import logging
import os

import click
import toml
from rich.console import Console
from rich.table import Table

from webwatcher import browser, config, logger, monitor
from webwatcher.events import LABEL_WIDTH
from webwatcher.formatter import EventFormatter
from webwatcher.observer import DirectoryObserver, WatchError

console = Console(stderr=True)


@click.group()
@click.option("--config", "-c", "config_path", default=None, help="Path to configuration TOML file.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx, config_path, debug):
    """
    WebWatcher CLI: watch what a browser writes to its profile directory.
    """
    try:
        cfg = config.load_config(config_path)
    except (OSError, toml.TomlDecodeError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.abort()
    if debug:
        cfg["logging"]["level"] = "DEBUG"

    logger.setup_logger(
        "webwatcher",
        level=logger.level_from_name(cfg["logging"]["level"]),
        log_dir=cfg["logging"].get("log_dir") or None,
    )
    ctx.obj = {"config": cfg, "config_path": config_path, "debug": debug}


def build_observer(watch_cfg, polling, settle):
    return DirectoryObserver(
        settle_window=watch_cfg["settle_window"] if settle is None else settle,
        poll_interval=watch_cfg["poll_interval"],
        max_settle=watch_cfg["max_settle"],
        use_polling=polling or watch_cfg["use_polling"],
    )


def watch_or_exit(ctx, root_path, observer):
    """Run the watch session, turning a failed watch into exit status 1."""
    console.print(f"[dim]Watching: {os.path.abspath(root_path)}[/dim]")
    try:
        monitor.watch_directory(root_path, observer, EventFormatter(label_width=LABEL_WIDTH))
    except WatchError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    except KeyboardInterrupt:
        console.print("[dim]Watcher stopped[/dim]")


@main.command()
@click.option("--profile-dir", "-p", default=None, help="Browser profile directory to create and watch.")
@click.option("--browser", "-b", "executable", default=None, help="Browser executable to launch.")
@click.option("--polling", is_flag=True, help="Poll the filesystem instead of using OS notifications.")
@click.option("--settle", type=float, default=None, help="Seconds a file must stay unchanged before it is reported.")
@click.pass_context
def run(ctx, profile_dir, executable, polling, settle):
    """
    Launch the browser on an isolated profile and watch it.
    """
    cfg = ctx.obj["config"]
    browser_cfg = cfg["browser"]
    executable = executable or browser_cfg.get("executable") or browser.resolve_browser_executable()
    profile_dir = profile_dir or browser_cfg["profile_dir"]

    if not browser.is_browser_installed(executable):
        click.echo("Chrome is not installed in your computer!", err=True)
        ctx.exit(1)

    proc = browser.launch_browser(executable, profile_dir, browser_cfg.get("args", browser.DEFAULT_BROWSER_ARGS))
    logging.getLogger("webwatcher").info(
        "Browser process:\n" + "\n".join(f"{k}: {v}" for k, v in browser.describe_process(proc.pid).items())
    )
    watch_or_exit(ctx, profile_dir, build_observer(cfg["watch"], polling, settle))


@main.command()
@click.argument("directory", type=click.Path(file_okay=False))
@click.option("--polling", is_flag=True, help="Poll the filesystem instead of using OS notifications.")
@click.option("--settle", type=float, default=None, help="Seconds a file must stay unchanged before it is reported.")
@click.pass_context
def watch(ctx, directory, polling, settle):
    """
    Watch an existing directory without launching a browser.
    """
    watch_or_exit(ctx, directory, build_observer(ctx.obj["config"]["watch"], polling, settle))


@main.command()
@click.pass_context
def show_config(ctx):
    """
    Show the effective configuration.
    """
    cfg = ctx.obj["config"]
    table = Table(title="WebWatcher Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("config file", str(cfg.get("__config_path__") or "(defaults)"))
    for section in ("browser", "watch", "logging"):
        for key, value in cfg.get(section, {}).items():
            table.add_row(f"{section}.{key}", str(value))
    Console().print(table)


if __name__ == "__main__":
    main()
