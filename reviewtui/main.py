# reviewtui/main.py
import asyncio
import logging
import os
import sys

import click

from reviewtui import __version__
from reviewtui.core import events
from reviewtui.core.bus import Bus
from reviewtui.core.config import Config, setup_logging
from reviewtui.core.errors import ChannelClosed, StorageError
from reviewtui.core.processor import EventProcessor
from reviewtui.core.producer import EventProducer
from reviewtui.core.storage import Database
from reviewtui.services import default_services
from reviewtui.ui_ptk.layout import build_application

log = logging.getLogger(__name__)


async def main(database: Database, repo_path: str, cfg: Config) -> int:
    """Run the UI until the user quits; returns the process exit code."""
    bus = Bus()
    inputs: asyncio.Queue = asyncio.Queue()
    processor = EventProcessor(bus, database, repo_path, default_services())
    app = build_application(processor, inputs)
    processor.on_render = app.invalidate
    producer = EventProducer(bus, inputs, cfg.tick_fps)
    exit_code = 0
    core_task = None

    async def _core():
        nonlocal exit_code
        try:
            await processor.run()
        except ChannelClosed:
            exit_code = 1
        except Exception:
            log.exception("event processor crashed")
            exit_code = 1
        finally:
            if app.is_running:
                app.exit()

    def _start():
        nonlocal core_task
        producer.start()
        core_task = asyncio.ensure_future(_core())

    bus.send_app(events.ReviewsLoad())
    bus.send_app(events.ReviewsBranchStatusCheck())

    try:
        await app.run_async(pre_run=_start)
    except KeyboardInterrupt:
        pass
    finally:
        bus.close()
        await producer.stop()
        if core_task is not None and not core_task.done():
            core_task.cancel()
            await asyncio.gather(core_task, return_exceptions=True)
    return exit_code


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--repo-path", "-r", default=".", show_default=True,
              type=click.Path(file_okay=False, dir_okay=True),
              help="Git repository to review.")
@click.version_option(__version__, "--version", "-V", message="reviewtui %(version)s")
def cli(repo_path: str) -> None:
    """Review the changes between two local Git branches."""
    cfg = Config.load()
    try:
        cfg.ensure_data_dir()
    except OSError as e:
        click.echo(f"Error: cannot create data directory {cfg.data_dir}: {e}", err=True)
        sys.exit(1)
    setup_logging(cfg)

    repo_path = os.path.abspath(repo_path)
    log.info("reviewtui %s starting (repo=%s)", __version__, repo_path)
    try:
        database = Database.open(cfg.db_path)
    except StorageError as e:
        log.error("%s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if cfg.last_repo_path != repo_path:
        cfg.last_repo_path = repo_path
        try:
            cfg.save()
        except OSError as e:
            log.warning("could not save config: %s", e)

    code = 1
    try:
        code = asyncio.run(main(database, repo_path, cfg))
    except KeyboardInterrupt:
        code = 0
    finally:
        database.close()
    log.info("reviewtui exiting with code %d", code)
    sys.exit(code)


if __name__ == "__main__":
    cli()
