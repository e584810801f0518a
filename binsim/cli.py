"""Command-line interface for binsim."""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import BinsimConfig, ConfigError, ConfigManager, create_default_config_file
from .core.evaluation import CorrelationEvaluator
from .core.loader import build_vocabulary, load_vectors
from .core.topk import TopKSelector
from .core.vocabulary import Vocabulary
from .errors import BinsimError, is_fatal
from .reporting import render_evaluation, render_neighbors, render_timings
from .utils.logging_setup import get_logger, log_operation, setup_logging
from .utils.timing import PhaseTimer


logger = get_logger(__name__)

console = Console()
err_console = Console(stderr=True)


def _load_config(config_path: Optional[str], verbose: bool, log_dir: Optional[str] = None,
                 **overrides) -> BinsimConfig:
    """Load config file, apply CLI overrides, validate and configure logging."""
    manager = ConfigManager(Path(config_path) if config_path else None)
    config = manager.update(**overrides)
    if not config.validate():
        raise click.UsageError("invalid configuration")
    setup_logging("binsim", level="DEBUG" if verbose else config.log_level.upper(),
                  log_dir=Path(log_dir) if log_dir else None)
    return config


def _fail(error: BinsimError):
    """Report a fatal error and exit with status 1."""
    logger.error(str(error), extra={'extra_fields': error.details})
    err_console.print(f"[red]Error: {escape(str(error))}[/red]")
    sys.exit(1)


@click.group(name="binsim")
@click.version_option(__version__, prog_name="binsim")
def main():
    """Evaluate and query binary word embeddings."""
    pass


@main.command(name="evaluate")
@click.argument("embedding", type=click.Path(dir_okay=False))
@click.option("--datasets", "datasets_dir", type=click.Path(file_okay=False),
              help="Directory of word-pair judgment files")
@click.option("--block-size", type=int, help="Bits per packed block (8, 16, 32, 64)")
@click.option("--radix", type=int, help="Radix of the block integers")
@click.option("--max-lines", type=int, help="Per-dataset record cap (0 for none)")
@click.option("--lenient/--strict", "lenient_records", default=None,
              help="Keep or skip malformed vector records")
@click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False),
              help="Path to configuration file")
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--log-dir", type=click.Path(file_okay=False),
              help="Also write JSON-lines debug logs to this directory")
def evaluate_cmd(embedding, datasets_dir, block_size, radix, max_lines, lenient_records,
                 config_path, as_json, verbose, log_dir):
    """Correlate EMBEDDING similarities with every judgment dataset."""
    try:
        config = _load_config(config_path, verbose, log_dir, datasets_dir=datasets_dir,
                              block_size=block_size, radix=radix, max_lines=max_lines,
                              lenient_records=lenient_records)
    except ConfigError as e:
        _fail(e)
    log_operation(logger, "evaluate", embedding=embedding, datasets=config.datasets_dir)

    timer = PhaseTimer()
    try:
        with timer.track("create_vocab"):
            vocabulary = build_vocabulary(config.datasets_dir)
        with timer.track("load_vectors"):
            store = load_vectors(embedding, vocabulary, block_size=config.block_size,
                                 radix=config.radix, lenient=config.lenient_records)
        with timer.track("evaluate"):
            evaluator = CorrelationEvaluator(vocabulary, store)
            results = list(evaluator.evaluate_directory(config.datasets_dir,
                                                        max_lines=config.max_lines))
    except BinsimError as e:
        if not is_fatal(e):
            raise
        _fail(e)

    if as_json:
        payload = {
            "results": [r.to_dict() for r in results],
            "timings": [t.to_dict() for t in timer],
            "load": store.stats.to_dict(),
        }
        click.echo(json.dumps(payload, indent=2))
        return

    render_evaluation(results, console)
    render_timings(timer, console)


@main.command(name="topk")
@click.argument("embedding", type=click.Path(dir_okay=False))
@click.argument("k", type=click.IntRange(min=1))
@click.argument("words", nargs=-1, required=True)
@click.option("--block-size", type=int, help="Bits per packed block (8, 16, 32, 64)")
@click.option("--radix", type=int, help="Radix of the block integers")
@click.option("--lenient/--strict", "lenient_records", default=None,
              help="Keep or skip malformed vector records")
@click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False),
              help="Path to configuration file")
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--log-dir", type=click.Path(file_okay=False),
              help="Also write JSON-lines debug logs to this directory")
def topk_cmd(embedding, k, words, block_size, radix, lenient_records, config_path,
             as_json, verbose, log_dir):
    """Print the K nearest neighbours of each WORD in EMBEDDING."""
    try:
        config = _load_config(config_path, verbose, log_dir, block_size=block_size, radix=radix,
                              lenient_records=lenient_records)
    except ConfigError as e:
        _fail(e)
    log_operation(logger, "topk", embedding=embedding, k=k, queries=len(words))

    timer = PhaseTimer()
    vocabulary = Vocabulary()
    try:
        with timer.track("load_vectors"):
            store = load_vectors(embedding, vocabulary, build_vocabulary=True,
                                 block_size=config.block_size, radix=config.radix,
                                 lenient=config.lenient_records)
    except BinsimError as e:
        if not is_fatal(e):
            raise
        _fail(e)

    selector = TopKSelector(store, vocabulary)
    payload = []
    for word in words:
        with timer.track("query", word=word) as timing:
            neighbors = selector.query(word, k)
        if as_json:
            payload.append({
                "query": word,
                "neighbors": None if neighbors is None else [
                    {"word": n.word, "score": n.score} for n in neighbors
                ],
                "seconds": timing.duration,
            })
        else:
            render_neighbors(word, neighbors, k, elapsed=timing.duration, console=console)

    if as_json:
        click.echo(json.dumps(payload, indent=2))
    else:
        render_timings([t for t in timer if t.operation == "load_vectors"], console)


@main.group(name="config")
def config_group():
    """Manage the binsim configuration file."""
    pass


@config_group.command(name="init")
@click.option("--path", type=click.Path(dir_okay=False), default=ConfigManager.DEFAULT_CONFIG_FILE,
              help="Path for config file")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def config_init(path, force):
    """Write a configuration file with default values."""
    config_path = Path(path)
    if config_path.exists() and not force:
        if not click.confirm(f"Config file {path} already exists. Overwrite?"):
            console.print("[yellow]Aborted[/yellow]")
            return
    if not create_default_config_file(config_path):
        sys.exit(1)


@config_group.command(name="show")
@click.option("--path", type=click.Path(dir_okay=False), help="Path to config file")
def config_show(path):
    """Display the effective configuration."""
    manager = ConfigManager(Path(path) if path else None)
    try:
        manager.display(manager.load())
    except ConfigError as e:
        _fail(e)


@config_group.command(name="validate")
@click.option("--path", type=click.Path(dir_okay=False), help="Path to config file")
def config_validate(path):
    """Validate the configuration file."""
    try:
        config = ConfigManager(Path(path) if path else None).load()
    except ConfigError as e:
        _fail(e)
    if config.validate():
        console.print("[green]✓ Configuration is valid[/green]")
    else:
        console.print("[red]✗ Configuration has validation errors[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
