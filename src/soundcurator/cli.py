import json
import os
import shutil
import sys
import tempfile

import click

from soundcurator.errors import CuratorError, UnknownProvider

_DEFAULT_LOG_FILE = os.path.join(tempfile.gettempdir(), "sound-pack-curator.log")


def _check_ffmpeg():
    """Check that FFmpeg is installed and available on PATH."""
    if not shutil.which("ffmpeg"):
        raise click.ClickException(
            "FFmpeg not found. Please install it to convert sounds.\n"
            "  macOS: brew install ffmpeg\n"
            "  Ubuntu: sudo apt install ffmpeg\n"
            "  Windows: https://ffmpeg.org/download.html"
        )


class _MutuallyExclusiveOption(click.Option):
    """Click option that is mutually exclusive with another option."""

    def __init__(self, *args, **kwargs):
        self.mutually_exclusive = set(kwargs.pop("mutually_exclusive", []))
        super().__init__(*args, **kwargs)

    def handle_parse_result(self, ctx, opts, args):
        for name in self.mutually_exclusive:
            if name in opts and self.name in opts:
                raise click.UsageError(
                    f"--{self.name} and --{name} are mutually exclusive."
                )
        return super().handle_parse_result(ctx, opts, args)


def _open_source(ctx, provider):
    """Instantiate the named provider with the run's rate limiter."""
    from soundcurator.ratelimit import RateLimiter
    from soundcurator.sources import get_source

    config = ctx.obj["config"]
    try:
        return get_source(provider, limiter=RateLimiter(config.rate_limits))
    except UnknownProvider as e:
        raise click.BadParameter(str(e), param_hint="PROVIDER")


@click.group()
@click.option("--packs-dir", default="./packs", envvar="PACKS_DIR", show_default=True, help="Root directory for assembled packs.")
@click.option("--preset", default="default", help="Config preset name or path to a YAML file.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show debug output.", cls=_MutuallyExclusiveOption, mutually_exclusive=["quiet"])
@click.option("--quiet", "-q", is_flag=True, default=False, help="Suppress all output except errors.", cls=_MutuallyExclusiveOption, mutually_exclusive=["verbose"])
@click.option("--log-file", default=_DEFAULT_LOG_FILE, envvar="LOG_FILE", type=click.Path(dir_okay=False), show_default=True, help="Append log entries to this file.")
@click.pass_context
def cli(ctx, packs_dir, preset, verbose, quiet, log_file):
    """Curate notification sound packs from Pixabay and Freesound.

    Credentials are read from PIXABAY_API_KEY, FREESOUND_API_KEY and
    FREESOUND_OAUTH_TOKEN.
    """
    from soundcurator.config import load_config
    from soundcurator.logging_config import setup_logging
    from soundcurator.ui import Console

    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(preset)
    except FileNotFoundError as e:
        raise click.BadParameter(str(e), param_hint="--preset")
    ctx.obj["packs_dir"] = packs_dir
    ctx.obj["console"] = Console(quiet=quiet)
    ctx.obj["logger"] = setup_logging(
        verbose=verbose, quiet=quiet, log_file=log_file, stream=sys.stderr,
    )


@cli.command()
@click.argument("provider")
@click.argument("text")
@click.option("--limit", "-n", default=None, type=click.IntRange(min=1), help="Maximum number of results (default from preset, 20).")
@click.pass_context
def query(ctx, provider, text, limit):
    """Search a provider and print one JSON object per result."""
    if limit is None:
        limit = ctx.obj["config"].query_limit
    with _open_source(ctx, provider) as source:
        try:
            candidates = source.search(text, limit)
        except CuratorError as e:
            raise click.ClickException(str(e))
    for candidate in candidates:
        click.echo(json.dumps(candidate.to_dict()))


@cli.command()
@click.argument("provider")
@click.argument("sound_id")
@click.argument("output_dir", required=False, default=None, type=click.Path(file_okay=False))
@click.pass_context
def download(ctx, provider, sound_id, output_dir):
    """Download one sound by id and print its path.

    OUTPUT_DIR defaults to $OUTPUT_DIR or ./downloads.
    """
    if output_dir is None:
        output_dir = os.environ.get("OUTPUT_DIR") or "./downloads"
    with _open_source(ctx, provider) as source:
        try:
            downloaded = source.fetch(sound_id, output_dir)
        except CuratorError as e:
            raise click.ClickException(str(e))
    click.echo(str(downloaded.path))


@cli.command()
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("output_dir", type=click.Path(file_okay=False))
@click.pass_context
def convert(ctx, input_dir, output_dir):
    """Convert every mp3/wav/ogg/flac file under INPUT_DIR to AIFF."""
    from soundcurator.convert import convert_directory
    from soundcurator.ui import StepSummary

    _check_ffmpeg()
    summary = StepSummary("Convert")
    convert_directory(input_dir, output_dir, summary=summary)
    console = ctx.obj["console"]
    for name, reason in summary.failures:
        console.error(f"  {name}: {reason}")
    console.info(summary.render())


@cli.command("create-pack")
@click.argument("pack_id")
@click.argument("version")
@click.argument("sounds_dir", type=click.Path(exists=True, file_okay=False))
@click.pass_context
def create_pack(ctx, pack_id, version, sounds_dir):
    """Build a pack manifest from a directory of AIFF sounds."""
    from soundcurator.pack import assemble

    config = ctx.obj["config"]
    manifest = assemble(
        pack_id,
        version,
        sounds_dir,
        ctx.obj["packs_dir"],
        event_keywords=config.event_keywords,
        description=config.description,
        author=config.author,
    )
    click.echo(manifest.to_json(), nl=False)


@cli.command()
@click.argument("provider")
@click.argument("pack_id")
@click.argument("text")
@click.option("--version", "pack_version", default=None, help="Pack version (default from preset, 1.0.0).")
@click.pass_context
def curate(ctx, provider, pack_id, text, pack_version):
    """Full workflow: query, download, convert, create pack."""
    from soundcurator.curate import curate as run_curation

    _check_ffmpeg()
    config = ctx.obj["config"]
    with _open_source(ctx, provider) as source:
        try:
            manifest = run_curation(
                source,
                pack_id,
                text,
                ctx.obj["packs_dir"],
                version=pack_version or config.version,
                limit=config.curate_limit,
                event_keywords=config.event_keywords,
                description=config.description,
                author=config.author,
            )
        except CuratorError as e:
            raise click.ClickException(str(e))
    click.echo(manifest.to_json(), nl=False)


@cli.command()
@click.pass_context
def providers(ctx):
    """List available providers."""
    from soundcurator.sources import list_sources

    for name in list_sources():
        click.echo(name)


@cli.command()
@click.pass_context
def presets(ctx):
    """List bundled config presets."""
    from soundcurator.config import list_presets

    for name in list_presets():
        click.echo(name)


if __name__ == "__main__":
    cli()
