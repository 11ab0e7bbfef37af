import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import unquote, urlparse

import click
import yaml

from .errors import MaterializeError

COMMAND_GROUPS = (
    ("Sources", ("scan", "collect", "key")),
    ("Pipeline", ("analyze", "images")),
    ("Render", ("gallery",)),
)
HELP_COL_MAX = 30
HELP_COL_SPACING = 2


class OrderedGroup(click.Group):
    def __init__(
        self,
        *args,
        command_groups: Sequence[tuple[str, Sequence[str]]] | None = None,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._command_groups = [(title, list(names)) for title, names in command_groups or []]

    def list_commands(self, ctx: click.Context) -> list[str]:
        ordered = [name for _, names in self._command_groups for name in names]
        ordered = [name for name in ordered if name in self.commands]
        remaining = [name for name in super().list_commands(ctx) if name not in ordered]
        return ordered + remaining

    def format_commands(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        for title, names in self._command_groups:
            rows = []
            for name in names:
                cmd = self.get_command(ctx, name)
                if cmd is None or cmd.hidden:
                    continue
                rows.append((name, cmd.get_short_help_str(limit=45)))
            if not rows:
                continue
            formatter.write("\n")
            formatter.write(click.style(title.upper(), bold=True) + "\n")
            formatter.indent()
            formatter.write_dl(rows, col_max=HELP_COL_MAX, col_spacing=HELP_COL_SPACING)
            formatter.dedent()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _emit(ctx: click.Context, records: list) -> None:
    payload = [record.to_dict() if hasattr(record, "to_dict") else record for record in records]
    if ctx.obj.get("json"):
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        click.echo(yaml.safe_dump(payload, sort_keys=False, allow_unicode=True), nl=False)


def _read_text(text: tuple[str, ...]) -> str:
    if text:
        return " ".join(text)
    if not sys.stdin.isatty():
        return sys.stdin.read()
    return ""


@click.group(
    cls=OrderedGroup,
    command_groups=COMMAND_GROUPS,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
@click.option("--json", "as_json", is_flag=True, help="Print records as JSON instead of YAML.")
@click.pass_context
def cli(ctx, verbose, as_json):
    """
    materialize - attachment ingestion for community submissions
    """
    ctx.ensure_object(dict)
    ctx.obj["json"] = as_json
    _configure_logging(verbose)


@cli.command("key")
@click.argument("record_id")
@click.argument("name")
@click.option("--ext", "extension", default=None, help="Force this extension on the key.")
def key_cmd(record_id, name, extension):
    """
    Print the on-disk file key for an id and file name.
    """
    from .naming import compute_file_key

    click.echo(compute_file_key(record_id, name, extension))


@cli.command("scan")
@click.argument("text", nargs=-1)
@click.pass_context
def scan_cmd(ctx, text):
    """
    List attachment links found in TEXT (or stdin).
    """
    from .references import extract_attachments_from_text

    _emit(ctx, extract_attachments_from_text(_read_text(text)))


@cli.command("collect")
@click.argument("channel_id")
@click.option(
    "-d",
    "--dir",
    "folder",
    type=click.Path(file_okay=False),
    default=None,
    help="Download and analyze attachments into this folder.",
)
@click.option("--system-author", default=None, help="Bot author id whose messages are kept.")
@click.pass_context
def collect_cmd(ctx, channel_id, folder, system_author):
    """
    Gather every attachment posted in a Discord channel or thread.
    """
    from .pipeline import collect_and_process
    from .references import DiscordClient, collect_all_attachments

    client = DiscordClient()
    try:
        if folder:
            attachments = collect_and_process(
                channel_id, folder, client, system_author_id=system_author
            )
        else:
            attachments = collect_all_attachments(
                channel_id, client, system_author_id=system_author
            )
    except MaterializeError as exc:
        raise click.ClickException(str(exc)) from exc
    _emit(ctx, attachments)


@cli.command("analyze")
@click.argument("paths", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def analyze_cmd(ctx, paths):
    """
    Read format metadata from local .litematic and world-save .zip files.
    """
    from .formats import analyze_attachment, load_version_table
    from .models import CONTENT_UNKNOWN, Attachment

    versions = load_version_table()
    records = []
    for raw in paths:
        path = Path(raw)
        attachment = Attachment(
            id=path.stem,
            name=path.name,
            content_type=CONTENT_UNKNOWN,
            url=path.resolve().as_uri(),
            can_download=True,
            path=path.name,
        )
        analyze_attachment(attachment, path.parent, None, versions)
        records.append(attachment)
    _emit(ctx, records)


def _image_from_url(url: str):
    from .models import Image

    name = unquote(Path(urlparse(url).path).name) or "image"
    return Image(name=name, url=url)


@cli.command("images")
@click.argument("urls", nargs=-1, required=True)
@click.option(
    "-d",
    "--dir",
    "folder",
    type=click.Path(file_okay=False),
    required=True,
    help="Folder for processed PNGs.",
)
@click.pass_context
def images_cmd(ctx, urls, folder):
    """
    Download images, trim transparent borders and shrink them to 800px.
    """
    from .pipeline import process_images
    from .references import DiscordClient

    processed = Path(folder)
    images = [_image_from_url(url) for url in urls]
    try:
        process_images(images, processed.parent / "downloaded_images", processed, DiscordClient())
    except MaterializeError as exc:
        raise click.ClickException(str(exc)) from exc
    _emit(ctx, images)


@cli.command("gallery")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--full", is_flag=True, help="Render 800x800 squares instead of grid cells.")
def gallery_cmd(paths, full):
    """
    Fit local images into presentation-grid cells as transparent PNGs.
    """
    from .render import normalize_gallery_images

    for output in normalize_gallery_images(list(paths), not full):
        click.echo(str(output))


def main():
    cli()


if __name__ == "__main__":
    main()
