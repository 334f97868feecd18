"""CLI interface for rendering text boxes described in TOML files."""

import io
import logging
from pathlib import Path

import click
from reportlab.lib.pagesizes import A4, letter
from reportlab.pdfgen import canvas

from textbox.box import TextBox
from textbox.config import BoxFile, load_box_file
from textbox.document import Bounds, Document
from textbox.errors import TextBoxError
from textbox.fonts import register_fonts, resolve_font

PAGE_SIZES = {"letter": letter, "a4": A4}


@click.group()
@click.version_option(package_name="pdf-textbox")
@click.option("-v", "--verbose", is_flag=True, help="Log render phases and font decisions.")
def main(verbose: bool) -> None:
    """Lay out styled text in boxes on PDF pages."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _prepare_fonts(box_file: BoxFile, fonts_dir: Path | None) -> None:
    if fonts_dir is not None:
        register_fonts(fonts_dir)
    for font_spec in box_file.google_fonts:
        name = resolve_font(font_spec, fallback=box_file.font)
        click.echo(f"Font '{font_spec}' registered as '{name}'")


def _build_box(box_file: BoxFile, pdf: canvas.Canvas) -> TextBox:
    page_width, page_height = PAGE_SIZES[box_file.page_size]
    margin = box_file.margin
    document = Document(
        pdf,
        bounds=Bounds(margin, margin, page_width - margin, page_height - margin),
        font=box_file.font,
        font_size=box_file.font_size,
    )
    return TextBox(box_file.runs, document=document, **box_file.box)


def _report(box: TextBox, unprinted: list) -> None:
    printed_text = "".join(run.text for run in box.text)
    unprinted_text = "".join(run.text for run in unprinted)
    click.echo(f"Printed:   {printed_text!r}")
    click.echo(f"Unprinted: {unprinted_text!r}")
    click.echo(f"Height:    {box.height:.2f}pt")
    if box.state.font_sizes_tried:
        click.echo(f"Font size: {box.state.font_size:g}pt")


@main.command()
@click.argument("box_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output PDF file path. Defaults to the box file name with a .pdf suffix.",
)
@click.option(
    "--fonts-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory of TTF files to register before rendering.",
)
@click.option(
    "--page-size",
    type=click.Choice(sorted(PAGE_SIZES)),
    help="Page size, overriding the box file.",
)
@click.option("--dry-run", is_flag=True, help="Lay out without drawing anything.")
def render(
    box_file: Path,
    output: Path | None,
    fonts_dir: Path | None,
    page_size: str | None,
    dry_run: bool,
) -> None:
    """Render the text box described in BOX_FILE to a PDF."""
    try:
        description = load_box_file(box_file)
        if page_size is not None:
            description = description.model_copy(update={"page_size": page_size})
        _prepare_fonts(description, fonts_dir)

        if output is None:
            output = box_file.with_suffix(".pdf")
        pdf = canvas.Canvas(str(output), pagesize=PAGE_SIZES[description.page_size])
        box = _build_box(description, pdf)
        unprinted = box.render(dry_run=dry_run)
        pdf.showPage()
        pdf.save()
    except (TextBoxError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    _report(box, unprinted)
    click.echo(f"PDF saved to: {output}")


@main.command()
@click.argument("box_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--fonts-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory of TTF files to register before measuring.",
)
def check(box_file: Path, fonts_dir: Path | None) -> None:
    """Dry-run BOX_FILE and report what would print. Exits 2 if text overflows."""
    try:
        description = load_box_file(box_file)
        _prepare_fonts(description, fonts_dir)
        pdf = canvas.Canvas(io.BytesIO(), pagesize=PAGE_SIZES[description.page_size])
        box = _build_box(description, pdf)
        unprinted = box.render(dry_run=True)
    except (TextBoxError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    _report(box, unprinted)
    if unprinted:
        raise SystemExit(2)


if __name__ == "__main__":
    main()
