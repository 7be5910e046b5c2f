"""normalmap command-line interface.

This module provides CLI commands for converting height maps to normal maps
and for inspecting height map images.
"""

import io
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from normalmap.core import (
    TRACKMANIA_MAPPING,
    ConversionOptions,
    HeightFieldError,
    OptionsError,
    convert,
    effective_scale,
    intensity_range,
)
from normalmap.image import ImageFormatError, read_heightfield, write_normal_map

# Exit codes
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2

# Filename standing for stdin or stdout
STDIO_FILENAME = "-"


def print_error(message: str) -> None:
    """Print error message to stderr.

    Args:
        message: Error message to print.
    """
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)


def print_success(message: str) -> None:
    """Print success message to stderr, keeping stdout free for image data.

    Args:
        message: Success message to print.
    """
    click.echo(click.style(message, fg="green"), err=True)


def build_options(
    config: Optional[Path],
    xyz: Optional[str],
    tm: bool,
    normalise: bool,
    scale: Optional[float],
    unsigned_z: bool,
    wrap: bool,
    tilesize: Optional[int],
    legacy_row_guard: bool,
) -> ConversionOptions:
    """Merge a preset file and command-line flags into conversion options.

    Flags given on the command line override the preset. Giving --scale
    implies --normalise, and --tm selects the Trackmania channel mapping
    unless --xyz is also given.

    Raises:
        OptionsError: If the merged options are invalid.
        FileNotFoundError: If the preset file doesn't exist.
    """
    options = ConversionOptions.from_config_file(config) if config else ConversionOptions()

    changes: dict = {}
    if xyz is not None:
        changes["channel_mapping"] = xyz
    elif tm:
        changes["channel_mapping"] = TRACKMANIA_MAPPING
    if scale is not None:
        changes["scale"] = scale
        changes["normalise"] = True
    if normalise:
        changes["normalise"] = True
    if unsigned_z:
        changes["unsigned_z"] = True
    if wrap:
        changes["wrap"] = True
    if tilesize is not None:
        changes["tile_size"] = tilesize
    if legacy_row_guard:
        changes["legacy_row_guard"] = True

    return options.replace(**changes) if changes else options


@click.group()
@click.version_option(version="0.1.0", prog_name="normalmap")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """normalmap - Convert height maps to normal maps for games.

    Reads 8-bit grayscale height maps and writes tangent-space normal maps.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )


@cli.command("convert")
@click.option(
    "--input",
    "-i",
    "input_file",
    required=True,
    metavar="FILENAME",
    help="Input file, or '-' for stdin",
)
@click.option(
    "--output",
    "-o",
    "output_file",
    required=True,
    metavar="FILENAME",
    help="Output file, or '-' for stdout",
)
@click.option(
    "--xyz",
    "-x",
    default=None,
    metavar="RGB",
    help="Mapping of XYZ to output colour channels; eg 'rgb', 'agb'",
)
@click.option(
    "--normalise",
    "-n",
    is_flag=True,
    default=False,
    help="Scale input heightmap values to fill range 0.0-1.0",
)
@click.option(
    "--scale",
    "-s",
    type=float,
    default=None,
    help="Scale of heightmap (implies --normalise) relative to a pixel; defaults to 1.0",
)
@click.option(
    "--unsigned",
    "-u",
    "unsigned_z",
    is_flag=True,
    default=False,
    help="Z values in output are unsigned (0-255) instead of signed (128-255)",
)
@click.option(
    "--wrap",
    "-w",
    is_flag=True,
    default=False,
    help="Texture wraps around for tiling",
)
@click.option(
    "--tm",
    "-t",
    is_flag=True,
    default=False,
    help="Use Trackmania format (--xyz=agb)",
)
@click.option(
    "--tilesize",
    "-z",
    type=int,
    default=None,
    help="Tile size for normal map generation (default is 0 for no tiles)",
)
@click.option(
    "--legacy-row-guard",
    is_flag=True,
    default=False,
    help="Reproduce the row slope guard of older normalmap releases",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(path_type=Path),
    default=None,
    help="YAML file with default conversion options",
)
def convert_command(
    input_file: str,
    output_file: str,
    xyz: Optional[str],
    normalise: bool,
    scale: Optional[float],
    unsigned_z: bool,
    wrap: bool,
    tm: bool,
    tilesize: Optional[int],
    legacy_row_guard: bool,
    config: Optional[Path],
) -> None:
    """Convert a height map image to a normal map image.

    Examples:

        # Basic conversion
        normalmap convert -i height.png -o normal.png

        # Tileable texture with a stronger relief
        normalmap convert -i height.png -o normal.png --wrap --scale 4

        # Trackmania channel layout, streaming through stdin and stdout
        normalmap convert --tm -i - -o - < height.png > normal.png
    """
    try:
        options = build_options(
            config, xyz, tm, normalise, scale, unsigned_z, wrap, tilesize, legacy_row_guard
        )

        if input_file == STDIO_FILENAME:
            source = io.BytesIO(click.get_binary_stream("stdin").read())
            field = read_heightfield(source)
        else:
            field = read_heightfield(Path(input_file))

        nmap = convert(field, options)

        if output_file == STDIO_FILENAME:
            stdout = click.get_binary_stream("stdout")
            write_normal_map(nmap, stdout)
            stdout.flush()
        else:
            write_normal_map(nmap, Path(output_file))
            print_success(f"Wrote {nmap.width}x{nmap.height} {nmap.mode} normal map to {output_file}")

    except FileNotFoundError as e:
        print_error(str(e))
        sys.exit(EXIT_USER_ERROR)
    except OptionsError as e:
        print_error(str(e))
        sys.exit(EXIT_USER_ERROR)
    except (ImageFormatError, HeightFieldError) as e:
        print_error(str(e))
        sys.exit(EXIT_USER_ERROR)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        sys.exit(EXIT_SYSTEM_ERROR)


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--config",
    "-c",
    type=click.Path(path_type=Path),
    default=None,
    help="YAML file with conversion options to report the scale for",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    default=False,
    help="Output results as JSON",
)
def info(input_path: Path, config: Optional[Path], output_json: bool) -> None:
    """Display information about a height map image.

    INPUT_PATH is the path to an image file to inspect.
    """
    try:
        options = ConversionOptions.from_config_file(config) if config else ConversionOptions()
        field = read_heightfield(input_path)
        low, high = intensity_range(field)

        result = {
            "width": field.width,
            "height": field.height,
            "min": low,
            "max": high,
            "scale": effective_scale(field, options.replace(normalise=False)),
            "normalised_scale": effective_scale(field, options.replace(normalise=True)),
            "options": options.to_dict(),
        }

        if output_json:
            click.echo(json.dumps(result, indent=2))
        else:
            click.echo(f"Height map: {input_path.name}")
            click.echo(f"Size: {field.width}x{field.height}")
            click.echo(f"Intensity range: {low}-{high}")
            click.echo(f"Slope scale: {result['scale']:.6f}")
            click.echo(f"Normalised slope scale: {result['normalised_scale']:.6f}")

    except FileNotFoundError as e:
        print_error(str(e))
        sys.exit(EXIT_USER_ERROR)
    except OptionsError as e:
        print_error(str(e))
        sys.exit(EXIT_USER_ERROR)
    except ImageFormatError as e:
        print_error(f"Failed to read height map: {e}")
        sys.exit(EXIT_USER_ERROR)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        sys.exit(EXIT_SYSTEM_ERROR)


if __name__ == "__main__":
    cli()
