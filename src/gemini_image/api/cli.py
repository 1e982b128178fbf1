"""``gemini-image`` command line interface.

Commands
--------
generate
    Create a new image from a prompt, optionally guided by context images.
edit
    Modify an existing image according to instructions.

Examples::

    gemini-image generate --prompt "A banana astronaut on Mars" --output ./images/
    gemini-image generate -p "A watercolor landscape" -a landscape --style watercolor
    gemini-image generate -p "Product shot" -c ./context.png --watermark ./logo.png
    gemini-image edit -p "Add neon lights to the skyline" -i ./city.png -o ./images/city-neon.png

``GOOGLE_API_KEY`` must be set before running any command.  On success the
saved path is printed to stdout; errors go to stderr and the exit status is 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Sequence

from pydantic import ValidationError

from gemini_image import __version__
from gemini_image.api.models import EditImageArgs, GenerateImageArgs
from gemini_image.api.tools import handle_edit_image, handle_generate_image, validation_failure
from gemini_image.core.config import GeminiImageConfig, config, configure_logging
from gemini_image.core.errors import ErrorKind, ImageToolError, MissingConfigurationError, ensure_tool_error
from gemini_image.core.service_factory import GeminiImageServices, create_services
from gemini_image.core.watermark import WATERMARK_POSITIONS

logger = logging.getLogger(__name__)

PROG = "gemini-image"

# CLI aspect names -> aspect ratios understood by the model prompt.
ASPECT_RATIOS: dict[str, str] = {
    "square": "1:1",
    "landscape": "16:9",
    "portrait": "9:16",
}

ServicesFactory = Callable[[GeminiImageConfig], GeminiImageServices]


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with ``generate`` and ``edit`` subcommands."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Generate and edit images with Google Gemini.",
        epilog="Environment: GOOGLE_API_KEY must be set before running any command.",
    )
    parser.add_argument("-v", "--version", action="version", version=__version__)
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    generate = subparsers.add_parser(
        "generate",
        help="Create a new image with Google Gemini.",
        description="Create a new image with Google Gemini.",
    )
    generate.add_argument(
        "-p", "--prompt", required=True, help="Detailed description of the image to create."
    )
    generate.add_argument(
        "-a",
        "--aspect",
        choices=sorted(ASPECT_RATIOS),
        help="Aspect ratio: square, landscape, or portrait. Defaults to square.",
    )
    generate.add_argument("-s", "--style", help="Optional artistic style hint.")
    generate.add_argument(
        "-c",
        "--context",
        action="append",
        default=[],
        metavar="PATH",
        help="Reference image to guide generation. Repeat for multiple images.",
    )
    _add_output_arguments(generate, "generated")

    edit = subparsers.add_parser(
        "edit",
        help="Modify an existing image with Google Gemini.",
        description="Modify an existing image with Google Gemini.",
    )
    edit.add_argument(
        "-p", "--prompt", required=True, help="Instructions describing the desired edits."
    )
    edit.add_argument(
        "-i", "--input", required=True, metavar="PATH", help="Path to the source image to edit."
    )
    _add_output_arguments(edit, "edited")

    return parser


def _add_output_arguments(parser: argparse.ArgumentParser, noun: str) -> None:
    parser.add_argument(
        "-o",
        "--output",
        metavar="PATH",
        help=f"Where to save the {noun} image. Defaults to the current directory.",
    )
    parser.add_argument(
        "--watermark", metavar="PATH", help="Apply a watermark image over the result."
    )
    parser.add_argument(
        "--watermark-position",
        choices=WATERMARK_POSITIONS,
        help="Position for the watermark. Defaults to bottom-right.",
    )


def _generate_args(namespace: argparse.Namespace, cfg: GeminiImageConfig) -> GenerateImageArgs:
    aspect_ratio = ASPECT_RATIOS[namespace.aspect] if namespace.aspect else cfg.default_aspect_ratio
    return GenerateImageArgs(
        description=namespace.prompt.strip(),
        aspect_ratio=aspect_ratio,
        style=namespace.style,
        output_path=namespace.output,
        watermark_path=namespace.watermark,
        watermark_position=namespace.watermark_position or cfg.default_watermark_position,
        images=namespace.context,
    )


def _edit_args(namespace: argparse.Namespace, cfg: GeminiImageConfig) -> EditImageArgs:
    return EditImageArgs(
        image_path=namespace.input,
        description=namespace.prompt.strip(),
        output_path=namespace.output,
        watermark_path=namespace.watermark,
        watermark_position=namespace.watermark_position or cfg.default_watermark_position,
    )


def print_error(command: str, error: ImageToolError) -> None:
    """Write ``[command] message`` plus cause and details to stderr."""
    print(f"[{command}] {error.message}", file=sys.stderr)
    cause = error.data.get("cause")
    if cause is not None:
        print(f"Cause: {cause}", file=sys.stderr)
    details = [(key, value) for key, value in error.data.items() if key != "cause"]
    if details:
        print("Details:", file=sys.stderr)
        for key, value in details:
            print(f"  - {key}: {value}", file=sys.stderr)


def run_command(
    namespace: argparse.Namespace,
    cfg: GeminiImageConfig,
    services_factory: ServicesFactory = create_services,
) -> int:
    """Execute a parsed command and return the process exit status."""
    command = namespace.command
    try:
        if command == "generate":
            args = _generate_args(namespace, cfg)
        else:
            args = _edit_args(namespace, cfg)
    except ValidationError as e:
        print_error(command, validation_failure(e))
        return 1

    try:
        services = services_factory(cfg)
    except MissingConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    handler = handle_generate_image if command == "generate" else handle_edit_image
    try:
        file_path = handler(args, services.gemini_service, services.image_service)
    except Exception as e:
        error = ensure_tool_error(e, ErrorKind.INTERNAL, "Command failed")
        if not error.is_client_error:
            logger.debug(f"{command} failed", exc_info=True)
        print_error(command, error)
        return 1

    print(f"Saved image to {file_path}")
    return 0


def main(
    argv: Sequence[str] | None = None,
    services_factory: ServicesFactory = create_services,
) -> int:
    """Entry point for the ``gemini-image`` console script.

    Args:
        argv: Arguments without the program name.  Defaults to ``sys.argv[1:]``.
        services_factory: Builds the services from configuration.

    Returns:
        Process exit status.
    """
    parser = build_parser()
    namespace = parser.parse_args(argv)

    if not namespace.command:
        parser.print_help()
        return 0

    configure_logging(config.log_level)
    return run_command(namespace, config, services_factory)


if __name__ == "__main__":
    sys.exit(main())
