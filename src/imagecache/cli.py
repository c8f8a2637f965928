"""Command line front-end.

    imagecache clear [--template NAME | --filename NAME]
    imagecache get TEMPLATE FILENAME [--max-size N] [--coords C] [--ratio R] ...
    imagecache templates
"""

import argparse
import sys
from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from imagecache.application.use_cases.clear_cache import CacheMaintenance
from imagecache.application.use_cases.get_cached_image import (
    GetCachedImageRequest,
    ImageCacheService,
)
from imagecache.config import ImageCacheConfig, get_config
from imagecache.domain.exceptions import (
    ImageCacheError,
    InvalidInputError,
    SourceImageNotFoundError,
)
from imagecache.infrastructure.templates.registry import CROP_TEMPLATE
from imagecache.shared.logger import setup_logging

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="imagecache", description="Image cache tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    clear = subparsers.add_parser("clear", help="Clear cached images")
    scope = clear.add_mutually_exclusive_group()
    scope.add_argument("--template", help="Only clear this template")
    scope.add_argument("--filename", help="Only clear images derived from this file")

    get = subparsers.add_parser("get", help="Print the cached image path, building it if needed")
    get.add_argument("template")
    get.add_argument("filename")
    get.add_argument("--max-size", type=int)
    get.add_argument("--max-width", type=int)
    get.add_argument("--max-height", type=int)
    get.add_argument("--coords", help="x,y,width,height")
    get.add_argument("--ratio", help="width:height or width x height")

    subparsers.add_parser("templates", help="List registered templates")
    return parser


def run(
    argv: Sequence[str] | None = None,
    app_config: ImageCacheConfig | None = None,
    console: Console | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    app_config = app_config or get_config()
    console = console or Console()

    try:
        match args.command:
            case "clear":
                return _clear(args, app_config, console)
            case "get":
                return _get(args, app_config, console)
            case _:
                return _templates(app_config, console)
    except (InvalidInputError, SourceImageNotFoundError) as e:
        console.print(f"[yellow]{e.public_message}:[/yellow] {escape(str(e))}")
        return EXIT_REJECTED
    except ImageCacheError as e:
        console.print(f"[red]{e.public_message}[/red]")
        return EXIT_FAILED


def _clear(args: argparse.Namespace, app_config: ImageCacheConfig, console: Console) -> int:
    service = ImageCacheService.from_config(app_config)
    maintenance = CacheMaintenance(store=service.store, templates=service.registry)

    if args.template is not None:
        removed = maintenance.clear_template(args.template)
        console.print(f"Image cache for template '{args.template}' cleared ({removed} directories).")
    elif args.filename is not None:
        removed = maintenance.clear_filename(args.filename)
        console.print(f"Cached images of '{args.filename}' cleared ({removed} files).")
    else:
        removed = maintenance.clear_all()
        console.print(f"All image cache cleared ({removed} template directories).")
    return EXIT_OK


def _check_crop_filter(args: argparse.Namespace, app_config: ImageCacheConfig) -> None:
    if args.template != CROP_TEMPLATE:
        return
    if app_config.crop_filter_type == "max_size":
        rejected = {"--max-width": args.max_width, "--max-height": args.max_height}
    else:
        rejected = {"--max-size": args.max_size}
    given = [flag for flag, value in rejected.items() if value is not None]
    if given:
        raise InvalidInputError(
            f"{', '.join(given)} not accepted by the crop template "
            f"(crop_filter_type={app_config.crop_filter_type})"
        )


def _get(args: argparse.Namespace, app_config: ImageCacheConfig, console: Console) -> int:
    _check_crop_filter(args, app_config)
    params = {
        "max_size": args.max_size,
        "max_width": args.max_width,
        "max_height": args.max_height,
        "coords": args.coords,
        "ratio": args.ratio,
    }
    service = ImageCacheService.from_config(app_config)
    response = service.execute(
        GetCachedImageRequest(
            template=args.template,
            filename=args.filename,
            params={key: value for key, value in params.items() if value is not None},
        )
    )
    status = "hit" if response.cache_hit else "built"
    console.print(f"{response.path} [dim]({status})[/dim]")
    return EXIT_OK


def _templates(app_config: ImageCacheConfig, console: Console) -> int:
    service = ImageCacheService.from_config(app_config)
    table = Table(title="Templates")
    table.add_column("Name")
    for name in service.registry.names():
        table.add_row(name)
    console.print(table)
    return EXIT_OK


def main() -> None:
    app_config = get_config()
    setup_logging(app_config.log_level, app_config.logs_dir)
    sys.exit(run(app_config=app_config))


if __name__ == "__main__":
    main()
