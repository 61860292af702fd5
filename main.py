import argparse
import asyncio
import logging
import sys

import cover_cache
import freshness
import mod_inventory
import steam_mod
from config import Config, load_config
from errors import NetworkFailure
from telemetry import configure_tracing, shutdown_tracing
from workshop_tool import open_workshop_page


def setup_logging(config: Config) -> None:
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")
    if config.log_file:
        handler = logging.FileHandler(config.log_file, mode="a", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        logging.getLogger().addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workshop-freshness",
        description="Inspect Steam Workshop mods installed for a dedicated server",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="list installed workshop items")
    list_cmd.add_argument("install_dir")

    check_cmd = sub.add_parser("check", help="check installed items against the Workshop")
    check_cmd.add_argument("install_dir")
    check_cmd.add_argument("mod_ids", nargs="*", type=int)
    check_cmd.add_argument("--concurrency", type=int, default=None)

    cover_cmd = sub.add_parser("cover", help="print the cached cover image path")
    cover_cmd.add_argument("install_dir")
    cover_cmd.add_argument("mod_id", type=int)

    info_cmd = sub.add_parser("info", help="show the Workshop title, update date and cover URL")
    info_cmd.add_argument("mod_id", type=int)

    open_cmd = sub.add_parser("open", help="open the Workshop page in a browser")
    open_cmd.add_argument("mod_id", type=int)
    return parser


def cmd_list(args: argparse.Namespace, config: Config) -> int:
    mods = mod_inventory.iter_installed_mods(args.install_dir, config=config)
    if not mods:
        print("No workshop items installed")
        return 0
    for mod in mods:
        print(f"{mod.mod_id}\t{mod.folder_name}\t{mod.last_modified.isoformat()}")
    return 0


async def cmd_check(args: argparse.Namespace, config: Config) -> int:
    results = await freshness.check_mods(
        args.install_dir,
        args.mod_ids or None,
        concurrency=args.concurrency,
        config=config,
    )
    if not results:
        print("No workshop items to check")
        return 0
    for mod_id, outdated in results.items():
        print(f"{mod_id}\t{'out of date' if outdated else 'up to date'}")
    return 1 if any(results.values()) else 0


async def cmd_cover(args: argparse.Namespace, config: Config) -> int:
    path = await cover_cache.get_cover_image_path(args.install_dir, args.mod_id, config=config)
    if not path:
        return 1
    print(path)
    return 0


async def cmd_info(args: argparse.Namespace, config: Config) -> int:
    try:
        page = await steam_mod.fetch_workshop_page(args.mod_id, config=config)
    except NetworkFailure as exc:
        logging.warning("Failed to fetch workshop page for %s: %s", args.mod_id, exc)
        return 1
    updated = page.last_updated.isoformat() if page.last_updated else page.last_updated_text or "-"
    print(f"{page.mod_id}\t{page.title or '-'}\t{updated}\t{page.cover_image_url or '-'}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config()
    setup_logging(config)
    configure_tracing(config)
    try:
        if args.command == "list":
            return cmd_list(args, config)
        if args.command == "check":
            return asyncio.run(cmd_check(args, config))
        if args.command == "cover":
            return asyncio.run(cmd_cover(args, config))
        if args.command == "info":
            return asyncio.run(cmd_info(args, config))
        return 0 if open_workshop_page(args.mod_id) else 1
    finally:
        shutdown_tracing()


if __name__ == "__main__":
    sys.exit(main())
