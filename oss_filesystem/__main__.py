"""Command line entry point for inspecting an OSS bucket through the adapter."""
import argparse
import logging
import sys

from botocore.exceptions import BotoCoreError, ClientError

from .adapter import OssAdapter
from .exceptions import FilesystemException
from .profiles import ProfileStorage
from .services import OssObjectService
from .settings import OptionsStorage

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pyossfs", description="Browse an OSS bucket as a filesystem.")
    parser.add_argument("--profile", required=True, help="name of a saved connection profile")
    parser.add_argument("--bucket", help="override the profile's bucket")
    parser.add_argument("--options", help="path to an adapter options JSON file")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    ls = commands.add_parser("ls", help="list a directory")
    ls.add_argument("path", nargs="?", default="")
    ls.add_argument("-r", "--recursive", action="store_true")

    exists = commands.add_parser("exists", help="check whether a file or directory exists")
    exists.add_argument("path")

    url = commands.add_parser("url", help="print the public URL of a file")
    url.add_argument("path")

    sign = commands.add_parser("sign", help="print a temporary signed URL")
    sign.add_argument("path")
    sign.add_argument("--expires", type=int, default=3600)
    sign.add_argument("--method", default="GET")

    rmdir = commands.add_parser("rmdir", help="delete a directory and everything below it")
    rmdir.add_argument("path")
    return parser


def build_adapter(args, profiles: ProfileStorage | None = None, client_factory=None) -> OssAdapter:
    profile = (profiles or ProfileStorage()).get(args.profile)
    options = OptionsStorage(args.options).load()
    service = OssObjectService.from_profile(profile, client_factory)
    return OssAdapter(service, args.bucket or profile.bucket, profile.prefix, options)


def run(args, adapter: OssAdapter, out=sys.stdout) -> int:
    if args.command == "ls":
        for attributes in adapter.list_contents(args.path, deep=args.recursive):
            if attributes.is_dir():
                out.write(f"{attributes.path}/\n")
            else:
                out.write(f"{attributes.file_size or 0:>12}  {attributes.path}\n")
        return 0
    if args.command == "exists":
        found = adapter.file_exists(args.path) or adapter.directory_exists(args.path)
        out.write("yes\n" if found else "no\n")
        return 0 if found else 1
    if args.command == "url":
        out.write(adapter.get_url(args.path) + "\n")
        return 0
    if args.command == "sign":
        out.write(adapter.get_temporary_url(args.path, args.expires, method=args.method) + "\n")
        return 0
    if args.command == "rmdir":
        adapter.delete_directory(args.path)
        return 0
    raise ValueError(f"unknown command {args.command!r}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return run(args, build_adapter(args))
    except (FilesystemException, BotoCoreError, ClientError, ValueError) as exc:
        LOGGER.exception("Command '%s' failed", args.command)
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
