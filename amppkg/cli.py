# amppkg/cli.py

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from amppkg.core.errors import PACKAGER_ERRORS, UnsupportedSchemeError
from amppkg.core.fetch import fetch_document
from amppkg.core.transform import transform
from amppkg.core.urls import absolute_url, decode_subdomain, encode_domain_label, get_cache_url
from amppkg.inputs.config import ConfigLoader, PackagerConfig
from amppkg.schemas.models import ResourceReference, TransformRequest

logger = logging.getLogger("amppkg")

EXIT_ERROR = 1
EXIT_UNSUPPORTED = 2


def _width(val: str) -> int:
    try:
        return int(val)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid width: {val!r}") from e


def _cmd_subdomain(args: argparse.Namespace, cfg: PackagerConfig) -> int:
    if args.decode:
        origin = decode_subdomain(args.host)
        if origin is None:
            print(f"{args.host}: not a human-readable cache subdomain", file=sys.stderr)
            return EXIT_ERROR
        print(origin)
        return 0

    label = encode_domain_label(args.host)
    print(label.encoded)
    if not label.human_readable:
        logger.info("%s uses the hashed fallback label", args.host)
    return 0


def _cmd_resolve(args: argparse.Namespace, cfg: PackagerConfig) -> int:
    ref = ResourceReference(raw_url=args.raw, base_url=args.base or "", document_url=args.document)
    print(absolute_url(ref))
    return 0


def _cmd_cache_url(args: argparse.Namespace, cfg: PackagerConfig) -> int:
    try:
        cache_url = get_cache_url(
            args.root,
            args.base or "",
            args.raw,
            args.kind,
            args.width,
            cache_host=cfg.cache_host,
        )
    except UnsupportedSchemeError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_UNSUPPORTED
    print(cache_url.url)
    return 0


def _cmd_transform(args: argparse.Namespace, cfg: PackagerConfig) -> int:
    if args.url:
        doc = fetch_document(args.url, config=cfg)
        html, document_url = doc.html, args.document_url or doc.url
    else:
        path = Path(args.file)
        html = path.read_text(encoding="utf-8", errors="surrogateescape")
        document_url = args.document_url or path.resolve().as_uri()

    request = TransformRequest(html=html, document_url=document_url, allowed_formats=cfg.allowed_formats)
    result = transform(request, cache_host=cfg.cache_host)
    logger.info(
        "rewrote %d subresources (%d skipped), %d preloads",
        len(result.rewritten),
        len(result.skipped),
        len(result.metadata.preloads),
    )

    if args.out:
        Path(args.out).write_text(result.html, encoding="utf-8", errors="surrogateescape")
    else:
        sys.stdout.write(result.html)
        sys.stdout.write("\n")

    preloads = [p.model_dump(by_alias=True, exclude_none=True) for p in result.metadata.preloads]
    print(json.dumps({"preloads": preloads}, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="amppkg", description="AMP cache URL tools")
    p.add_argument("--config", type=str, default=None, help="Path to a JSON config file")
    p.add_argument("--log-level", type=str, default="WARNING", choices=("DEBUG", "INFO", "WARNING", "ERROR"))
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("subdomain", help="Cache subdomain label for an origin host")
    s.add_argument("host")
    s.add_argument("--decode", action="store_true", help="Decode a human-readable label back to its host")
    s.set_defaults(func=_cmd_subdomain)

    r = sub.add_parser("resolve", help="Resolve a reference against a document/base URL")
    r.add_argument("--document", type=str, required=True)
    r.add_argument("--base", type=str, default=None, help="Defaults to the document URL")
    r.add_argument("raw")
    r.set_defaults(func=_cmd_resolve)

    c = sub.add_parser("cache-url", help="Cache URL for a subresource reference")
    c.add_argument("--root", type=str, required=True, help="URL of the referencing document")
    c.add_argument("--base", type=str, default=None)
    c.add_argument("--kind", type=str, choices=("image", "other"), default="other")
    c.add_argument("--width", type=_width, default=0, help="Desired image width (images only)")
    c.add_argument("raw")
    c.set_defaults(func=_cmd_cache_url)

    t = sub.add_parser("transform", help="Rewrite a document's subresources to cache URLs")
    src = t.add_mutually_exclusive_group(required=True)
    src.add_argument("--file", type=str, default=None)
    src.add_argument("--url", type=str, default=None)
    t.add_argument("--document-url", type=str, default=None, help="Public URL of the document")
    t.add_argument("--out", type=str, default=None, help="Write the HTML here instead of stdout")
    t.set_defaults(func=_cmd_transform)

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        cfg = ConfigLoader().load(args.config)
        return int(args.func(args, cfg))
    except PACKAGER_ERRORS as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
