# clip_cli.py

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from clipcache.core.fetch.errors import ClipCacheError, InvalidReferenceError
from clipcache.inputs.settings import debug_enabled, load_policy
from clipcache.tools.clip_service import ClipService


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if (verbose or debug_enabled()) else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Resolve and fetch short audio clips")
    p.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds")
    p.add_argument("--user-agent", type=str, default=None)
    p.add_argument("-v", "--verbose", action="store_true")

    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("resolve", help="Print the direct audio URL for a reference")
    r.add_argument("reference")

    f = sub.add_parser("fetch", help="Download a clip and print a payload summary")
    f.add_argument("reference")
    f.add_argument("--out", type=str, default=None, help="Write the data URI to this file")

    pc = sub.add_parser("precache", help="Download several clips in the background pool")
    pc.add_argument("references", nargs="+")
    pc.add_argument("--wait", type=float, default=None, help="Max seconds to wait for the batch")

    return p


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        policy = load_policy(timeout_s=args.timeout, user_agent=args.user_agent)
    except ValueError as e:
        print(f"error: {e}")
        return 2

    with ClipService(policy) as svc:
        try:
            if args.command == "resolve":
                print(svc.resolve(args.reference))

            elif args.command == "fetch":
                payload = svc.play(args.reference)
                print(f"{payload.source_url}: {payload.content_type}, {payload.raw_size} bytes, encoded {payload.encoded_length} chars")
                if args.out:
                    Path(args.out).write_text(payload.encoded, encoding="utf-8")
                    print(f"wrote {args.out}")

            elif args.command == "precache":
                urls = [svc.resolve(ref) for ref in args.references]
                report = svc.precache(urls, timeout=args.wait)
                print(f"cached={len(report.cached)} skipped={len(report.skipped)} failed={len(report.failed)}")
                for url, msg in report.failed.items():
                    print(f"  failed {url}: {msg}")
                print(svc.cache_info().summary())
                if not report.ok:
                    return 1

        except InvalidReferenceError as e:
            print(f"invalid reference: {e}")
            return 2
        except ClipCacheError as e:
            print(f"error ({type(e).__name__}): {e}")
            return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
