import argparse
import logging
import time
import sys
import json
from typing import Any, Dict, List
from concurrent.futures import ThreadPoolExecutor, as_completed
from colorama import Fore, Style, init
import yaml

from .config import load_config
from .errors import KatsiniError, MissingIdentifier
from .lookup import AppLookup

init(autoreset=True)

logger = logging.getLogger(__name__)

EXIT_LOOKUP_FAILED = 1
EXIT_BAD_INPUT = 2


def setup_logging(level: str):
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr
    )


def print_config_summary(config):
    """Show where browsers come from and whether the API fallback is live."""
    endpoint = config.browser.remote_endpoint or "local Chromium"
    fallback = "enabled" if config.huawei.configured else "disabled"
    print(f"{Fore.CYAN}{Style.BRIGHT}[CONFIG]{Style.RESET_ALL} "
          f"browser={endpoint} timeout={config.browser.timeout_seconds:.0f}s "
          f"appgallery-api-fallback={fallback}", file=sys.stderr)


def print_error(err: Exception):
    print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {err}", file=sys.stderr)


def run_single(lookup: AppLookup, provider: str, params: Dict[str, Any]) -> int:
    try:
        app = lookup.lookup(provider, **params)
    except MissingIdentifier as e:
        print_error(e)
        return EXIT_BAD_INPUT
    except KatsiniError as e:
        print_error(e)
        return EXIT_LOOKUP_FAILED
    print(json.dumps(app.to_dict(lookup.fields_for(provider)), indent=2))
    return 0


def load_batch(path: str) -> List[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []
    if not isinstance(data, list) or not all(isinstance(e, dict) for e in data):
        raise ValueError(f"{path}: expected a list of lookups")
    return data


def run_batch(lookup: AppLookup, entries: List[Dict[str, Any]], workers: int = 3, quiet=False) -> int:
    """Run lookups concurrently; each worker owns its own browser session."""
    results: List[Dict[str, Any]] = [None] * len(entries)
    failures = 0
    start_time = time.time()

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {}
        for i, entry in enumerate(entries):
            params = {str(k): v for k, v in entry.items()}
            provider = params.pop("provider", "")
            futures[executor.submit(lookup.lookup, provider, **params)] = (i, provider)

        for future in as_completed(futures):
            i, provider = futures[future]
            label = str(provider)
            try:
                app = future.result()
            except KatsiniError as e:
                failures += 1
                results[i] = {"provider": provider, "error": str(e)}
                if not quiet:
                    print(f"  {Fore.YELLOW}{label.upper():<10}{Style.RESET_ALL} → {e}", file=sys.stderr)
                continue
            except Exception as e:
                logger.exception("Lookup #%d (%s) failed: %s", i, label, e)
                failures += 1
                results[i] = {"provider": provider, "error": str(e)}
                continue
            results[i] = {"provider": provider, **app.to_dict(lookup.fields_for(provider))}
            if not quiet:
                print(f"  {Fore.GREEN}{label.upper():<10}{Style.RESET_ALL} → {app.title}", file=sys.stderr)

    duration = time.time() - start_time
    if not quiet:
        print(f"\n  {Fore.BLUE}[SUMMARY]{Style.RESET_ALL} {len(entries)} lookups, "
              f"{failures} failed in {duration:.1f}s", file=sys.stderr)
    print(json.dumps(results, indent=2))
    return EXIT_LOOKUP_FAILED if failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="katsini: mobile app store metadata lookup")
    parser.add_argument("--config", "-c", default="config.yml", help="Path to config.yml")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("playstore", help="Google Play Store (browser)")
    p.add_argument("--bundle-id", default="")
    p.add_argument("--lang", default="")
    p.add_argument("--country", default="")

    a = sub.add_parser("appstore", help="Apple App Store (iTunes lookup API)")
    a.add_argument("--app-id", default="")
    a.add_argument("--bundle-id", default="")
    a.add_argument("--country", default="")

    g = sub.add_parser("appgallery", help="Huawei AppGallery (browser, Connect API fallback)")
    g.add_argument("--app-id", default="")

    b = sub.add_parser("batch", help="Run a YAML list of lookups concurrently")
    b.add_argument("file")
    b.add_argument("--workers", type=int, default=3)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.logging.get("level", "INFO"))
    if not args.quiet:
        print_config_summary(config)
    lookup = AppLookup(config)

    if args.command == "batch":
        try:
            entries = load_batch(args.file)
        except (OSError, ValueError, yaml.YAMLError) as e:
            print_error(e)
            return EXIT_BAD_INPUT
        return run_batch(lookup, entries, workers=args.workers, quiet=args.quiet)

    params = {k: v for k, v in vars(args).items() if k in ("bundle_id", "app_id", "lang", "country")}
    return run_single(lookup, args.command, params)


if __name__ == "__main__":
    sys.exit(main())
