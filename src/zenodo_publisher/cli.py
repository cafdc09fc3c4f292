# src/zenodo_publisher/cli.py

import argparse
import json
import logging
import sys

import requests

from .config import load_config, resolve_token
from .errors import ZenodoApiError
from .publisher import publish
from .transport import RequestsTransport

# --- Logging Setup ---
logging.basicConfig(level=logging.INFO, format='%(message)s', stream=sys.stderr)
log = logging.getLogger("zenodo_publisher")


def handle_publish(args: argparse.Namespace) -> int:
    """Runs the publish workflow and reports the outcome. Returns the exit status."""
    try:
        with RequestsTransport(progress=not args.no_progress) as transport:
            record = publish(
                deposition_id=args.deposition_id,
                file_path=args.file_path,
                version=args.version,
                token=args.token,
                sandbox=args.sandbox,
                transport=transport,
            )
    except ZenodoApiError as e:
        reason = f"{e} ({e.detail})" if e.detail else str(e)
        log.error(f"✗ ERROR: Step '{e.step}' failed. Reason: {reason}")
        return 1
    except OSError as e:
        log.error(f"✗ ERROR: Could not read '{args.file_path}'. Reason: {e}")
        return 1
    except requests.exceptions.RequestException as e:
        log.error(f"✗ ERROR: Could not reach Zenodo. Reason: {e}")
        return 1
    except (KeyError, ValueError) as e:
        log.error(f"✗ ERROR: Unexpected response from Zenodo. Reason: {e!r}")
        return 1

    log.info("\n🎉 Published successfully! 🎉")
    log.info(f"   DOI: {record.doi}")
    log.info(f"   View on Zenodo: {record.html}")

    if args.json:
        print(json.dumps(record.as_dict()))
    else:
        for key, value in record.as_dict().items():
            print(f"{key}={value}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Publish a new version of an existing Zenodo deposition.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose (DEBUG) logging.")
    parser.add_argument("deposition_id", help="ID of the Zenodo deposition to create a new version of.")
    parser.add_argument("file_path", help="Path of the file to upload.")
    parser.add_argument("--version", required=True, dest="version", help="Version string of the new release.")
    parser.add_argument("--token", help="Your Zenodo access token. Overrides $ZENODO_TOKEN and the config file.")
    parser.add_argument("--sandbox", action="store_true", help="Use the Zenodo sandbox environment.")
    parser.add_argument("--no-progress", action="store_true", help="Do not show an upload progress bar.")
    parser.add_argument("--json", action="store_true", help="Print the published record as JSON.")
    return parser


def main(argv=None) -> int:
    """Main function to parse arguments, select token and publish."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        log.setLevel(logging.DEBUG)

    config = load_config()
    args.token = resolve_token(args.token, args.sandbox, config)
    if not args.token:
        env = "sandbox" if args.sandbox else "production"
        parser.error(f"A Zenodo '{env}' token is required. Provide it via --token, $ZENODO_TOKEN or the [tokens] table of .zenodo.toml.")

    return handle_publish(args)


if __name__ == "__main__":
    sys.exit(main())
