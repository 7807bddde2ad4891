import argparse
import logging
import os
import sys

from picup.client import DEFAULT_API_URL, DEFAULT_TIMEOUT, upload
from picup.errors import PicupError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="picup", description="Upload images to a PicUp server.")
    parser.add_argument(
        "-t", "--token",
        default=os.environ.get("PICUP_TOKEN"),
        help="Token for access to uploading images to the server (default: $PICUP_TOKEN).",
    )
    parser.add_argument(
        "-u", "--api-url",
        default=os.environ.get("PICUP_API_URL", DEFAULT_API_URL),
        help=f"Base URL of the PicUp server (default: {DEFAULT_API_URL}).",
    )
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Request timeout in seconds.")
    parser.add_argument("images", nargs="+", help="File paths for images to be uploaded.")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if not args.token:
        print("error: no token given (use --token or PICUP_TOKEN)", file=sys.stderr)
        return 2

    try:
        results = upload(args.api_url, args.token, args.images, timeout=args.timeout)
    except PicupError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 2

    failed = 0
    for path, result in zip(args.images, results):
        if result.ok:
            print(result.url)
        else:
            failed += 1
            print(f"error: {path}: {result.error}", file=sys.stderr)
    return 1 if failed else 0


def serve(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="picup-srv", description="Run the PicUp upload server.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=None, help="Listening port (default: $PICUP_PORT or 19190).")
    args = parser.parse_args(argv)

    if args.port:
        # config derives the default URL prefix from the port at import time
        os.environ["PICUP_PORT"] = str(args.port)

    import uvicorn

    from picup.config import KEEP_ALIVE_TIMEOUT, PORT, STORAGE_DIR, URL_PREFIX

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger(__name__).info(
        "PicUp server is now listening to port %s, storing into %s, serving URLs under %s. Ctrl+C to stop the server.",
        PORT,
        STORAGE_DIR,
        URL_PREFIX,
    )
    uvicorn.run("picup.main:app", host=args.host, port=PORT, timeout_keep_alive=KEEP_ALIVE_TIMEOUT)
    return 0


if __name__ == "__main__":
    sys.exit(main())
