"""
Welut - Application entry point
"""

import argparse
import logging

from config import LUT_LIBRARY_DIR


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Apply PNG color LUTs to photos and camera RAW files.")
    parser.add_argument("--host", default="127.0.0.1", help="Address to bind the UI server")
    parser.add_argument("--port", type=int, default=7860)
    parser.add_argument("--library", default=LUT_LIBRARY_DIR, help="LUT library directory")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    # Imported here so --help works without the UI stack
    from ui.app import build_default_app

    app = build_default_app(args.library)
    app.launch(server_name=args.host, server_port=args.port, inbrowser=True)


if __name__ == "__main__":
    main()
