"""CLI entry point for the posture API server."""

import argparse
import os


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="posture-server",
        description="Security posture dashboard API server",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8080, help="Bind port (default: 8080)")
    parser.add_argument(
        "--local",
        action="store_true",
        help="Local dev mode: SQLite database and console logs",
    )
    parser.add_argument(
        "--seed-demo",
        action="store_true",
        help="Load demo services and Mend findings into an empty database",
    )
    args = parser.parse_args(argv)

    # Settings are read at import time, so set the environment first.
    if args.local:
        os.environ["POSTURE_LOCAL_MODE"] = "1"
        os.environ["POSTURE_LOCAL"] = "1"
    if args.seed_demo:
        os.environ["POSTURE_SEED_DEMO_DATA"] = "1"

    import uvicorn

    uvicorn.run("posture.main:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
