"""Entry point for CDN Cert Sync.

Usage:
    python -m cdn_cert_sync [run]          Watch the certificate files and sync on change
    python -m cdn_cert_sync once           Upload the certificate pair once and exit
    python -m cdn_cert_sync help           Show this message

Options:
    --env-file PATH    Read settings from PATH instead of $DOTENV_PATH or ./.env
"""

from __future__ import annotations

import sys

from cdn_cert_sync.errors import InvalidConfiguration


def _split_args(argv: list[str]) -> tuple[str, str | None]:
    """Return (command, env_file) from the raw argument list."""
    cmd = ""
    env_file = None
    args = iter(argv)
    for arg in args:
        if arg == "--env-file":
            env_file = next(args, None)
            if env_file is None:
                raise InvalidConfiguration("--env-file requires a path")
        elif arg.startswith("--env-file="):
            env_file = arg.split("=", 1)[1]
        elif not cmd:
            cmd = arg
        else:
            raise InvalidConfiguration(f"Unexpected argument: {arg}")
    return cmd or "run", env_file


def main(argv: list[str] | None = None) -> int:
    """Run the requested command and return the process exit code."""
    argv = sys.argv[1:] if argv is None else argv
    try:
        cmd, env_file = _split_args(argv)
        if cmd in ("help", "-h", "--help"):
            print(__doc__)
            return 0
        if cmd not in ("run", "once"):
            print(f"Unknown command: {cmd}", file=sys.stderr)
            print(__doc__, file=sys.stderr)
            return 2

        from cdn_cert_sync.app import CertSyncApp, setup_logging
        from cdn_cert_sync.config import load_config

        config = load_config(env_file)
        setup_logging(config)
    except InvalidConfiguration as exc:
        print(f"ERROR: invalid configuration: {exc}", file=sys.stderr)
        return 2

    app = CertSyncApp(config)
    if cmd == "once":
        try:
            result = app.sync_now()
        finally:
            app.uploader.close()
        return 0 if result.success else 1

    try:
        app.run_forever()
    except FileNotFoundError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
