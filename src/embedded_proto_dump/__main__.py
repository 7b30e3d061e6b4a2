"""Module entry point for `python -m embedded_proto_dump`."""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
