"""Recover protobuf schema definitions embedded in compiled binaries."""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
