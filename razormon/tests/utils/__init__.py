"""
Test utilities and helper functions.

Provides synthetic events, stub trigger flags and ROOT file writers shared
across the test suite.
"""

from .event_factory import (
    DEFAULT_TAGS,
    REFERENCE_HEMISPHERES,
    REFERENCE_MET,
    StubFlag,
    generate_event_stream,
    make_razor_event,
    write_events_root_file,
)

__all__ = [
    "DEFAULT_TAGS",
    "REFERENCE_HEMISPHERES",
    "REFERENCE_MET",
    "StubFlag",
    "generate_event_stream",
    "make_razor_event",
    "write_events_root_file",
]
