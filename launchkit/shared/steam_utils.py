"""
Steam Utilities Module

Environment detection from the Steam launch flags, performed once at startup
and passed to services.
"""

import logging
from enum import Enum
from typing import Mapping, Optional, Tuple

from ..backend.models.configuration import RuntimeEnvironment

logger = logging.getLogger(__name__)

DECK_WINDOW_SIZE = (1280, 800)
DESKTOP_WINDOW_SIZE = (1200, 800)


class SteamEnvironment(Enum):
    """Where the launcher was started from."""
    DESKTOP = "desktop"
    DECK = "deck"
    OS = "os"
    INDEPENDENT = "independent"


def detect_runtime_environment(environ: Optional[Mapping[str, str]] = None) -> RuntimeEnvironment:
    """
    Read the process environment once.

    Returns:
        RuntimeEnvironment to hand to SteamRuntimeDiscovery and the resolver
    """
    runtime = RuntimeEnvironment.from_environ(environ)
    logger.info(
        f"Runtime environment: steam={runtime.launched_from_steam}, "
        f"deck={runtime.is_steam_deck}, steamos={runtime.is_steam_os}"
    )
    return runtime


def detect_environment(runtime: RuntimeEnvironment) -> SteamEnvironment:
    """
    Classify the runtime environment.

    Deck and SteamOS flags only count when launched under Steam; a Steam
    launch without either is a desktop Steam client.
    """
    if not runtime.launched_from_steam:
        return SteamEnvironment.INDEPENDENT
    if runtime.is_steam_deck:
        return SteamEnvironment.DECK
    if runtime.is_steam_os:
        return SteamEnvironment.OS
    return SteamEnvironment.DESKTOP


def default_window_size(environment: SteamEnvironment) -> Tuple[int, int]:
    """Default launcher window size (width, height)."""
    if environment == SteamEnvironment.DECK:
        return DECK_WINDOW_SIZE
    return DESKTOP_WINDOW_SIZE
