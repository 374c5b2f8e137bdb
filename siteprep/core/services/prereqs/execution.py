"""
L4 Execution — launching installers and waiting for them.

Installers are fire-and-forget: we start them, then block until their
image name disappears from the process table. The wait has no timeout;
the only way out early is to kill this session or the installer.
Exit codes are not consulted.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Sequence

from siteprep.adapters.base import ProcessLauncher, ProcessTable

logger = logging.getLogger(__name__)


def wait_while(
    is_alive: Callable[[], bool],
    interval: float,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Block until ``is_alive()`` returns False, checking every ``interval`` seconds.

    The first check happens immediately. Nothing is ever done to the
    thing being polled.

    Returns:
        The 1-based check number on which absence was observed. A
        process that stays alive for N checks returns N + 1.
    """
    tick = 0
    while True:
        tick += 1
        if not is_alive():
            return tick
        sleep(interval)


def launch_and_wait(
    launcher: ProcessLauncher,
    processes: ProcessTable,
    executable: str,
    args: Sequence[str],
    *,
    image_name: str,
    interval: float,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Start an installer and wait for its image to leave the process table.

    Returns:
        Number of liveness checks performed.
    """
    launcher.launch(executable, args)
    logger.info("Waiting for %s to finish (polling every %ss)", image_name, interval)
    started = time.monotonic()
    ticks = wait_while(lambda: processes.is_running(image_name), interval, sleep=sleep)
    logger.info("%s finished after %d checks (%.0fs)", image_name, ticks, time.monotonic() - started)
    return ticks
