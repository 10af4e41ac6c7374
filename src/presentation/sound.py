"""Alert sound playback via pydub."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import structlog
from pydub import AudioSegment
from pydub.playback import play as play_segment

logger = structlog.stdlib.get_logger()


class SoundPlayer:
    """Plays sound files from a directory.

    ``play`` blocks until the clip finishes; ``play_async`` runs it in a
    worker thread and never raises, so alert handling does not wait on audio.
    A missing file falls back to the system beep.
    """

    def __init__(self, sounds_dir: str | Path) -> None:
        self.sounds_dir = Path(sounds_dir)
        self._tasks: set[asyncio.Task[None]] = set()

    def resolve(self, filename: str) -> Path:
        return self.sounds_dir / filename

    def play(self, filename: str) -> None:
        """Decode and play *filename* synchronously.

        Raises whatever pydub raises when decoding or output fails.
        """
        path = self.resolve(filename)
        if not path.exists():
            logger.warning("sound_file_missing", path=str(path), fallback="beep")
            self.beep()
            return

        logger.info("sound_playing", path=str(path))
        segment = AudioSegment.from_file(path)
        play_segment(segment)

    def beep(self) -> None:
        if sys.platform == "win32":
            import winsound

            winsound.MessageBeep(winsound.MB_ICONEXCLAMATION)
        else:
            sys.stderr.write("\a")
            sys.stderr.flush()

    def play_async(self, filename: str) -> asyncio.Task[None]:
        """Fire-and-forget playback. Failures are logged, never raised."""
        task = asyncio.create_task(self._play_logged(filename), name=f"sound-{filename}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _play_logged(self, filename: str) -> None:
        try:
            await asyncio.to_thread(self.play, filename)
        except Exception:
            logger.exception("sound_play_failed", filename=filename)

    async def close(self) -> None:
        """Wait for in-flight playback to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
