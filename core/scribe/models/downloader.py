"""
Download model artifacts over HTTP(S).
Each download runs under a fixed deadline and can be cancelled.
"""

import os
import tempfile
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import httpx

from scribe.config import DOWNLOAD_CHUNK_SIZE, DOWNLOAD_TIMEOUT_SECONDS
from scribe.errors import (
    DownloadCancelledError,
    DownloadError,
    DownloadTimeoutError,
    FailureCategory,
)
from scribe.models.catalog import ModelDescriptor
from scribe.utils.disk import format_bytes
from scribe.utils.logging import logger


@dataclass
class DownloadSession:
    """A single download attempt. Not persisted."""

    descriptor: ModelDescriptor
    deadline: float  # monotonic seconds
    cancel_event: threading.Event = field(default_factory=threading.Event)

    def check(self, now: float) -> None:
        """Raise if the attempt was cancelled or ran past its deadline."""
        url = self.descriptor.source_url
        if self.cancel_event.is_set():
            raise DownloadCancelledError("Download cancelled", url)
        if now > self.deadline:
            raise DownloadTimeoutError("Download deadline exceeded", url)


def _cleanup_partial_file(file_path: Path) -> None:
    try:
        file_path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Failed to remove partial download: path={file_path} error={e}")

class ModelDownloader:
    """
    Fetch whole model artifacts to their descriptor's local path.

    Each attempt streams into its own temporary ``.part`` file beside the
    target, which replaces the target only once complete. A failed attempt
    never leaves a partial file at ``local_path``, and concurrent attempts
    for the same model do not share files. There is no retry loop.

    The transfer runs on a worker thread; the caller waits on it under the
    session deadline, so a stalled read cannot hold the caller past it.
    """

    def __init__(
        self,
        timeout: float = DOWNLOAD_TIMEOUT_SECONDS,
        chunk_size: int = DOWNLOAD_CHUNK_SIZE,
        transport: Optional[httpx.BaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
        poll_interval: float = 0.1,
    ):
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.poll_interval = poll_interval
        self._transport = transport
        self._clock = clock

    def start_session(
        self,
        descriptor: ModelDescriptor,
        cancel_event: Optional[threading.Event] = None,
    ) -> DownloadSession:
        """Open a download session bound to the configured deadline."""
        return DownloadSession(
            descriptor=descriptor,
            deadline=self._clock() + self.timeout,
            cancel_event=cancel_event or threading.Event(),
        )

    def download(
        self,
        descriptor: ModelDescriptor,
        cancel_event: Optional[threading.Event] = None,
    ) -> Path:
        """
        Download a descriptor's artifact.

        The caller is expected to have checked free disk space.

        Args:
            descriptor: Model to fetch
            cancel_event: Optional event to cancel the download

        Returns:
            Path to the downloaded file (``descriptor.local_path``)

        Raises:
            DownloadTimeoutError: The deadline passed before completion
            DownloadCancelledError: ``cancel_event`` was set
            DownloadError: Non-2xx status, transport or filesystem failure
        """
        session = self.start_session(descriptor, cancel_event)
        url = descriptor.source_url
        dest_path = Path(descriptor.local_path)
        partial_path: Optional[Path] = None

        logger.info(f"Downloading model: name={descriptor.name} url={url}")
        started = self._clock()

        try:
            session.check(started)
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=dest_path.parent, prefix=f".{dest_path.name}-", suffix=".part"
            )
            os.close(fd)
            partial_path = Path(tmp_name)
            downloaded = self._fetch_until_deadline(session, partial_path)
            os.replace(partial_path, dest_path)
        except DownloadError as e:
            logger.error(f"Download failed: name={descriptor.name} error={e.message}")
            raise
        except httpx.TimeoutException as e:
            logger.error(f"Download timed out: name={descriptor.name} error={e}")
            raise DownloadTimeoutError(f"Download timed out: {e}", url) from e
        except httpx.HTTPError as e:
            logger.error(f"Download failed: name={descriptor.name} error={e}")
            raise DownloadError(f"Download failed: {e}", url) from e
        except OSError as e:
            logger.error(f"Failed to write download: path={dest_path} error={e}")
            raise DownloadError(
                f"Failed to write {dest_path}: {e}", url, FailureCategory.FILESYSTEM
            ) from e
        finally:
            if partial_path is not None:
                _cleanup_partial_file(partial_path)

        logger.info(
            f"Downloaded model: name={descriptor.name} path={dest_path} "
            f"size={format_bytes(downloaded)} seconds={self._clock() - started:.1f}"
        )
        return dest_path

    def _fetch_until_deadline(self, session: DownloadSession, partial_path: Path) -> int:
        """
        Run ``_fetch`` on a worker thread and wait for it under the deadline.

        On timeout or cancellation the caller returns immediately; the worker
        stops at its next session check or network timeout and its output is
        discarded.
        """
        outcome: dict = {}

        def do_fetch():
            try:
                outcome["bytes"] = self._fetch(session, partial_path)
            except Exception as e:
                outcome["error"] = e

        worker = threading.Thread(
            target=do_fetch,
            name=f"download-{session.descriptor.name}",
            daemon=True,
        )
        worker.start()

        while worker.is_alive():
            session.check(self._clock())
            worker.join(self.poll_interval)

        if "error" in outcome:
            raise outcome["error"]
        return outcome["bytes"]

    def _fetch(self, session: DownloadSession, partial_path: Path) -> int:
        """Stream the response body into ``partial_path``; return bytes written."""
        url = session.descriptor.source_url
        downloaded = 0
        # Bounds each network wait so the worker does not outlive the deadline
        remaining = max(session.deadline - self._clock(), self.poll_interval)

        with httpx.Client(
            follow_redirects=True,
            timeout=remaining,
            transport=self._transport,
        ) as client:
            with client.stream("GET", url) as response:
                if not response.is_success:
                    raise DownloadError(
                        f"Download failed: HTTP {response.status_code}", url
                    )

                # The caller deletes the partial file once it gives up
                session.check(self._clock())
                with open(partial_path, "wb") as f:
                    for chunk in response.iter_bytes(chunk_size=self.chunk_size):
                        session.check(self._clock())
                        f.write(chunk)
                        downloaded += len(chunk)

        return downloaded
