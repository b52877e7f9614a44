"""Download strategies used by the fetcher.

Each strategy is one way of moving bytes from a URL into a file: an
external transfer tool with a fixed set of options, or an in-process
HTTP client for images that ship neither curl nor wget. Strategies are
tried in order for every URL; compressed transfers come first.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import requests

from assetctl.config import Config

logger = logging.getLogger("assetctl.strategies")

CHUNK_SIZE = 64 * 1024


class DownloadError(Exception):
    """A single transfer attempt failed."""


class DownloadStrategy:
    """Base class for a way of downloading one URL into one file."""

    name = "base"

    def available(self) -> bool:
        return True

    def download(self, url: str, dest: Path) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class CommandStrategy(DownloadStrategy):
    """Run an external transfer tool.

    ``args`` may reference ``{url}``, ``{dest}``, ``{connect_timeout}``,
    ``{retries}`` and ``{retry_delay}``.
    """

    def __init__(self, name: str, tool: str, args: Sequence[str],
                 connect_timeout: int, retries: int, retry_delay: int,
                 runner: Callable = subprocess.run,
                 which: Callable[[str], Optional[str]] = shutil.which):
        self.name = name
        self.tool = tool
        self.args = list(args)
        self.connect_timeout = connect_timeout
        self.retries = retries
        self.retry_delay = retry_delay
        self.runner = runner
        self.which = which

    def available(self) -> bool:
        return self.which(self.tool) is not None

    def build_command(self, url: str, dest: Path) -> List[str]:
        values = {
            'url': url,
            'dest': str(dest),
            'connect_timeout': self.connect_timeout,
            'retries': self.retries,
            'retry_delay': self.retry_delay,
        }
        return [self.tool] + [arg.format(**values) for arg in self.args]

    def download(self, url: str, dest: Path) -> None:
        cmd = self.build_command(url, dest)
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            self.runner(cmd, check=True, capture_output=True, text=True)
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or '').strip()
            raise DownloadError(f"{self.tool} exited with {e.returncode}: {stderr}") from e
        except (OSError, subprocess.SubprocessError) as e:
            raise DownloadError(f"{self.tool} failed: {e}") from e


class RequestsStrategy(DownloadStrategy):
    """In-process HTTP transfer, used when no transfer tool is installed."""

    name = "requests"

    def __init__(self, connect_timeout: int, read_timeout: Optional[int] = None,
                 session: Optional[requests.Session] = None):
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout or Config.API_TIMEOUT
        self.session = session

    def download(self, url: str, dest: Path) -> None:
        getter = self.session.get if self.session is not None else requests.get
        try:
            with getter(url, stream=True, timeout=(self.connect_timeout, self.read_timeout)) as response:
                response.raise_for_status()
                with open(dest, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except (requests.RequestException, OSError) as e:
            raise DownloadError(f"requests transfer failed: {e}") from e


def default_strategies(connect_timeout: Optional[int] = None, retries: Optional[int] = None,
                       retry_delay: Optional[int] = None, runner: Callable = subprocess.run,
                       which: Callable[[str], Optional[str]] = shutil.which,
                       session: Optional[requests.Session] = None) -> List[DownloadStrategy]:
    """The standard ordered strategy list.

    curl and wget with compression first, then both without, then the
    in-process client.
    """
    connect_timeout = Config.FETCH_CONNECT_TIMEOUT if connect_timeout is None else connect_timeout
    retries = Config.FETCH_RETRIES if retries is None else retries
    retry_delay = Config.FETCH_RETRY_DELAY if retry_delay is None else retry_delay
    common = dict(connect_timeout=connect_timeout, retries=retries, retry_delay=retry_delay,
                  runner=runner, which=which)

    return [
        CommandStrategy(
            "curl-compressed", "curl",
            ["-f", "--compressed", "-Lo", "{dest}", "--connect-timeout", "{connect_timeout}",
             "--retry", "{retries}", "--retry-delay", "{retry_delay}", "{url}"],
            **common,
        ),
        CommandStrategy(
            "wget-compressed", "wget",
            ["--compression=auto", "-O", "{dest}", "--connect-timeout={connect_timeout}",
             "--tries={retries}", "--wait={retry_delay}", "{url}"],
            **common,
        ),
        CommandStrategy(
            "curl", "curl",
            ["-f", "-Lo", "{dest}", "--connect-timeout", "{connect_timeout}",
             "--retry", "{retries}", "--retry-delay", "{retry_delay}", "{url}"],
            **common,
        ),
        CommandStrategy(
            "wget", "wget",
            ["-O", "{dest}", "--connect-timeout={connect_timeout}",
             "--tries={retries}", "--wait={retry_delay}", "{url}"],
            **common,
        ),
        RequestsStrategy(connect_timeout=connect_timeout, session=session),
    ]
