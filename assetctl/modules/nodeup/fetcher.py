"""Verified fetcher: make a hash-verified binary present on the node.

Runs at first boot, before anything exists that could retry it, so it
never gives up. Each call either returns with the target holding bytes
whose SHA-256 matches, or keeps trying until the process is killed.

Downloads land in a ``.partial`` sibling and are renamed over the target
only after verification, so the target path only ever holds verified
bytes (or stale bytes left by an earlier run, which are re-checked).
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Union

from assetctl.config import Config
from assetctl.modules.assets.models import normalize_sha256
from assetctl.utils.files import sha256_file

from .bootconfig import BootConfig
from .strategies import DownloadError, DownloadStrategy, default_strategies

logger = logging.getLogger("assetctl.fetcher")

PARTIAL_SUFFIX = ".partial"


def split_urls(urls: Union[str, Iterable[str]]) -> List[str]:
    """Accept a comma-joined string or an ordered collection of URLs."""
    if isinstance(urls, str):
        urls = urls.split(',')
    return [u.strip() for u in urls if u and u.strip()]


class VerifiedFetcher:
    """Download-and-verify with unbounded retry over mirrors and strategies.

    Args:
        strategies: Ordered download strategies (default: curl/wget/requests)
        sleep: Called with the backoff interval after every failed pass
        backoff: Seconds to wait between full passes
    """

    def __init__(self, strategies: Optional[Sequence[DownloadStrategy]] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 backoff: Optional[float] = None):
        self.strategies = list(strategies) if strategies is not None else default_strategies()
        self.sleep = sleep
        self.backoff = Config.FETCH_BACKOFF if backoff is None else backoff

    def fetch(self, target: Union[str, Path], sha256: str, urls: Union[str, Iterable[str]],
              executable: bool = True) -> Path:
        """Ensure ``target`` exists with the expected hash.

        Returns only on success. Transfer failures and hash mismatches are
        logged and retried indefinitely.
        """
        target = Path(target)
        expected = normalize_sha256(sha256)
        url_list = split_urls(urls)
        if not url_list:
            raise ValueError(f"no download urls given for {target}")

        if self._verify_existing(target, expected):
            return target

        target.parent.mkdir(parents=True, exist_ok=True)
        partial = target.with_name(target.name + PARTIAL_SUFFIX)

        attempt_pass = 0
        while True:
            attempt_pass += 1
            for url in url_list:
                for strategy in self.strategies:
                    if not strategy.available():
                        logger.debug(f"Skipping {strategy.name}: not available")
                        continue
                    if self._attempt(strategy, url, partial, target, expected, executable):
                        return target
            logger.warning(
                f"⚠️  All downloads failed for {target.name} (pass {attempt_pass}); "
                f"sleeping {self.backoff}s before retrying"
            )
            self.sleep(self.backoff)

    def _verify_existing(self, target: Path, expected: str) -> bool:
        if not target.is_file():
            return False
        try:
            actual = sha256_file(str(target))
        except OSError as e:
            logger.warning(f"Unable to hash existing {target}: {e}")
            actual = None
        if actual == expected:
            logger.info(f"✅ {target} already present with expected hash")
            return True
        logger.warning(f"Existing {target} has hash {actual}, expected {expected}; removing")
        self._remove(target)
        return False

    def _attempt(self, strategy: DownloadStrategy, url: str, partial: Path, target: Path,
                 expected: str, executable: bool) -> bool:
        logger.info(f"Downloading {url} using {strategy.name}")
        try:
            strategy.download(url, partial)
        except DownloadError as e:
            logger.warning(f"❌ Download of {url} using {strategy.name} failed: {e}")
            return False

        try:
            actual = sha256_file(str(partial))
        except OSError as e:
            logger.warning(f"❌ Unable to read download of {url}: {e}")
            return False

        if actual != expected:
            logger.error(f"❌ Hash mismatch for {url}: got {actual}, expected {expected}")
            self._remove(partial)
            return False

        try:
            if executable:
                os.chmod(partial, 0o755)
            os.replace(partial, target)
        except OSError as e:
            logger.error(f"❌ Unable to install {target}: {e}")
            self._remove(partial)
            return False

        logger.info(f"✅ Downloaded {target.name} from {url} ({expected})")
        return True

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"⚠️  Unable to remove {path}: {e}")


def fetch_all(config: BootConfig, fetcher: Optional[VerifiedFetcher] = None,
              max_workers: int = 1) -> List[Path]:
    """Fetch every artifact of a boot configuration into <install_dir>/bin.

    Artifacts own disjoint paths, so ``max_workers > 1`` fetches them in
    parallel. Returns the installed paths in configuration order.
    """
    fetcher = fetcher or VerifiedFetcher()
    bin_dir = config.bin_dir
    bin_dir.mkdir(parents=True, exist_ok=True)

    def _fetch(artifact):
        return fetcher.fetch(bin_dir / artifact.file_name, artifact.sha256, artifact.urls,
                             executable=artifact.executable)

    logger.info(f"🚀 Fetching {len(config.artifacts)} artifacts into {bin_dir}")
    if max_workers <= 1:
        return [_fetch(artifact) for artifact in config.artifacts]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(_fetch, config.artifacts))
