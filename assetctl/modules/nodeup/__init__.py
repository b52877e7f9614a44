"""Node bootstrap: boot configuration and the verified fetcher.

- bootconfig: per-node artifact list written by cluster compilation
- strategies: ordered download strategies (curl, wget, requests)
- fetcher: retrying, hash-verifying download of boot artifacts
"""

from .bootconfig import BootArtifact, BootConfig
from .fetcher import VerifiedFetcher, fetch_all
from .strategies import CommandStrategy, DownloadError, DownloadStrategy, RequestsStrategy, default_strategies

__all__ = [
    'BootArtifact',
    'BootConfig',
    'VerifiedFetcher',
    'fetch_all',
    'CommandStrategy',
    'DownloadError',
    'DownloadStrategy',
    'RequestsStrategy',
    'default_strategies',
]
