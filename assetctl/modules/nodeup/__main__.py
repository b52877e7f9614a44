#!/usr/bin/env python3
"""Node-side entry point.

Reads the boot configuration and blocks until every artifact it lists is
present and hash-verified under <install_dir>/bin::

    python -m assetctl.modules.nodeup --config /opt/assetctl/conf/boot.yaml
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from assetctl.config import Config
from assetctl.logging import setup_logger
from assetctl.modules.assets.errors import AssetError

from .bootconfig import BIN_DIR, BOOT_CONFIG_FILE, CONF_DIR, BootConfig
from .fetcher import VerifiedFetcher, fetch_all

logger = logging.getLogger("assetctl.nodeup")


def parse_args(args: List[str]) -> argparse.Namespace:
    """Parse command line arguments."""
    default_config = Path(Config.INSTALL_DIR) / CONF_DIR / BOOT_CONFIG_FILE
    parser = argparse.ArgumentParser(description='Fetch and verify node boot artifacts')
    parser.add_argument(
        '-c', '--config',
        default=str(default_config),
        help=f'Boot configuration file (default: {default_config})'
    )
    parser.add_argument(
        '--install-dir',
        help=f'Override the install directory; artifacts go to <install-dir>/{BIN_DIR}'
    )
    parser.add_argument(
        '--backoff',
        type=float,
        default=None,
        help='Seconds to wait between full retry passes'
    )
    parser.add_argument(
        '-j', '--parallel',
        type=int,
        default=1,
        help='Number of artifacts to fetch concurrently'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    return parser.parse_args(args)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the fetcher for every artifact in the boot configuration."""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    setup_logger("assetctl", logging.DEBUG if args.verbose else None)

    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"❌ {e}")
        return 1

    try:
        config = BootConfig.load(args.config)
    except (OSError, ValueError, yaml.YAMLError, AssetError) as e:
        logger.error(f"❌ Unable to load boot configuration {args.config}: {e}")
        return 1
    if args.install_dir:
        config = config.model_copy(update={'install_dir': args.install_dir})

    paths = fetch_all(config, VerifiedFetcher(backoff=args.backoff), max_workers=args.parallel)
    for path in paths:
        logger.info(f"✅ {path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
