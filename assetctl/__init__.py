"""assetctl: resolve, pin and fetch the binaries Kubernetes nodes need at boot."""

__version__ = "0.1.0"
