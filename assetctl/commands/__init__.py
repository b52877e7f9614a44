from . import catalog, cluster, resolve

__all__ = ['catalog', 'cluster', 'resolve']
