"""
undead - find Python files that nothing imports

    from undead import find_dead_files

    result = find_dead_files(["src/myproject"])
    for dead in result.dead_files:
        print(dead.rel_path)
"""

from importlib.metadata import PackageNotFoundError, version


def find_dead_files(*args, **kwargs):
    """Lazy import wrapper so ``import undead`` stays cheap."""
    from .dead_files import find_dead_files as _find_dead_files

    return _find_dead_files(*args, **kwargs)


try:
    __version__ = version("undead")
except PackageNotFoundError:
    # Fallback for development/uninstalled package
    __version__ = "unknown"

__all__ = ["find_dead_files", "__version__"]
