# core/schema_registry.py
from __future__ import annotations
from typing import Callable, List, Tuple
from sqlalchemy.engine import Engine
import logging
import pkgutil
import importlib
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

# Schema installer type
SchemaInstaller = Callable[[Engine], None]

# Registry: (name, installer_func)
_REGISTRY: List[Tuple[str, SchemaInstaller]] = []

def _add(name: str, fn: SchemaInstaller) -> None:
    # Re-importing a schema module must not queue its installer twice.
    if any(existing == name for existing, _ in _REGISTRY):
        return
    _REGISTRY.append((name, fn))

def register(
    name: str | SchemaInstaller, installer: SchemaInstaller | None = None
) -> SchemaInstaller | Callable[[SchemaInstaller], SchemaInstaller]:
    """
    Registers a schema installer function.
    Can be used as a decorator (@register / @register("name")) or a call (register("name", fn)).
    """
    if isinstance(name, str) and installer is None:
        def decorator(fn: SchemaInstaller) -> SchemaInstaller:
            _add(name, fn)
            return fn
        return decorator

    elif callable(name) and installer is None:
        fn = name
        _add(fn.__name__, fn)
        return fn

    elif isinstance(name, str) and callable(installer):
        _add(name, installer)
        return installer

    raise TypeError("Invalid usage of @register")

def registered() -> List[str]:
    return [name for name, _ in _REGISTRY]

def run_all(engine: Engine):
    """
    Runs all registered schema installers in order. A failing installer is
    logged and the rest still run; the first failure is raised at the end.
    """
    logger.info("SchemaRegistry: running %d installers", len(_REGISTRY))
    failures = []
    for name, installer_fn in _REGISTRY:
        try:
            logger.debug("Applying schema: %s", name)
            installer_fn(engine)
        except Exception as e:
            logger.exception("FAILED to apply schema %s", name)
            failures.append((name, e))
    if failures:
        name, err = failures[0]
        raise RuntimeError(f"{len(failures)} schema installer(s) failed, first: {name}") from err
    logger.info("SchemaRegistry: all installers complete")

def auto_discover(start_path: str | Path = "schemas") -> List[str]:
    """
    Imports every module in a directory so their @register decorators run.
    The directory is imported as a top-level package named after itself;
    returns the imported module names.
    """
    start_path = Path(start_path)

    if not start_path.is_dir():
        logger.warning("Schema auto_discover: %s is not a directory, skipping", start_path)
        return []

    parent_dir = str(start_path.parent.resolve())
    if parent_dir not in sys.path:
        sys.path.insert(0, parent_dir)
    base_import_name = start_path.name

    imported = []

    for _, module_name, is_pkg in pkgutil.walk_packages(
        path=[str(start_path)],
        prefix=f"{base_import_name}."
    ):
        if is_pkg:
            continue
        importlib.import_module(module_name)
        imported.append(module_name)
        logger.debug("Discovered schema module %s", module_name)
    return imported
