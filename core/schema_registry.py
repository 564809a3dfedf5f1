# core/schema_registry.py
from __future__ import annotations
from typing import Callable, List, Tuple
from sqlalchemy.engine import Engine
import pkgutil
import importlib
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

# Schema installer type
SchemaInstaller = Callable[[Engine], None]

# Registry: (name, installer_func), applied in registration order
_REGISTRY: List[Tuple[str, SchemaInstaller]] = []


def _add(name: str, fn: SchemaInstaller) -> None:
    # re-registering a name replaces the earlier installer
    for i, (existing, _) in enumerate(_REGISTRY):
        if existing == name:
            _REGISTRY[i] = (name, fn)
            return
    _REGISTRY.append((name, fn))


def register(
    name: str | SchemaInstaller, installer: SchemaInstaller | None = None
) -> SchemaInstaller | Callable[[SchemaInstaller], SchemaInstaller]:
    """
    Registers a schema installer function.
    Can be used as a decorator (@register), a named decorator (@register("name"))
    or a function call (register("name", fn)).
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


def registered_names() -> List[str]:
    return [name for name, _ in _REGISTRY]


def run_all(engine: Engine) -> None:
    """
    Runs all registered schema installers in order.
    A failing installer is logged and re-raised; later installers are not run.
    """
    logger.info(f"SchemaRegistry: Running {len(_REGISTRY)} installers...")
    for name, installer_fn in _REGISTRY:
        try:
            logger.debug(f"  -> Applying schema: {name}")
            installer_fn(engine)
        except Exception:
            logger.exception(f"  -> FAILED to apply schema {name}")
            raise
    logger.info("SchemaRegistry: All installers complete.")


def auto_discover(schemas_dir: str | Path = "schemas") -> List[str]:
    """
    Import every schema module under `schemas_dir` so its @register runs.
    The directory is imported as a top-level package named after itself.
    Returns the module names that were imported.
    """
    schemas_dir = Path(schemas_dir)
    if not schemas_dir.is_dir():
        logger.warning(f"Schema auto_discover: {schemas_dir} is not a directory. Skipping.")
        return []

    root = str(schemas_dir.parent.resolve())
    if root not in sys.path:
        sys.path.insert(0, root)

    imported = []
    for info in pkgutil.iter_modules([str(schemas_dir)], prefix=f"{schemas_dir.name}."):
        if info.ispkg or info.name.rsplit(".", 1)[-1].startswith("_"):
            continue
        importlib.import_module(info.name)
        imported.append(info.name)
    logger.debug(f"Schema auto_discover: {len(imported)} module(s) from {schemas_dir}")
    return imported
