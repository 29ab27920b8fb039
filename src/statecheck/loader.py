from __future__ import annotations

import importlib
import sys
from pathlib import Path

from statecheck.driver import PropertySpec


def load_target(target: str, project_root: Path | None = None) -> PropertySpec:
    """Resolve ``"package.module:attribute"`` to a :class:`PropertySpec`.

    A callable attribute is invoked with no arguments. ``project_root`` is put
    on ``sys.path`` so properties defined next to the project can be imported.
    """
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise ValueError(f"Target must look like 'module:attribute', got {target!r}")

    if project_root is not None:
        root = str(project_root.resolve())
        if root not in sys.path:
            sys.path.insert(0, root)

    module = importlib.import_module(module_name)
    try:
        loaded = getattr(module, attribute)
    except AttributeError as exc:
        raise ValueError(f"Module {module_name!r} has no attribute {attribute!r}") from exc

    spec = loaded() if callable(loaded) and not isinstance(loaded, PropertySpec) else loaded
    if not isinstance(spec, PropertySpec):
        raise TypeError(f"{target} did not resolve to a PropertySpec (got {type(spec).__name__})")
    if spec.target is None:
        spec.target = target
    return spec


__all__ = ["load_target"]
