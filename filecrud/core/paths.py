"""Storage root computation and escape-checked path resolution."""

import inspect
import os
from typing import TYPE_CHECKING

from starlette.requests import Request

from filecrud.core.exceptions import AppException, ConfigurationError, PathEscapeError

if TYPE_CHECKING:
    from filecrud.core.crud_config import FileCrudConfig


def normalize_root(base_path: str, storage_root: str) -> str:
    """Join ``base_path`` and ``storage_root`` into an absolute, normalized path.

    A leading slash on ``storage_root`` is optional when a base path is set;
    the root is always treated as relative to it.
    """
    if base_path:
        storage_root = os.path.join(base_path, storage_root.lstrip("/" + os.sep))
    return os.path.abspath(storage_root)


async def resolve_root(config: "FileCrudConfig", request: Request) -> str:
    """Return the absolute storage root for this request.

    Static roots were normalized when the configuration was built. Callable
    roots are evaluated on every request and may be sync or async.
    """
    if not config.is_dynamic:
        return config.storage_root

    try:
        computed = config.storage_root(request)
        if inspect.isawaitable(computed):
            computed = await computed
    except AppException:
        raise
    except Exception as exc:
        raise ConfigurationError(f"Storage path computation failed: {exc}") from exc

    if not isinstance(computed, str | os.PathLike):
        raise ConfigurationError(
            f"Storage path must resolve to a string, got {type(computed).__name__}"
        )
    computed = os.fspath(computed)
    if not computed:
        raise ConfigurationError("Storage path resolved to an empty string")
    return os.path.abspath(computed)


def is_within(root: str, candidate: str) -> bool:
    """Lexical containment test; both paths must already be normalized."""
    if candidate == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return candidate.startswith(prefix)


def resolve_relative(root: str, segment: str) -> str:
    """Resolve a request-supplied segment against ``root``.

    The segment is always nested below the root, even when it starts with a
    separator. Normalization (``..`` collapsing) happens before the
    containment check.
    """
    candidate = os.path.normpath(f"{root}{os.sep}{segment}")
    if not is_within(root, candidate):
        raise PathEscapeError()
    return candidate
