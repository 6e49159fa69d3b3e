"""Reading bulk book data from JSON files."""

import json
import logging
from pathlib import Path
from typing import Any

from .errors import ErrorCode, ErrResult, OkResult, err_result, ok_result

logger = logging.getLogger(__name__)


def read_books(path: str | Path) -> OkResult[list[Any]] | ErrResult:
    """
    Read a JSON file holding a list of raw book objects.

    The objects are returned unvalidated; each is validated when it is added.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        return err_result(f"cannot read {path}: {e.strerror}", ErrorCode.BAD_ARG, str(path))
    except UnicodeDecodeError as e:
        return err_result(f"{path} is not UTF-8 text: {e.reason}", ErrorCode.BAD_REQ, str(path))
    except json.JSONDecodeError as e:
        return err_result(f"invalid JSON in {path}: {e}", ErrorCode.BAD_REQ, str(path))

    if not isinstance(data, list):
        return err_result(f"{path} must hold a JSON array of books", ErrorCode.BAD_REQ, str(path))

    logger.debug("Read %d book(s) from %s", len(data), path)
    return ok_result(data)
