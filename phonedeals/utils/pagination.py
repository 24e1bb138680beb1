# phonedeals/utils/pagination.py
import math
from typing import Any, Dict, Tuple

from phonedeals.utils.settings import DEFAULT_PAGE_SIZE


def page_window(page: int | None, limit: int | None) -> Tuple[int, int, int]:
    """Normalise page/limit query values, returns (page, limit, offset)."""
    page = page if page and page > 0 else 1
    limit = limit if limit and limit > 0 else DEFAULT_PAGE_SIZE
    return page, limit, (page - 1) * limit


def pagination(total: int, page: int, limit: int) -> Dict[str, Any]:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "pages": math.ceil(total / limit) if limit else 0,
    }
