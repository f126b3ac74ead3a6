import math

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def build_pagination(page: int, limit: int, total: int, returned: int) -> dict:
    skip = page_offset(page, limit)

    return {
        "current": page,
        "pages": math.ceil(total / limit) if limit else 0,
        "total": total,
        "has_next": skip + returned < total,
        "has_prev": page > 1,
    }
