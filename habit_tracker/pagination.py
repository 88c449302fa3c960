import math
from flask import request


def page_args(default_limit):
    """Read ``limit`` and ``page`` from the query string, clamped to >= 1."""
    limit = max(request.args.get("limit", default_limit, type=int), 1)
    page = max(request.args.get("page", 1, type=int), 1)
    return limit, page


def paginate(query, limit, page):
    items = query.limit(limit).offset((page - 1) * limit).all()
    total = query.order_by(None).count()
    return items, {
        "current": page,
        "total": math.ceil(total / limit),
        "count": len(items),
        "total_count": total
    }
