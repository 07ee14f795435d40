from flask import request
from sqlalchemy import or_

DEFAULT_PER_PAGE = 50
MAX_PER_PAGE = 200


def page_args():
    """``(page, per_page, search)`` from the query string, clamped to sane bounds."""
    page = request.args.get("page", 1, type=int) or 1
    per_page = request.args.get("per_page", DEFAULT_PER_PAGE, type=int) or DEFAULT_PER_PAGE
    search = (request.args.get("search") or "").strip() or None
    return max(page, 1), min(max(per_page, 1), MAX_PER_PAGE), search


def search_columns(query, model, search_term, columns):
    """Case-insensitive substring match of ``search_term`` against any of ``columns``."""
    search_term = (search_term or "").strip()
    if not search_term:
        return query
    pattern = f"%{search_term}%"
    return query.filter(or_(*(getattr(model, col).ilike(pattern) for col in columns)))


def paginate(query, page, per_page):
    return query.paginate(page=page, per_page=per_page, error_out=False)


def pagination_meta(paginated):
    return {
        "total": paginated.total,
        "page": paginated.page,
        "pages": paginated.pages,
        "perPage": paginated.per_page,
    }
