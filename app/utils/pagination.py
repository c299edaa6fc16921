import math

from app.core.config import settings

# DB OFFSET은 signed 64bit 정수
MAX_OFFSET = 2**63 - 1


def parse_positive_int(value, default: int) -> int:
    """ 숫자가 아니거나 1보다 작으면 default """
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


def resolve_page_params(list_size, page) -> tuple[int, int]:
    list_size = min(parse_positive_int(list_size, settings.DEFAULT_LIST_SIZE), settings.MAX_LIST_SIZE)
    page = parse_positive_int(page, 1)
    # (page - 1) * list_size 가 MAX_OFFSET을 넘지 않도록
    page = min(page, MAX_OFFSET // list_size + 1)
    return list_size, page


def total_pages(total_rows: int, list_size: int) -> int:
    return math.ceil(total_rows / list_size)
