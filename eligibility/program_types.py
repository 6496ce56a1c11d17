"""
Map free-form program type tags onto occupancy categories
"""

LL_CATEGORY = "LL"
ACP_CATEGORY = "ACP"

PROGRAM_CATEGORIES = {
    "LL": LL_CATEGORY,
    "LL+EBB": LL_CATEGORY,
    "LL+ACP": LL_CATEGORY,
    "EBB": ACP_CATEGORY,
    "EBB+LL": ACP_CATEGORY,
    "ACP": ACP_CATEGORY,
    "ACP+LL": ACP_CATEGORY,
}


def normalize_program_type(program_type: str) -> str:
    """
    Return the occupancy category for a program type.

    Known tags collapse to LL or ACP; anything else is its own category.
    """
    tag = (program_type or "").strip()
    return PROGRAM_CATEGORIES.get(tag.upper(), tag)
