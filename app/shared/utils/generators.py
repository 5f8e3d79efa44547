"""ID generators (CUID2 primary keys, job ids and local status tokens)."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2)."""
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(f"Expected str from cuid_generator, got {type(result).__name__}")
    return result


def generate_prefixed_id(prefix: str, sep: str = ":") -> str:
    """Return "<prefix><sep><cuid>", e.g. a local workflow status token."""
    return f"{prefix}{sep}{generate_cuid()}"
