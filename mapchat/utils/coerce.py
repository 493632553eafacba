from typing import Optional

def to_int(v) -> Optional[int]:
    try:
        if v is None or v == "" or str(v).lower() in ("null", "nan"):
            return None
        return int(float(v))
    except (TypeError, ValueError):
        return None

def to_float(v) -> Optional[float]:
    try:
        if v is None or v == "" or str(v).lower() in ("null", "nan"):
            return None
        return float(v)
    except (TypeError, ValueError):
        return None

def to_bool(v) -> bool:
    if isinstance(v, bool):
        return v
    return str(v).strip().lower() in ("true", "1", "yes", "y")

def to_str(v) -> str:
    if v is None or (isinstance(v, float) and v != v):
        return ""
    return str(v).strip()
