# core/responses.py


def ok(data=None) -> dict:
    """Success envelope shared by every route."""
    return {"success": True, "data": data}


def fail(error: str, **extra) -> dict:
    return {"success": False, "error": error, **extra}
