from fastapi.responses import JSONResponse


def error_response(message: str, status_code: int = 500, details: dict = None):
    content = {"success": False, "data": None, "error": message}
    if details:
        content["details"] = details
    return JSONResponse(content=content, status_code=status_code)
