from fastapi.responses import Response


def csv_attachment(filename: str, content: str) -> Response:
    """Serve CSV text as a file download."""
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
