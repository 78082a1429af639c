from __future__ import annotations

from http import HTTPStatus


class StudioError(Exception):
    """Domain error carrying a machine-readable code and an HTTP status."""

    status = HTTPStatus.BAD_REQUEST

    def __init__(self, code: str, payload: dict | None = None, *, status: HTTPStatus | None = None):
        super().__init__(code)
        self.code = code
        self.payload = payload or {}
        if status is not None:
            self.status = status

    def to_dict(self) -> dict:
        return {"message": self.code, **self.payload}
