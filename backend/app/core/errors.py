class DomainError(ValueError):
    Kind = "error"
    StatusCode = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.Message = message

    def ToPayload(self) -> dict:
        return {"detail": self.Message, "kind": self.Kind}


class NotFoundError(DomainError):
    Kind = "not_found"
    StatusCode = 404


class ValidationError(DomainError):
    Kind = "validation"
    StatusCode = 400

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.Fields = list(fields or [])

    def ToPayload(self) -> dict:
        payload = super().ToPayload()
        payload["fields"] = self.Fields
        return payload


class ConflictError(DomainError):
    Kind = "conflict"
    StatusCode = 409


class InsufficientPointsError(DomainError):
    Kind = "insufficient_points"
    StatusCode = 400

    def __init__(self, message: str, points_needed: int = 0) -> None:
        super().__init__(message)
        self.PointsNeeded = max(points_needed, 0)

    def ToPayload(self) -> dict:
        payload = super().ToPayload()
        payload["pointsNeeded"] = self.PointsNeeded
        return payload


class AuthError(DomainError):
    Kind = "auth"
    StatusCode = 401


class AccessDeniedError(DomainError):
    Kind = "access_denied"
    StatusCode = 403


def FieldsFromPydantic(exc) -> list[str]:
    fields: list[str] = []
    for error in exc.errors():
        location = error.get("loc") or ()
        name = ".".join(str(part) for part in location) or "__root__"
        if name not in fields:
            fields.append(name)
    return fields
