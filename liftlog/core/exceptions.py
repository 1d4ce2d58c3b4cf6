class DomainError(Exception):
    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(DomainError):
    def __init__(self, entity: str, message: str | None = None, details: dict | None = None):
        code = f"NF_{entity.upper()}_001"
        msg = message or f"{entity} not found"
        super().__init__(code, msg, details)


class OwnershipError(NotFoundError):
    """Program exists but belongs to another user; rendered exactly like not-found."""

    def __init__(self, entity: str = "program", details: dict | None = None):
        super().__init__(entity, "Program not found", details)


class ShellProgramMissingError(NotFoundError):
    def __init__(self, program_id: str, program_type: str):
        super().__init__(
            "shell_program",
            f"Shell {program_type} program {program_id} no longer exists",
            {"program_id": program_id, "program_type": program_type},
        )


class StuckJobError(NotFoundError):
    def __init__(self, program_id: str, message: str = "Clone timed out and was cleaned up"):
        super().__init__("clone_job", message, {"program_id": program_id})
        self.code = "NF_CLONE_STUCK"


class ValidationError(DomainError):
    def __init__(self, field: str, message: str, details: dict | None = None):
        code = f"VAL_{field.upper()}_001"
        msg = f"Validation failed for {field}: {message}"
        super().__init__(code, msg, details or {"field": field})


class DecodeError(DomainError):
    def __init__(self, message: str, code: str = "DEC_001", details: dict | None = None):
        super().__init__(code, message, details)


class TransientDatastoreError(DomainError):
    def __init__(self, message: str, code: str = "DS_TRANSIENT", details: dict | None = None):
        super().__init__(code, message, details)


class AuthenticationError(DomainError):
    def __init__(self, message: str, code: str = "AUTH_001", details: dict | None = None):
        super().__init__(code, message, details)
