"""
Custom Exceptions for AppForge
==============================

Use these instead of generic Exception to:
1. Make errors more specific and debuggable
2. Enable proper error handling at API layer
3. Provide meaningful error messages to users

Usage:
    from appforge.core.exceptions import EntryNotFoundError, IOFailureError

    if entry is None:
        raise EntryNotFoundError(rel_path, root)

    try:
        await backend.write_file(root, rel_path, content)
    except IOFailureError as e:
        logger.error(f"Write failed: {e}")
        raise
"""

from typing import Optional, Any, Dict


class AppForgeError(Exception):
    """Base exception for all AppForge errors"""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Resource Errors (404-type)
# ============================================

class NotFoundError(AppForgeError):
    """Base class for not found errors"""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class ProjectNotFoundError(NotFoundError):
    """Project root does not exist"""

    def __init__(self, project: str):
        super().__init__("Project", project)


class EntryNotFoundError(NotFoundError):
    """File or directory not found in a project"""

    def __init__(self, path: str, root: str = ""):
        super().__init__("File", path)
        self.details["root"] = root


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(AppForgeError):
    """Input validation failed"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidPathError(ValidationError):
    """Path is empty, escapes its root, or is otherwise unusable"""

    def __init__(self, path: str, reason: str = "invalid path"):
        super().__init__(f"Invalid path '{path}': {reason}", field="path")
        self.code = "INVALID_PATH"
        self.details["path"] = path


# ============================================
# Storage Errors
# ============================================

class StorageError(AppForgeError):
    """Storage operation failed"""

    def __init__(self, message: str):
        super().__init__(message, code="STORAGE_ERROR")


class IOFailureError(StorageError):
    """Backend read/write failed"""

    def __init__(self, operation: str, path: str, message: str = ""):
        super().__init__(f"Failed to {operation} '{path}'" + (f": {message}" if message else ""))
        self.code = "IO_FAILURE"
        self.details = {"operation": operation, "path": path}


class PersistenceFailureError(StorageError):
    """Flush to durable storage failed; in-memory state is still valid"""

    def __init__(self, message: str = "Failed to persist file system state"):
        super().__init__(message)
        self.code = "PERSISTENCE_FAILURE"


# ============================================
# AI/Claude Errors
# ============================================

class AIServiceError(AppForgeError):
    """AI service (Claude) error"""

    def __init__(self, message: str):
        super().__init__(message, code="AI_SERVICE_ERROR")


class AIResponseParseError(AIServiceError):
    """Failed to parse AI response"""

    def __init__(self, message: str = "Failed to parse AI response"):
        super().__init__(message)
        self.code = "AI_PARSE_ERROR"


# ============================================
# Generation Errors
# ============================================

class GenerationError(AppForgeError):
    """Project generation failed"""

    def __init__(self, message: str, code: str = "GENERATION_ERROR"):
        super().__init__(message, code=code)


class GenerationFailureError(GenerationError):
    """AI gateway call exhausted its retry budget"""

    def __init__(self, message: str, stage: str, attempts: int, file_path: Optional[str] = None):
        super().__init__(message, code="GENERATION_FAILED")
        self.details = {"stage": stage, "attempts": attempts}
        if file_path:
            self.details["file_path"] = file_path


class PlanningFailureError(GenerationError):
    """Plan is malformed even after defaulting"""

    def __init__(self, message: str = "Failed to plan project structure"):
        super().__init__(message, code="PLANNING_FAILED")


class GenerationCancelledError(GenerationError):
    """Run was cancelled by the caller"""

    def __init__(self, message: str = "Generation cancelled"):
        super().__init__(message, code="GENERATION_CANCELLED")


class GenerationInProgressError(GenerationError):
    """Orchestrator already has a run in flight"""

    def __init__(self, run_id: Optional[str] = None):
        super().__init__("A generation run is already in progress", code="GENERATION_IN_PROGRESS")
        if run_id:
            self.details["run_id"] = run_id


# ============================================
# Preview Errors
# ============================================

class PreviewNotActiveError(AppForgeError):
    """No active preview to update"""

    def __init__(self):
        super().__init__("No active preview to update", code="PREVIEW_NOT_ACTIVE")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: AppForgeError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
