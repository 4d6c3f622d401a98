"""
Error handling for the compliance profile service.

Custom exception classes, severity/category classification, logging of
failures without sensitive payloads, and the mapping from errors to JSON
API responses.
"""

import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.utils.logger import get_logger

logger = get_logger(__name__)


class ErrorSeverity(str, Enum):
    """Error severity levels for categorization and alerting"""

    LOW = "low"  # Minor issues, logging only
    MEDIUM = "medium"  # Important issues, monitoring alerts
    HIGH = "high"  # Critical issues, immediate attention
    CRITICAL = "critical"  # System-threatening issues, emergency response


class ErrorCategory(str, Enum):
    """Error categories for systematic handling"""

    CONFIGURATION = "configuration"  # Config/setup errors
    AUTHENTICATION = "authentication"  # Auth/authorization errors
    INTEGRITY = "integrity"  # Failed authentication tags, tampered data
    DATABASE = "database"  # Database errors
    VALIDATION = "validation"  # Malformed input or stored data
    SYSTEM = "system"  # System/infrastructure errors


class ErrorContext:
    """Container for error context information"""

    def __init__(
        self,
        error: Exception,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        user_message: Optional[str] = None,
        technical_details: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
        recovery_suggestions: Optional[list] = None,
    ):
        self.error = error
        self.severity = severity
        self.category = category
        self.user_message = user_message or self._generate_user_message()
        self.technical_details = technical_details or {}
        self.user_id = user_id
        self.recovery_suggestions = recovery_suggestions or []
        self.timestamp = datetime.now(timezone.utc)
        self.error_id = f"err_{int(self.timestamp.timestamp())}"

    def _generate_user_message(self) -> str:
        """Generate user-friendly error message based on error type"""
        error_type = type(self.error).__name__

        user_messages = {
            "ConfigurationError": "The service is not configured for encrypted storage.",
            "IntegrityError": "Stored data failed its integrity check.",
            "FormatError": "Stored or submitted data is malformed.",
            "DatabaseConnectionError": "Unable to connect to the database. Please try again.",
            "ValidationError": "The provided data is invalid. Please check your input.",
        }

        return user_messages.get(
            error_type,
            "An unexpected error occurred. Please try again or contact support.",
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert error context to dictionary for logging/serialization"""
        return {
            "error_id": self.error_id,
            "timestamp": self.timestamp.isoformat(),
            "error_type": type(self.error).__name__,
            "error_message": str(self.error),
            "severity": self.severity.value,
            "category": self.category.value,
            "user_message": self.user_message,
            "technical_details": self.technical_details,
            "user_id": self.user_id,
            "recovery_suggestions": self.recovery_suggestions,
            "traceback": traceback.format_exc()
            if self.severity in [ErrorSeverity.HIGH, ErrorSeverity.CRITICAL]
            else None,
        }


# === Custom Exception Classes ===


class AppError(Exception):
    """Base exception for service errors"""

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        technical_details: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[list] = None,
    ):
        super().__init__(message)
        self.severity = severity
        self.category = category
        self.technical_details = technical_details or {}
        self.recovery_suggestions = recovery_suggestions or []


class ConfigurationError(AppError):
    """Raised when the field encryption key is missing or malformed"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.CONFIGURATION,
            recovery_suggestions=[
                "Set FIELD_ENCRYPTION_KEY to 32 random bytes, base64-encoded",
            ],
            **kwargs,
        )


class IntegrityError(AppError):
    """Raised when an envelope's authentication tag does not verify"""

    def __init__(self, message: str = "Authentication tag mismatch", **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.INTEGRITY,
            recovery_suggestions=[
                "Check that the configured key is the one the data was written with",
                "Inspect stored envelopes for corruption or tampering",
            ],
            **kwargs,
        )


class FormatError(AppError):
    """Raised when an envelope or its plaintext cannot be decoded"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.VALIDATION,
            **kwargs,
        )


class DatabaseConnectionError(AppError):
    """Raised when database connection fails"""

    def __init__(self, message: str = "Database connection failed", **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.DATABASE,
            recovery_suggestions=[
                "Check database connectivity",
                "Verify DATABASE_URL",
            ],
            **kwargs,
        )


# === Error Handler Class ===


class ErrorHandler:
    """Centralized error classification and logging"""

    def __init__(self):
        self._error_counts: Dict[str, int] = {}

    def handle_error(
        self, error: Exception, context: Optional[Dict[str, Any]] = None
    ) -> ErrorContext:
        """
        Handle an error with appropriate categorization and logging.

        Args:
            error: The exception that occurred
            context: Additional context information

        Returns:
            ErrorContext with detailed error information
        """
        context = context or {}
        error_context = self._categorize_error(error, context)
        self._log_error(error_context)
        self._track_frequency(error_context)
        return error_context

    def _categorize_error(
        self, error: Exception, context: Dict[str, Any]
    ) -> ErrorContext:
        if isinstance(error, AppError):
            return ErrorContext(
                error=error,
                severity=error.severity,
                category=error.category,
                technical_details={**error.technical_details, **context},
                user_id=context.get("user_id"),
                recovery_suggestions=list(error.recovery_suggestions),
            )

        error_mappings = {
            ValueError: (ErrorSeverity.LOW, ErrorCategory.VALIDATION),
            KeyError: (ErrorSeverity.LOW, ErrorCategory.VALIDATION),
            PermissionError: (ErrorSeverity.HIGH, ErrorCategory.AUTHENTICATION),
            ConnectionError: (ErrorSeverity.HIGH, ErrorCategory.DATABASE),
        }

        severity, category = error_mappings.get(
            type(error), (ErrorSeverity.MEDIUM, ErrorCategory.SYSTEM)
        )

        return ErrorContext(
            error=error,
            severity=severity,
            category=category,
            user_id=context.get("user_id"),
            technical_details=context,
        )

    def _log_error(self, error_context: ErrorContext):
        # The exception message is logged, never the payload being processed.
        log_data = {
            "error_id": error_context.error_id,
            "error_type": type(error_context.error).__name__,
            "error_message": str(error_context.error),
            "category": error_context.category.value,
            "severity": error_context.severity.value,
            "user_id": error_context.user_id,
            "technical_details": error_context.technical_details,
        }

        if error_context.severity == ErrorSeverity.CRITICAL:
            logger.critical(error_context.user_message, **log_data, exc_info=True)
        elif error_context.severity == ErrorSeverity.HIGH:
            logger.error(error_context.user_message, **log_data)
        elif error_context.severity == ErrorSeverity.MEDIUM:
            logger.warning(error_context.user_message, **log_data)
        else:  # LOW
            logger.info(error_context.user_message, **log_data)

    def _track_frequency(self, error_context: ErrorContext):
        error_key = (
            f"{type(error_context.error).__name__}:{error_context.category.value}"
        )
        self._error_counts[error_key] = self._error_counts.get(error_key, 0) + 1

        # Repeated integrity failures usually mean a key mismatch, not tampering
        if self._error_counts[error_key] > 5:
            logger.warning(
                "High frequency error detected",
                error_key=error_key,
                count=self._error_counts[error_key],
                error_id=error_context.error_id,
            )

    def error_count(self, error_type: str, category: ErrorCategory) -> int:
        return self._error_counts.get(f"{error_type}:{category.value}", 0)


# === HTTP mapping ===

STATUS_CODE_MAP = {
    ErrorSeverity.LOW: 400,
    ErrorSeverity.MEDIUM: 500,
    ErrorSeverity.HIGH: 500,
    ErrorSeverity.CRITICAL: 503,
}


def _error_body(error_context: ErrorContext) -> Dict[str, Any]:
    return {
        "error": {
            "id": error_context.error_id,
            "message": error_context.user_message,
            "category": error_context.category.value,
            "severity": error_context.severity.value,
            "recovery_suggestions": error_context.recovery_suggestions,
            "timestamp": error_context.timestamp.isoformat(),
        }
    }


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """FastAPI middleware for centralized error handling"""

    def __init__(self, app, error_handler: Optional[ErrorHandler] = None):
        super().__init__(app)
        self.error_handler = error_handler or ErrorHandler()

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except HTTPException:
            raise  # Let FastAPI handle it
        except Exception as e:
            context = {
                "request_path": request.url.path,
                "request_method": request.method,
            }
            error_context = self.error_handler.handle_error(e, context)
            return JSONResponse(
                status_code=STATUS_CODE_MAP.get(error_context.severity, 500),
                content=_error_body(error_context),
            )


# === Global Error Handler Instance ===

error_handler = ErrorHandler()


def create_error_response(
    error: Exception, context: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    """Create standardized error response for APIs"""

    error_context = error_handler.handle_error(error, context)
    return JSONResponse(
        status_code=STATUS_CODE_MAP.get(error_context.severity, 500),
        content=_error_body(error_context),
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Exception handler registered on the app for :class:`AppError`."""
    return create_error_response(
        exc,
        {"request_path": request.url.path, "request_method": request.method},
    )
