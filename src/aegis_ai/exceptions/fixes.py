"""Fix application exceptions: caller input errors and git workflow failures."""

from typing import Optional

from .base import AegisError


class FixError(AegisError):
    """Base class for fix-related errors."""

    pass


class FixIndexInvalidError(FixError):
    """Raised when a fix index does not address an existing auto-fix."""

    def __init__(self, index: int, available: int):
        super().__init__(
            f"Fix index out of range: {index}",
            details={"index": str(index), "available": str(available)},
        )
        self.index = index
        self.available = available


class LineOutOfRangeError(FixError):
    """Raised when the target line does not exist in the target file."""

    def __init__(self, file_path: str, line_number: int, total_lines: int):
        super().__init__(
            f"Line {line_number} is out of range for {file_path}",
            details={
                "file_path": file_path,
                "line_number": str(line_number),
                "total_lines": str(total_lines),
            },
        )
        self.file_path = file_path
        self.line_number = line_number
        self.total_lines = total_lines


class FixApplicationError(FixError):
    """Raised when a fatal step of the fix workflow fails."""

    def __init__(self, step: str, reason: str):
        super().__init__(f"Failed to {step}: {reason}", details={"step": step})
        self.step = step
        self.reason = reason


class PullRequestCreationError(FixError):
    """Raised when a pull request cannot be opened for a pushed branch."""

    def __init__(self, branch: str, reason: str, status_code: Optional[int] = None):
        details = {"branch": branch, "reason": reason}
        if status_code is not None:
            details["status_code"] = str(status_code)

        super().__init__(f"Failed to open pull request for {branch}", details=details)
        self.branch = branch
        self.reason = reason
        self.status_code = status_code
