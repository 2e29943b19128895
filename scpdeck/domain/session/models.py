"""
Session domain models
"""
from dataclasses import dataclass
from typing import Callable, Dict, Any

# Receives chunks of the ssh/scp diagnostic stream as they arrive
ProgressCallback = Callable[[str], None]


@dataclass(frozen=True)
class SessionResult:
    """Outcome of one ssh/scp invocation"""
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "exit_code": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
        }
