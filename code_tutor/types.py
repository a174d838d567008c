"""Type definitions for the Code Tutor pipeline."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional


class QuestionType(str, Enum):
    """What the student is asking for (first matching category wins)."""
    CONCEPT = "concept"
    DEBUGGING = "debugging"
    EXPLANATION = "explanation"
    GENERAL = "general"


class LearningLevel(str, Enum):
    """Student learning level, used to adapt the tutor's register."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Role(str, Enum):
    """Author of a conversation turn."""
    STUDENT = "student"
    ASSISTANT = "assistant"


class WarningType(str, Enum):
    """Category of an accessibility warning."""
    COLOR = "color"
    CODE_BLOCK = "code-block"
    HEADING = "heading"
    LINK = "link"
    OTHER = "other"


class ErrorSeverity(str, Enum):
    """Severity of an accessibility error. Only CRITICAL fails a report."""
    CRITICAL = "critical"
    SERIOUS = "serious"
    MODERATE = "moderate"


# =============================================================================
# MESSAGE SIDE
# =============================================================================

@dataclass(frozen=True)
class CodeBlock:
    """A fenced code region extracted from a student message."""
    language: str  # Canonical lowercase identifier, "unknown" if untagged
    code: str


@dataclass(frozen=True)
class ParsedMessage:
    """Structured view of one incoming student message."""
    text: str
    code_blocks: tuple[CodeBlock, ...] = ()
    question_type: QuestionType = QuestionType.GENERAL
    is_homework_request: bool = False
    is_unethical_request: bool = False
    detected_languages: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> "ParsedMessage":
        """Safe default returned for empty or unparseable input."""
        return cls(text="")


@dataclass(frozen=True)
class SafetyVerdict:
    """Allow/deny decision. ``message`` is empty iff the prompt is allowed."""
    is_allowed: bool
    message: str = ""

    @classmethod
    def allow(cls) -> "SafetyVerdict":
        return cls(is_allowed=True, message="")

    @classmethod
    def refuse(cls, message: str) -> "SafetyVerdict":
        return cls(is_allowed=False, message=message)


@dataclass(frozen=True)
class BuiltPrompt:
    """Prompt handed to the AI backend.

    ``total_tokens`` is a chars/4 budgeting estimate, not a tokenizer count.
    """
    system_prompt: str
    user_prompt: str
    total_tokens: int


# =============================================================================
# STUDENT CONTEXT
# =============================================================================

@dataclass(frozen=True)
class ConversationMessage:
    """One turn of conversation history."""
    role: Role
    content: str
    timestamp: int  # Epoch seconds

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content, "timestamp": self.timestamp}


@dataclass
class StudentPreferences:
    """Student-controlled tutoring preferences."""
    preferred_languages: list[str] = field(default_factory=list)
    explanation_style: str = "detailed"  # "concise" | "detailed" | "step-by-step"
    include_examples: bool = True


@dataclass
class StudentContext:
    """Snapshot of a student's state, supplied by the context manager."""
    session_id: str
    learning_level: LearningLevel = LearningLevel.BEGINNER
    conversation_history: list[ConversationMessage] = field(default_factory=list)
    preferences: StudentPreferences = field(default_factory=StudentPreferences)
    last_updated_at: int = 0


# =============================================================================
# RESPONSE SIDE
# =============================================================================

@dataclass(frozen=True)
class HeadingEntry:
    """A markdown heading found while scanning a reply."""
    level: int
    text: str
    line: int  # 1-based


@dataclass
class AccessibilityWarning:
    """Advisory accessibility finding. Never blocks display."""
    type: WarningType
    message: str
    location: Optional[str] = None
    suggestion: Optional[str] = None


@dataclass
class AccessibilityError:
    """Accessibility fault. No current check raises one."""
    type: ErrorSeverity
    message: str
    wcag_criterion: Optional[str] = None


@dataclass
class AccessibilityReport:
    """Result of auditing a formatted reply."""
    passed: bool
    warnings: list[AccessibilityWarning] = field(default_factory=list)
    errors: list[AccessibilityError] = field(default_factory=list)
    wcag_level: Optional[str] = None
    keyboard_navigable: Optional[bool] = None
    screen_reader_support: Optional[bool] = None
    color_contrast: Optional[bool] = None
    zoom_support: Optional[bool] = None
    timestamp: Optional[int] = None

    def to_dict(self) -> dict:
        """JSON-ready representation for the UI/persistence layer."""
        data = asdict(self)
        data["warnings"] = [
            {**w, "type": w["type"].value} for w in data["warnings"]
        ]
        data["errors"] = [
            {**e, "type": e["type"].value} for e in data["errors"]
        ]
        return data


# =============================================================================
# PIPELINE RESULTS
# =============================================================================

@dataclass
class PromptOutcome:
    """Result of the request half of the pipeline."""
    parsed: ParsedMessage
    verdict: SafetyVerdict
    prompt: Optional[BuiltPrompt] = None  # None when the verdict refuses


@dataclass
class FormattedReply:
    """Result of the reply half of the pipeline."""
    content: str
    report: AccessibilityReport


@dataclass
class ChatResult:
    """Everything produced while handling one chat turn."""
    reply: str
    parsed: ParsedMessage
    verdict: SafetyVerdict
    prompt: Optional[BuiltPrompt] = None
    report: Optional[AccessibilityReport] = None

    @property
    def was_refused(self) -> bool:
        return not self.verdict.is_allowed
