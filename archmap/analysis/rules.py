"""Ordered heuristic tables for architecture roles and design-pattern tags.

Role rules are evaluated top to bottom and the first predicate that holds
wins. Pattern rules are independent; every predicate that holds adds its tag.
Predicates only look at the path string, the file content and the already
extracted structural facts.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Callable, List, Sequence

from ..models import DEFAULT_ROLE


@dataclass(frozen=True)
class RuleSubject:
    """Inputs visible to role and pattern predicates."""

    path: str
    content: str
    functions: Sequence[str]
    classes: Sequence[str]
    export_count: int

    @property
    def lowered_path(self) -> str:
        return self.path.replace("\\", "/").lower()

    @property
    def basename(self) -> str:
        return os.path.basename(self.lowered_path)

    @property
    def suffix(self) -> str:
        return os.path.splitext(self.lowered_path)[1]


Predicate = Callable[[RuleSubject], bool]


@dataclass(frozen=True)
class Rule:
    label: str
    predicate: Predicate

    def matches(self, subject: RuleSubject) -> bool:
        return self.predicate(subject)


_TEST_DIR_MARKERS = ("/test/", "/tests/", "/__tests__/", "/spec/", "/e2e/")
_TEST_NAME_MARKERS = (".test.", ".spec.", "_test.")

_API_CONTENT_MARKERS = (
    "NextResponse",
    "NextRequest",
    "express()",
    "express.Router(",
    "FastAPI(",
    "APIRouter(",
    "Flask(__name__)",
    "@app.route(",
    "Blueprint(",
)
_API_ROUTE_CALL = re.compile(r"\b(app|router)\.(get|post|put|delete|patch)\(")
_API_PATH_MARKERS = ("/api/", "/routes/", "/controllers/", "/handlers/")
_API_FILE_NAMES = ("route.ts", "route.js", "views.py", "urls.py")

_UI_SUFFIXES = (".tsx", ".jsx")
_HOOK_CALL = re.compile(r"\buse[A-Z]\w*\(")

_SERVICE_PATH_MARKERS = (
    "/services/",
    "/service/",
    "/lib/",
    "/utils/",
    "/helpers/",
    "/core/",
    "/domain/",
)

_PACKAGE_INIT_NAMES = ("__init__.py", "index.ts", "index.js")


def _is_verification(subject: RuleSubject) -> bool:
    path = f"/{subject.lowered_path}"
    if any(marker in path for marker in _TEST_DIR_MARKERS):
        return True
    basename = subject.basename
    if basename.startswith("test_") or basename == "conftest.py":
        return True
    return any(marker in basename for marker in _TEST_NAME_MARKERS)


def _is_edge_api(subject: RuleSubject) -> bool:
    if any(marker in subject.content for marker in _API_CONTENT_MARKERS):
        return True
    if _API_ROUTE_CALL.search(subject.content):
        return True
    path = f"/{subject.lowered_path}"
    if any(marker in path for marker in _API_PATH_MARKERS):
        return True
    return subject.basename in _API_FILE_NAMES


def _is_presentation(subject: RuleSubject) -> bool:
    if subject.suffix in _UI_SUFFIXES:
        return True
    return bool(_HOOK_CALL.search(subject.content)) and len(subject.classes) > 0


def _is_service(subject: RuleSubject) -> bool:
    path = f"/{subject.lowered_path}"
    return any(marker in path for marker in _SERVICE_PATH_MARKERS)


def _is_package_init(subject: RuleSubject) -> bool:
    return subject.basename in _PACKAGE_INIT_NAMES


ROLE_RULES: tuple[Rule, ...] = (
    Rule("Verification", _is_verification),
    Rule("Edge/API", _is_edge_api),
    Rule("Presentation", _is_presentation),
    Rule("Service/Logic", _is_service),
    Rule("Orchestration", _is_package_init),
)


def _uses_proxy(subject: RuleSubject) -> bool:
    return "new Proxy(" in subject.content


def _uses_event_emitter(subject: RuleSubject) -> bool:
    content = subject.content
    return "EventEmitter" in content or (".emit(" in content and ".on(" in content)


def _is_settings(subject: RuleSubject) -> bool:
    return "BaseSettings" in subject.content or "extends Config" in subject.content


def _has_abstract_methods(subject: RuleSubject) -> bool:
    content = subject.content
    return "@abstractmethod" in content or "abstract " in content


def _is_single_export_class(subject: RuleSubject) -> bool:
    return subject.export_count == 1 and len(subject.classes) == 1


def _consumes_context(subject: RuleSubject) -> bool:
    content = subject.content
    return "useContext(" in content or "createContext(" in content


PATTERN_RULES: tuple[Rule, ...] = (
    Rule("Proxy", _uses_proxy),
    Rule("Observer", _uses_event_emitter),
    Rule("Settings/Config", _is_settings),
    Rule("Abstract Template", _has_abstract_methods),
    Rule("Singleton/Module", _is_single_export_class),
    Rule("Provider", _consumes_context),
)


def infer_role(subject: RuleSubject, rules: Sequence[Rule] = ROLE_RULES) -> str:
    """Return the label of the first matching role rule, or the default role."""
    for rule in rules:
        if rule.matches(subject):
            return rule.label
    return DEFAULT_ROLE


def detect_patterns(subject: RuleSubject, rules: Sequence[Rule] = PATTERN_RULES) -> List[str]:
    """Return every matching pattern tag in table order."""
    return [rule.label for rule in rules if rule.matches(subject)]


__all__ = [
    "PATTERN_RULES",
    "ROLE_RULES",
    "Rule",
    "RuleSubject",
    "detect_patterns",
    "infer_role",
]
