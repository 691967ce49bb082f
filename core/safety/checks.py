"""Built-in gate checks for ABAP artifacts.

Each check takes an Artifact (plus the policy inputs it needs) and returns a
plain dict ``{status, message, details}``; the gate engine wraps it into a
GateResult.
"""

import re
from typing import Any, Dict, List

from core.models.refs import Artifact, GateStatus, Strictness

CheckOutcome = Dict[str, Any]

CODE_TYPES = frozenset({"program", "class", "function_module", "interface", "include"})
ATC_TYPES = frozenset({"program", "class", "function_module", "interface"})
UNIT_TEST_TYPES = frozenset({"program", "class", "function_module"})

ATC_VARIANT = "S4HANA_READINESS"
MAX_NAME_LENGTH = 30
MIN_DESCRIPTION_LENGTH = 10

NAMING_PATTERNS = {
    "program": re.compile(r"^[ZY]", re.IGNORECASE),
    "class": re.compile(r"^[ZY]CL_", re.IGNORECASE),
    "function_module": re.compile(r"^[ZY]_", re.IGNORECASE),
    "interface": re.compile(r"^[ZY]IF_", re.IGNORECASE),
    "include": re.compile(r"^[ZY]", re.IGNORECASE),
}


def _outcome(status: GateStatus, message: str, details: Dict[str, Any]) -> CheckOutcome:
    return {"status": status.value, "message": message, "details": details}


def _count(pattern: str, source: str) -> int:
    return len(re.findall(pattern, source, re.IGNORECASE))


def _soft_status(strictness: str) -> GateStatus:
    """Warning, or failure under strict."""
    return GateStatus.FAILED if strictness == Strictness.STRICT.value else GateStatus.WARNING


# =============================================================================
# Source Hash
# =============================================================================

def source_hash(text: str) -> str:
    """32-bit rolling hash (h * 31 + c) rendered as signed hex.

    Identification only, not cryptographic.
    """
    h = 0
    for ch in text:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return f"-{-h:x}" if h < 0 else f"{h:x}"


# =============================================================================
# Syntax
# =============================================================================

_BLOCK_PAIRS = (
    ("IF", r"\bIF\b", "ENDIF", r"\bENDIF\b"),
    ("LOOP", r"\bLOOP\b", "ENDLOOP", r"\bENDLOOP\b"),
    ("DO", r"\bDO\b", "ENDDO", r"\bENDDO\b"),
)

_EMPTY_FORM = re.compile(r"\bFORM\b[^.]+\.\s*\bENDFORM\b", re.IGNORECASE)
_EMPTY_METHOD = re.compile(r"\bMETHOD\b[^.]+\.\s*\bENDMETHOD\b", re.IGNORECASE)


def _statement_lines(source: str) -> List[str]:
    lines = []
    for line in source.split("\n"):
        stripped = line.strip()
        if stripped and not stripped.startswith(("*", '"')):
            lines.append(stripped)
    return lines


def check_syntax(artifact: Artifact) -> CheckOutcome:
    """Balanced block openers/closers and empty FORM/METHOD bodies."""
    if not artifact.source:
        return _outcome(GateStatus.PASSED, "No source to check", {"skipped": True})

    source = artifact.source
    errors = []

    for opener, open_re, closer, close_re in _BLOCK_PAIRS:
        opened = _count(open_re, source)
        closed = _count(close_re, source)
        if opened != closed:
            errors.append(f"Unmatched {opener}/{closer}: {opened} {opener} vs {closed} {closer}")

    if _EMPTY_FORM.search(source):
        errors.append("Empty FORM implementation detected")
    if _EMPTY_METHOD.search(source):
        errors.append("Empty METHOD implementation detected")

    if errors:
        return _outcome(
            GateStatus.FAILED,
            f"Syntax issues found: {len(errors)} error(s)",
            {"errors": errors},
        )

    return _outcome(
        GateStatus.PASSED,
        "Syntax check passed",
        {"linesChecked": len(_statement_lines(source))},
    )


# =============================================================================
# ATC
# =============================================================================

_OBSOLETE = (
    (re.compile(r"\bDESCRIBE\s+TABLE\b.*\bOCCURS\b", re.IGNORECASE), "DESCRIBE TABLE with OCCURS is obsolete"),
    (re.compile(r"\bMOVE\b.*\bTO\b", re.IGNORECASE), "MOVE...TO is obsolete, use assignment operator"),
    (re.compile(r"\bCOMPUTE\b", re.IGNORECASE), "COMPUTE statement is obsolete"),
    (re.compile(r"\bHEADER\s+LINE\b", re.IGNORECASE), "Tables with HEADER LINE are obsolete"),
)


def _finding(priority: int, category: str, message: str, rule: str) -> Dict[str, Any]:
    return {"priority": priority, "category": category, "message": message, "rule": rule}


def atc_findings(source: str) -> List[Dict[str, Any]]:
    """Pattern-scan ABAP source. Priority 1 findings are critical."""
    findings = []

    if re.search(r"\bSELECT\s+\*", source, re.IGNORECASE):
        findings.append(_finding(1, "PERFORMANCE", "SELECT * used without explicit field list", "FUNC_SELECT_STAR"))

    if (re.search(r"\bCALL\s+TRANSACTION\b", source, re.IGNORECASE)
            and not re.search(r"\bAUTHORITY-CHECK\b", source, re.IGNORECASE)):
        findings.append(_finding(1, "SECURITY", "CALL TRANSACTION without AUTHORITY-CHECK", "SEC_AUTH_MISSING"))

    for pattern, message in _OBSOLETE:
        if pattern.search(source):
            findings.append(_finding(2, "S4HANA_READINESS", message, "S4H_OBSOLETE"))

    if (re.search(r"\bCLIENT\s+SPECIFIED\b", source, re.IGNORECASE)
            and not re.search(r"\bSY-MANDT\b", source, re.IGNORECASE)):
        findings.append(_finding(2, "PORTABILITY", "CLIENT SPECIFIED used without SY-MANDT", "PORT_CLIENT"))

    return findings


def check_atc(artifact: Artifact, strictness: str) -> CheckOutcome:
    """Critical findings fail; other findings warn, or fail under strict."""
    if not artifact.source:
        return _outcome(GateStatus.PASSED, "No source to check", {"skipped": True, "variant": ATC_VARIANT})

    findings = atc_findings(artifact.source)
    critical = [f for f in findings if f["priority"] == 1]
    details = {
        "findings": findings,
        "criticalCount": len(critical),
        "totalCount": len(findings),
        "variant": ATC_VARIANT,
    }

    if critical:
        return _outcome(GateStatus.FAILED, f"ATC check failed: {len(critical)} critical finding(s)", details)
    if findings:
        return _outcome(
            _soft_status(strictness),
            f"ATC check: {len(findings)} finding(s), no critical issues",
            details,
        )
    return _outcome(GateStatus.PASSED, "ATC check passed with no findings", details)


# =============================================================================
# Naming Convention
# =============================================================================

def check_naming_convention(artifact: Artifact, strictness: str) -> CheckOutcome:
    errors: List[str] = []
    warnings: List[str] = []
    name = artifact.name
    artifact_type = artifact.type or "program"

    pattern = NAMING_PATTERNS.get(artifact_type)
    if pattern and not pattern.search(name):
        errors.append(f'Name "{name}" does not follow Z*/Y* naming convention for type "{artifact_type}"')

    description = artifact.metadata.get("description")
    if isinstance(description, str) and description and len(description) < MIN_DESCRIPTION_LENGTH:
        warnings.append(
            f"Description too short ({len(description)} chars, minimum {MIN_DESCRIPTION_LENGTH})"
        )

    if name != name.upper():
        warnings.append(f'Name "{name}" is not in UPPER_CASE; SAP convention recommends uppercase')

    if re.search(r"\s", name):
        errors.append(f'Name "{name}" contains whitespace')

    if len(name) > MAX_NAME_LENGTH:
        errors.append(f'Name "{name}" exceeds {MAX_NAME_LENGTH} character limit ({len(name)} chars)')

    details = {"errors": errors, "warnings": warnings}
    if errors:
        return _outcome(GateStatus.FAILED, f"Naming convention violations: {'; '.join(errors)}", details)
    if warnings and strictness == Strictness.STRICT.value:
        return _outcome(
            GateStatus.FAILED,
            f"Naming convention warnings (strict mode): {'; '.join(warnings)}",
            details,
        )
    if warnings:
        return _outcome(GateStatus.WARNING, f"Naming convention: {len(warnings)} warning(s)", details)
    return _outcome(GateStatus.PASSED, "Naming conventions satisfied", details)


# =============================================================================
# Unit Tests
# =============================================================================

def check_unit_test_coverage(artifact: Artifact, strictness: str) -> CheckOutcome:
    has_test_metadata = artifact.metadata.get("hasTests") is True

    if not artifact.source and not has_test_metadata:
        return _outcome(GateStatus.PASSED, "No source to check for test coverage", {"skipped": True})

    source = artifact.source or ""
    has_test_class = bool(re.search(r"\bCLASS\b.*\bFOR\s+TESTING\b", source, re.IGNORECASE))
    has_test_method = bool(re.search(r"\bMETHODS?\b.*\bFOR\s+TESTING\b", source, re.IGNORECASE))
    for_testing = bool(re.search(r"\bFOR\s+TESTING\b", source, re.IGNORECASE))

    if for_testing or has_test_metadata:
        return _outcome(
            GateStatus.PASSED,
            "Unit test coverage detected",
            {
                "hasTestClass": has_test_class,
                "hasTestMethod": has_test_method,
                "hasTestMetadata": has_test_metadata,
            },
        )

    return _outcome(
        _soft_status(strictness),
        "No unit tests found for this artifact",
        {
            "hasTestClass": False,
            "hasTestMethod": False,
            "recommendation": "Add ABAP Unit test class with FOR TESTING",
        },
    )


# =============================================================================
# Human Approval
# =============================================================================

def check_human_approval(artifact: Artifact, strictness: str, approved: bool) -> CheckOutcome:
    """strict: pending_review until approved. moderate: warn. permissive: auto-pass."""
    if strictness == Strictness.STRICT.value:
        if approved:
            return _outcome(GateStatus.PASSED, "Human approval granted", {"approvalRequired": True, "approved": True})
        return _outcome(
            GateStatus.PENDING_REVIEW,
            "Awaiting human review and approval",
            {"approvalRequired": True, "approved": False},
        )

    if strictness == Strictness.MODERATE.value:
        if approved:
            return _outcome(GateStatus.PASSED, "Human approval granted", {"approvalRequired": False, "approved": True})
        return _outcome(
            GateStatus.WARNING,
            "Human review recommended but not required",
            {"approvalRequired": False, "approved": False},
        )

    return _outcome(
        GateStatus.PASSED,
        "Human approval auto-passed (permissive mode)",
        {"approvalRequired": False, "approved": approved, "autoApproved": True},
    )
