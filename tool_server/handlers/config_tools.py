"""Configuration tool handlers.

Reads return canned SAP configuration in mock mode. Writes, safety checks,
approvals and the audit trail all go through the SafetyBridge.
"""

from typing import Any, Dict, List, Optional

from core.models.canonical import utc_timestamp
from core.observability.logging import get_logger
from core.safety.bridge import SafetyBridge

logger = get_logger(__name__)

DEFAULT_SYSTEM_ID = "S4D"

CONFIG_SOURCE_DATA: Dict[str, List[Dict[str, Any]]] = {
    "company-codes": [
        {"code": "1000", "name": "Global Corp", "country": "US", "currency": "USD", "chartOfAccounts": "YCOA"},
        {"code": "2000", "name": "EMEA Operations", "country": "DE", "currency": "EUR", "chartOfAccounts": "YCOA"},
        {"code": "3000", "name": "APAC Division", "country": "SG", "currency": "SGD", "chartOfAccounts": "YCOA"},
    ],
    "plants": [
        {"code": "1000", "name": "Main Plant US", "companyCode": "1000", "country": "US", "region": "NA",
         "valuationArea": "1000"},
        {"code": "2000", "name": "Frankfurt Plant", "companyCode": "2000", "country": "DE", "region": "EMEA",
         "valuationArea": "2000"},
        {"code": "3000", "name": "Singapore Plant", "companyCode": "3000", "country": "SG", "region": "APAC",
         "valuationArea": "3000"},
        {"code": "1100", "name": "Distribution Center US", "companyCode": "1000", "country": "US", "region": "NA",
         "valuationArea": "1100"},
    ],
    "sales-orgs": [
        {"code": "1000", "name": "US Sales Org", "companyCode": "1000", "distributionChannel": "10",
         "division": "00", "currency": "USD"},
        {"code": "2000", "name": "EMEA Sales Org", "companyCode": "2000", "distributionChannel": "10",
         "division": "00", "currency": "EUR"},
        {"code": "3000", "name": "APAC Sales Org", "companyCode": "3000", "distributionChannel": "10",
         "division": "00", "currency": "SGD"},
    ],
    "purchasing-orgs": [
        {"code": "1000", "name": "Central Purchasing", "companyCode": "1000", "country": "US"},
        {"code": "2000", "name": "EMEA Purchasing", "companyCode": "2000", "country": "DE"},
    ],
    "chart-of-accounts": [
        {"code": "YCOA", "name": "Global Chart of Accounts", "length": 10, "language": "EN",
         "blockingIndicator": False},
    ],
}

SAMPLE_CONFIG_ENTRY = {"id": "SAMPLE-001", "description": "Sample config entry"}

OVERWRITE_DECISION = {
    "id": "CFG-001",
    "category": "configuration",
    "question": "Confirm target system configuration overwrite?",
    "options": ["Approve", "Review first", "Reject"],
    "impact": "Will modify target system configuration",
    "blocking": True,
}


class ConfigToolHandlers:
    """Handlers for the ``config_*`` tools."""

    def __init__(self, bridge: Optional[SafetyBridge] = None, mode: str = "mock"):
        self.mode = mode
        self.bridge = bridge or SafetyBridge(mode=mode)

    async def handle(self, tool_name: str, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        handler = getattr(self, f"_handle_{tool_name}", None)
        if handler is None:
            raise ValueError(f"Unknown config tool: {tool_name}")
        logger.debug(f"Handling {tool_name}")
        result = await handler(params or {})
        logger.debug(f"Completed {tool_name}", extra_fields={"result_keys": list(result.keys())})
        return result

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def _handle_config_read_source(self, params: Dict[str, Any]) -> Dict[str, Any]:
        config_type = params.get("configType")
        entries = CONFIG_SOURCE_DATA.get(config_type, [SAMPLE_CONFIG_ENTRY])
        return {
            "configType": config_type,
            "systemId": params.get("systemId") or DEFAULT_SYSTEM_ID,
            "entries": [dict(e) for e in entries],
            "totalEntries": len(entries),
        }

    # =========================================================================
    # Write Operations (safety-gated)
    # =========================================================================

    async def _handle_config_write_target(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Validate or write configuration. Dry run unless dryRun is exactly false."""
        config_type = params.get("configType")
        data = params.get("data")
        transport = params.get("transport")
        dry_run = params.get("dryRun") is not False

        if not dry_run:
            decision = await self.bridge.check(
                tool_name="config_write_target",
                operation=f"Write {config_type} configuration to target system",
                artifact={
                    "name": config_type,
                    "type": "configuration",
                    "transport": transport,
                    "metadata": data if isinstance(data, dict) else {},
                },
                dry_run=False,
            )
            if not decision.allowed:
                return {
                    "configType": config_type,
                    "dryRun": False,
                    "status": "blocked",
                    "reason": decision.reason,
                    "gateResults": [r.to_dict() for r in decision.gate_results],
                }

        if isinstance(data, dict):
            entries = data.get("entries")
            entries_processed = len(entries) if isinstance(entries, list) else 1
        else:
            entries_processed = 0

        return {
            "configType": config_type,
            "dryRun": dry_run,
            "status": "validated" if dry_run else "written",
            "entriesProcessed": entries_processed,
            "transport": transport,
            "validation": {"passed": True, "errors": [], "warnings": []},
            "humanDecisionsRequired": [dict(OVERWRITE_DECISION)],
        }

    # =========================================================================
    # Safety and Audit Operations
    # =========================================================================

    async def _handle_config_safety_check(self, params: Dict[str, Any]) -> Dict[str, Any]:
        operation = params.get("operation")
        artifact = params.get("artifact") or {
            "name": "config-operation",
            "type": "configuration",
            "metadata": {"operation": operation},
        }
        decision = await self.bridge.check(
            tool_name="config_safety_check",
            operation=operation,
            artifact=artifact,
            dry_run=False,
        )

        if decision.allowed:
            recommendations = [
                "Operation passed safety gates, proceed with caution",
                "Ensure transport request is assigned before write",
            ]
        else:
            recommendations = [
                "Operation blocked by safety gates, review gate results",
                "Consider running in dry-run mode first",
                "Request human approval if override is needed",
            ]

        return {
            "operation": operation,
            "allowed": decision.allowed,
            "gates": [{"name": r.name, "status": r.status, "message": r.message} for r in decision.gate_results],
            "strictness": self.bridge.strictness,
            "recommendations": recommendations,
        }

    async def _handle_config_request_approval(self, params: Dict[str, Any]) -> Dict[str, Any]:
        operation = params.get("operation")
        urgency = params.get("urgency") or "normal"
        request = self.bridge.request_approval({
            "name": operation or "config-operation",
            "type": "configuration",
            "metadata": {"operation": operation, "details": params.get("details") or {}, "urgency": urgency},
        })
        logger.info(f"Approval requested for {operation}", extra_fields={"approval_id": request.approval_id})
        return {
            "approvalId": request.approval_id,
            "operation": operation,
            "urgency": urgency,
            "status": request.status,
            "requestedAt": utc_timestamp(),
            "estimatedReviewTime": "2-4 hours",
        }

    async def _handle_config_get_audit_trail(self, params: Dict[str, Any]) -> Dict[str, Any]:
        since = params.get("since")
        artifact_type = params.get("artifactType")
        approved = params.get("approved")

        filters: Dict[str, Any] = {}
        if since:
            filters["since"] = since
        if artifact_type:
            filters["artifact_type"] = artifact_type
        if approved is not None:
            filters["approved"] = approved

        entries = self.bridge.get_audit_trail(filters)
        return {
            "entries": entries,
            "totalEntries": len(entries),
            "filters": {"since": since, "artifactType": artifact_type, "approved": approved},
        }
