"""Canonical entity endpoints.

Lists the registered entity schemas and maps a single source record into
canonical form with its validation result.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from core.errors import MappingNotFoundError, UnknownEntityTypeError, UnsupportedSourceError
from core.models.registry import get_registry


router = APIRouter()


class FromSourceRequest(BaseModel):
    """A raw ERP record to map."""
    source_system: str = Field(..., description="SAP, INFOR_LN, INFOR_M3, INFOR_CSI or INFOR_LAWSON")
    record: Dict[str, Any] = Field(..., description="Source record keyed by ERP field names")


@router.get("/entities")
async def list_entities() -> List[Dict[str, Any]]:
    """List entity types with their required fields and field definitions."""
    registry = get_registry()
    return [registry.get(name).schema.to_dict() for name in registry.list_types()]


@router.post("/{entity_type}/from-source")
async def map_from_source(entity_type: str, request: FromSourceRequest) -> Dict[str, Any]:
    """Map one source record and validate the result."""
    try:
        entity = get_registry().create(entity_type).from_source(request.source_system, request.record)
    except UnknownEntityTypeError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MappingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UnsupportedSourceError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"entity": entity.to_json(), "validation": entity.validate().to_dict()}
