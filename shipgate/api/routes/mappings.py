"""
Carrier/service mapping admin routes.

New mappings apply to every subsequent rate request in this process.
"""
import logging

from fastapi import APIRouter, Depends, status

from shipgate.api.deps import get_canonicalizer
from shipgate.modules.shipping.mapping import Canonicalizer
from shipgate.schemas.shipping import CarrierMappingCreate, MappingsResponse, ServiceMappingCreate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mappings", tags=["mappings"])


def _snapshot(canonicalizer: Canonicalizer) -> MappingsResponse:
    return MappingsResponse(
        carriers=canonicalizer.carrier_mappings(),
        services=canonicalizer.service_mappings(),
    )


@router.get("", response_model=MappingsResponse)
async def list_mappings(canonicalizer: Canonicalizer = Depends(get_canonicalizer)):
    """Current carrier and service tables."""
    return _snapshot(canonicalizer)


@router.post("/carriers", response_model=MappingsResponse, status_code=status.HTTP_201_CREATED)
async def add_carrier_mapping(
    mapping: CarrierMappingCreate,
    canonicalizer: Canonicalizer = Depends(get_canonicalizer),
):
    canonicalizer.register_carrier_mapping(mapping.source, mapping.target)
    logger.info(f"Carrier mapping added: {mapping.source} -> {mapping.target}")
    return _snapshot(canonicalizer)


@router.post("/services", response_model=MappingsResponse, status_code=status.HTTP_201_CREATED)
async def add_service_mapping(
    mapping: ServiceMappingCreate,
    canonicalizer: Canonicalizer = Depends(get_canonicalizer),
):
    canonicalizer.register_service_mapping(mapping.carrier, mapping.source, mapping.target)
    logger.info(f"Service mapping added: {mapping.carrier}:{mapping.source} -> {mapping.target}")
    return _snapshot(canonicalizer)
