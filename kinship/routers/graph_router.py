from typing import List

from fastapi import APIRouter

from kinship.core.generation_utils import get_generation_color_palette
from kinship.schemas.graph_schema import GraphAnalysisOut, GraphPayload, PaletteEntry
from kinship.services.graph_service import analyze_graph


router = APIRouter(prefix="/graph", tags=["Graph"])


# --------------------------------------------------
# ANALYZE A CALLER-SUPPLIED GRAPH
# --------------------------------------------------
@router.post("/analyze", response_model=GraphAnalysisOut)
def analyze(payload: GraphPayload):
    return analyze_graph(payload.persons, payload.connections, payload.union_config)


@router.get("/palette", response_model=List[PaletteEntry])
def generation_palette():
    return get_generation_color_palette()
