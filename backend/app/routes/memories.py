"""Memory search routes."""

from fastapi import APIRouter

from ..dependencies import Memory
from ..models import MemorySearchRequest, MemorySearchResponse, MemorySearchResult
from ..responses import internal_error

router = APIRouter(prefix="/memory", tags=["memory"])


@router.post("/search", response_model=MemorySearchResponse)
async def search_memories(request: MemorySearchRequest, memory: Memory):
    """
    Search memory using case-insensitive substring matching.

    Scans the first page of store files in order and stops at ``top_k``
    matches; results are not ranked.
    """
    try:
        results = await memory.search(
            request.query, top_k=request.top_k, filter_tags=request.filter_tags
        )
        return MemorySearchResponse(
            results=[MemorySearchResult(**r.to_dict()) for r in results],
            query=request.query,
            total=len(results),
        )
    except Exception as e:
        return internal_error(e, "/memory/search")
