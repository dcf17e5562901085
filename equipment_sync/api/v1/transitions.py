"""
Transition rule API endpoints.

Read-only views of the state graphs for equipment, fault reports and
repair records.
"""
from fastapi import APIRouter, HTTPException, status

from ..schemas import TransitionCheckResponse, TransitionsResponse
from ...domain.services import EntityType, can_transition, parse_state, valid_next_states

router = APIRouter(prefix="/transitions", tags=["Transitions"])


def _entity_type(entity_type: str) -> EntityType:
    try:
        return EntityType(entity_type)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown entity type '{entity_type}'",
        )


@router.get(
    "/{entity_type}/{state}",
    response_model=TransitionsResponse,
    summary="List legal next states",
)
async def get_valid_next_states(entity_type: str, state: str) -> TransitionsResponse:
    kind = _entity_type(entity_type)
    if parse_state(kind, state) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown {kind.value} state '{state}'",
        )

    next_states = sorted(s.value for s in valid_next_states(kind, state))
    return TransitionsResponse(
        entity_type=kind.value,
        state=state,
        valid_next_states=next_states,
    )


@router.get(
    "/{entity_type}/{from_state}/{to_state}",
    response_model=TransitionCheckResponse,
    summary="Check a single transition",
)
async def check_transition(entity_type: str, from_state: str, to_state: str) -> TransitionCheckResponse:
    kind = _entity_type(entity_type)
    return TransitionCheckResponse(
        entity_type=kind.value,
        from_state=from_state,
        to_state=to_state,
        allowed=can_transition(kind, from_state, to_state),
    )
