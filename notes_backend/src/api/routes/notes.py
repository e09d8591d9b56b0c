from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from src.api.auth import get_current_user
from src.api.database import get_db
from src.api.models import Note, User
from src.api.schemas import (
    FolderRef,
    MessageResponse,
    NoteCreateRequest,
    NoteResponse,
    NoteUpdateRequest,
)
from src.api.services import NoteService

router = APIRouter(prefix="/notes", tags=["Notes"])


def note_response(note: Note) -> NoteResponse:
    folder = note.folder
    return NoteResponse(
        id=note.id,
        title=note.title,
        content=note.content,
        user_id=note.user_id,
        folder_id=note.folder_id,
        folder=FolderRef(id=folder.id, name=folder.name, color=folder.color) if folder else None,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


# PUBLIC_INTERFACE
@router.get("", response_model=List[NoteResponse], summary="List notes with search, filter and sort")
def list_notes(
    search: Optional[str] = Query(None, description="Search query for title/content"),
    folder: Optional[str] = Query(None, description="Folder id, or 'none' for unfiled notes"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="Field to sort by"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc or desc"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List notes belonging to the current user.

    Query params:
        search: optional text to match in title or content, case-insensitive
        folder: folder id, or 'none' for notes outside any folder
        sortBy: field to sort by, default updatedAt
        sortOrder: asc or desc, default desc
    """
    notes = NoteService.list_notes(
        db,
        current_user.id,
        search=search,
        folder=folder,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return [note_response(n) for n in notes]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new note",
)
def create_note(
    payload: NoteCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create a new note for the authenticated user.

    Body:
        title: note title
        content: note content
        folder_id: optional id of one of the user's folders (alias: folder)

    Returns:
        Created NoteResponse
    """
    note = NoteService.create_note(db, current_user.id, payload)
    return note_response(note)


# PUBLIC_INTERFACE
@router.get("/{note_id}", response_model=NoteResponse, summary="Get a note by ID")
def get_note(
    note_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Retrieve a single note by ID. Only the owner can access it.
    """
    return note_response(NoteService.get_note(db, current_user.id, note_id))


# PUBLIC_INTERFACE
@router.put("/{note_id}", response_model=NoteResponse, summary="Update a note by ID")
def update_note(
    payload: NoteUpdateRequest,
    note_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Update a note. Only the owner can modify it.
    """
    note = NoteService.update_note(db, current_user.id, note_id, payload)
    return note_response(note)


# PUBLIC_INTERFACE
@router.delete("/{note_id}", response_model=MessageResponse, summary="Delete a note by ID")
def delete_note(
    note_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Delete a note. Only the owner can delete it.
    """
    NoteService.delete_note(db, current_user.id, note_id)
    return MessageResponse(message="Note deleted successfully")
