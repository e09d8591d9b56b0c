from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from src.api.auth import get_current_user
from src.api.database import get_db
from src.api.models import Folder, User
from src.api.routes.notes import note_response
from src.api.schemas import (
    FolderCreateRequest,
    FolderDeleteResponse,
    FolderResponse,
    FolderUpdateRequest,
    NoteResponse,
)
from src.api.services import FolderService, NoteService

router = APIRouter(prefix="/folders", tags=["Folders"])


def folder_response(folder: Folder, note_count: int = 0) -> FolderResponse:
    return FolderResponse(
        id=folder.id,
        name=folder.name,
        description=folder.description,
        color=folder.color,
        user_id=folder.user_id,
        note_count=note_count,
        created_at=folder.created_at,
        updated_at=folder.updated_at,
    )


# PUBLIC_INTERFACE
@router.get("", response_model=List[FolderResponse], summary="List folders")
def list_folders(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the current user's folders by name, each with its note count."""
    return [
        folder_response(folder, note_count)
        for folder, note_count in FolderService.list_folders(db, current_user.id)
    ]


# PUBLIC_INTERFACE
@router.get("/{folder_id}", response_model=FolderResponse, summary="Get a folder by ID")
def get_folder(
    folder_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Retrieve a single folder with the number of notes filed in it.
    Only the owner can access it.
    """
    folder, note_count = FolderService.get_folder_with_count(db, current_user.id, folder_id)
    return folder_response(folder, note_count)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=FolderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a folder",
)
def create_folder(
    payload: FolderCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create a folder for the authenticated user.

    Body:
        name: folder name, unique per user
        description: optional, defaults to empty
        color: optional display color

    Raises:
        400 if the name is blank or already used by another of the user's folders.
    """
    folder = FolderService.create_folder(db, current_user.id, payload)
    return folder_response(folder)


# PUBLIC_INTERFACE
@router.put("/{folder_id}", response_model=FolderResponse, summary="Update a folder")
def update_folder(
    payload: FolderUpdateRequest,
    folder_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Partially update a folder. Only the owner can modify it."""
    folder = FolderService.update_folder(db, current_user.id, folder_id, payload)
    _, note_count = FolderService.get_folder_with_count(db, current_user.id, folder.id)
    return folder_response(folder, note_count)


# PUBLIC_INTERFACE
@router.delete("/{folder_id}", response_model=FolderDeleteResponse, summary="Delete a folder")
def delete_folder(
    folder_id: int = Path(..., ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Delete a folder. Notes filed in it are kept and become unfiled.
    """
    detached = FolderService.delete_folder(db, current_user.id, folder_id)
    return FolderDeleteResponse(message="Folder deleted successfully", detached_notes=detached)


# PUBLIC_INTERFACE
@router.get(
    "/{folder_id}/notes",
    response_model=List[NoteResponse],
    summary="List notes in a folder",
)
def list_folder_notes(
    folder_id: int = Path(..., ge=1),
    search: Optional[str] = Query(None, description="Search query for title/content"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="Field to sort by"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc or desc"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the notes filed in one of the user's folders, with search and sort."""
    notes = NoteService.list_folder_notes(
        db, current_user.id, folder_id, search=search, sort_by=sort_by, sort_order=sort_order
    )
    return [note_response(n) for n in notes]
