"""
Ownership-scoped stores for folders and notes.

Every query is filtered by the owning user id, so an entity that belongs to
someone else is indistinguishable from one that does not exist.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import and_, asc, desc, func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.api.config import settings
from src.api.errors import Conflict, NotFound, ValidationError
from src.api.models import Folder, Note, User
from src.api.schemas import (
    FolderCreateRequest,
    FolderUpdateRequest,
    NoteCreateRequest,
    NoteUpdateRequest,
    UserCreateRequest,
)

logger = logging.getLogger(__name__)

# Folder filter value selecting notes that are not filed anywhere
FOLDER_NONE = "none"

NOTE_SORT_FIELDS = {
    "id": Note.id,
    "title": Note.title,
    "content": Note.content,
    "folder": Note.folder_id,
    "folderId": Note.folder_id,
    "folder_id": Note.folder_id,
    "createdAt": Note.created_at,
    "created_at": Note.created_at,
    "updatedAt": Note.updated_at,
    "updated_at": Note.updated_at,
}

DEFAULT_SORT_BY = "updatedAt"
DEFAULT_SORT_ORDER = "desc"

FOLDER_CONFLICT_MESSAGE = "A folder with this name already exists"


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _note_ordering(sort_by: Optional[str], sort_order: Optional[str]):
    column = NOTE_SORT_FIELDS.get(sort_by or DEFAULT_SORT_BY)
    if column is None:
        raise ValidationError(f"Cannot sort notes by '{sort_by}'")
    order = (sort_order or DEFAULT_SORT_ORDER).lower()
    if order not in ("asc", "desc"):
        raise ValidationError("sortOrder must be 'asc' or 'desc'")
    direction = desc if order == "desc" else asc
    # Ties resolve on id so equal timestamps still list deterministically.
    return direction(column), direction(Note.id)


class UserService:
    """Registration and lookup of identities"""

    @staticmethod
    def register(db: Session, data: UserCreateRequest, password_hash: str) -> User:
        existing = db.query(User).filter(User.email == data.email).first()
        if existing:
            raise Conflict("Email already registered")
        user = User(name=data.name, email=data.email, password_hash=password_hash)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("Email already registered")
        db.refresh(user)
        logger.info("Registered user id=%s", user.id)
        return user


class FolderService:
    """Folder store scoped to one owner"""

    @staticmethod
    def _count_notes(db: Session, user_id: int, folder_id: int) -> int:
        return (
            db.query(func.count(Note.id))
            .filter(Note.folder_id == folder_id, Note.user_id == user_id)
            .scalar()
            or 0
        )

    @staticmethod
    def _name_taken(db: Session, user_id: int, name: str, exclude_id: Optional[int] = None) -> bool:
        query = db.query(Folder.id).filter(Folder.user_id == user_id, Folder.name == name)
        if exclude_id is not None:
            query = query.filter(Folder.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def _commit_folder(db: Session, folder: Folder) -> Folder:
        try:
            db.commit()
        except IntegrityError:
            # A concurrent insert won the unique (user_id, name) race.
            db.rollback()
            raise Conflict(FOLDER_CONFLICT_MESSAGE)
        db.refresh(folder)
        return folder

    @staticmethod
    def get_folder(db: Session, user_id: int, folder_id: int) -> Folder:
        folder = (
            db.query(Folder)
            .filter(Folder.id == folder_id, Folder.user_id == user_id)
            .first()
        )
        if folder is None:
            raise NotFound("Folder")
        return folder

    @staticmethod
    def get_folder_with_count(db: Session, user_id: int, folder_id: int) -> Tuple[Folder, int]:
        folder = FolderService.get_folder(db, user_id, folder_id)
        return folder, FolderService._count_notes(db, user_id, folder.id)

    @staticmethod
    def list_folders(db: Session, user_id: int) -> List[Tuple[Folder, int]]:
        """All folders of the user ordered by name, each with its note count."""
        rows = (
            db.query(Folder, func.count(Note.id).label("note_count"))
            .outerjoin(Note, and_(Note.folder_id == Folder.id, Note.user_id == user_id))
            .filter(Folder.user_id == user_id)
            .group_by(Folder.id)
            .order_by(Folder.name.asc())
            .all()
        )
        return [(folder, note_count) for folder, note_count in rows]

    @staticmethod
    def create_folder(db: Session, user_id: int, data: FolderCreateRequest) -> Folder:
        if FolderService._name_taken(db, user_id, data.name):
            raise Conflict(FOLDER_CONFLICT_MESSAGE)
        folder = Folder(
            name=data.name,
            description=data.description if data.description is not None else settings.FOLDER_DEFAULT_DESCRIPTION,
            color=data.color or settings.FOLDER_DEFAULT_COLOR,
            user_id=user_id,
        )
        db.add(folder)
        folder = FolderService._commit_folder(db, folder)
        logger.info("User %s created folder id=%s", user_id, folder.id)
        return folder

    @staticmethod
    def update_folder(db: Session, user_id: int, folder_id: int, data: FolderUpdateRequest) -> Folder:
        folder = FolderService.get_folder(db, user_id, folder_id)
        if data.name is not None and data.name != folder.name:
            if FolderService._name_taken(db, user_id, data.name, exclude_id=folder.id):
                raise Conflict(FOLDER_CONFLICT_MESSAGE)
            folder.name = data.name
        if data.description is not None:
            folder.description = data.description
        if data.color:
            folder.color = data.color
        return FolderService._commit_folder(db, folder)

    @staticmethod
    def delete_folder(db: Session, user_id: int, folder_id: int) -> int:
        """
        Delete a folder and unfile its notes in one transaction.

        Returns:
            The number of notes that were detached.
        """
        folder = FolderService.get_folder(db, user_id, folder_id)
        try:
            detached = detach_notes_from_folder(db, user_id, folder.id)
            db.delete(folder)
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info("User %s deleted folder id=%s, detached %d notes", user_id, folder_id, detached)
        return detached


def detach_notes_from_folder(db: Session, user_id: int, folder_id: int) -> int:
    """
    Clear the folder reference of every note the user filed in ``folder_id``.

    The notes keep their title, content and timestamps. Does not commit; the
    caller owns the transaction.
    """
    result = db.execute(
        update(Note)
        .where(Note.folder_id == folder_id, Note.user_id == user_id)
        .values(folder_id=None, updated_at=Note.updated_at)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


class NoteService:
    """Note store scoped to one owner"""

    @staticmethod
    def _parse_folder_filter(folder: Optional[str]):
        if folder is None or folder == "":
            return None
        if folder == FOLDER_NONE:
            return FOLDER_NONE
        try:
            return int(folder)
        except ValueError:
            raise ValidationError(f"folder must be a folder id or '{FOLDER_NONE}'")

    @staticmethod
    def _check_folder(db: Session, user_id: int, folder_id: int) -> None:
        exists = (
            db.query(Folder.id)
            .filter(Folder.id == folder_id, Folder.user_id == user_id)
            .first()
        )
        if exists is None:
            raise ValidationError("Folder not found")

    @staticmethod
    def list_notes(
        db: Session,
        user_id: int,
        search: Optional[str] = None,
        folder: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> List[Note]:
        """
        List the user's notes.

        Args:
            search: case-insensitive substring matched against title or content
            folder: a folder id, or ``"none"`` for notes outside any folder
            sort_by: a key of ``NOTE_SORT_FIELDS``, default ``updatedAt``
            sort_order: ``asc`` or ``desc``, default ``desc``
        """
        ordering = _note_ordering(sort_by, sort_order)
        query = db.query(Note).filter(Note.user_id == user_id)
        if search:
            like = _like_pattern(search)
            query = query.filter(
                or_(Note.title.ilike(like, escape="\\"), Note.content.ilike(like, escape="\\"))
            )
        folder_filter = NoteService._parse_folder_filter(folder)
        if folder_filter == FOLDER_NONE:
            query = query.filter(Note.folder_id.is_(None))
        elif folder_filter is not None:
            query = query.filter(Note.folder_id == folder_filter)
        return query.order_by(*ordering).all()

    @staticmethod
    def list_folder_notes(
        db: Session,
        user_id: int,
        folder_id: int,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> List[Note]:
        folder = FolderService.get_folder(db, user_id, folder_id)
        return NoteService.list_notes(
            db, user_id, search=search, folder=str(folder.id), sort_by=sort_by, sort_order=sort_order
        )

    @staticmethod
    def get_note(db: Session, user_id: int, note_id: int) -> Note:
        note = db.query(Note).filter(Note.id == note_id, Note.user_id == user_id).first()
        if note is None:
            raise NotFound("Note")
        return note

    @staticmethod
    def create_note(db: Session, user_id: int, data: NoteCreateRequest) -> Note:
        if data.folder_id is not None:
            NoteService._check_folder(db, user_id, data.folder_id)
        note = Note(
            title=data.title,
            content=data.content,
            folder_id=data.folder_id,
            user_id=user_id,
        )
        db.add(note)
        db.commit()
        db.refresh(note)
        logger.info("User %s created note id=%s", user_id, note.id)
        return note

    @staticmethod
    def update_note(db: Session, user_id: int, note_id: int, data: NoteUpdateRequest) -> Note:
        note = NoteService.get_note(db, user_id, note_id)
        if data.title is not None:
            note.title = data.title
        if data.content is not None:
            note.content = data.content
        if "folder_id" in data.model_fields_set:
            if data.folder_id is not None:
                NoteService._check_folder(db, user_id, data.folder_id)
            note.folder_id = data.folder_id
        db.commit()
        db.refresh(note)
        return note

    @staticmethod
    def delete_note(db: Session, user_id: int, note_id: int) -> None:
        note = NoteService.get_note(db, user_id, note_id)
        db.delete(note)
        db.commit()
        logger.info("User %s deleted note id=%s", user_id, note_id)
