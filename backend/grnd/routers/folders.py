from __future__ import annotations
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from grnd.db import get_db
from grnd.deps.auth import get_current_user, owned_or_404
from grnd.models import User
from grnd.repositories.folder_repo import FolderRepository
from grnd.repositories.template_repo import TemplateRepository
from grnd.schemas.folder import FolderCreate, FolderRead, FolderRename
from grnd.schemas.template import PinUpdate, TemplateRead

router = APIRouter(prefix="/folders", tags=["folders"])

def _owned_folder(db: Session, folder_id: int, current_user: User):
    return owned_or_404(FolderRepository(db).get(folder_id), current_user, "Folder")

@router.get("", response_model=list[FolderRead])
def list_folders(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return FolderRepository(db).list_by_user(current_user.id)

@router.post("", response_model=FolderRead, status_code=status.HTTP_201_CREATED)
def create_folder(payload: FolderCreate, db: Session = Depends(get_db),
                  current_user: User = Depends(get_current_user)):
    return FolderRepository(db).create(current_user.id, name=payload.name)

@router.put("/{folder_id}", response_model=FolderRead)
def rename_folder(folder_id: int, payload: FolderRename, db: Session = Depends(get_db),
                  current_user: User = Depends(get_current_user)):
    _owned_folder(db, folder_id, current_user)
    return FolderRepository(db).rename(folder_id, name=payload.name)

@router.delete("/{folder_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_folder(
    folder_id: int,
    delete_templates: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _owned_folder(db, folder_id, current_user)
    FolderRepository(db).delete(folder_id, delete_templates=delete_templates)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.put("/{folder_id}/pin", response_model=FolderRead)
def pin_folder(folder_id: int, payload: PinUpdate, db: Session = Depends(get_db),
               current_user: User = Depends(get_current_user)):
    _owned_folder(db, folder_id, current_user)
    return FolderRepository(db).set_pinned(folder_id, pinned=payload.pinned)

@router.get("/{folder_id}/templates", response_model=list[TemplateRead])
def templates_in_folder(folder_id: int, db: Session = Depends(get_db),
                        current_user: User = Depends(get_current_user)):
    _owned_folder(db, folder_id, current_user)
    return TemplateRepository(db).list_by_folder(current_user.id, folder_id)

@router.put("/{folder_id}/templates/{template_id}", response_model=TemplateRead)
def add_template_to_folder(folder_id: int, template_id: int, db: Session = Depends(get_db),
                           current_user: User = Depends(get_current_user)):
    _owned_folder(db, folder_id, current_user)
    repo = TemplateRepository(db)
    owned_or_404(repo.get(template_id), current_user, "Template")
    return repo.set_folder(template_id, folder_id=folder_id)

@router.delete("/{folder_id}/templates/{template_id}", response_model=TemplateRead)
def remove_template_from_folder(folder_id: int, template_id: int, db: Session = Depends(get_db),
                                current_user: User = Depends(get_current_user)):
    _owned_folder(db, folder_id, current_user)
    repo = TemplateRepository(db)
    template = owned_or_404(repo.get(template_id), current_user, "Template")
    if template.folder_id != folder_id:
        return template
    return repo.set_folder(template_id, folder_id=None)
