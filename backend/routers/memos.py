from fastapi import APIRouter, HTTPException, Body, Path, Depends
from sqlmodel import Session, select, desc

from models import User, Memo, MemoUpdate, utcnow
from config import get_current_user_dep

router = APIRouter(prefix="/memos", tags=["Memos"])

def get_database_engine():
    """Get the database engine from the main app context"""
    from fastapi_app import database_engine
    return database_engine


def _get_memo(session: Session, topic: str, current_user: User):
    return session.exec(
        select(Memo)
        .where(Memo.user_id == current_user.id)
        .where(Memo.topic == topic)
    ).first()


@router.get("/",
         summary="List memos",
         description="Retrieves the memos of the authenticated user, most recently updated first.")
def list_memos(current_user: User = Depends(get_current_user_dep)):
    with Session(get_database_engine()) as session:
        memos = session.exec(
            select(Memo)
            .where(Memo.user_id == current_user.id)
            .order_by(desc(Memo.updated_at))
        ).all()
        return memos


@router.get("/{topic:path}",
         summary="Get a memo",
         description="Retrieves the memo for a topic. Topics are URL-encoded and may contain slashes.")
def get_memo(topic: str = Path(..., min_length=1, max_length=100, description="Memo topic"),
             current_user: User = Depends(get_current_user_dep)):
    with Session(get_database_engine()) as session:
        memo = _get_memo(session, topic, current_user)
        if not memo:
            raise HTTPException(status_code=404, detail="Memo not found")
        return memo


@router.put("/{topic:path}",
         summary="Upsert a memo",
         description="Creates the memo for a topic or replaces its content.")
def upsert_memo(topic: str = Path(..., min_length=1, max_length=100, description="Memo topic"),
                memo_update: MemoUpdate = Body(..., description="Memo content"),
                current_user: User = Depends(get_current_user_dep)):
    """
    Upsert a memo. One memo per topic and user.
    """
    with Session(get_database_engine()) as session:
        memo = _get_memo(session, topic, current_user)
        if memo:
            memo.content = memo_update.content
            memo.updated_at = utcnow()
        else:
            memo = Memo(user_id=current_user.id, topic=topic, content=memo_update.content)
        session.add(memo)
        session.commit()
        session.refresh(memo)
        return memo


@router.delete("/{topic:path}",
            summary="Delete memo",
            description="Deletes the memo for a topic.")
def delete_memo(topic: str = Path(..., min_length=1, max_length=100, description="Memo topic"),
                current_user: User = Depends(get_current_user_dep)):
    with Session(get_database_engine()) as session:
        memo = _get_memo(session, topic, current_user)
        if not memo:
            raise HTTPException(status_code=404, detail="Memo not found")
        session.delete(memo)
        session.commit()
        return {"message": "Memo deleted successfully"}
