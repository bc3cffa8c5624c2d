from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from backend.auth import require_user_id
from backend import repositories
from backend.schemas import JournalEntryCreate, JournalEntryPatch

router = APIRouter()


def format_entries_as_text(entries: list[dict]) -> str:
    blocks = []
    for entry in entries:
        lines = [
            f"Date: {entry['entry_date']}",
            f"Title: {entry['title']}",
            f"Mood: {entry.get('mood') or 'Not specified'}",
        ]
        if entry.get("tags"):
            lines.append("Tags: " + ", ".join(entry["tags"]))
        lines.append("")
        lines.append(entry.get("content") or "")
        blocks.append("\n".join(lines))
    return "\n\n---\n\n".join(blocks) + ("\n" if blocks else "")


@router.get("/v1/journal")
async def list_entries(
    limit: int | None = Query(default=None, ge=1, le=500),
    mood: str | None = Query(default=None),
    tag: str | None = Query(default=None),
    q: str | None = Query(default=None),
    user_id: str = Depends(require_user_id),
):
    items = await repositories.list_journal_entries(user_id, limit=limit, mood=mood, tag=tag, search=q)
    return {"items": items}


@router.get("/v1/journal/export", response_class=PlainTextResponse)
async def export_entries(user_id: str = Depends(require_user_id)):
    entries = await repositories.list_journal_entries(user_id)
    return PlainTextResponse(
        format_entries_as_text(entries),
        headers={"Content-Disposition": "attachment; filename=journal.txt"},
    )


@router.post("/v1/journal")
async def create_entry(payload: JournalEntryCreate, user_id: str = Depends(require_user_id)):
    return await repositories.create_journal_entry(user_id, payload.model_dump())


@router.get("/v1/journal/{entry_id}")
async def get_entry(entry_id: str, user_id: str = Depends(require_user_id)):
    return await repositories.get_journal_entry(user_id, entry_id)


@router.patch("/v1/journal/{entry_id}")
async def update_entry(entry_id: str, payload: JournalEntryPatch, user_id: str = Depends(require_user_id)):
    return await repositories.update_journal_entry(user_id, entry_id, payload.model_dump(exclude_unset=True))


@router.delete("/v1/journal/{entry_id}")
async def delete_entry(entry_id: str, user_id: str = Depends(require_user_id)):
    await repositories.delete_journal_entry(user_id, entry_id)
    return {"ok": True}
