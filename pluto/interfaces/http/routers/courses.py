from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from ....application.use_cases.courses import CreateCourse
from ....domain.entities import CourseOutline, SectionOutline, User, VideoOutline
from ....infrastructure.db import get_db
from ....infrastructure.repositories import CourseRepository, ProgressRepository
from ....infrastructure.cache import get_cache, set_cache, delete_cache, outline_key
from ....infrastructure.metrics import cache_hits_total, cache_misses_total
from ..schemas import CourseCreate, CourseOut, CourseOutlineOut, CourseViewerOut
from ..authz import get_current_user

router = APIRouter(prefix="/api/courses", tags=["courses"])

def _load_outline(course_id: str, db: Session) -> CourseOutlineOut | None:
    # outlines do not change after ingestion; progress is never cached
    cached = get_cache(outline_key(course_id))
    if cached:
        cache_hits_total.inc()
        return CourseOutlineOut.model_validate(cached)

    cache_misses_total.inc()
    outline = CourseRepository(db).get_outline(course_id)
    if outline is None:
        return None
    result = CourseOutlineOut.model_validate(outline)
    set_cache(outline_key(course_id), result.model_dump(mode="json"))
    return result

@router.get("", response_model=list[CourseOut])
def list_courses(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [CourseOut.model_validate(c) for c in CourseRepository(db).list_for_owner(user.id)]

@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(payload: CourseCreate,
                  user: User = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    outline = CourseOutline(
        title=payload.title,
        playlist_id=payload.playlist_id,
        sections=[
            SectionOutline(
                title=s.title,
                videos=[
                    VideoOutline(
                        youtube_id=v.youtube_id,
                        title=v.title,
                        duration_s=v.duration_s,
                        thumbnail_url=v.thumbnail_url,
                    )
                    for v in s.videos
                ],
            )
            for s in payload.sections
        ],
    )
    try:
        created = CreateCourse(CourseRepository(db)).execute(user.id, outline)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CourseOut.model_validate(created)

@router.get("/{course_id}", response_model=CourseViewerOut)
def course_viewer(course_id: str,
                  user: User = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    outline = _load_outline(course_id, db)
    if outline is None or outline.user_id != user.id:
        raise HTTPException(404, "Course not found")
    video_ids = [v.id for s in outline.sections for v in s.videos]
    progress = ProgressRepository(db).for_videos(user.id, video_ids)
    return CourseViewerOut(course=outline, progress=progress)

@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: str,
                  user: User = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    if not CourseRepository(db).delete(course_id, user.id):
        raise HTTPException(404, "Course not found")
    delete_cache(outline_key(course_id))
