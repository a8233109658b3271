from dataclasses import replace

from ...domain.entities import CourseOutline


class ICourseRepository:
    def create(self, user_id: str, outline: CourseOutline) -> CourseOutline: ...


class CreateCourse:
    """Persist an outline produced by playlist ingestion.

    Sections and videos keep the order they arrive in; totals are derived here
    rather than trusted from the caller.
    """

    def __init__(self, repo: ICourseRepository):
        self.repo = repo

    def execute(self, user_id: str, outline: CourseOutline) -> CourseOutline:
        if not outline.title.strip():
            raise ValueError("Course title is required")
        sections = []
        video_count = 0
        duration = 0
        for s_idx, section in enumerate(outline.sections):
            videos = [replace(v, order_index=v_idx) for v_idx, v in enumerate(section.videos)]
            video_count += len(videos)
            duration += sum(v.duration_s or 0 for v in videos)
            sections.append(replace(section, order_index=s_idx, videos=videos))
        normalized = replace(
            outline,
            sections=sections,
            total_videos=video_count,
            total_duration_s=duration,
        )
        return self.repo.create(user_id, normalized)
